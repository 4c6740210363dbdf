from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Mapping

from code_broker.core.config import Settings
from code_broker.core.errors import LaunchError, StagingError
from code_broker.services.container import ContainerInvoker, is_runtime_failure
from code_broker.services.pump import pump
from code_broker.services.toolchains import TOOLCHAINS, ToolchainSpec, normalize_language, resolve_toolchain
from code_broker.services.workspace import request_workspace, stage_source


logger = logging.getLogger(__name__)


class ExecutionStatus(enum.Enum):
    OK = "ok"
    SERVER_ERROR = "server_error"


@dataclass(frozen=True, slots=True)
class ExecutionResult:
    output: str
    error: str
    status: ExecutionStatus = ExecutionStatus.OK


def _decode(data: bytes | None) -> str:
    return (data or b"").decode("utf-8", errors="replace")


def _server_error(message: str) -> ExecutionResult:
    return ExecutionResult(output="", error=message, status=ExecutionStatus.SERVER_ERROR)


def execute_request(
    *,
    language: str,
    code: str,
    stdin: str | None,
    settings: Settings,
    invoker: ContainerInvoker | None = None,
    registry: Mapping[str, ToolchainSpec] = TOOLCHAINS,
) -> ExecutionResult:
    """Compile (when needed) and run one submission in a fresh container.

    Notes:
    - Unsupported languages raise UnsupportedLanguageError before any
      container is started; every other failure becomes a result.
    - A compiler exiting non-zero yields an OK result carrying the compiler
      stderr, and the run phase is skipped.
    - A non-zero exit of the program itself is not an error here; its stderr
      is returned as is. The exception is docker's own exit 125 with a
      daemon error and no program output, which is a launch failure.
    """
    toolchain = resolve_toolchain(language, registry)
    invoker = invoker or ContainerInvoker(settings)
    lang = normalize_language(language)
    logger.info("executing %s submission (%d chars)", lang, len(code))

    if settings.enable_probe and toolchain.probe_argv:
        invoker.probe(toolchain.probe_argv)

    try:
        with request_workspace(settings.workspace_root, settings.workspace_mode) as workdir:
            stage_source(workdir, toolchain.source_file, code)

            if toolchain.compile_argv:
                compiled = invoker.compile(workdir, toolchain.compile_argv)
                if compiled.returncode != 0:
                    logger.info("%s compile failed with exit code %d", lang, compiled.returncode)
                    return ExecutionResult(output="", error=_decode(compiled.stderr))

            process = invoker.spawn(workdir, toolchain.run_argv)
            try:
                pumped = pump(process, (stdin or "").encode("utf-8"))
            except OSError as exc:
                process.kill()
                process.wait()
                raise LaunchError(f"Failed to wait on container: {exc}") from exc
            if is_runtime_failure(pumped.returncode, pumped.stdout, pumped.stderr):
                raise LaunchError(f"Failed to start container: {_decode(pumped.stderr).strip()}")
    except StagingError as exc:
        logger.error("staging failed: %s", exc)
        return _server_error(str(exc))
    except LaunchError as exc:
        logger.error("container launch failed: %s", exc)
        return _server_error(str(exc))

    if not pumped.stdin_delivered:
        logger.info("%s program did not consume all of its input", lang)
    logger.info("%s program exited with code %d", lang, pumped.returncode)
    return ExecutionResult(output=_decode(pumped.stdout), error=_decode(pumped.stderr))
