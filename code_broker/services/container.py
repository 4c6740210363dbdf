from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Sequence

from code_broker.core.config import Settings
from code_broker.core.errors import LaunchError


logger = logging.getLogger(__name__)

# docker run exits 125 when the daemon rejects the container (missing image,
# daemon down, bad flags) before the toolchain command starts.
DOCKER_RUN_FAILURE = 125
_DOCKER_ERROR_PREFIXES = (b"docker:", b"Unable to find image")


def is_runtime_failure(returncode: int, stdout: bytes, stderr: bytes) -> bool:
    """Tell a docker-level failure apart from a program that exited 125 itself."""
    if returncode != DOCKER_RUN_FAILURE or stdout:
        return False
    return stderr.lstrip().startswith(_DOCKER_ERROR_PREFIXES)


class ContainerInvoker:
    """Run toolchain commands inside a throwaway container of the executor image.

    Every invocation has the same shape: ``docker run --rm [-i] -v
    <workspace>:<mount> -w <mount> [extra args] <image> <argv...>``.
    """

    def __init__(self, settings: Settings) -> None:
        self._settings = settings

    def build_command(self, workdir: Path, argv: Sequence[str], *, interactive: bool) -> list[str]:
        mount = self._settings.mount_path
        cmd: list[str] = [self._settings.docker_binary, "run", "--rm"]
        if interactive:
            cmd.append("-i")
        cmd.extend(["-v", f"{workdir}:{mount}", "-w", mount])
        cmd.extend(self._settings.extra_run_args)
        cmd.append(self._settings.image)
        cmd.extend(argv)
        return cmd

    def compile(self, workdir: Path, argv: Sequence[str]) -> subprocess.CompletedProcess[bytes]:
        cmd = self.build_command(workdir, argv, interactive=False)
        logger.debug("compile: %s", cmd)
        try:
            proc = subprocess.run(  # nosec: B603 (controlled argv)
                cmd,
                stdin=subprocess.DEVNULL,
                capture_output=True,
                check=False,
            )
        except OSError as exc:
            raise LaunchError(f"Compilation failed: {exc}") from exc
        if proc.returncode == DOCKER_RUN_FAILURE:
            raise LaunchError(
                "Compilation failed: container runtime error: "
                + proc.stderr.decode("utf-8", errors="replace").strip()
            )
        return proc

    def spawn(self, workdir: Path, argv: Sequence[str]) -> subprocess.Popen[bytes]:
        cmd = self.build_command(workdir, argv, interactive=True)
        logger.debug("run: %s", cmd)
        try:
            return subprocess.Popen(  # nosec: B603 (controlled argv)
                cmd,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=False,
            )
        except OSError as exc:
            raise LaunchError(f"Failed to start container: {exc}") from exc

    def probe(self, argv: Sequence[str]) -> str | None:
        """Run a diagnostic command against the image and log what it prints.

        Never raises; the probe must not gate the execution that follows.
        """
        cmd = [self._settings.docker_binary, "run", "--rm", self._settings.image, *argv]
        try:
            proc = subprocess.run(cmd, stdin=subprocess.DEVNULL, capture_output=True, check=False)
        except OSError as exc:
            logger.warning("container environment probe could not start: %s", exc)
            return None
        if proc.returncode != 0:
            logger.warning(
                "container environment probe failed: %s",
                proc.stderr.decode("utf-8", errors="replace"),
            )
            return None
        report = proc.stdout.decode("utf-8", errors="replace")
        logger.info("container environment:\n%s", report)
        return report
