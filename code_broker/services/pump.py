from __future__ import annotations

import logging
import subprocess
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import IO


logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PumpResult:
    stdout: bytes
    stderr: bytes
    returncode: int
    stdin_delivered: bool


def _feed(stream: IO[bytes], payload: bytes) -> bool:
    delivered = True
    try:
        if payload:
            stream.write(payload)
            stream.flush()
    except OSError as exc:  # includes BrokenPipeError when the child exits early
        logger.debug("stdin delivery stopped early: %s", exc)
        delivered = False
    finally:
        try:
            stream.close()
        except OSError:
            delivered = False
    return delivered


def _drain(stream: IO[bytes]) -> bytes:
    with stream:
        return stream.read()


def pump(process: subprocess.Popen[bytes], payload: bytes) -> PumpResult:
    """Feed ``payload`` to the child's stdin while collecting stdout/stderr.

    Writing and reading happen on separate threads so neither side can block
    the other on a full pipe. Returns once the process has exited and both
    output streams reached EOF. A failed stdin write is reported through
    ``stdin_delivered`` and never raised.
    """
    if process.stdin is None or process.stdout is None or process.stderr is None:
        raise ValueError("process must be spawned with stdin, stdout and stderr as pipes")

    with ThreadPoolExecutor(max_workers=3, thread_name_prefix="pump") as pool:
        feeding = pool.submit(_feed, process.stdin, payload)
        out = pool.submit(_drain, process.stdout)
        err = pool.submit(_drain, process.stderr)
        returncode = process.wait()
        stdout = out.result()
        stderr = err.result()
        delivered = feeding.result()

    return PumpResult(
        stdout=stdout,
        stderr=stderr,
        returncode=returncode,
        stdin_delivered=delivered,
    )
