from __future__ import annotations

import logging
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from code_broker.core.errors import StagingError


logger = logging.getLogger(__name__)


@contextmanager
def request_workspace(root: str | None = None, mode: int | None = None) -> Iterator[Path]:
    """Yield a fresh directory owned by a single request, removed on exit.

    Notes:
    - The directory is created 0700. Pass ``mode`` (e.g. 0o777) when the
      container runs as a non-root user that must write compiled artifacts.
    - Artifacts written by the container may be owned by another user; a
      failed removal is logged and does not fail the request.
    """
    try:
        tmp = tempfile.TemporaryDirectory(prefix="exec-", dir=root)
    except OSError as exc:
        raise StagingError(f"Failed to create workspace: {exc}") from exc
    workdir = Path(tmp.name)
    if mode is not None:
        try:
            workdir.chmod(mode)
        except OSError as exc:
            tmp.cleanup()
            raise StagingError(f"Failed to prepare workspace: {exc}") from exc
    try:
        yield workdir
    finally:
        try:
            tmp.cleanup()
        except OSError as exc:
            logger.warning("workspace %s was not fully removed: %s", workdir, exc)


def stage_source(workdir: Path, file_name: str, code: str) -> Path:
    target = workdir / file_name
    try:
        target.write_text(code, encoding="utf-8")
    except OSError as exc:
        raise StagingError(f"Failed to write code file: {exc}") from exc
    return target
