from __future__ import annotations

import logging
import stat
import tempfile
from pathlib import Path

import pytest

from code_broker.core.errors import StagingError
from code_broker.services.workspace import request_workspace, stage_source


def test_workspace_is_unique_and_removed(tmp_path: Path) -> None:
    with request_workspace(str(tmp_path)) as first, request_workspace(str(tmp_path)) as second:
        assert first != second
        assert first.parent == tmp_path
        assert first.is_dir() and second.is_dir()
    assert not first.exists()
    assert not second.exists()


def test_stage_source_writes_code_verbatim(tmp_path: Path) -> None:
    code = "print('héllo')\n\x00 not validated"
    target = stage_source(tmp_path, "code.py", code)
    assert target == tmp_path / "code.py"
    assert target.read_text(encoding="utf-8") == code


def test_stage_source_failure_is_a_staging_error(tmp_path: Path) -> None:
    with pytest.raises(StagingError, match="Failed to write code file"):
        stage_source(tmp_path / "missing", "code.py", "print(1)")


def test_workspace_root_must_exist(tmp_path: Path) -> None:
    with pytest.raises(StagingError, match="Failed to create workspace"):
        with request_workspace(str(tmp_path / "missing")):
            pass


def test_workspace_mode_is_applied(tmp_path: Path) -> None:
    with request_workspace(str(tmp_path), 0o777) as workdir:
        assert stat.S_IMODE(workdir.stat().st_mode) == 0o777
    with request_workspace(str(tmp_path)) as workdir:
        assert stat.S_IMODE(workdir.stat().st_mode) == 0o700


def test_cleanup_failure_is_logged_not_raised(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    def refuse(self: tempfile.TemporaryDirectory) -> None:
        raise PermissionError("artifact owned by container user")

    monkeypatch.setattr(tempfile.TemporaryDirectory, "cleanup", refuse)
    with caplog.at_level(logging.WARNING, logger="code_broker.services.workspace"):
        with request_workspace(str(tmp_path)):
            pass
    assert any("was not fully removed" in r.getMessage() for r in caplog.records)
