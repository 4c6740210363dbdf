from __future__ import annotations

import stat
from pathlib import Path

import pytest

from code_broker.core.config import Settings


_FAKE_DOCKER = """#!/bin/sh
# Stand-in for the docker CLI: runs the command in the bind-mounted host dir.
printf '%s\\n' "$*" >> "{log}"
[ "$1" = "run" ] || exit 125
shift
host_dir=
while [ $# -gt 0 ]; do
  case "$1" in
    --rm|-i) shift ;;
    -v) host_dir="${{2%%:*}}"; shift 2 ;;
    -w) shift 2 ;;
    *) break ;;
  esac
done
shift
if [ -n "$host_dir" ]; then
  cd "$host_dir" || exit 125
fi
exec "$@"
"""

_MISSING_IMAGE_DOCKER = """#!/bin/sh
# Stand-in for a docker CLI whose daemon cannot provide the image.
printf '%s\\n' "$*" >> "{log}"
echo "Unable to find image 'executor:latest' locally" >&2
echo "docker: Error response from daemon: pull access denied for executor." >&2
exit 125
"""


class FakeDocker:
    def __init__(self, root: Path, script: str = _FAKE_DOCKER) -> None:
        self.log = root / "docker.log"
        self.log.touch()
        self.binary = root / "docker"
        self.binary.write_text(script.format(log=self.log))
        self.binary.chmod(self.binary.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        self.workspaces = root / "workspaces"
        self.workspaces.mkdir()

    @property
    def calls(self) -> list[str]:
        return [line for line in self.log.read_text().splitlines() if line]

    def settings(self, **overrides: object) -> Settings:
        values: dict[str, object] = {
            "docker_binary": str(self.binary),
            "workspace_root": str(self.workspaces),
        }
        values.update(overrides)
        return Settings(**values)  # type: ignore[arg-type]


@pytest.fixture
def fake_docker(tmp_path: Path) -> FakeDocker:
    return FakeDocker(tmp_path)


@pytest.fixture
def missing_image(tmp_path: Path) -> FakeDocker:
    return FakeDocker(tmp_path, _MISSING_IMAGE_DOCKER)


@pytest.fixture
def missing_docker(tmp_path: Path) -> Settings:
    return Settings(
        docker_binary=str(tmp_path / "no-such-docker"),
        workspace_root=str(tmp_path),
    )
