from __future__ import annotations

import os
import shlex
from dataclasses import dataclass
from functools import lru_cache


def _bool_from_env(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _mode_from_env(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return int(raw, 8)
    except ValueError:
        return default


def _str_from_env(name: str, default: str | None) -> str | None:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip()


@dataclass(frozen=True, slots=True)
class Settings:
    docker_binary: str = "docker"
    image: str = "executor"            # pre-built image carrying every toolchain
    mount_path: str = "/app"           # workspace path inside the container
    extra_run_args: tuple[str, ...] = ()
    workspace_root: str | None = None  # parent of per-request workspaces
    workspace_mode: int = 0o700        # 0o777 when the image runs as a non-root USER
    enable_probe: bool = False
    cors_allow_origins: tuple[str, ...] = ("*",)
    log_level: str = "INFO"

    @staticmethod
    def from_env() -> "Settings":
        origins = _str_from_env("CORS_ALLOW_ORIGINS", "*") or "*"
        return Settings(
            docker_binary=_str_from_env("EXECUTOR_DOCKER_BINARY", "docker") or "docker",
            image=_str_from_env("EXECUTOR_IMAGE", "executor") or "executor",
            mount_path=_str_from_env("EXECUTOR_MOUNT_PATH", "/app") or "/app",
            extra_run_args=tuple(shlex.split(os.environ.get("EXECUTOR_DOCKER_ARGS", ""))),
            workspace_root=_str_from_env("EXECUTOR_WORKSPACE_ROOT", None),
            workspace_mode=_mode_from_env("EXECUTOR_WORKSPACE_MODE", 0o700),
            enable_probe=_bool_from_env("EXECUTOR_ENABLE_PROBE", False),
            cors_allow_origins=tuple(o.strip() for o in origins.split(",") if o.strip()),
            log_level=(_str_from_env("LOG_LEVEL", "INFO") or "INFO").upper(),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()
