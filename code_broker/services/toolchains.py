from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from code_broker.core.errors import UnsupportedLanguageError


@dataclass(frozen=True, slots=True)
class ToolchainSpec:
    source_file: str
    run_argv: tuple[str, ...]
    compile_argv: tuple[str, ...] | None = None
    probe_argv: tuple[str, ...] | None = None

    def __post_init__(self) -> None:
        if not self.run_argv:
            raise ValueError(f"toolchain for {self.source_file} has an empty run command")


_BUN = ToolchainSpec(
    source_file="code.ts",
    run_argv=("bun", "run", "code.ts"),
    probe_argv=("sh", "-c", "echo $PATH && which bun && bun --version"),
)

TOOLCHAINS: Mapping[str, ToolchainSpec] = MappingProxyType(
    {
        "python": ToolchainSpec(
            source_file="code.py",
            run_argv=("python3", "code.py"),
        ),
        "rust": ToolchainSpec(
            source_file="code.rs",
            compile_argv=("rustc", "code.rs"),
            run_argv=("./code",),
        ),
        "cpp": ToolchainSpec(
            source_file="code.cpp",
            compile_argv=("g++", "code.cpp", "-o", "code"),
            run_argv=("./code",),
        ),
        "typescript": _BUN,
        "javascript": _BUN,
    }
)


def normalize_language(language: str) -> str:
    return language.strip().lower()


def resolve_toolchain(
    language: str, registry: Mapping[str, ToolchainSpec] = TOOLCHAINS
) -> ToolchainSpec:
    """Return the toolchain registered for ``language`` (case-insensitive).

    Raises UnsupportedLanguageError when no toolchain is registered.
    """
    spec = registry.get(normalize_language(language))
    if spec is None:
        raise UnsupportedLanguageError(language)
    return spec


def supported_languages(registry: Mapping[str, ToolchainSpec] = TOOLCHAINS) -> list[str]:
    return sorted(registry)
