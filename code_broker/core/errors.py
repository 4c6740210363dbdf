from __future__ import annotations


class BrokerError(Exception):
    """Base class for failures raised while orchestrating one execution."""


class UnsupportedLanguageError(BrokerError):
    """The requested language has no registered toolchain (client error)."""

    def __init__(self, language: str) -> None:
        super().__init__(f"Unsupported language: {language!r}")
        self.language = language


class StagingError(BrokerError):
    """The submitted source could not be written to the workspace."""


class LaunchError(BrokerError):
    """The container runtime process could not be started or awaited."""
