from __future__ import annotations

from pathlib import Path


class TilewallError(Exception):
    """Base class for errors reported to the user by the CLI."""


class RepositoryAccessError(TilewallError):
    """A repository could not be read. Non-fatal: the run continues without it."""

    def __init__(self, path: Path | str, reason: str) -> None:
        self.path = str(path)
        self.reason = reason
        super().__init__(f"{self.path}: {reason}")


class FontUnavailableError(TilewallError):
    """No usable font for drawing labels."""


class InvalidThemeError(TilewallError):
    def __init__(self, name: str, choices: tuple[str, ...]) -> None:
        self.name = name
        super().__init__(f"Unknown theme {name!r} (expected one of: {', '.join(choices)})")


class OutputWriteError(TilewallError):
    def __init__(self, path: Path | str, cause: BaseException) -> None:
        self.path = str(path)
        self.cause = cause
        super().__init__(f"Could not write {self.path}: {cause}")
