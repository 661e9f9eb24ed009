"""Exception types raised while bootstrapping a Visual Studio solution."""

from __future__ import annotations

from pathlib import Path


class VisualStudioError(Exception):
    """Base class for every error raised by vsbootstrap."""


class ConfigurationError(VisualStudioError):
    """Settings conflict, ambiguous solution discovery, or nothing to analyse."""


class ProjectParseError(VisualStudioError):
    """A project file is malformed or misses a mandatory attribute."""

    def __init__(self, message: str, path: str | Path, line: int | None) -> None:
        self.path = str(path)
        self.line = line
        location = f" at line {line}" if line is not None else ""
        super().__init__(f"{message} in {self.path}{location}")


class ProjectReadError(VisualStudioError):
    """A project file could not be opened or read."""

    def __init__(self, path: str | Path) -> None:
        self.path = str(path)
        super().__init__(f"Unable to read the project file {self.path}")


class SolutionReadError(VisualStudioError):
    """A solution file could not be opened or read."""

    def __init__(self, path: str | Path) -> None:
        self.path = str(path)
        super().__init__(f"Unable to read the solution file {self.path}")
