"""Error taxonomy shared by every mol2grep component.

Library code raises these; only the CLI turns them into exit codes.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

PathLike = Union[str, Path]


class Mol2GrepError(Exception):
    """Base class for all mol2grep failures."""


class ConfigError(Mol2GrepError):
    """Missing or invalid arguments / settings. Raised before any I/O."""


class ParseError(Mol2GrepError):
    """Malformed query file or mol2 record."""

    def __init__(self, message: str, path: Optional[PathLike] = None, line: Optional[int] = None):
        self.message = message
        self.path = str(path) if path is not None else None
        self.line = line
        super().__init__(str(self))

    def __str__(self) -> str:
        where = self.path or "<stream>"
        if self.line is not None:
            where = f"{where}:{self.line}"
        return f"{where}: {self.message}"


class IoError(Mol2GrepError):
    """File not found, permission denied, disk full, corrupt compressed stream."""

    def __init__(self, message: str, path: Optional[PathLike] = None):
        self.message = message
        self.path = str(path) if path is not None else None
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.path is None:
            return self.message
        return f"{self.path}: {self.message}"
