"""Transparent gzip/plain text streams and input list handling."""

from __future__ import annotations

import gzip
import zlib
from pathlib import Path
from typing import TextIO, Union

from mol2grep.errors import IoError

PathLike = Union[str, Path]

# surrogateescape keeps undecodable bytes intact so records round-trip verbatim
ENCODING = "utf-8"
ERRORS = "surrogateescape"

# what a read from a plain or gzip stream may raise on damaged input
READ_ERRORS = (OSError, EOFError, zlib.error)


def is_gzip(path: PathLike) -> bool:
    return str(path).lower().endswith(".gz")


def open_input(path: PathLike) -> TextIO:
    """Open a plain or gzip-compressed text file for reading.

    Newlines are passed through untranslated.
    """
    path = Path(path)
    try:
        if is_gzip(path):
            return gzip.open(path, "rt", encoding=ENCODING, errors=ERRORS, newline="")
        return open(path, "r", encoding=ENCODING, errors=ERRORS, newline="")
    except FileNotFoundError:
        raise IoError("no such file", path) from None
    except OSError as e:
        raise IoError(e.strerror or str(e), path) from e


def open_output(path: PathLike, compress_level: int = 6) -> TextIO:
    """Open a plain or gzip-compressed text file for writing, creating parent dirs."""
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        if is_gzip(path):
            return gzip.open(
                path, "wt", compresslevel=compress_level,
                encoding=ENCODING, errors=ERRORS, newline="",
            )
        return open(path, "w", encoding=ENCODING, errors=ERRORS, newline="")
    except OSError as e:
        raise IoError(e.strerror or str(e), path) from e


def read_input_list(path: PathLike) -> list[Path]:
    """Read a whitespace-separated list of input paths."""
    with open_input(path) as f:
        try:
            content = f.read()
        except READ_ERRORS as e:
            raise IoError(str(e), path) from e
    return [Path(p) for p in content.split()]
