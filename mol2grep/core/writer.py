"""Serialize mol2 records back to (optionally gzip-compressed) text."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Optional, TextIO, Union

from mol2grep.core.file_io import open_output
from mol2grep.core.logging_utils import get_logger
from mol2grep.errors import IoError
from mol2grep.parsers.mol2 import Mol2Record

logger = get_logger(__name__)

PathLike = Union[str, Path]


def write_records(records: Iterable[Mol2Record], stream: TextIO, path: Optional[PathLike] = None) -> int:
    """Write records verbatim in the order received. Returns the count written."""
    count = 0
    for record in records:
        text = record.text
        if not text.endswith("\n"):
            text += "\n"
        try:
            stream.write(text)
        except OSError as e:
            raise IoError(f"write failed: {e.strerror or e}", path) from e
        count += 1
    return count


class Mol2Writer:
    """Owns one output file. Use as a context manager.

    Output written before a failure stays on disk; there is no rollback.
    """

    def __init__(self, path: PathLike, compress_level: int = 6):
        self.path = Path(path)
        self.compress_level = compress_level
        self.count = 0
        self._stream: Optional[TextIO] = None

    def open(self) -> "Mol2Writer":
        self._stream = open_output(self.path, compress_level=self.compress_level)
        return self

    def write(self, record: Mol2Record) -> None:
        if self._stream is None:
            raise IoError("writer is not open", self.path)
        self.count += write_records((record,), self._stream, self.path)

    def write_all(self, records: Iterable[Mol2Record]) -> int:
        if self._stream is None:
            raise IoError("writer is not open", self.path)
        n = write_records(records, self._stream, self.path)
        self.count += n
        return n

    def close(self) -> None:
        if self._stream is None:
            return
        stream, self._stream = self._stream, None
        try:
            stream.close()
        except OSError as e:
            raise IoError(f"close failed: {e.strerror or e}", self.path) from e
        logger.debug("Wrote %d records to %s", self.count, self.path)

    def __enter__(self) -> "Mol2Writer":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"<Mol2Writer {self.path} count={self.count}>"
