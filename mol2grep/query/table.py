"""Query table: the (name, energy) acceptance set loaded from a TSV file."""

from __future__ import annotations

import math
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping, Optional, Union

from mol2grep.core.file_io import READ_ERRORS, open_input
from mol2grep.core.logging_utils import get_logger
from mol2grep.errors import IoError, ParseError

logger = get_logger(__name__)

PathLike = Union[str, Path]


class QueryTable:
    """Immutable lookup of query names and their accepted energies.

    A name-only table accepts any energy (including records without one).
    """

    __slots__ = ("_entries", "_names_only")

    def __init__(self, entries: Mapping[str, frozenset[float]], names_only: bool = False):
        self._entries = MappingProxyType(dict(entries))
        self._names_only = names_only

    @classmethod
    def from_pairs(cls, pairs: Iterable[tuple[str, float]]) -> "QueryTable":
        grouped: dict[str, set[float]] = {}
        for name, energy in pairs:
            grouped.setdefault(name, set()).add(float(energy))
        return cls({k: frozenset(v) for k, v in grouped.items()})

    @classmethod
    def from_names(cls, names: Iterable[str]) -> "QueryTable":
        return cls({n: frozenset() for n in names}, names_only=True)

    @property
    def names_only(self) -> bool:
        return self._names_only

    @property
    def names(self) -> frozenset[str]:
        return frozenset(self._entries)

    def energies(self, name: str) -> frozenset[float]:
        return self._entries.get(name, frozenset())

    def matches(self, name: str, energy: Optional[float], tolerance: float) -> bool:
        """True if (name, energy) is in the table within `tolerance`."""
        accepted = self._entries.get(name)
        if accepted is None:
            return False
        if self._names_only:
            return True
        if energy is None:
            return False
        return any(abs(energy - e) <= tolerance for e in accepted)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __iter__(self) -> Iterator[tuple[str, Optional[float]]]:
        for name, energies in self._entries.items():
            if self._names_only:
                yield (name, None)
            else:
                for e in sorted(energies):
                    yield (name, e)

    def __len__(self) -> int:
        if self._names_only:
            return len(self._entries)
        return sum(len(v) for v in self._entries.values())

    def __bool__(self) -> bool:
        return bool(self._entries)

    def __repr__(self) -> str:
        kind = "names" if self._names_only else "keys"
        return f"<QueryTable {kind}={len(self)}>"


def _parse_energy(token: str, path: PathLike, line_no: int) -> float:
    try:
        energy = float(token)
    except ValueError:
        raise ParseError(f"energy is not numeric: {token!r}", path, line_no) from None
    if not math.isfinite(energy):
        raise ParseError(f"energy is not finite: {token!r}", path, line_no)
    return energy


def load_query_table(path: PathLike, names_only: bool = False) -> QueryTable:
    """Load a query file of `name<TAB>energy` lines (no header).

    Fields are tab-separated, so names may contain spaces.

    With `names_only`, only the first column is read and energies are ignored.
    Blank lines are skipped; any malformed line aborts the whole load.
    """
    path = Path(path)
    pairs: list[tuple[str, float]] = []
    names: list[str] = []

    with open_input(path) as f:
        try:
            for line_no, line in enumerate(f, start=1):
                if not line.strip():
                    continue
                fields = [field.strip() for field in line.rstrip("\r\n").split("\t")]
                if not fields[0]:
                    raise ParseError("empty name column", path, line_no)
                if names_only:
                    names.append(fields[0])
                    continue
                if len(fields) != 2:
                    raise ParseError(
                        f"expected 2 columns (name, energy), found {len(fields)}",
                        path, line_no,
                    )
                pairs.append((fields[0], _parse_energy(fields[1], path, line_no)))
        except READ_ERRORS as e:
            raise IoError(str(e), path) from e

    table = QueryTable.from_names(names) if names_only else QueryTable.from_pairs(pairs)
    logger.info("Loaded %d query %s from %s", len(table), "names" if names_only else "keys", path)
    return table
