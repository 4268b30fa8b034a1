"""Streaming mol2 parser for DOCK-style multi-molecule files.

Each record is the run of lines from its '#' comment header (or its
@<TRIPOS>MOLECULE tag when there is no header) up to the line before the
next record starts. Only the header is interpreted; atom, bond and any other
TRIPOS sections are carried through as opaque text.

Layout::

    ##########                 Name:     ZINC000000000001
    ##########         Total Energy:     -35.123456
    @<TRIPOS>MOLECULE
    ZINC000000000001
        3     2     1     0     0
    ...
    @<TRIPOS>ATOM
    ...
    @<TRIPOS>BOND
    ...
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, Optional, TextIO, Union

from mol2grep.core.file_io import READ_ERRORS, open_input
from mol2grep.core.logging_utils import get_logger
from mol2grep.errors import IoError, ParseError

logger = get_logger(__name__)

PathLike = Union[str, Path]

TRIPOS_PREFIX = "@<TRIPOS>"
MOLECULE_TAG = "@<TRIPOS>MOLECULE"
ATOM_TAG = "@<TRIPOS>ATOM"
BOND_TAG = "@<TRIPOS>BOND"

_NAME_RE = re.compile(r"^#+\s+Name:\s*(.*?)\s*$")
_ENERGY_RE = re.compile(r"^#+\s+Total Energy:\s*(.*?)\s*$")


@dataclass(frozen=True)
class Mol2Record:
    """One molecule: its identity plus the verbatim record text."""

    name: str
    energy: Optional[float]
    text: str = field(repr=False)
    source: Optional[str] = None
    line_number: int = 1

    @property
    def key(self) -> tuple[str, Optional[float]]:
        return (self.name, self.energy)


class Mol2Reader:
    """Lazy, single-pass iterator of Mol2Record over a text stream.

    Stops with ParseError at the first malformed record; records yielded
    before it are unaffected.
    """

    def __init__(self, stream: TextIO, source: Optional[PathLike] = None):
        self._stream = stream
        self.source = str(source) if source is not None else None
        self._records = self._iter_records()

    def __iter__(self) -> Iterator[Mol2Record]:
        return self

    def __next__(self) -> Mol2Record:
        return next(self._records)

    def _iter_lines(self) -> Iterator[tuple[int, str]]:
        line_no = 0
        while True:
            try:
                line = self._stream.readline()
            except READ_ERRORS as e:
                raise IoError(f"read failed after line {line_no}: {e}", self.source) from e
            if not line:
                return
            line_no += 1
            yield line_no, line

    def _iter_records(self) -> Iterator[Mol2Record]:
        lines: list[str] = []
        start = 1
        seen_molecule = False
        seen_name = False

        for line_no, line in self._iter_lines():
            is_name = _NAME_RE.match(line) is not None
            # A second Name: header before any MOLECULE tag closes a headless record.
            if seen_molecule:
                boundary = line.startswith("#") or line.startswith(MOLECULE_TAG)
            else:
                boundary = is_name and seen_name
            if boundary:
                yield self._build(lines, start)
                lines = []
                seen_molecule = False
                seen_name = False
            if not lines:
                start = line_no
            lines.append(line)
            if line.startswith(MOLECULE_TAG):
                seen_molecule = True
            elif is_name:
                seen_name = True

        if any(line.strip() for line in lines):
            yield self._build(lines, start)

    def _build(self, lines: list[str], start: int) -> Mol2Record:
        tag_idx = next((i for i, line in enumerate(lines) if line.startswith(MOLECULE_TAG)), None)
        if tag_idx is None:
            raise ParseError(f"record has no {MOLECULE_TAG} section", self.source, start)

        tag_line = start + tag_idx
        if len(lines) < tag_idx + 3:
            raise ParseError(
                f"truncated {MOLECULE_TAG} header: expected molecule name and counts lines",
                self.source, tag_line,
            )

        mol_name = lines[tag_idx + 1].strip()
        if not mol_name:
            raise ParseError("empty molecule name", self.source, tag_line + 1)

        counts = lines[tag_idx + 2].split()
        try:
            n_atoms = int(counts[0])
            n_bonds = int(counts[1]) if len(counts) > 1 else 0
        except (ValueError, IndexError):
            raise ParseError(
                f"malformed counts line: {lines[tag_idx + 2].strip()!r}",
                self.source, tag_line + 2,
            ) from None

        name: Optional[str] = None
        energy: Optional[float] = None
        for i, line in enumerate(lines[:tag_idx]):
            m = _NAME_RE.match(line)
            if m:
                if name is None and m.group(1):
                    name = m.group(1)
                continue
            m = _ENERGY_RE.match(line)
            if m and energy is None:
                try:
                    energy = float(m.group(1))
                except ValueError:
                    raise ParseError(
                        f"energy is not numeric: {m.group(1)!r}", self.source, start + i,
                    ) from None

        self._check_section(lines, ATOM_TAG, n_atoms, start)
        self._check_section(lines, BOND_TAG, n_bonds, start)

        return Mol2Record(
            name=name or mol_name,
            energy=energy,
            text="".join(lines),
            source=self.source,
            line_number=start,
        )

    def _check_section(self, lines: list[str], tag: str, expected: int, start: int) -> None:
        """Fail if a counted section is missing or shorter than the counts line declares."""
        if expected <= 0:
            return
        idx = next((i for i, line in enumerate(lines) if line.startswith(tag)), None)
        if idx is None:
            raise ParseError(
                f"missing {tag} section ({expected} entries declared)",
                self.source, start + len(lines) - 1,
            )
        found = 0
        for line in lines[idx + 1:]:
            if line.startswith(TRIPOS_PREFIX):
                break
            if line.strip():
                found += 1
        if found < expected:
            raise ParseError(
                f"truncated {tag} section: expected {expected} entries, found {found}",
                self.source, start + idx,
            )


def iter_mol2(path: PathLike) -> Iterator[Mol2Record]:
    """Stream records from a plain or gzip-compressed mol2 file."""
    path = Path(path)
    logger.debug("Reading %s", path)
    with open_input(path) as f:
        yield from Mol2Reader(f, source=path)
