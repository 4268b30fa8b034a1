from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, Optional

from mol2grep.config import ENERGY_TOLERANCE
from mol2grep.parsers.mol2 import Mol2Record
from mol2grep.query.table import QueryTable


@dataclass
class FilterStats:
    """Running counts of records seen and accepted."""

    processed: int = 0
    accepted: int = 0


def filter_records(
    records: Iterable[Mol2Record],
    table: QueryTable,
    tolerance: float = ENERGY_TOLERANCE,
    stats: Optional[FilterStats] = None,
) -> Iterator[Mol2Record]:
    """Yield, in input order, the records whose (name, energy) is in `table`.

    Names match exactly; energies match when within `tolerance` (inclusive).
    """
    for record in records:
        if stats is not None:
            stats.processed += 1
        if table.matches(record.name, record.energy, tolerance):
            if stats is not None:
                stats.accepted += 1
            yield record
