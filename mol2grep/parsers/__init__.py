"""mol2grep.parsers: streaming mol2 record parsing.

Usage::

    from mol2grep.parsers import iter_mol2

    for record in iter_mol2("poses.mol2.gz"):
        print(record.name, record.energy)
"""

from mol2grep.parsers.mol2 import Mol2Reader, Mol2Record, iter_mol2

__all__ = ["Mol2Reader", "Mol2Record", "iter_mol2"]
