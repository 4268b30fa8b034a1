"""mol2grep: select, split and tabulate molecules in mol2 files."""

__version__ = "0.1.0"
