"""Shared fixtures: small DOCK-style mol2 records and query files."""

from __future__ import annotations

import gzip
from pathlib import Path
from typing import Callable, Optional

import pytest


def mol2_record(name: str, energy: Optional[float] = -10.0, n_atoms: int = 2) -> str:
    """Build one DOCK-style mol2 record with `n_atoms` atoms in a chain."""
    lines = [f"##########                 Name:     {name}\n"]
    if energy is not None:
        lines.append(f"##########         Total Energy:     {energy}\n")
    lines.append("##########    Ligand Source File:     test.db2\n")
    n_bonds = n_atoms - 1
    lines += [
        "@<TRIPOS>MOLECULE\n",
        f"{name}\n",
        f"    {n_atoms}    {n_bonds}     1     0     0\n",
        "SMALL\n",
        "USER_CHARGES\n",
        "\n",
        "@<TRIPOS>ATOM\n",
    ]
    for i in range(1, n_atoms + 1):
        lines.append(f"      {i} C{i}    {i:.4f}    0.0000    0.0000 C.3     1 LIG1    -0.1000\n")
    lines.append("@<TRIPOS>BOND\n")
    for i in range(1, n_bonds + 1):
        lines.append(f"     {i}    {i}    {i + 1} 1\n")
    lines += [
        "@<TRIPOS>SUBSTRUCTURE\n",
        "     1 LIG1        1 TEMP              0 ****  ****    0 ROOT\n",
        "\n",
    ]
    return "".join(lines)


@pytest.fixture
def write_mol2(tmp_path: Path) -> Callable[..., Path]:
    """Write a mol2 (or mol2.gz) file from (name, energy) pairs."""

    def _write(filename: str, molecules, raw_suffix: str = "") -> Path:
        text = "".join(mol2_record(name, energy) for name, energy in molecules) + raw_suffix
        path = tmp_path / filename
        if filename.endswith(".gz"):
            with gzip.open(path, "wt") as f:
                f.write(text)
        else:
            path.write_text(text)
        return path

    return _write


@pytest.fixture
def write_query(tmp_path: Path) -> Callable[..., Path]:
    def _write(lines: list[str], filename: str = "query.tsv") -> Path:
        path = tmp_path / filename
        path.write_text("".join(line + "\n" for line in lines))
        return path

    return _write


def read_text(path: Path) -> str:
    if str(path).endswith(".gz"):
        with gzip.open(path, "rt") as f:
            return f.read()
    return path.read_text()
