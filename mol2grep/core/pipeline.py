"""grep / split / table pipelines over one or more mol2 inputs."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional, Sequence, Union

import pandas as pd
from tqdm import tqdm

from mol2grep.config import ENERGY_TOLERANCE
from mol2grep.core.file_io import is_gzip
from mol2grep.core.filtering import FilterStats, filter_records
from mol2grep.core.writer import Mol2Writer
from mol2grep.errors import ConfigError, IoError, Mol2GrepError
from mol2grep.parsers.mol2 import Mol2Record, iter_mol2
from mol2grep.query.table import QueryTable, load_query_table

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

TABLE_COLUMNS = ["ligand_id", "name", "energy"]


@dataclass
class RunStats:
    """Totals of a grep run."""

    files: int = 0
    processed: int = 0
    accepted: int = 0


@dataclass
class _FileResult:
    path: Path
    matches: list[Mol2Record] = field(default_factory=list)
    stats: FilterStats = field(default_factory=FilterStats)
    error: Optional[Mol2GrepError] = None


def _require_inputs(inputs: Sequence[PathLike]) -> list[Path]:
    paths = [Path(p) for p in inputs]
    if not paths:
        raise ConfigError("no input files given")
    return paths


def _grep_one(path: Path, table: QueryTable, tolerance: float) -> _FileResult:
    """Filter one file in a worker. Matches found before an error are kept."""
    result = _FileResult(path=path)
    try:
        for record in filter_records(iter_mol2(path), table, tolerance, stats=result.stats):
            result.matches.append(record)
    except Mol2GrepError as e:
        result.error = e
    return result


def grep(
    inputs: Sequence[PathLike],
    query_path: PathLike,
    output_path: PathLike,
    tolerance: float = ENERGY_TOLERANCE,
    names_only: bool = False,
    workers: int = 1,
    compress_level: int = 6,
    progress: bool = False,
) -> RunStats:
    """Write every input record matching the query table to `output_path`.

    Records keep input-file order, then record order. The first ParseError or
    IoError stops the run after flushing the matches that preceded it.
    """
    paths = _require_inputs(inputs)
    if workers < 1:
        raise ConfigError(f"workers must be >= 1, got {workers}")
    table = load_query_table(query_path, names_only=names_only)

    run = RunStats()
    with Mol2Writer(output_path, compress_level=compress_level) as writer:
        if workers == 1:
            for path in tqdm(paths, unit="file", desc="grep", disable=not progress):
                stats = FilterStats()
                try:
                    writer.write_all(filter_records(iter_mol2(path), table, tolerance, stats=stats))
                finally:
                    run.files += 1
                    run.processed += stats.processed
                    run.accepted += stats.accepted
        else:
            with ThreadPoolExecutor(max_workers=workers) as ex:
                futures = [ex.submit(_grep_one, p, table, tolerance) for p in paths]
                try:
                    for fut in tqdm(futures, unit="file", desc="grep", disable=not progress):
                        result = fut.result()
                        writer.write_all(result.matches)
                        run.files += 1
                        run.processed += result.stats.processed
                        run.accepted += result.stats.accepted
                        if result.error is not None:
                            raise result.error
                except BaseException:
                    for fut in futures:
                        fut.cancel()
                    raise

    logger.info("Processed %d molecules from %d files, accepted %d", run.processed, run.files, run.accepted)
    return run


def _iter_all(paths: Iterable[Path], desc: str, progress: bool) -> Iterable[Mol2Record]:
    for path in tqdm(list(paths), unit="file", desc=desc, disable=not progress):
        yield from iter_mol2(path)


def split_output_name(prefix: PathLike, index: int) -> Path:
    return Path(f"{prefix}.{index:04d}.mol2.gz")


def split(
    inputs: Sequence[PathLike],
    prefix: PathLike = "split",
    num_files: int = 4,
    compress_level: int = 6,
    progress: bool = False,
) -> list[int]:
    """Distribute records round-robin into `<prefix>.NNNN.mol2.gz` files.

    Returns the number of records written to each file.
    """
    paths = _require_inputs(inputs)
    if num_files < 1:
        raise ConfigError(f"num_files must be >= 1, got {num_files}")

    writers = [Mol2Writer(split_output_name(prefix, i), compress_level=compress_level) for i in range(num_files)]
    opened: list[Mol2Writer] = []
    try:
        for w in writers:
            opened.append(w.open())
        for n, record in enumerate(_iter_all(paths, "split", progress)):
            writers[n % num_files].write(record)
    finally:
        for w in opened:
            w.close()

    counts = [w.count for w in writers]
    for w in writers:
        logger.info("  %s:\t%d", w.path, w.count)
    return counts


def table(
    inputs: Sequence[PathLike],
    output_path: PathLike,
    header: bool = True,
    progress: bool = False,
) -> pd.DataFrame:
    """Write a tab-separated `ligand_id, name, energy` table of every record."""
    paths = _require_inputs(inputs)
    rows = [
        (i, record.name, record.energy)
        for i, record in enumerate(_iter_all(paths, "table", progress))
    ]
    df = pd.DataFrame(rows, columns=TABLE_COLUMNS)

    output_path = Path(output_path)
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        df.to_csv(
            output_path,
            sep="\t",
            index=False,
            header=header,
            compression="gzip" if is_gzip(output_path) else None,
        )
    except OSError as e:
        raise IoError(e.strerror or str(e), output_path) from e

    logger.info("Total poses: %d written to %s", len(df), output_path)
    return df
