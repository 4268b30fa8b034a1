from __future__ import annotations

from pathlib import Path
from typing import Callable, List, Optional

import typer

from mol2grep import __version__
from mol2grep.config import DEFAULT_SPLIT_PREFIX, DEFAULT_TABLE_OUTPUT, Mol2GrepSettings, load_settings
from mol2grep.core import pipeline
from mol2grep.core.file_io import read_input_list
from mol2grep.core.logging_utils import configure_logging, get_logger
from mol2grep.errors import ConfigError, Mol2GrepError

logger = get_logger(__name__)
app = typer.Typer(no_args_is_help=True, help="Select, split and tabulate molecules in mol2 files.")


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"mol2grep {__version__}")
        raise typer.Exit()


def _settings(ctx: typer.Context) -> Mol2GrepSettings:
    """Load settings once a subcommand's options have parsed, then set up logging."""
    try:
        settings = load_settings()
    except ConfigError as e:
        raise typer.BadParameter(str(e))
    verbose = bool(ctx.obj and ctx.obj.get("verbose"))
    configure_logging("DEBUG" if verbose else settings.log_level)
    logger.debug("Settings: %s", settings)
    return settings


def _collect_inputs(
    inputs: Optional[List[Path]],
    extra: Optional[List[Path]],
    files: Optional[Path],
) -> list[Path]:
    paths = list(inputs or []) + list(extra or [])
    if files is not None:
        paths.extend(read_input_list(files))
    if not paths:
        raise ConfigError("no input files given (use -i/--input or -f/--files)")
    return paths


def _run(fn: Callable, *args, **kwargs):
    """Map library errors to exit codes: usage error (2) or failure (1)."""
    try:
        return fn(*args, **kwargs)
    except ConfigError as e:
        raise typer.BadParameter(str(e))
    except Mol2GrepError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)


@app.callback()
def main(
    ctx: typer.Context,
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show the version and exit.",
    ),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Enable debug logging."),
):
    ctx.obj = {"verbose": verbose}


@app.command("grep")
def grep_cmd(
    ctx: typer.Context,
    extra: Optional[List[Path]] = typer.Argument(None, help="More input files, e.g. the rest of a shell glob after -i."),
    inputs: Optional[List[Path]] = typer.Option(None, "-i", "--input", help="mol2 or mol2.gz file to grep (repeatable)."),
    files: Optional[Path] = typer.Option(None, "-f", "--files", help="Text file listing input paths."),
    query: Path = typer.Option(..., "-q", "--query", help="Query table of names and energies (tab separated, no header)."),
    output: Optional[Path] = typer.Option(None, "-o", "--output", "--out", help="Output mol2 file, gzipped if it ends in .gz."),
    tol: Optional[float] = typer.Option(None, "-e", "--tol", min=0.0, help="Energy tolerance (default: MOL2GREP_TOLERANCE or 1e-4)."),
    names_only: bool = typer.Option(False, "--names-only", help="Query file lists names only; ignore energies."),
    threads: Optional[int] = typer.Option(None, "-t", "--threads", min=1, help="Input files processed in parallel."),
    no_progress: bool = typer.Option(False, "--no-progress", help="Disable the progress bar."),
):
    """Keep the molecules whose name and energy appear in the query table."""
    settings = _settings(ctx)
    paths = _run(_collect_inputs, inputs, extra, files)
    stats = _run(
        pipeline.grep,
        paths,
        query,
        output or Path(settings.output),
        tolerance=settings.tolerance if tol is None else tol,
        names_only=names_only,
        workers=threads or settings.num_threads,
        compress_level=settings.compress_level,
        progress=settings.show_progress and not no_progress,
    )
    typer.echo(f">>> Number of Molecules Processed: {stats.processed}")
    typer.echo(f">>> Number of Molecules Accepted: {stats.accepted}")


@app.command("split")
def split_cmd(
    ctx: typer.Context,
    extra: Optional[List[Path]] = typer.Argument(None, help="More input files."),
    inputs: Optional[List[Path]] = typer.Option(None, "-i", "--input", help="mol2 or mol2.gz file to split (repeatable)."),
    files: Optional[Path] = typer.Option(None, "-f", "--files", help="Text file listing input paths."),
    prefix: str = typer.Option(DEFAULT_SPLIT_PREFIX, "-o", "--prefix", help="Output files are <prefix>.NNNN.mol2.gz."),
    num_files: int = typer.Option(4, "-n", "--num-files", min=1, help="Number of files to split records into."),
    no_progress: bool = typer.Option(False, "--no-progress", help="Disable the progress bar."),
):
    """Distribute all molecules round-robin across several compressed files."""
    settings = _settings(ctx)
    paths = _run(_collect_inputs, inputs, extra, files)
    counts = _run(
        pipeline.split,
        paths,
        prefix=prefix,
        num_files=num_files,
        compress_level=settings.compress_level,
        progress=settings.show_progress and not no_progress,
    )
    typer.echo("File Totals:")
    for i, n in enumerate(counts):
        typer.echo(f"  {pipeline.split_output_name(prefix, i)}:\t{n}")


@app.command("table")
def table_cmd(
    ctx: typer.Context,
    extra: Optional[List[Path]] = typer.Argument(None, help="More input files."),
    inputs: Optional[List[Path]] = typer.Option(None, "-i", "--input", help="mol2 or mol2.gz file to tabulate (repeatable)."),
    files: Optional[Path] = typer.Option(None, "-f", "--files", help="Text file listing input paths."),
    output: Path = typer.Option(Path(DEFAULT_TABLE_OUTPUT), "-o", "--output", help="Output table, gzipped if it ends in .gz."),
    no_header: bool = typer.Option(False, "-n", "--no-header", help="Do not write a header row."),
    no_progress: bool = typer.Option(False, "--no-progress", help="Disable the progress bar."),
):
    """Write a tab-separated table of names and energies of every molecule."""
    settings = _settings(ctx)
    paths = _run(_collect_inputs, inputs, extra, files)
    df = _run(
        pipeline.table,
        paths,
        output,
        header=not no_header,
        progress=settings.show_progress and not no_progress,
    )
    typer.echo(f"Total Poses: {len(df)}")
    typer.echo(f"Written to: {output}")
