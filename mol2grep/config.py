from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from mol2grep.errors import ConfigError

_env_path = Path(__file__).resolve().parents[1] / ".env"
if _env_path.is_file():
    load_dotenv(_env_path, override=False)

# Absolute, inclusive tolerance for query vs. record energy comparisons.
ENERGY_TOLERANCE = 1e-4

DEFAULT_OUTPUT = "query_output.mol2.gz"
DEFAULT_TABLE_OUTPUT = "output.tab.gz"
DEFAULT_SPLIT_PREFIX = "split"


@dataclass(frozen=True)
class Mol2GrepSettings:
    """Configuration loaded from MOL2GREP_* environment variables.

    Example .env:
      MOL2GREP_TOLERANCE=1e-4
      MOL2GREP_THREADS=4
      MOL2GREP_OUTPUT=hits.mol2.gz
      MOL2GREP_COMPRESS_LEVEL=6
      MOL2GREP_PROGRESS=false
      MOL2GREP_LOG_LEVEL=DEBUG
    """

    tolerance: float = ENERGY_TOLERANCE
    num_threads: int = 1
    output: str = DEFAULT_OUTPUT
    compress_level: int = 6
    show_progress: bool = True
    log_level: str = "INFO"


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from None
    if value < 0:
        raise ConfigError(f"{name} must be non-negative, got {raw!r}")
    return value


def _env_int(name: str, default: int, lo: int, hi: int | None = None) -> int:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from None
    if value < lo or (hi is not None and value > hi):
        bounds = f">= {lo}" if hi is None else f"between {lo} and {hi}"
        raise ConfigError(f"{name} must be {bounds}, got {value}")
    return value


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    val = raw.strip().lower()
    if val in ("true", "1", "yes", "on"):
        return True
    if val in ("false", "0", "no", "off"):
        return False
    raise ConfigError(f"{name} must be a boolean, got {raw!r}")


def load_settings() -> Mol2GrepSettings:
    """Load settings from environment variables."""
    log_level = os.environ.get("MOL2GREP_LOG_LEVEL", "INFO").upper()
    if log_level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        raise ConfigError(f"MOL2GREP_LOG_LEVEL is not a logging level: {log_level!r}")

    return Mol2GrepSettings(
        tolerance=_env_float("MOL2GREP_TOLERANCE", ENERGY_TOLERANCE),
        num_threads=_env_int("MOL2GREP_THREADS", 1, lo=1),
        output=os.environ.get("MOL2GREP_OUTPUT") or DEFAULT_OUTPUT,
        compress_level=_env_int("MOL2GREP_COMPRESS_LEVEL", 6, lo=0, hi=9),
        show_progress=_env_bool("MOL2GREP_PROGRESS", True),
        log_level=log_level,
    )
