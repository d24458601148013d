"""
Directory setup for the surveyjoin pipeline.

Flat layout under one base directory:
- one raw directory per category (original remote file names)
- logs/ for the run log, outcome ledger and runtime config snapshot
- the six output artifacts directly in the base directory
"""

import logging
from datetime import datetime, timezone
from pathlib import Path

logger = logging.getLogger(__name__)


def setup_output_directories(base_output_dir, categories=()):
    """
    Set up the output directory structure.

    Parameters
    ----------
    base_output_dir : str or Path
        Base output directory.
    categories : iterable of CategoryConfig
        Each category gets a raw-file directory keyed by its name.

    Returns
    -------
    dict
        Dictionary with paths: 'base', 'logs', and one key per category name.

    Example
    -------
    >>> dirs = setup_output_directories("/data/out", config.categories)
    >>> dirs["laboratory"]
    PosixPath('/data/out/laboratory')
    """
    base_output_dir = Path(base_output_dir).expanduser().resolve()

    directories = {
        "base": base_output_dir,
        "logs": base_output_dir / "logs",
    }
    for category in categories:
        directories[category.name] = base_output_dir / category.raw_subdir

    for path in directories.values():
        path.mkdir(parents=True, exist_ok=True)

    logger.debug("Output directories: %s", {k: str(v) for k, v in directories.items()})
    return directories


def get_log_path(output_dirs, run_id=None):
    """
    Get the log file path for a run.

    Returns
    -------
    Path
        logs/surveyjoin_<run_id>.log, or logs/surveyjoin_latest.log
    """
    log_dir = Path(output_dirs["logs"])
    log_dir.mkdir(parents=True, exist_ok=True)

    if run_id:
        filename = f"surveyjoin_{run_id}.log"
    else:
        filename = "surveyjoin_latest.log"

    return log_dir / filename


def generate_run_id():
    """UTC timestamp run identifier, e.g. '20250305_142233_804512'."""
    return datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S_%f")
