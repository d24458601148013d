"""Core survey merge pipeline execution logic.

This module contains the pipeline runner and its argument parser. The
script in scripts/ is a thin wrapper; this is the real implementation.
"""

import sys
import json
import shutil
import logging
import argparse
import importlib.util
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Dict, Any

from pydantic import ValidationError

from surveyjoin.contracts import ContractViolation, PersistenceError
from surveyjoin.pipeline.orchestrator import PHASES, PipelineOrchestrator
from surveyjoin.pipeline.outcomes import RunSummary
from surveyjoin.schemas import resolve_config, ParamConfig, UserConfig, CLIConfig, InternalConfig
from surveyjoin.setup_directories import setup_output_directories, generate_run_id


logger = logging.getLogger(__name__)


def load_user_config_dict(config_path: str) -> dict:
    """Load user config dict from Python file.

    Returns the raw dict before Pydantic validation.

    Parameters
    ----------
    config_path : str
        Path to user config Python file containing a CONFIG dict.

    Raises
    ------
    FileNotFoundError
        If config file does not exist.
    ValueError
        If no CONFIG dict found in file.
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config not found: {path}")

    spec = importlib.util.spec_from_file_location("surveyjoin_user_config", path)
    if spec is None or spec.loader is None:
        raise ImportError(f"Could not load config module from {path}")

    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    for name in dir(module):
        if name.startswith('CONFIG'):
            obj = getattr(module, name)
            if isinstance(obj, dict):
                return obj

    raise ValueError(f"No CONFIG dict found in {path}")


def persist_runtime_config(config: InternalConfig, run_id: str, output_dirs: Dict[str, Path]) -> Path:
    """Save the resolved configuration with its run ID for reproducibility."""
    config_file = Path(output_dirs["logs"]) / f"runtime_config_{run_id}.json"

    config_dict = config.model_dump(mode="json")
    config_dict["run_id"] = run_id
    config_dict["created_at"] = datetime.now(timezone.utc).isoformat()

    with open(config_file, 'w') as f:
        json.dump(config_dict, f, indent=2, default=str)

    logger.debug("Runtime config saved: %s", config_file)
    return config_file


def run_merge_pipeline(
    user_config_path: Optional[str] = None,
    cli_args: Optional[Dict[str, Any]] = None,
    phase: str = "all",
    rerun: bool = False,
    verbose: bool = False,
    session=None,
) -> RunSummary:
    """Execute the survey merge pipeline.

    1. Loads and resolves configuration (Param < User < CLI)
    2. Optionally cleans the output directory if rerun=True
    3. Sets up output directories and saves the runtime config
    4. Runs the orchestrator for the requested phase

    Parameters
    ----------
    user_config_path : str, optional
        Path to user config file (Python file with CONFIG dict). If None,
        the embedded source registry and defaults are used.
    cli_args : dict, optional
        CLI argument overrides. Keys: base_dir, join_key, log_level.
    phase : str, optional
        "all" (default), "laboratory", "demographics", or "join".
    rerun : bool, optional
        If True, delete the output directory before running.
    verbose : bool, optional
        If True, enable DEBUG logging and print the resolved config.
    session : requests.Session, optional
        HTTP session for the fetcher (testing).

    Returns
    -------
    RunSummary

    Raises
    ------
    FileNotFoundError
        If user_config_path does not exist.
    ValidationError
        If configuration validation fails.
    PersistenceError
        If an output artifact cannot be written.

    Examples
    --------
    Run with embedded defaults::

        run_merge_pipeline(cli_args={"base_dir": "/data/surveyjoin"})

    Re-run only the join pass::

        run_merge_pipeline("config/my_config.py", phase="join")
    """
    param_cfg = ParamConfig()

    if user_config_path:
        user_cfg = UserConfig.model_validate(load_user_config_dict(user_config_path))
    else:
        user_cfg = UserConfig()

    cli_args = dict(cli_args or {})
    if verbose and "log_level" not in cli_args:
        cli_args["log_level"] = "DEBUG"
    cli_dict = {k: v for k, v in cli_args.items() if v is not None}
    cli_cfg = CLIConfig.model_validate(cli_dict) if cli_dict else CLIConfig()

    config = resolve_config(param_cfg, user_cfg, cli_cfg)

    if rerun:
        base_dir_path = Path(config.base_dir)
        if base_dir_path.exists():
            print(f"Cleaning output directory: {base_dir_path}")
            shutil.rmtree(base_dir_path)
            print("Output directory cleaned")

    output_dirs = setup_output_directories(config.base_dir, config.categories)
    run_id = generate_run_id()
    persist_runtime_config(config, run_id, output_dirs)

    print(f"\n{'='*60}")
    print("Survey Merge Pipeline")
    print('='*60)
    print(f"Config:  {user_config_path or '(embedded defaults)'}")
    print(f"Run:     {run_id}")
    print(f"Phase:   {phase}")
    print(f"Sources: {len(config.laboratory.sources)} laboratory, "
          f"{len(config.demographics.sources)} demographics")
    print(f"Key:     {config.join.key}")
    print(f"Output:  {output_dirs['base']}")
    print('='*60)

    if verbose:
        print("\nFull Internal Configuration:")
        print(json.dumps(config.model_dump(mode="json"), indent=2))
        print('='*60)

    orchestrator = PipelineOrchestrator(config, output_dirs, session=session, run_id=run_id)
    return orchestrator.start(phase=phase)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="surveyjoin",
        description="Download, stack and join survey laboratory and demographic files",
    )
    parser.add_argument("config", nargs="?", help="Path to user config file (optional)")
    parser.add_argument("--base-dir", help="Output directory")
    parser.add_argument("--join-key", help="Identifier column shared by both categories")
    parser.add_argument("--phase", choices=PHASES, default="all", help="Pass to run (default: all)")
    parser.add_argument("--rerun", action="store_true", help="Delete output directory before running")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    try:
        summary = run_merge_pipeline(
            args.config,
            cli_args={"base_dir": args.base_dir, "join_key": args.join_key},
            phase=args.phase,
            rerun=args.rerun,
            verbose=args.verbose,
        )
    except (FileNotFoundError, ValueError, ValidationError) as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2
    except (PersistenceError, ContractViolation) as e:
        print(f"Pipeline aborted: {e}", file=sys.stderr)
        return 1

    print()
    for report in summary.reports.values():
        print(report.summary_line())
    if summary.merged_rows is not None:
        print(f"merged: {summary.merged_rows} rows")
    return 0


if __name__ == "__main__":
    sys.exit(main())
