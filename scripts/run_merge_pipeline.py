#!/usr/bin/env python3
"""Survey merge pipeline runner.

Usage:
    python scripts/run_merge_pipeline.py
    python scripts/run_merge_pipeline.py scripts/user_config.py
    python scripts/run_merge_pipeline.py scripts/user_config.py --phase join
    python scripts/run_merge_pipeline.py --base-dir /data/surveyjoin --rerun

Note: User config in scripts/user_config.py, expert defaults in
src/surveyjoin/schemas/param.py
"""

import sys
from pathlib import Path

# Add src to path
project_root = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(project_root / "src"))

from surveyjoin.cli.run_merge import main


if __name__ == "__main__":
    sys.exit(main())
