"""Command-line interface modules for surveyjoin pipeline execution.

This package contains the core execution logic, making scripts/ optional.
"""

from surveyjoin.cli.run_merge import run_merge_pipeline, main

__all__ = ['run_merge_pipeline', 'main']
