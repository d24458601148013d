"""Pipeline modules.

- accumulator: Tagging and per-category stacking
- joiner: Cross-category inner join
- persister: Parquet + CSV artifacts
- source_tracker: SQLite outcome ledger
- orchestrator: Main pipeline controller
"""

from surveyjoin.pipeline.accumulator import CategoryAccumulator, tag_table, combine_tables
from surveyjoin.pipeline.joiner import join_categories
from surveyjoin.pipeline.persister import TablePersister
from surveyjoin.pipeline.source_tracker import SourceTracker
from surveyjoin.pipeline.orchestrator import PipelineOrchestrator

__all__ = [
    "CategoryAccumulator",
    "tag_table",
    "combine_tables",
    "join_categories",
    "TablePersister",
    "SourceTracker",
    "PipelineOrchestrator",
]
