"""`surveyjoin` - cross-cycle download, stacking and joining of survey tables.

Subpackages:
- sources: Source registry, XPORT fetcher and reader
- pipeline: Tagging, accumulation, join, persistence, orchestration
- schemas: Pydantic configuration (param < user < CLI)
- contracts: Stage invariants and failure taxonomy
"""

__version__ = "0.1.0"
