"""Pydantic configuration schemas for surveyjoin.

Exports
-------
resolve_config : function
    Single entrypoint for configuration resolution
InternalConfig : class
    Fully validated, authoritative runtime configuration
ParamConfig : class
    Expert defaults (complete, including the source registry)
UserConfig : class
    User-facing configuration (forgiving, minimal)
CLIConfig : class
    Command-line operational overrides
SourceEntry, CategoryConfig : class
    Source registry records
"""

from surveyjoin.schemas.source import SourceEntry, CategoryConfig
from surveyjoin.schemas.resolve import resolve_config
from surveyjoin.schemas.internal import InternalConfig
from surveyjoin.schemas.param import ParamConfig
from surveyjoin.schemas.user import UserConfig
from surveyjoin.schemas.cli import CLIConfig

__all__ = [
    'resolve_config',
    'InternalConfig',
    'ParamConfig',
    'UserConfig',
    'CLIConfig',
    'SourceEntry',
    'CategoryConfig',
]
