"""ParamConfig: Expert defaults for the surveyjoin pipeline.

ALL pipeline parameters have defaults here, including the full source
registry. Runtime code never reads ParamConfig directly; it only receives
InternalConfig produced by resolve_config().
"""

from typing import Literal
from pydantic import Field, field_validator

from surveyjoin.schemas.base import SurveyBaseModel
from surveyjoin.schemas.source import CategoryConfig
from surveyjoin.sources.registry import LABORATORY_PREFIX, DEMOGRAPHIC_PREFIX, registry_rows


# =============================================================================
# Nested Configuration Models
# =============================================================================

class RemoteConfig(SurveyBaseModel):
    """Remote file server settings."""
    base_url: str = "https://wwwn.cdc.gov/Nchs/Data/Nhanes/Public"
    extension: str = "xpt"
    timeout_sec: float = Field(120.0, gt=0, description="Per-request timeout in seconds")
    chunk_size: int = Field(1 << 16, ge=1024, description="Streaming chunk size in bytes")

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v):
        return v.rstrip("/")

    @field_validator("extension")
    @classmethod
    def strip_leading_dot(cls, v):
        return v.lstrip(".")


class ReaderConfig(SurveyBaseModel):
    """Downloaded file reader configuration."""
    file_format: Literal["xport"] = "xport"
    encoding: str = "latin1"


class TaggingConfig(SurveyBaseModel):
    """Provenance column names appended to every row."""
    cycle_column: str = "Cycle"
    source_column: str = "SourceFile"


class JoinConfig(SurveyBaseModel):
    """Cross-category join configuration."""
    key: str = Field("SEQN", min_length=1)
    output_name: str = "merged"


class OutputConfig(SurveyBaseModel):
    """Output file configuration."""
    compression: Literal["snappy", "gzip", "zstd", "none"] = "snappy"


class LoggingConfig(SurveyBaseModel):
    """Logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"


class TrackingConfig(SurveyBaseModel):
    """Per-entry outcome ledger (SQLite)."""
    enabled: bool = True
    db_filename: str = "source_outcomes.db"


def _laboratory_default() -> CategoryConfig:
    return CategoryConfig(
        name="laboratory",
        raw_subdir="laboratory",
        output_name="combined_laboratory",
        sources=registry_rows(LABORATORY_PREFIX),
    )


def _demographics_default() -> CategoryConfig:
    return CategoryConfig(
        name="demographics",
        raw_subdir="demographics",
        output_name="combined_demographics",
        sources=registry_rows(DEMOGRAPHIC_PREFIX),
    )


# =============================================================================
# Main ParamConfig
# =============================================================================

class ParamConfig(SurveyBaseModel):
    """Complete expert configuration with all defaults.

    This is the single source of truth for all pipeline parameters.
    It serves as the base layer in config resolution:

        internal_cfg = resolve_config(param_cfg, user_cfg, cli_cfg)
    """

    base_dir: str = "output"
    remote: RemoteConfig = Field(default_factory=RemoteConfig)
    reader: ReaderConfig = Field(default_factory=ReaderConfig)
    tagging: TaggingConfig = Field(default_factory=TaggingConfig)
    laboratory: CategoryConfig = Field(default_factory=_laboratory_default)
    demographics: CategoryConfig = Field(default_factory=_demographics_default)
    join: JoinConfig = Field(default_factory=JoinConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    tracking: TrackingConfig = Field(default_factory=TrackingConfig)
