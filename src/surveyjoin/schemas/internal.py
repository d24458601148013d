"""InternalConfig: Authoritative runtime configuration.

This is the ONLY config schema that runtime code sees. It is fully validated,
frozen, and every field that processing code depends on is explicit.
"""

from typing import Literal
from pydantic import ConfigDict, Field, field_validator, model_validator

from surveyjoin.schemas.base import SurveyBaseModel
from surveyjoin.schemas.source import CategoryConfig


class InternalRemoteConfig(SurveyBaseModel):
    """Runtime remote server configuration."""
    base_url: str
    extension: str
    timeout_sec: float = Field(gt=0)
    chunk_size: int = Field(ge=1024)

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v):
        return v.rstrip("/")

    @field_validator("extension")
    @classmethod
    def strip_leading_dot(cls, v):
        return v.lstrip(".")


class InternalReaderConfig(SurveyBaseModel):
    """Runtime reader configuration."""
    file_format: Literal["xport"]
    encoding: str


class InternalTaggingConfig(SurveyBaseModel):
    """Runtime provenance column names."""
    cycle_column: str
    source_column: str


class InternalJoinConfig(SurveyBaseModel):
    """Runtime join configuration."""
    key: str = Field(min_length=1)
    output_name: str


class InternalOutputConfig(SurveyBaseModel):
    """Runtime output configuration."""
    compression: Literal["snappy", "gzip", "zstd", "none"]


class InternalLoggingConfig(SurveyBaseModel):
    """Runtime logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class InternalTrackingConfig(SurveyBaseModel):
    """Runtime outcome ledger configuration."""
    enabled: bool
    db_filename: str


class InternalConfig(SurveyBaseModel):
    """Authoritative runtime configuration.

    Runtime modules receive InternalConfig and access fields directly:

        def __init__(self, config: InternalConfig):
            self.key = config.join.key              # NOT .get()
            self.sources = config.laboratory.sources

    Rules
    -----
    - NO .get() calls
    - NO fallback defaults
    - NO validation in runtime code
    """

    base_dir: str = Field(min_length=1)
    remote: InternalRemoteConfig
    reader: InternalReaderConfig
    tagging: InternalTaggingConfig
    laboratory: CategoryConfig
    demographics: CategoryConfig
    join: InternalJoinConfig
    output: InternalOutputConfig
    logging: InternalLoggingConfig
    tracking: InternalTrackingConfig

    model_config = ConfigDict(
        extra='forbid',
        validate_assignment=True,
        use_enum_values=True,
        str_strip_whitespace=True,
        frozen=True,
    )

    @model_validator(mode="after")
    def check_distinct_categories(self):
        """The two categories must not share names, raw dirs or outputs."""
        lab, demo = self.laboratory, self.demographics
        for field in ("name", "raw_subdir", "output_name"):
            if getattr(lab, field) == getattr(demo, field):
                raise ValueError(f"categories must have distinct {field}: {getattr(lab, field)!r}")
        if self.join.output_name in (lab.output_name, demo.output_name):
            raise ValueError(f"join output_name collides with a category output: {self.join.output_name!r}")
        return self

    @property
    def categories(self) -> tuple[CategoryConfig, CategoryConfig]:
        """Both categories in join order (left, right)."""
        return (self.laboratory, self.demographics)
