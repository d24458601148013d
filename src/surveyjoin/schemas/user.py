"""UserConfig: Forgiving, minimal user-facing configuration.

This schema accepts user inputs with aliases for common naming patterns
(e.g., BASE_DIR -> base_dir, JOIN_KEY -> join_key). Users only specify what
they want to override from the expert defaults. Unknown keys are ignored.

Source lists accept either dicts or ``(remote_identifier, label, cycle_year)``
triples::

    CONFIG = {
        "BASE_DIR": "/data/surveyjoin",
        "LABORATORY_SOURCES": [
            ("GHB_I", "2015-2016", "2015"),
            ("GHB_J", "2017-2018", "2017"),
        ],
    }
"""

from typing import Literal, Optional
from pydantic import Field, field_validator

from surveyjoin.schemas.base import SurveyBaseModel
from surveyjoin.schemas.source import SourceEntry


class UserRemoteConfig(SurveyBaseModel):
    """User-facing remote server config."""
    base_url: Optional[str] = None
    extension: Optional[str] = None
    timeout_sec: Optional[float] = None
    chunk_size: Optional[int] = None


class UserCategoryConfig(SurveyBaseModel):
    """User-facing category override."""
    raw_subdir: Optional[str] = None
    output_name: Optional[str] = None
    sources: Optional[list[SourceEntry]] = None


class UserConfig(SurveyBaseModel):
    """User-facing configuration schema.

    Usage
    -----
        user_cfg = UserConfig(
            base_dir="/data/surveyjoin",
            join_key="SEQN",
            laboratory_sources=[("GHB_J", "2017-2018", "2017")],
        )

        internal = resolve_config(param_cfg, user_cfg, cli_cfg)
    """

    # Top-level operational settings
    base_dir: Optional[str] = Field(None, alias="BASE_DIR")
    join_key: Optional[str] = Field(None, alias="JOIN_KEY")
    log_level: Optional[Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]] = Field(
        None, alias="LOG_LEVEL"
    )

    # Remote settings (flat aliases)
    base_url: Optional[str] = Field(None, alias="BASE_URL")
    timeout_sec: Optional[float] = Field(None, alias="TIMEOUT_SEC")

    # Reader settings
    encoding: Optional[str] = Field(None, alias="ENCODING")

    # Registries (flat aliases)
    laboratory_sources: Optional[list[SourceEntry]] = Field(None, alias="LABORATORY_SOURCES")
    demographic_sources: Optional[list[SourceEntry]] = Field(None, alias="DEMOGRAPHIC_SOURCES")

    # Output settings
    compression: Optional[Literal["snappy", "gzip", "zstd", "none"]] = Field(None, alias="COMPRESSION")
    tracking: Optional[bool] = Field(None, alias="TRACKING")

    # Nested overrides (advanced users)
    remote: Optional[UserRemoteConfig] = None
    laboratory: Optional[UserCategoryConfig] = None
    demographics: Optional[UserCategoryConfig] = None

    model_config = SurveyBaseModel.model_config.copy()
    # Allow forgiving input dictionaries (ignore unknown keys)
    model_config.update({"populate_by_name": True, "extra": "ignore"})

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        """Accept 'debug' for DEBUG."""
        if isinstance(v, str):
            return v.upper().strip()
        return v

    @field_validator("compression", mode="before")
    @classmethod
    def normalize_compression(cls, v):
        """Accept 'GZIP' for gzip."""
        if isinstance(v, str):
            return v.lower().strip()
        return v

    @field_validator("timeout_sec", mode="before")
    @classmethod
    def coerce_timeout(cls, v):
        """Accept int or float for timeout."""
        if v is not None:
            return float(v)
        return v

    def to_internal_overrides(self) -> dict:
        """Convert flat UserConfig to nested InternalConfig structure.

        Returns
        -------
        dict
            Nested dictionary matching InternalConfig structure
        """
        overrides = {}

        if self.base_dir is not None:
            overrides["base_dir"] = str(self.base_dir)

        if self.join_key is not None:
            overrides["join"] = {"key": self.join_key}

        if self.log_level is not None:
            overrides["logging"] = {"level": self.log_level}

        # Remote section
        remote = {}
        if self.base_url is not None:
            remote["base_url"] = self.base_url
        if self.timeout_sec is not None:
            remote["timeout_sec"] = self.timeout_sec
        if self.remote is not None:
            remote.update(self.remote.model_dump(exclude_none=True))
        if remote:
            overrides["remote"] = remote

        if self.encoding is not None:
            overrides["reader"] = {"encoding": self.encoding}

        # Category sections: flat source lists, then nested overrides
        for section, flat_sources, nested in (
            ("laboratory", self.laboratory_sources, self.laboratory),
            ("demographics", self.demographic_sources, self.demographics),
        ):
            category = {}
            if flat_sources is not None:
                category["sources"] = [e.model_dump() for e in flat_sources]
            if nested is not None:
                category.update(nested.model_dump(exclude_none=True))
            if category:
                overrides[section] = category

        if self.compression is not None:
            overrides["output"] = {"compression": self.compression}

        if self.tracking is not None:
            overrides["tracking"] = {"enabled": self.tracking}

        return overrides
