"""CLIConfig: Command-line operational overrides.

Minimal configuration for parameters that commonly change between runs:
output directory, join key column, verbosity.
"""

from typing import Literal, Optional

from surveyjoin.schemas.base import SurveyBaseModel


class CLIConfig(SurveyBaseModel):
    """Command-line configuration overrides.

    Highest priority in config resolution.

    Usage
    -----
        cli_cfg = CLIConfig(base_dir="/scratch/surveyjoin", join_key="SEQN")
        internal = resolve_config(param_cfg, user_cfg, cli_cfg)
    """

    base_dir: Optional[str] = None
    join_key: Optional[str] = None
    log_level: Optional[Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]] = None

    def to_internal_overrides(self) -> dict:
        """Convert CLI config to internal config structure.

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

        return overrides
