"""surveyjoin User Configuration.

This is the user-facing configuration file. Modify settings here to customize
the pipeline behavior. Expert defaults (full source registry, reader and
output settings) live in src/surveyjoin/schemas/param.py

Usage:
    python scripts/run_merge_pipeline.py scripts/user_config.py
    python scripts/run_merge_pipeline.py scripts/user_config.py --phase laboratory
    python scripts/run_merge_pipeline.py scripts/user_config.py --base-dir /tmp/out
"""

CONFIG = {
    # ========================================================================
    # OUTPUT
    # ========================================================================
    "BASE_DIR": "output",        # Raw files, logs and the six tables go here
    "COMPRESSION": "snappy",     # Parquet codec: snappy, gzip, zstd, none
    "LOG_LEVEL": "INFO",

    # ========================================================================
    # REMOTE SERVER
    # ========================================================================
    "BASE_URL": "https://wwwn.cdc.gov/Nchs/Data/Nhanes/Public",
    "TIMEOUT_SEC": 120,

    # ========================================================================
    # JOIN
    # ========================================================================
    "JOIN_KEY": "SEQN",          # Respondent sequence number

    # ========================================================================
    # SOURCES (remote_identifier, label, cycle_year), oldest first.
    # Leave out to use the full 2005-2018 registry.
    # ========================================================================
    # "LABORATORY_SOURCES": [
    #     ("GHB_I", "2015-2016", "2015"),
    #     ("GHB_J", "2017-2018", "2017"),
    # ],
    # "DEMOGRAPHIC_SOURCES": [
    #     ("DEMO_I", "2015-2016", "2015"),
    #     ("DEMO_J", "2017-2018", "2017"),
    # ],
}
