"""Read downloaded SAS XPORT files into pandas DataFrames."""

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import pandas as pd

from surveyjoin.contracts.failure import ParseError

if TYPE_CHECKING:
    from surveyjoin.schemas import InternalConfig

__all__ = ['XptTableReader']

logger = logging.getLogger(__name__)


class XptTableReader:
    """Parse a persisted XPORT file into a DataFrame.

    Numeric SAS variables become float64 columns (SAS missing values become
    NaN); character variables are decoded with the configured encoding.

    Examples
    --------
    >>> reader = XptTableReader(config)
    >>> df = reader.read("laboratory/GHB_J.xpt")
    >>> df.columns.tolist()
    ['SEQN', 'LBXGH']
    """

    def __init__(self, config: "InternalConfig"):
        self.file_format = config.reader.file_format
        self.encoding = config.reader.encoding

    def read(self, path) -> pd.DataFrame:
        """Read one file.

        Raises
        ------
        ParseError
            If the file is missing, truncated or not in XPORT format.
        """
        path = Path(path)
        try:
            df = pd.read_sas(path, format=self.file_format, encoding=self.encoding)
        except Exception as e:
            raise ParseError(f"Could not parse {path.name}: {e}", path=path) from e

        logger.debug("Read %s: %d rows x %d columns", path.name, len(df), len(df.columns))
        return df
