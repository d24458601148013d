"""Survey source modules.

- registry: Default source rows (laboratory and demographic files per cycle)
- fetcher: HTTP download of XPORT files
- reader: XPORT to DataFrame parsing
"""

from surveyjoin.sources.fetcher import XptFetcher
from surveyjoin.sources.reader import XptTableReader

__all__ = [
    "XptFetcher",
    "XptTableReader",
]
