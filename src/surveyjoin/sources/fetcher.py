"""HTTP retrieval of survey XPORT files.

Builds the remote address for a SourceEntry, streams the response body to a
temporary file in the category directory, and renames it over the target
path. Success is HTTP 200 only; everything else raises FetchError. There is
no retry and no backoff.
"""

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING

import requests

from surveyjoin.contracts.failure import FetchError

if TYPE_CHECKING:
    from surveyjoin.schemas import InternalConfig, SourceEntry

__all__ = ['XptFetcher']

logger = logging.getLogger(__name__)


class XptFetcher:
    """Downloads one remote file per SourceEntry over plain HTTP GET.

    **Remote layout:** ``{base_url}/{cycle_year}/DataFiles/{remote_identifier}.{ext}``
    Example: ``https://wwwn.cdc.gov/Nchs/Data/Nhanes/Public/2017/DataFiles/GHB_J.xpt``

    **Local layout:** ``{dest_dir}/{remote_identifier}.{ext}``, overwritten on
    every run. The body is written to ``<name>.part`` first and moved into
    place only after the stream completes, so an interrupted download never
    leaves a truncated file under the final name.

    Example usage (typically called by CategoryAccumulator)::

        fetcher = XptFetcher(config)
        path = fetcher.fetch(entry, Path("/data/surveyjoin/laboratory"))
    """

    def __init__(self, config: "InternalConfig", session=None):
        """Initialize fetcher.

        Parameters
        ----------
        config : InternalConfig
            Uses ``config.remote`` (base_url, extension, timeout_sec, chunk_size).
        session : requests.Session, optional
            HTTP session. If None, creates a new one. Allows injection for testing.
        """
        self.config = config
        self.base_url = config.remote.base_url
        self.extension = config.remote.extension
        self.timeout = config.remote.timeout_sec
        self.chunk_size = config.remote.chunk_size
        self.session = session or requests.Session()

    def file_name(self, entry: "SourceEntry") -> str:
        """Local (and remote) file name for an entry."""
        return f"{entry.remote_identifier}.{self.extension}"

    def build_url(self, entry: "SourceEntry") -> str:
        """Remote address for an entry."""
        return f"{self.base_url}/{entry.cycle_year}/DataFiles/{self.file_name(entry)}"

    def local_path(self, entry: "SourceEntry", dest_dir: Path) -> Path:
        return Path(dest_dir) / self.file_name(entry)

    def fetch(self, entry: "SourceEntry", dest_dir: Path) -> Path:
        """Download one entry to ``dest_dir``.

        Parameters
        ----------
        entry : SourceEntry
            Remote file to retrieve.
        dest_dir : Path
            Category directory. Created if it doesn't exist.

        Returns
        -------
        Path
            Path of the persisted raw file.

        Raises
        ------
        FetchError
            On any non-200 status or network error.
        """
        url = self.build_url(entry)
        local_path = self.local_path(entry, dest_dir)
        local_path.parent.mkdir(parents=True, exist_ok=True)
        part_path = local_path.with_name(local_path.name + ".part")

        logger.debug("GET %s", url)
        try:
            with self.session.get(url, stream=True, timeout=self.timeout) as response:
                if response.status_code != 200:
                    raise FetchError(
                        f"HTTP {response.status_code} for {url}",
                        url=url,
                        status_code=response.status_code,
                    )
                size = self._stream_to(response, part_path)
            os.replace(part_path, local_path)
        except requests.RequestException as e:
            self._discard(part_path)
            raise FetchError(f"Request failed for {url}: {e}", url=url) from e
        except FetchError:
            self._discard(part_path)
            raise
        except OSError as e:
            self._discard(part_path)
            raise FetchError(f"Could not write {local_path}: {e}", url=url) from e

        logger.info("Downloaded: %s (%d bytes)", local_path.name, size)
        return local_path

    def _stream_to(self, response, path: Path) -> int:
        """Write the response body to ``path`` in chunks; return byte count."""
        size = 0
        with open(path, "wb") as fh:
            for chunk in response.iter_content(chunk_size=self.chunk_size):
                if chunk:
                    fh.write(chunk)
                    size += len(chunk)
        return size

    @staticmethod
    def _discard(path: Path) -> None:
        try:
            path.unlink()
        except FileNotFoundError:
            pass
