"""
Download handler for directly linked resource PDFs.
"""

import requests
import logging
from pathlib import Path

from ..utils import log_download_attempt
from ...config import DOWNLOAD_TIMEOUT, DOWNLOAD_CHUNK_SIZE, USER_AGENT
from ...error_handling import FetchError, FilesystemError

logger = logging.getLogger(__name__)


class DownloadHandler:
    """
    Streams a file from a URL straight to disk.
    """

    def __init__(self, timeout: float = DOWNLOAD_TIMEOUT, chunk_size: int = DOWNLOAD_CHUNK_SIZE):
        """
        Initialize the download handler.

        Args:
            timeout: Request timeout in seconds
            chunk_size: Bytes read per chunk while streaming
        """
        self.timeout = timeout
        self.chunk_size = chunk_size

        self.session = requests.Session()
        self.session.headers.update({'User-Agent': USER_AGENT})

    def download(self, url: str, destination: Path) -> Path:
        """
        Download url to destination.

        Args:
            url: URL of the document
            destination: File to write

        Returns:
            The destination path

        Raises:
            FetchError: on a non-200 response or a transfer failure; no
                partial file is left behind
        """
        destination = Path(destination)
        logger.info(f"Downloading {url}")
        try:
            with self.session.get(url, timeout=self.timeout, stream=True) as response:
                if response.status_code != 200:
                    raise FetchError(
                        f"Failed to get '{url}' ({response.status_code})",
                        url=url,
                        status_code=response.status_code,
                    )
                written = 0
                with open(destination, 'wb') as f:
                    for chunk in response.iter_content(chunk_size=self.chunk_size):
                        if chunk:
                            f.write(chunk)
                            written += len(chunk)
        except FetchError as e:
            self._remove_partial(destination)
            log_download_attempt(destination.stem, url, False, str(e))
            raise
        except requests.exceptions.RequestException as e:
            self._remove_partial(destination)
            log_download_attempt(destination.stem, url, False, str(e))
            raise FetchError(f"Failed to download '{url}': {e}", url=url) from e
        except OSError as e:
            self._remove_partial(destination)
            raise FilesystemError(f"Could not write {destination}: {e}", path=destination) from e

        logger.info(f"Saved {destination} ({written / (1024 * 1024):.2f}MB)")
        log_download_attempt(destination.stem, url, True)
        return destination

    def _remove_partial(self, destination: Path) -> None:
        try:
            destination.unlink()
            logger.debug(f"Removed partial file {destination}")
        except FileNotFoundError:
            pass

    def close(self) -> None:
        self.session.close()
