"""Cached download of GeoServer archives."""

import os
from pathlib import Path
from typing import Optional

import httpx

from geoserver_runner.core.exceptions import DownloadError
from geoserver_runner.core.logging import get_logger

logger = get_logger(__name__)


class ArchiveCache:
    """
    Fetches archives over HTTPS into a download directory and reuses them on later runs.

    Cached entries are never invalidated; delete a file from the download
    directory to force it to be fetched again.
    """

    def __init__(self, download_dir: Path, client: Optional[httpx.Client] = None, timeout: float = 60.0):
        self.download_dir = Path(download_dir)
        self._client = client or httpx.Client(timeout=timeout, follow_redirects=True)

    def path_for(self, filename: str) -> Path:
        return self.download_dir / filename

    def is_cached(self, filename: str) -> bool:
        return self.path_for(filename).is_file()

    def fetch(self, url: str, filename: str, label: Optional[str] = None) -> Path:
        """
        Return the cached archive ``filename``, downloading it from ``url`` first if needed.

        Args:
            url: Remote location of the archive
            filename: Name of the archive inside the download directory
            label: What to call the archive in progress messages

        Returns:
            Path to the archive in the download directory
        """
        target = self.path_for(filename)
        if target.is_file():
            logger.debug(f"Using cached {filename}")
            return target

        self.download_dir.mkdir(parents=True, exist_ok=True)
        logger.info(f"Downloading {label or filename}")
        partial = target.with_name(target.name + ".part")
        try:
            with self._client.stream("GET", url) as response:
                response.raise_for_status()
                with open(partial, "wb") as f:
                    for chunk in response.iter_bytes(65536):
                        f.write(chunk)
            os.replace(partial, target)
        except httpx.HTTPStatusError as e:
            raise DownloadError(f"Failed to download {url}: HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise DownloadError(f"Failed to download {url}: {str(e)}") from e
        finally:
            # Remove partially downloaded file if it exists
            if partial.exists():
                partial.unlink()
        logger.debug(f"Downloaded {url} to {target}")
        return target

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "ArchiveCache":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
