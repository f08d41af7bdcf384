"""
Network download manager returning typed outcomes.

This module provides the transport used by the catalog client and the
acquisition pipeline:
- HTTP/HTTPS streaming downloads with TLS verification
- Progress reporting (bytes, percentage, speed)
- A typed :class:`DownloadOutcome` (ok / not-found / failed) instead of
  exceptions, so callers branch explicitly on HTTP 404

No retry, resume or checksum verification is performed.
"""

import logging
import time
import uuid
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

import requests
from requests.exceptions import RequestException
from requests.utils import default_user_agent

from nodesetup.core.exceptions import TransportError, TransportNotFoundError

logger = logging.getLogger(__name__)

USER_AGENT = "nodesetup"


class DownloadStatus(Enum):
    """Result variant of a download attempt."""

    OK = "ok"
    NOT_FOUND = "not_found"
    FAILED = "failed"


@dataclass(frozen=True)
class DownloadOutcome:
    """Outcome of a single download attempt."""

    url: str
    status: DownloadStatus
    path: Optional[Path] = None
    status_code: Optional[int] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.status is DownloadStatus.OK

    @property
    def not_found(self) -> bool:
        return self.status is DownloadStatus.NOT_FOUND

    def unwrap(self) -> Path:
        """
        Get the downloaded file or raise the matching transport error.

        Raises:
            TransportNotFoundError: For the NOT_FOUND variant
            TransportError: For the FAILED variant
        """
        if self.status is DownloadStatus.OK:
            return self.path
        if self.status is DownloadStatus.NOT_FOUND:
            raise TransportNotFoundError(self.url)
        raise TransportError(
            f"Download failed for {self.url}: {self.error}",
            self.url,
            self.status_code,
        ) from self.error


@dataclass
class DownloadProgress:
    """Progress information for a download."""

    bytes_downloaded: int
    total_bytes: int
    percentage: float
    speed_bps: float  # bytes per second

    def __str__(self) -> str:
        """Format progress for display."""
        return format_progress(self)


class Downloader:
    """
    Streams remote files into a scratch directory.

    Example:
        >>> downloader = Downloader(Path("/tmp/nodesetup"))
        >>> outcome = downloader.download("https://nodejs.org/dist/index.json")
        >>> if outcome.ok:
        ...     print(outcome.path)
    """

    def __init__(
        self,
        work_dir: Path,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
        progress_callback: Optional[Callable[[DownloadProgress], None]] = None,
    ):
        """
        Initialize downloader.

        Args:
            work_dir: Directory receiving downloaded files
            timeout: Per-request timeout in seconds (None waits indefinitely)
            session: Optional requests session (shared connection pool)
            progress_callback: Optional callback for progress updates
        """
        self.work_dir = Path(work_dir)
        self.timeout = timeout
        self.session = session or requests.Session()
        if self.session.headers.get("User-Agent") in (None, default_user_agent()):
            self.session.headers["User-Agent"] = USER_AGENT
        self.progress_callback = progress_callback

    def download(self, url: str, destination: Optional[Path] = None) -> DownloadOutcome:
        """
        Download ``url`` to ``destination`` (default: a fresh uuid-named file).

        Args:
            url: URL to download
            destination: Optional target file path

        Returns:
            DownloadOutcome; NOT_FOUND for HTTP 404, FAILED for any other
            HTTP error, network error or local I/O error
        """
        if not url:
            raise ValueError("URL cannot be empty")

        if destination is None:
            destination = self.work_dir / str(uuid.uuid4())
        destination = Path(destination)

        logger.info(f"Downloading from {url}")

        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            response = self.session.get(
                url, stream=True, timeout=self.timeout, allow_redirects=True
            )
        except (RequestException, OSError) as e:
            logger.debug(f"Request for {url} failed: {e}")
            return DownloadOutcome(url, DownloadStatus.FAILED, error=e)

        with response:
            if response.status_code == 404:
                logger.debug(f"Not found: {url}")
                return DownloadOutcome(url, DownloadStatus.NOT_FOUND, status_code=404)

            try:
                response.raise_for_status()
                self._write_stream(response, destination)
            except (RequestException, OSError) as e:
                logger.error(f"Error during download: {e}")
                return DownloadOutcome(
                    url,
                    DownloadStatus.FAILED,
                    status_code=response.status_code,
                    error=e,
                )

        logger.debug(f"Download complete: {destination}")
        return DownloadOutcome(
            url, DownloadStatus.OK, path=destination, status_code=response.status_code
        )

    def _write_stream(self, response: requests.Response, destination: Path) -> None:
        content_length = response.headers.get("content-length")
        total_size = int(content_length) if content_length else 0

        downloaded = 0
        start_time = time.time()
        last_progress_time = start_time

        with open(destination, "wb") as f:
            for chunk in response.iter_content(chunk_size=8192):
                if not chunk:
                    continue
                f.write(chunk)
                downloaded += len(chunk)

                # Report progress at most twice a second
                current_time = time.time()
                if (
                    current_time - last_progress_time >= 0.5
                    or downloaded == total_size
                ):
                    elapsed = current_time - start_time
                    progress = DownloadProgress(
                        bytes_downloaded=downloaded,
                        total_bytes=total_size if total_size > 0 else downloaded,
                        percentage=(downloaded / total_size * 100)
                        if total_size > 0
                        else 0,
                        speed_bps=downloaded / elapsed if elapsed > 0 else 0,
                    )
                    logger.debug(f"Progress: {progress}")
                    if self.progress_callback:
                        self.progress_callback(progress)
                    last_progress_time = current_time


def format_progress(progress: DownloadProgress) -> str:
    """
    Format progress for display.

    Example:
        >>> progress = DownloadProgress(52428800, 104857600, 50.0, 1048576)
        >>> print(format_progress(progress))
        50.0/100.0 MB (50.0%) at 1.0 MB/s
    """
    mb_downloaded = progress.bytes_downloaded / 1024 / 1024
    mb_total = progress.total_bytes / 1024 / 1024
    speed_mbps = progress.speed_bps / 1024 / 1024

    if progress.total_bytes > 0 and progress.percentage > 0:
        return (
            f"{mb_downloaded:.1f}/{mb_total:.1f} MB "
            f"({progress.percentage:.1f}%) "
            f"at {speed_mbps:.1f} MB/s"
        )
    return f"{mb_downloaded:.1f} MB at {speed_mbps:.1f} MB/s"
