"""
Remote version catalog client.

Fetches ``{mirror}/index.json``, the flat list of every published release and
the platform assets it ships, and answers "which release best satisfies this
range on this platform".
"""

import logging
from typing import List, Optional

import requests
from requests.exceptions import RequestException
from requests.utils import default_user_agent

from nodesetup.core.download import USER_AGENT
from nodesetup.core.exceptions import CatalogError, TransportError
from nodesetup.core.platform import PlatformInfo
from nodesetup.installer.matcher import match
from nodesetup.installer.models import CatalogEntry

logger = logging.getLogger(__name__)

CATALOG_FILE = "index.json"


class CatalogClient:
    """
    Client for the distribution version catalog.

    Example:
        >>> client = CatalogClient(detect_platform(), "https://nodejs.org/dist")
        >>> client.query_latest_match("^18.0.0")
        'v18.20.4'
    """

    def __init__(
        self,
        platform: PlatformInfo,
        mirror: str,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
    ):
        """
        Initialize catalog client.

        Args:
            platform: Host platform used to filter releases
            mirror: Distribution base URL (no trailing slash)
            session: Optional requests session
            timeout: Request timeout in seconds
        """
        self.platform = platform
        self.mirror = mirror.rstrip("/")
        self.session = session or requests.Session()
        if self.session.headers.get("User-Agent") in (None, default_user_agent()):
            self.session.headers["User-Agent"] = USER_AGENT
        self.timeout = timeout

    @property
    def catalog_url(self) -> str:
        return f"{self.mirror}/{CATALOG_FILE}"

    def fetch_catalog(self) -> List[CatalogEntry]:
        """
        Fetch and deserialize the catalog.

        Returns:
            Entries in catalog order; empty when the document has no data

        Raises:
            TransportError: If the request fails
            CatalogError: If the document is not a JSON list
        """
        url = self.catalog_url
        logger.debug(f"Fetching version catalog from {url}")

        try:
            response = self.session.get(
                url, timeout=self.timeout, headers={"Accept": "application/json"}
            )
            response.raise_for_status()
        except RequestException as e:
            status = getattr(getattr(e, "response", None), "status_code", None)
            raise TransportError(
                f"Failed to fetch version catalog from {url}: {e}", url, status
            ) from e

        if not response.content:
            return []

        try:
            data = response.json()
        except ValueError as e:
            raise CatalogError(f"Invalid JSON in version catalog {url}: {e}") from e

        if data is None:
            return []
        if not isinstance(data, list):
            raise CatalogError(
                f"Expected a list of releases in {url}, got {type(data).__name__}"
            )

        entries = []
        for item in data:
            if not isinstance(item, dict):
                logger.warning(f"Skipping malformed catalog item: {item!r}")
                continue
            try:
                entries.append(CatalogEntry.from_dict(item))
            except ValueError as e:
                logger.warning(f"Skipping catalog item: {e}")

        logger.debug(f"Catalog lists {len(entries)} releases")
        return entries

    def platform_versions(self) -> List[CatalogEntry]:
        """
        Releases that ship an asset for the current platform.

        Raises:
            UnsupportedPlatformError: If the host OS is not recognized
        """
        asset_id = self.platform.asset_id()
        return [entry for entry in self.fetch_catalog() if entry.supports(asset_id)]

    def query_latest_match(self, spec: str) -> Optional[str]:
        """
        Find the best release for ``spec`` on the current platform.

        Args:
            spec: npm range expression

        Returns:
            Version string as published, or None if nothing matches

        Raises:
            UnsupportedPlatformError: If the host OS is not recognized
            TransportError: If the catalog cannot be fetched
        """
        return match(self.platform_versions(), spec)


__all__ = ["CATALOG_FILE", "CatalogClient"]
