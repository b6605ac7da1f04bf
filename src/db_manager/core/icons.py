"""
Fetches database icons shown on container cards.
"""

import logging
from typing import Iterable, Optional

import requests

logger = logging.getLogger(__name__)


class IconLoader:
    """Downloads icon images; a failed download simply yields no icon."""

    def __init__(self, session: Optional[requests.Session] = None, timeout: float = 10.0):
        self.session = session or requests.Session()
        self.timeout = timeout

    def fetch(self, url: str) -> Optional[bytes]:
        """
        Download a single icon.

        Returns:
            Image bytes, or None if the URL is empty or the request fails
        """
        if not url:
            return None

        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.warning("Could not fetch icon %s: %s", url, e)
            return None

        return response.content

    def load_all(self, databases: Iterable) -> dict[str, bytes]:
        """
        Download the icon of every catalog entry.

        Args:
            databases: DatabaseConfig entries

        Returns:
            Image reference -> icon bytes, for entries whose icon loaded
        """
        icons = {}
        for database in databases:
            if database.image in icons:
                continue
            data = self.fetch(database.icon_url)
            if data:
                icons[database.image] = data
        return icons

    def close(self) -> None:
        self.session.close()
