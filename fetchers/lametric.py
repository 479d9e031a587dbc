# fetchers/lametric.py
import os
from typing import List, Optional

import requests

from core.logger import get_logger
from core.models import Item

logger = get_logger(__name__)

API_BASE = os.getenv(
    "LAMETRIC_API_BASE",
    "https://developer.lametric.com/api/v1/dev/preloadicons",
)
CATEGORY = os.getenv("LAMETRIC_CATEGORY", "Popular")
USER_AGENT = os.getenv(
    "LAMETRIC_USER_AGENT",
    "Mozilla/5.0 (compatible; IconBot/1.0)",
)
_TIMEOUT_RAW = os.getenv("LAMETRIC_REQUEST_TIMEOUT", "").strip()
REQUEST_TIMEOUT: Optional[float] = float(_TIMEOUT_RAW) if _TIMEOUT_RAW else None


class LaMetricFetcher:
    """
    Fetches one page of the LaMetric icon gallery at a time.

    Failures of any kind come back as an empty page; the caller decides what
    an empty page means.
    """

    def __init__(
        self,
        page_size: int = 80,
        session: Optional[requests.Session] = None,
        api_base: str = API_BASE,
        category: str = CATEGORY,
        timeout: Optional[float] = REQUEST_TIMEOUT,
    ):
        self.page_size = page_size
        self.api_base = api_base
        self.category = category
        self.timeout = timeout
        self.total_available: Optional[int] = None

        self.session = session or requests.Session()
        self.session.headers.update(
            {"Accept": "application/json", "User-Agent": USER_AGENT}
        )

    def _params(self, page_index: int) -> dict:
        return {
            "page": page_index,
            "category": self.category,
            "search": "",
            "count": self.page_size,
            "guest_icons": "",
        }

    def fetch(self, page_index: int) -> List[Item]:
        try:
            resp = self.session.get(
                self.api_base, params=self._params(page_index), timeout=self.timeout
            )
            resp.raise_for_status()
            data = resp.json()
            if not isinstance(data, dict):
                raise ValueError("response body is not a JSON object")
            records = data.get("icons") or []
            if not isinstance(records, list):
                raise ValueError("'icons' is not a list")
        except Exception as e:
            logger.error("Error fetching page %d: %s", page_index, e)
            return []

        if self.total_available is None:
            count_all = data.get("count_all")
            if isinstance(count_all, int) and not isinstance(count_all, bool):
                self.total_available = count_all
                logger.info("Total icons available: %d", count_all)

        items: List[Item] = []
        for record in records:
            try:
                items.append(Item.from_api(record))
            except ValueError as e:
                logger.debug("Skipping icon record on page %d: %s", page_index, e)

        return items
