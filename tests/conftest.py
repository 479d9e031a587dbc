import os

# Keep test runs off the real log file.
os.environ["LOG_TO_FILE"] = "false"

import pytest

from core.models import Item


def make_icon(icon_id, name=None, category="Popular"):
    return Item(
        id=icon_id,
        name=name if name is not None else f"icon {icon_id}",
        category=category,
        type="picture",
        version=1,
        thumbnail=f"thumb_{icon_id}",
        thumbnail_image=f"https://example.test/{icon_id}.png",
    )


class FakeFetcher:
    """Serves canned pages; unknown pages come back empty."""

    def __init__(self, pages, total=None, on_fetch=None):
        self.pages = pages
        self.total = total
        self.on_fetch = on_fetch
        self.total_available = None
        self.calls = []

    def fetch(self, page_index):
        self.calls.append(page_index)
        if self.on_fetch:
            self.on_fetch(page_index)
        items = self.pages(page_index) if callable(self.pages) else self.pages.get(page_index, [])
        if self.total_available is None:
            self.total_available = self.total
        return list(items)


@pytest.fixture
def icon():
    return make_icon


@pytest.fixture
def fake_fetcher():
    return FakeFetcher
