# core/registry.py
import re
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from .models import Item

KEY_MAX_LENGTH = 50

_NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")


def normalize_key(name: str) -> str:
    """
    Lookup key for an icon name: lowercase, runs of anything outside a-z0-9
    become a single "_", no leading/trailing "_", at most 50 characters.
    """
    key = _NON_ALNUM_RE.sub("_", (name or "").lower()).strip("_")
    return key[:KEY_MAX_LENGTH]


class Registry:
    """
    Deduplicating store of icons keyed by id. The first payload seen for an
    id is kept; later ones are dropped whole.
    """

    def __init__(self, items: Optional[Iterable[Item]] = None):
        self._by_id: Dict[int, Item] = {}
        if items:
            self.merge(items)

    def merge(self, items: Iterable[Item]) -> int:
        added = 0
        for it in items:
            if it.id in self._by_id:
                continue
            self._by_id[it.id] = it
            added += 1
        return added

    def size(self) -> int:
        return len(self._by_id)

    def __len__(self) -> int:
        return len(self._by_id)

    def __contains__(self, item_id) -> bool:
        return item_id in self._by_id

    def __iter__(self) -> Iterator[Item]:
        return iter(self._by_id.values())

    def get(self, item_id: int) -> Optional[Item]:
        return self._by_id.get(item_id)

    def by_id(self) -> Dict[int, Item]:
        return dict(self._by_id)

    def build_indexes(self) -> Tuple[Dict[str, Item], Dict[str, List[Item]]]:
        """
        Rebuild (by_key, by_category) from scratch.
        Key collisions resolve to the last item visited.
        """
        by_key: Dict[str, Item] = {}
        by_category: Dict[str, List[Item]] = {}
        for it in self._by_id.values():
            by_key[normalize_key(it.name)] = it
            by_category.setdefault(it.category, []).append(it)
        return by_key, by_category

    def category_counts(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for it in self._by_id.values():
            counts[it.category] = counts.get(it.category, 0) + 1
        return counts
