# core/storage.py
import datetime
import json
import os
from typing import Any, Dict, Optional, Tuple

import pytz

from .config import OUTPUT_DIR, PAGE_SIZE, PROGRESS_FILENAME, REGISTRY_FILENAME
from .logger import get_logger
from .models import Item
from .registry import Registry

logger = get_logger(__name__)


def now_utc_iso() -> str:
    return datetime.datetime.now(tz=pytz.UTC).isoformat()


def percent_complete(scraped: int, total: Optional[int]) -> str:
    # Over 100% is left as-is when the remote total shrinks.
    if not total:
        return "0.00%"
    return f"{scraped * 100.0 / total:.2f}%"


def _read_json(path: str) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"{path} does not hold a JSON object")
    return data


def _write_json(path: str, data: Dict[str, Any], indent: Optional[int] = None) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=indent)


def _as_total(value: Any) -> Optional[int]:
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


class Checkpoint:
    """
    Registry dump plus a small progress record under one directory.

    The two files are written one after the other; a crash in between leaves
    them out of step, which load() copes with.
    """

    def __init__(self, output_dir: str = OUTPUT_DIR, page_size: int = PAGE_SIZE):
        self.output_dir = output_dir
        self.page_size = page_size
        self.registry_file = os.path.join(output_dir, REGISTRY_FILENAME)
        self.progress_file = os.path.join(output_dir, PROGRESS_FILENAME)

    def load(self) -> Tuple[int, Registry, Optional[int]]:
        """
        Return (start_page, registry, total_available) from disk.
        Missing or unreadable state means a fresh start, never an error.
        """
        registry = Registry()

        if not os.path.exists(self.progress_file):
            logger.info("No progress file at %s; starting fresh scrape.", self.progress_file)
            return 0, registry, None

        try:
            progress = _read_json(self.progress_file)
        except (OSError, ValueError) as e:
            logger.info("Progress file %s unreadable (%s); starting fresh scrape.", self.progress_file, e)
            return 0, registry, None

        total = _as_total(progress.get("totalAvailable"))
        logger.info("Resuming: %s icons already scraped", progress.get("scraped", 0))

        registry = self._load_registry()
        start_page = registry.size() // self.page_size
        return start_page, registry, total

    def _load_registry(self) -> Registry:
        if not os.path.exists(self.registry_file):
            logger.info("No registry file at %s; keeping progress total only.", self.registry_file)
            return Registry()

        try:
            data = _read_json(self.registry_file)
            by_id = data.get("byId") or {}
            if not isinstance(by_id, dict):
                raise ValueError("byId is not an object")
        except (OSError, ValueError) as e:
            logger.info("Registry file %s unreadable (%s); starting with empty registry.", self.registry_file, e)
            return Registry()

        items = []
        skipped = 0
        for raw_id, record in by_id.items():
            # The byId key is the identity; the record body only fills fields.
            try:
                if not isinstance(record, dict):
                    raise ValueError(f"record is not an object: {record!r}")
                items.append(Item.from_api({**record, "id": raw_id}))
            except ValueError as e:
                skipped += 1
                logger.debug("Skipping stored icon %r: %s", raw_id, e)

        registry = Registry(items)
        if skipped:
            logger.info("Restored %d icons from %s (%d unreadable entries skipped)",
                        registry.size(), self.registry_file, skipped)
        else:
            logger.debug("Restored %d icons from %s", registry.size(), self.registry_file)
        return registry

    def save(self, registry: Registry, total_available: Optional[int]) -> None:
        os.makedirs(self.output_dir, exist_ok=True)

        by_key, by_category = registry.build_indexes()
        scraped = registry.size()
        ts = now_utc_iso()

        document = {
            "scrapedAt": ts,
            "totalAvailable": total_available,
            "totalScraped": scraped,
            "byId": {str(it.id): it.to_dict() for it in registry},
            "byKey": {key: it.to_dict() for key, it in by_key.items()},
            "byCategory": {
                cat: [it.to_dict() for it in items]
                for cat, items in by_category.items()
            },
        }
        _write_json(self.registry_file, document, indent=2)

        _write_json(
            self.progress_file,
            {
                "lastUpdate": ts,
                "totalAvailable": total_available,
                "scraped": scraped,
                "percentComplete": percent_complete(scraped, total_available),
            },
        )

        pct = scraped * 100.0 / total_available if total_available else 0.0
        logger.info(
            "Saved: %d/%s icons (%.1f%%)",
            scraped,
            total_available if total_available is not None else "?",
            pct,
        )
