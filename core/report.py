from pathlib import Path
from typing import List, Optional, Tuple

from jinja2 import Environment, FileSystemLoader

from core.registry import Registry

# Resolve template directory relative to this file
TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"
env = Environment(loader=FileSystemLoader(str(TEMPLATE_DIR)), trim_blocks=True)

CATEGORY_COLUMN_WIDTH = 25


def top_categories(registry: Registry, limit: int = 15) -> List[Tuple[str, int]]:
    """Categories by icon count, largest first; ties keep first-seen order."""
    counts = registry.category_counts()
    ranked = sorted(counts.items(), key=lambda kv: kv[1], reverse=True)
    return ranked[:limit]


def build_summary(
    registry: Registry,
    total_available: Optional[int],
    limit: int = 15,
) -> str:
    template = env.get_template("summary.txt")

    categories = [
        {"name": name.ljust(CATEGORY_COLUMN_WIDTH), "count": count}
        for name, count in top_categories(registry, limit)
    ]

    ctx = {
        "scraped": registry.size(),
        "total": total_available if total_available is not None else "?",
        "categories": categories,
    }

    return template.render(**ctx)
