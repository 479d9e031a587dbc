# core/models.py
from dataclasses import asdict, dataclass
from typing import Any, Dict


@dataclass
class Item:
    """
    One icon from the remote catalog.
    `id` is assigned by the remote side and is the only identity; the
    thumbnail fields are carried through untouched.
    """
    id: int
    name: str = ""
    category: str = ""
    type: str = ""
    version: Any = None
    thumbnail: Any = None
    thumbnail_image: Any = None

    @classmethod
    def from_api(cls, record: Dict[str, Any]) -> "Item":
        if not isinstance(record, dict):
            raise ValueError(f"icon record is not an object: {record!r}")
        raw_id = record.get("id")
        if isinstance(raw_id, bool) or raw_id is None:
            raise ValueError(f"icon record has no usable id: {record!r}")
        try:
            item_id = int(raw_id)
        except (TypeError, ValueError):
            raise ValueError(f"icon record has no usable id: {record!r}")

        return cls(
            id=item_id,
            name=str(record.get("name") or ""),
            category=str(record.get("category") or ""),
            type=str(record.get("type") or ""),
            version=record.get("version"),
            thumbnail=record.get("thumbnail"),
            thumbnail_image=record.get("thumbnail_image"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
