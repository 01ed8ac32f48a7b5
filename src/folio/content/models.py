"""
Content records and the normalizer.

The content API returns one raw array per collection. normalize() turns
those arrays into ContentItem objects that share a kind tag and a parsed,
timezone-aware creation timestamp.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


class ContentKind(str, Enum):
    """Content collections, in fetch order."""

    PROJECT = "project"
    BLOG = "blog"
    MESSAGE = "message"
    TESTIMONIAL = "testimonial"
    EXPERIENCE = "experience"
    SKILL = "skill"
    SERVICE = "service"
    CERTIFICATE = "certificate"
    ACHIEVEMENT = "achievement"

    @classmethod
    def parse(cls, value: ContentKind | str) -> ContentKind:
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            # Accept plural collection names ("projects", "blogs")
            return cls(str(value).lower().rstrip("s"))


@dataclass
class ContentItem:
    """A single record from one of the content collections."""

    id: str
    kind: ContentKind
    created_at: datetime
    fields: dict[str, Any] = field(default_factory=dict)

    @property
    def title(self) -> str:
        return str(self.fields.get("title") or "")

    @property
    def name(self) -> str:
        return str(self.fields.get("name") or "")

    @property
    def label(self) -> str:
        """Human label for listings: title, then name, then id."""
        return self.title or self.name or self.id

    @property
    def featured(self) -> bool:
        return bool(self.fields.get("featured", False))

    @property
    def published(self) -> bool:
        return bool(self.fields.get("published", False))

    @property
    def published_at(self) -> datetime | None:
        return parse_timestamp(self.fields.get("published_at"))

    @property
    def read(self) -> bool:
        return bool(self.fields.get("read", False))

    @property
    def author(self) -> str:
        return str(self.fields.get("author") or "")

    @property
    def company(self) -> str:
        return str(self.fields.get("company") or self.fields.get("role") or "")

    @property
    def subject(self) -> str:
        return str(self.fields.get("subject") or "")

    @property
    def current(self) -> bool:
        return bool(self.fields.get("current", False))

    @property
    def category(self) -> str | None:
        value = self.fields.get("category")
        return str(value) if value else None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "id": self.id,
            "kind": self.kind.value,
            "created_at": self.created_at.isoformat(),
            "label": self.label,
        }


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an API timestamp into an aware UTC datetime.

    Accepts ISO-8601 strings (trailing "Z" allowed, date-only means
    midnight), datetime/date objects and epoch seconds. Naive values are
    taken as UTC.

    Returns:
        Parsed datetime, or None if the value cannot be parsed.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def normalize_record(kind: ContentKind, raw: Any) -> ContentItem | None:
    """Normalize a single raw record, or return None if it is unusable."""
    if not isinstance(raw, Mapping):
        logger.debug("Dropping non-mapping %s record: %r", kind.value, raw)
        return None

    created_at = parse_timestamp(raw.get("created_at", raw.get("createdAt")))
    if created_at is None:
        logger.debug("Dropping %s record %s with unparseable date", kind.value, raw.get("id"))
        return None

    record_id = raw.get("id", raw.get("_id"))
    return ContentItem(
        id="" if record_id is None else str(record_id),
        kind=kind,
        created_at=created_at,
        fields=dict(raw),
    )


def normalize(raw_by_kind: Mapping[ContentKind | str, Iterable[Any] | None]) -> list[ContentItem]:
    """Map raw collections into a flat list of ContentItem.

    Args:
        raw_by_kind: Raw arrays keyed by kind; None means empty

    Returns:
        One item per usable record, in input order
    """
    items: list[ContentItem] = []
    for kind_key, records in raw_by_kind.items():
        if not records:
            continue
        kind = ContentKind.parse(kind_key)
        for raw in records:
            item = normalize_record(kind, raw)
            if item is not None:
                items.append(item)
    return items


def group_by_kind(items: Iterable[ContentItem]) -> dict[ContentKind, list[ContentItem]]:
    """Group items by kind, preserving their relative order."""
    grouped: dict[ContentKind, list[ContentItem]] = {}
    for item in items:
        grouped.setdefault(item.kind, []).append(item)
    return grouped
