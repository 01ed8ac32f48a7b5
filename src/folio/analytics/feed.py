"""
Recent-activity feed.

The feed is built in two stages: each kind contributes its few most recent
items (a per-kind cap), then the selected events are ranked together by
time and truncated. The cap keeps a burst of one kind, say a day with many
messages, from pushing every other kind out of the feed.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from folio.content.models import ContentItem, ContentKind

DEFAULT_PER_KIND_LIMIT: dict[ContentKind, int] = {
    ContentKind.PROJECT: 2,
    ContentKind.BLOG: 2,
    ContentKind.MESSAGE: 2,
    ContentKind.TESTIMONIAL: 1,
}

DEFAULT_ACTOR = "Admin"


@dataclass
class ActivityEvent:
    """One entry of the recent-activity feed."""

    id: str
    kind: ContentKind
    actor: str
    description: str
    timestamp: datetime
    read: bool | None = None
    detail: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "id": self.id,
            "kind": self.kind.value,
            "actor": self.actor,
            "description": self.description,
            "timestamp": self.timestamp.isoformat(),
            "read": self.read,
            "detail": self.detail,
        }


def to_event(item: ContentItem) -> ActivityEvent:
    """Describe a content item as a feed event."""
    actor = DEFAULT_ACTOR
    read: bool | None = None
    detail = ""

    if item.kind is ContentKind.PROJECT:
        description = f'created project "{item.title}"'
        detail = "Featured" if item.featured else ""
    elif item.kind is ContentKind.BLOG:
        actor = item.author or DEFAULT_ACTOR
        if item.published:
            description = f'published blog "{item.title}"'
        else:
            description = f'created blog draft "{item.title}"'
    elif item.kind is ContentKind.MESSAGE:
        actor = item.name or "Someone"
        description = "sent a message"
        read = item.read
        detail = item.subject
    elif item.kind is ContentKind.TESTIMONIAL:
        actor = item.name or "Someone"
        description = "left a testimonial"
        detail = item.company
    else:
        description = f'added {item.kind.value} "{item.label}"'

    return ActivityEvent(
        id=f"{item.kind.value}-{item.id}",
        kind=item.kind,
        actor=actor,
        description=description,
        timestamp=item.created_at,
        read=read,
        detail=detail,
    )


def _most_recent(items: Sequence[ContentItem], limit: int) -> list[ContentItem]:
    if limit <= 0:
        return []
    return sorted(items, key=lambda i: i.created_at, reverse=True)[:limit]


def build_feed(
    items_by_kind: Mapping[ContentKind, Sequence[ContentItem]],
    per_kind_limit: Mapping[ContentKind, int] | None = None,
    feed_limit: int = 10,
) -> list[ActivityEvent]:
    """Build the recent-activity feed.

    Args:
        items_by_kind: Normalized items grouped by kind
        per_kind_limit: How many recent items each kind may contribute;
            kinds not listed contribute nothing
        feed_limit: Maximum feed length (5 on the dashboard, 10 in analytics)

    Returns:
        Events newest first. Equal timestamps keep kind order (projects,
        blogs, messages, testimonials, ...).
    """
    if per_kind_limit is None:
        per_kind_limit = DEFAULT_PER_KIND_LIMIT
    if feed_limit <= 0:
        return []

    events: list[ActivityEvent] = []
    for kind in ContentKind:
        limit = per_kind_limit.get(kind, 0)
        for item in _most_recent(items_by_kind.get(kind, ()), limit):
            events.append(to_event(item))

    events.sort(key=lambda e: e.timestamp, reverse=True)
    return events[:feed_limit]


def format_time_ago(timestamp: datetime, now: datetime | None = None) -> str:
    """Render a timestamp relative to now ("5 min ago", "3 days ago")."""
    if now is None:
        now = datetime.now(timezone.utc)
    seconds = int((now - timestamp).total_seconds())

    if seconds < 60:
        return "just now"
    if seconds < 3600:
        return f"{seconds // 60} min ago"
    if seconds < 86400:
        return f"{seconds // 3600} hours ago"
    if seconds < 604800:
        return f"{seconds // 86400} days ago"
    return timestamp.strftime("%Y-%m-%d")
