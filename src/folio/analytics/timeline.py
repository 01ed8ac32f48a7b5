"""
Activity timeline bucketing.

Partitions a window ending today into one bucket per UTC calendar day (or
per calendar month for the dashboard chart) and counts the items of each
tracked kind created inside each bucket.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from enum import Enum
from typing import Any

from folio.content.models import ContentItem, ContentKind

# Kinds charted by the analytics view
TIMELINE_KINDS: tuple[ContentKind, ...] = (
    ContentKind.PROJECT,
    ContentKind.BLOG,
    ContentKind.MESSAGE,
    ContentKind.TESTIMONIAL,
)

# Kinds charted by the dashboard's monthly view
MONTHLY_KINDS: tuple[ContentKind, ...] = (
    ContentKind.PROJECT,
    ContentKind.BLOG,
    ContentKind.MESSAGE,
)


class TimeRange(str, Enum):
    """Selectable analytics window."""

    WEEK = "7d"
    MONTH = "30d"
    QUARTER = "90d"
    YEAR = "1y"

    @property
    def days(self) -> int:
        return _RANGE_DAYS[self]

    @classmethod
    def parse(cls, value: TimeRange | str) -> TimeRange:
        """Parse a range, accepting the legacy "30days"-style spellings too."""
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower()
        text = _LEGACY_RANGES.get(text, text)
        return cls(text)


_RANGE_DAYS = {
    TimeRange.WEEK: 7,
    TimeRange.MONTH: 30,
    TimeRange.QUARTER: 90,
    TimeRange.YEAR: 365,
}

_LEGACY_RANGES = {
    "7days": "7d",
    "30days": "30d",
    "90days": "90d",
    "1year": "1y",
    "365d": "1y",
}


@dataclass
class TimeBucket:
    """Half-open window [start, end) with per-kind counts."""

    label: str
    start: datetime
    end: datetime
    counts_by_kind: dict[ContentKind, int] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return sum(self.counts_by_kind.values())

    def count(self, kind: ContentKind) -> int:
        return self.counts_by_kind.get(kind, 0)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "label": self.label,
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "counts": {kind.value: count for kind, count in self.counts_by_kind.items()},
            "total": self.total,
        }


def _utc_date(moment: datetime) -> date:
    if moment.tzinfo is None:
        return moment.date()
    return moment.astimezone(timezone.utc).date()


def _midnight(day: date) -> datetime:
    return datetime(day.year, day.month, day.day, tzinfo=timezone.utc)


def bucketize(
    items: Iterable[ContentItem],
    time_range: TimeRange | str,
    now: datetime,
    kinds: Sequence[ContentKind] = TIMELINE_KINDS,
) -> list[TimeBucket]:
    """Count items per kind per calendar day over the selected range.

    Args:
        items: Normalized content items of any kind
        time_range: Window size; the last bucket is today's
        now: Reference time (its UTC date is "today")
        kinds: Kinds to count; items of other kinds are ignored

    Returns:
        One bucket per day, oldest first. Items dated outside the window
        are not counted anywhere.
    """
    days = TimeRange.parse(time_range).days
    first_day = _utc_date(now) - timedelta(days=days - 1)

    buckets: list[TimeBucket] = []
    for offset in range(days):
        day = first_day + timedelta(days=offset)
        start = _midnight(day)
        buckets.append(
            TimeBucket(
                label=day.strftime("%b %d"),
                start=start,
                end=start + timedelta(days=1),
                counts_by_kind={kind: 0 for kind in kinds},
            )
        )

    tracked = set(kinds)
    for item in items:
        if item.kind not in tracked:
            continue
        index = (_utc_date(item.created_at) - first_day).days
        if 0 <= index < days:
            buckets[index].counts_by_kind[item.kind] += 1

    return buckets


def _shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def bucketize_months(
    items: Iterable[ContentItem],
    now: datetime,
    months: int = 6,
    kinds: Sequence[ContentKind] = MONTHLY_KINDS,
) -> list[TimeBucket]:
    """Count items per kind per calendar month, ending with the current month.

    Returns:
        One bucket per month, oldest first
    """
    if months <= 0:
        return []

    today = _utc_date(now)
    buckets: list[TimeBucket] = []
    index_by_month: dict[tuple[int, int], int] = {}

    for back in range(months - 1, -1, -1):
        year, month = _shift_month(today.year, today.month, -back)
        next_year, next_month = _shift_month(year, month, 1)
        start = _midnight(date(year, month, 1))
        index_by_month[(year, month)] = len(buckets)
        buckets.append(
            TimeBucket(
                label=start.strftime("%b %y"),
                start=start,
                end=_midnight(date(next_year, next_month, 1)),
                counts_by_kind={kind: 0 for kind in kinds},
            )
        )

    tracked = set(kinds)
    for item in items:
        if item.kind not in tracked:
            continue
        day = _utc_date(item.created_at)
        index = index_by_month.get((day.year, day.month))
        if index is not None:
            buckets[index].counts_by_kind[item.kind] += 1

    return buckets


@dataclass
class DailyCount:
    """Number of items created on one UTC calendar day."""

    day: date
    count: int

    @property
    def label(self) -> str:
        return self.day.strftime("%b %d")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {"date": self.day.isoformat(), "label": self.label, "count": self.count}


def messages_by_day(items: Iterable[ContentItem], limit: int = 30) -> list[DailyCount]:
    """Count messages per calendar day, keeping the `limit` latest days that have any.

    Unlike bucketize() this is not tied to a window: days without messages
    are skipped and old days still show up when they are among the latest.

    Returns:
        DailyCount entries, oldest first
    """
    if limit <= 0:
        return []

    counts: dict[date, int] = {}
    for item in items:
        if item.kind is not ContentKind.MESSAGE:
            continue
        day = _utc_date(item.created_at)
        counts[day] = counts.get(day, 0) + 1

    days = sorted(counts)[-limit:]
    return [DailyCount(day=day, count=counts[day]) for day in days]
