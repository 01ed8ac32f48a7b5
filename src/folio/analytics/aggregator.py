"""
Content analytics aggregator.

Fetches every collection through the content gateway, normalizes the
records once, and derives stats, timelines, the activity feed and the
performance table from that same item set.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from folio.analytics.feed import DEFAULT_PER_KIND_LIMIT, ActivityEvent, build_feed
from folio.analytics.stats import (
    MessagePreview,
    PerformanceRow,
    StatsSnapshot,
    TopContentRow,
    compute_stats,
    content_performance,
    recent_messages,
    top_content,
)
from folio.analytics.timeline import (
    DailyCount,
    TimeBucket,
    TimeRange,
    bucketize,
    bucketize_months,
    messages_by_day,
)
from folio.content.gateway import ContentGateway, fetch_collections
from folio.content.models import ContentKind, group_by_kind, normalize

logger = logging.getLogger(__name__)

BATCH_ERROR = "Failed to load analytics data"


@dataclass
class AnalyticsSnapshot:
    """Everything derived from one refresh."""

    time_range: TimeRange
    generated_at: datetime
    stats: StatsSnapshot
    timeline: list[TimeBucket]
    monthly: list[TimeBucket]
    feed: list[ActivityEvent]
    performance: list[PerformanceRow]
    top_content: list[TopContentRow] = field(default_factory=list)
    message_stats: list[DailyCount] = field(default_factory=list)
    recent_messages: list[MessagePreview] = field(default_factory=list)
    failures: dict[ContentKind, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "range": self.time_range.value,
            "generated_at": self.generated_at.isoformat(),
            "stats": self.stats.to_dict(),
            "timeline": [b.to_dict() for b in self.timeline],
            "monthly": [b.to_dict() for b in self.monthly],
            "feed": [e.to_dict() for e in self.feed],
            "performance": [r.to_dict() for r in self.performance],
            "top_content": [r.to_dict() for r in self.top_content],
            "message_stats": [d.to_dict() for d in self.message_stats],
            "recent_messages": [m.to_dict() for m in self.recent_messages],
            "failures": {kind.value: message for kind, message in self.failures.items()},
        }


def build_snapshot(
    collections: Mapping[ContentKind, Sequence[Any]],
    time_range: TimeRange | str,
    now: datetime,
    feed_limit: int = 10,
    per_kind_limit: Mapping[ContentKind, int] | None = None,
    failures: Mapping[ContentKind, str] | None = None,
) -> AnalyticsSnapshot:
    """Derive all aggregates from raw collections.

    Args:
        collections: Raw records per kind, as returned by the gateway
        time_range: Window for the daily timeline and recency counts
        now: Reference time
        feed_limit: Maximum feed length
        per_kind_limit: Per-kind feed cap (defaults to DEFAULT_PER_KIND_LIMIT)
        failures: Kinds that could not be fetched, with the reason

    Returns:
        AnalyticsSnapshot
    """
    time_range = TimeRange.parse(time_range)
    items = normalize(collections)
    by_kind = group_by_kind(items)

    return AnalyticsSnapshot(
        time_range=time_range,
        generated_at=now,
        stats=compute_stats(by_kind),
        timeline=bucketize(items, time_range, now),
        monthly=bucketize_months(items, now),
        feed=build_feed(
            by_kind,
            DEFAULT_PER_KIND_LIMIT if per_kind_limit is None else per_kind_limit,
            feed_limit,
        ),
        performance=content_performance(by_kind, time_range, now),
        top_content=top_content(by_kind),
        message_stats=messages_by_day(by_kind.get(ContentKind.MESSAGE, ())),
        recent_messages=recent_messages(by_kind.get(ContentKind.MESSAGE, ())),
        failures=dict(failures or {}),
    )


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ContentAnalytics:
    """Analytics view state over the content gateway."""

    def __init__(
        self,
        gateway: ContentGateway,
        feed_limit: int = 10,
        per_kind_limit: Mapping[ContentKind, int] | None = None,
        time_range: TimeRange | str = TimeRange.MONTH,
        kinds: Sequence[ContentKind] = tuple(ContentKind),
        clock: Callable[[], datetime] | None = None,
    ):
        """Initialize analytics.

        Args:
            gateway: Content gateway used for every collection fetch
            feed_limit: Maximum activity feed length
            per_kind_limit: Per-kind feed cap
            time_range: Initial window
            kinds: Collections to fetch on refresh
            clock: Returns the current time (tests pin it)
        """
        self.gateway = gateway
        self.feed_limit = feed_limit
        self.per_kind_limit = dict(
            DEFAULT_PER_KIND_LIMIT if per_kind_limit is None else per_kind_limit
        )
        self.time_range = TimeRange.parse(time_range)
        self.kinds = tuple(kinds)
        self._clock = clock or _utcnow

        self.snapshot: AnalyticsSnapshot | None = None
        self.error: str | None = None
        self.is_loading = False
        self._request_id = 0

    @property
    def failures(self) -> dict[ContentKind, str]:
        """Kinds missing from the current snapshot."""
        return dict(self.snapshot.failures) if self.snapshot else {}

    async def refresh(self, time_range: TimeRange | str | None = None) -> AnalyticsSnapshot | None:
        """Fetch all collections and recompute every aggregate.

        Only the most recent call applies its results; an older call that
        settles later returns None and leaves the state alone. When every
        collection fails, ``error`` is set and the previous snapshot is kept.
        ``time_range`` only changes once a snapshot for it is applied.

        Returns:
            The new snapshot, or None if nothing was applied
        """
        requested_range = self.time_range if time_range is None else TimeRange.parse(time_range)

        self._request_id += 1
        request_id = self._request_id
        self.is_loading = True

        try:
            results = await fetch_collections(self.gateway, self.kinds)
        finally:
            if request_id == self._request_id:
                self.is_loading = False

        if request_id != self._request_id:
            logger.debug(
                "Discarding stale analytics refresh %d (latest is %d)",
                request_id,
                self._request_id,
            )
            return None

        if results.all_failed:
            logger.error("%s: every collection fetch failed", BATCH_ERROR)
            self.error = BATCH_ERROR
            return None

        snapshot = build_snapshot(
            results.collections,
            requested_range,
            self._clock(),
            feed_limit=self.feed_limit,
            per_kind_limit=self.per_kind_limit,
            failures=results.failures,
        )
        self.snapshot = snapshot
        self.time_range = requested_range
        self.error = None
        return snapshot

    async def set_range(self, time_range: TimeRange | str) -> AnalyticsSnapshot | None:
        """Switch the window and refresh."""
        return await self.refresh(time_range)

    def get_summary(self) -> dict[str, Any]:
        """Get the current snapshot as a JSON-ready dict."""
        summary: dict[str, Any] = self.snapshot.to_dict() if self.snapshot else {}
        summary["error"] = self.error
        return summary
