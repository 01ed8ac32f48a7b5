"""
Analytics module for content insights and statistics.

Provides counts, timelines and the recent-activity feed across all content
collections.
"""

from folio.analytics.aggregator import (
    AnalyticsSnapshot,
    ContentAnalytics,
    build_snapshot,
)
from folio.analytics.feed import ActivityEvent, build_feed, format_time_ago
from folio.analytics.stats import (
    CategoryDistribution,
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

__all__ = [
    "ActivityEvent",
    "AnalyticsSnapshot",
    "CategoryDistribution",
    "ContentAnalytics",
    "DailyCount",
    "MessagePreview",
    "PerformanceRow",
    "StatsSnapshot",
    "TimeBucket",
    "TimeRange",
    "TopContentRow",
    "build_feed",
    "build_snapshot",
    "bucketize",
    "bucketize_months",
    "compute_stats",
    "content_performance",
    "format_time_ago",
    "messages_by_day",
    "recent_messages",
    "top_content",
]
