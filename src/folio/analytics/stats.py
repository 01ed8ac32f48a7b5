"""
Aggregate content statistics.

Everything here is a pure function of the items passed in.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any

from folio.analytics.timeline import TimeRange
from folio.content.models import ContentItem, ContentKind

UNCATEGORIZED = "uncategorized"


@dataclass
class CategoryDistribution:
    """Counts of a collection grouped by one field value."""

    kind: ContentKind
    field_name: str
    total: int = 0
    counts: dict[str, int] = field(default_factory=dict)

    def percentage(self, category: str) -> float:
        if self.total == 0:
            return 0.0
        return self.counts.get(category, 0) / self.total * 100

    @property
    def percentages(self) -> dict[str, float]:
        return {category: self.percentage(category) for category in self.counts}

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "kind": self.kind.value,
            "field": self.field_name,
            "total": self.total,
            "counts": self.counts,
            "percentages": {k: round(v, 2) for k, v in self.percentages.items()},
        }


@dataclass
class StatsSnapshot:
    """Counts and derived metrics over the current collections."""

    counts_by_kind: dict[ContentKind, int] = field(default_factory=dict)
    derived_metrics: dict[str, float] = field(default_factory=dict)
    distributions: dict[str, CategoryDistribution] = field(default_factory=dict)

    def count(self, kind: ContentKind) -> int:
        return self.counts_by_kind.get(kind, 0)

    @property
    def total(self) -> int:
        return sum(self.counts_by_kind.values())

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "counts": {kind.value: count for kind, count in self.counts_by_kind.items()},
            "total": self.total,
            "metrics": self.derived_metrics,
            "distributions": {
                name: dist.to_dict() for name, dist in self.distributions.items()
            },
        }


@dataclass
class PerformanceRow:
    """Per-collection totals for the content performance table."""

    category: str
    total: int
    highlighted: int
    recent: int

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "category": self.category,
            "total": self.total,
            "highlighted": self.highlighted,
            "recent": self.recent,
        }


def category_distribution(
    kind: ContentKind,
    items: Sequence[ContentItem],
    field_name: str = "category",
) -> CategoryDistribution:
    """Group a collection by a field value."""
    dist = CategoryDistribution(kind=kind, field_name=field_name, total=len(items))
    for item in items:
        value = item.fields.get(field_name)
        key = str(value) if value else UNCATEGORIZED
        dist.counts[key] = dist.counts.get(key, 0) + 1
    return dist


def _average(values: Sequence[float]) -> float:
    if not values:
        return 0.0
    return sum(values) / len(values)


def _proficiency(item: ContentItem) -> float:
    try:
        return float(item.fields.get("proficiency") or 0)
    except (TypeError, ValueError):
        return 0.0


def compute_stats(items_by_kind: Mapping[ContentKind, Sequence[ContentItem]]) -> StatsSnapshot:
    """Compute counts, derived metrics and category distributions.

    Args:
        items_by_kind: Normalized items grouped by kind (missing kinds count as empty)

    Returns:
        StatsSnapshot with every kind present in counts_by_kind
    """
    def of(kind: ContentKind) -> Sequence[ContentItem]:
        return items_by_kind.get(kind, ())

    blogs = of(ContentKind.BLOG)
    messages = of(ContentKind.MESSAGE)
    skills = of(ContentKind.SKILL)

    published_blogs = sum(1 for b in blogs if b.published)
    unread_messages = sum(1 for m in messages if not m.read)

    metrics: dict[str, float] = {
        "published_blogs": published_blogs,
        "draft_blogs": len(blogs) - published_blogs,
        "unread_messages": unread_messages,
        "read_messages": len(messages) - unread_messages,
        "featured_projects": sum(1 for p in of(ContentKind.PROJECT) if p.featured),
        "featured_testimonials": sum(1 for t in of(ContentKind.TESTIMONIAL) if t.featured),
        "featured_certificates": sum(1 for c in of(ContentKind.CERTIFICATE) if c.featured),
        "featured_achievements": sum(1 for a in of(ContentKind.ACHIEVEMENT) if a.featured),
        "current_experience": sum(1 for e in of(ContentKind.EXPERIENCE) if e.current),
        "skill_categories": len({s.category for s in skills if s.category}),
        "average_skill_proficiency": round(_average([_proficiency(s) for s in skills]), 1),
    }

    return StatsSnapshot(
        counts_by_kind={kind: len(of(kind)) for kind in ContentKind},
        derived_metrics=metrics,
        distributions={
            "skills_by_category": category_distribution(ContentKind.SKILL, skills),
            "achievements_by_category": category_distribution(
                ContentKind.ACHIEVEMENT, of(ContentKind.ACHIEVEMENT)
            ),
        },
    )


def content_performance(
    items_by_kind: Mapping[ContentKind, Sequence[ContentItem]],
    time_range: TimeRange | str,
    now: datetime,
) -> list[PerformanceRow]:
    """Per-collection totals, highlighted counts and items added within the range."""
    window_start = now - timedelta(days=TimeRange.parse(time_range).days)

    def recent(items: Sequence[ContentItem]) -> int:
        return sum(1 for i in items if window_start <= i.created_at <= now)

    projects = items_by_kind.get(ContentKind.PROJECT, ())
    blogs = items_by_kind.get(ContentKind.BLOG, ())
    testimonials = items_by_kind.get(ContentKind.TESTIMONIAL, ())
    experience = items_by_kind.get(ContentKind.EXPERIENCE, ())
    services = items_by_kind.get(ContentKind.SERVICE, ())

    return [
        PerformanceRow("projects", len(projects), sum(1 for p in projects if p.featured),
                       recent(projects)),
        PerformanceRow("blogs", len(blogs), sum(1 for b in blogs if b.published), recent(blogs)),
        PerformanceRow("testimonials", len(testimonials),
                       sum(1 for t in testimonials if t.featured), recent(testimonials)),
        PerformanceRow("experience", len(experience), sum(1 for e in experience if e.current),
                       recent(experience)),
        # Services have no highlight flag or meaningful recency
        PerformanceRow("services", len(services), len(services), 0),
    ]


@dataclass
class TopContentRow:
    """A recently created project or blog post."""

    title: str
    kind: ContentKind
    created_at: datetime
    highlighted: bool
    tag_count: int

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "title": self.title,
            "kind": self.kind.value,
            "created_at": self.created_at.isoformat(),
            "highlighted": self.highlighted,
            "tag_count": self.tag_count,
        }


def _newest(items: Sequence[ContentItem], limit: int) -> list[ContentItem]:
    return sorted(items, key=lambda i: i.created_at, reverse=True)[:limit]


def _list_length(value: Any) -> int:
    return len(value) if isinstance(value, (list, tuple)) else 0


def top_content(
    items_by_kind: Mapping[ContentKind, Sequence[ContentItem]],
    per_kind: int = 5,
    limit: int = 8,
) -> list[TopContentRow]:
    """Newest projects and blog posts, merged and ranked by creation time.

    Projects are highlighted when featured and count their technologies;
    blog posts are highlighted when published and count their tags.
    """
    if per_kind <= 0 or limit <= 0:
        return []

    rows = [
        TopContentRow(
            title=p.label,
            kind=ContentKind.PROJECT,
            created_at=p.created_at,
            highlighted=p.featured,
            tag_count=_list_length(p.fields.get("technologies")),
        )
        for p in _newest(items_by_kind.get(ContentKind.PROJECT, ()), per_kind)
    ]
    rows += [
        TopContentRow(
            title=b.label,
            kind=ContentKind.BLOG,
            created_at=b.created_at,
            highlighted=b.published,
            tag_count=_list_length(b.fields.get("tags")),
        )
        for b in _newest(items_by_kind.get(ContentKind.BLOG, ()), per_kind)
    ]

    # Stable: on equal times projects stay ahead of blog posts
    rows.sort(key=lambda r: r.created_at, reverse=True)
    return rows[:limit]


@dataclass
class MessagePreview:
    """Short view of an inbound message for the dashboard."""

    id: str
    name: str
    email: str
    excerpt: str
    read: bool
    created_at: datetime

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "excerpt": self.excerpt,
            "read": self.read,
            "created_at": self.created_at.isoformat(),
        }


def recent_messages(
    messages: Sequence[ContentItem],
    limit: int = 3,
    excerpt_length: int = 100,
) -> list[MessagePreview]:
    """The newest messages, each with a shortened body."""
    previews = []
    for message in _newest(messages, max(limit, 0)):
        body = str(message.fields.get("message") or "")
        if len(body) > excerpt_length:
            body = body[:excerpt_length] + "..."
        previews.append(
            MessagePreview(
                id=message.id,
                name=message.name or "Someone",
                email=str(message.fields.get("email") or ""),
                excerpt=body,
                read=message.read,
                created_at=message.created_at,
            )
        )
    return previews
