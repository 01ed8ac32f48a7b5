"""Tests for folio.analytics.feed."""

from datetime import datetime, timedelta, timezone

import pytest

from folio.analytics.feed import (
    DEFAULT_PER_KIND_LIMIT,
    ActivityEvent,
    build_feed,
    format_time_ago,
    to_event,
)
from folio.content.models import ContentKind, group_by_kind


@pytest.fixture
def scenario_c(make_item):
    """2 projects, 2 blogs (one draft), 3 messages, 1 testimonial; distinct times."""
    items = [
        make_item(ContentKind.PROJECT, "2024-03-01T10:00:00Z", item_id="p1", title="Alpha"),
        make_item(ContentKind.PROJECT, "2024-03-05T10:00:00Z", item_id="p2", title="Beta",
                  featured=True),
        make_item(ContentKind.BLOG, "2024-03-02T10:00:00Z", item_id="b1", title="Live",
                  published=True, author="Grace"),
        make_item(ContentKind.BLOG, "2024-03-06T10:00:00Z", item_id="b2", title="Draft"),
        make_item(ContentKind.MESSAGE, "2024-03-03T10:00:00Z", item_id="m1", name="Ada"),
        make_item(ContentKind.MESSAGE, "2024-03-07T10:00:00Z", item_id="m2", name="Bob",
                  read=True),
        make_item(ContentKind.MESSAGE, "2024-03-08T10:00:00Z", item_id="m3", name="Cy",
                  subject="Hire me"),
        make_item(ContentKind.TESTIMONIAL, "2024-03-04T10:00:00Z", item_id="t1", name="Dee",
                  company="Acme"),
    ]
    return group_by_kind(items)


class TestBuildFeed:
    """Tests for build_feed()."""

    def test_scenario_c_dashboard_feed(self, scenario_c):
        feed = build_feed(scenario_c, feed_limit=5)

        assert len(feed) == 5
        assert [e.id for e in feed] == [
            "message-m3",
            "message-m2",
            "blog-b2",
            "project-p2",
            "testimonial-t1",
        ]
        for earlier, later in zip(feed, feed[1:]):
            assert earlier.timestamp > later.timestamp

    def test_per_kind_cap_applied_before_ranking(self, scenario_c):
        feed = build_feed(scenario_c, feed_limit=10)

        ids = [e.id for e in feed]
        # The oldest message is cut by the per-kind cap of 2
        assert "message-m1" not in ids
        assert len(feed) == 7
        assert {e.kind for e in feed} == {
            ContentKind.PROJECT, ContentKind.BLOG, ContentKind.MESSAGE, ContentKind.TESTIMONIAL,
        }

    def test_one_kind_dominating_still_leaves_room(self, make_item):
        messages = [
            make_item(ContentKind.MESSAGE, datetime(2024, 3, 9, h, tzinfo=timezone.utc), name="x")
            for h in range(10)
        ]
        old_project = make_item(ContentKind.PROJECT, "2023-01-01T00:00:00Z", title="Old")

        feed = build_feed(group_by_kind(messages + [old_project]), feed_limit=5)

        assert [e.kind for e in feed].count(ContentKind.MESSAGE) == 2
        assert feed[-1].id == f"project-{old_project.id}"

    def test_ties_keep_kind_order(self, make_item):
        same = "2024-03-01T00:00:00Z"
        by_kind = group_by_kind([
            make_item(ContentKind.TESTIMONIAL, same, item_id="t", name="T"),
            make_item(ContentKind.MESSAGE, same, item_id="m", name="M"),
            make_item(ContentKind.BLOG, same, item_id="b", title="B"),
            make_item(ContentKind.PROJECT, same, item_id="p", title="P"),
        ])

        feed = build_feed(by_kind)

        assert [e.id for e in feed] == ["project-p", "blog-b", "message-m", "testimonial-t"]

    def test_kinds_without_limit_are_skipped(self, make_item):
        by_kind = group_by_kind([make_item(ContentKind.SKILL, title="Python")])
        assert build_feed(by_kind) == []

    def test_custom_limits(self, make_item):
        by_kind = group_by_kind([
            make_item(ContentKind.SKILL, "2024-03-01T00:00:00Z", title="Python"),
            make_item(ContentKind.SKILL, "2024-03-02T00:00:00Z", title="Rust"),
        ])

        feed = build_feed(by_kind, per_kind_limit={ContentKind.SKILL: 1})

        assert len(feed) == 1
        assert feed[0].description == 'added skill "Rust"'

    def test_empty_inputs(self):
        assert build_feed({}) == []
        assert build_feed({}, {}, 5) == []

    def test_non_positive_limits(self, scenario_c):
        assert build_feed(scenario_c, feed_limit=0) == []
        assert build_feed(scenario_c, per_kind_limit={ContentKind.PROJECT: -1}) == []

    def test_deterministic(self, scenario_c):
        assert build_feed(scenario_c) == build_feed(scenario_c)

    def test_does_not_mutate_input(self, scenario_c):
        before = [i.id for i in scenario_c[ContentKind.MESSAGE]]
        build_feed(scenario_c)
        assert [i.id for i in scenario_c[ContentKind.MESSAGE]] == before

    def test_default_limits(self):
        assert DEFAULT_PER_KIND_LIMIT == {
            ContentKind.PROJECT: 2,
            ContentKind.BLOG: 2,
            ContentKind.MESSAGE: 2,
            ContentKind.TESTIMONIAL: 1,
        }


class TestToEvent:
    """Tests for the per-kind description templates."""

    def test_project(self, make_item):
        event = to_event(make_item(ContentKind.PROJECT, item_id=1, title="Site", featured=True))
        assert event.id == "project-1"
        assert event.actor == "Admin"
        assert event.description == 'created project "Site"'
        assert event.detail == "Featured"

    def test_published_blog(self, make_item):
        event = to_event(make_item(ContentKind.BLOG, title="Post", published=True, author="Grace"))
        assert event.actor == "Grace"
        assert event.description == 'published blog "Post"'

    def test_blog_draft_defaults_to_admin(self, make_item):
        event = to_event(make_item(ContentKind.BLOG, title="WIP"))
        assert event.actor == "Admin"
        assert event.description == 'created blog draft "WIP"'

    def test_message(self, make_item):
        event = to_event(make_item(ContentKind.MESSAGE, name="Ada", subject="Hi", read=False))
        assert event.actor == "Ada"
        assert event.description == "sent a message"
        assert event.read is False
        assert event.detail == "Hi"

    def test_testimonial(self, make_item):
        event = to_event(make_item(ContentKind.TESTIMONIAL, name="Dee", company="Acme"))
        assert event.actor == "Dee"
        assert event.description == "left a testimonial"
        assert event.detail == "Acme"
        assert event.read is None

    def test_to_dict(self, make_item):
        event = to_event(make_item(ContentKind.MESSAGE, "2024-03-01T00:00:00Z", item_id=9,
                                   name="Ada"))
        d = event.to_dict()
        assert d["id"] == "message-9"
        assert d["kind"] == "message"
        assert d["timestamp"] == "2024-03-01T00:00:00+00:00"
        assert isinstance(event, ActivityEvent)


class TestFormatTimeAgo:
    """Tests for format_time_ago()."""

    @pytest.mark.parametrize(
        "delta,expected",
        [
            (timedelta(seconds=10), "just now"),
            (timedelta(minutes=5), "5 min ago"),
            (timedelta(hours=3), "3 hours ago"),
            (timedelta(days=2), "2 days ago"),
        ],
    )
    def test_relative(self, now, delta, expected):
        assert format_time_ago(now - delta, now) == expected

    def test_older_than_a_week_shows_date(self, now):
        assert format_time_ago(now - timedelta(days=30), now) == "2024-02-09"
