"""Tests for folio.analytics.commands CLI module."""

import json
from unittest.mock import AsyncMock, patch

import pytest
from click.testing import CliRunner

from folio.analytics.aggregator import build_snapshot
from folio.analytics.commands import (
    analytics,
    analytics_distribution,
    analytics_feed,
    analytics_stats,
    analytics_summary,
    analytics_timeline,
)
from folio.content.models import ContentKind


@pytest.fixture
def runner():
    """Create a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def snapshot(now):
    """A snapshot built from a handful of records."""
    collections = {
        ContentKind.PROJECT: [
            {"id": 1, "title": "Portfolio", "featured": True, "created_at": "2024-03-09T10:00:00Z"},
        ],
        ContentKind.BLOG: [
            {"id": 1, "title": "Hello [world]", "published": True, "author": "Grace",
             "created_at": "2024-03-08T10:00:00Z"},
        ],
        ContentKind.MESSAGE: [
            {"id": 1, "name": "Ada", "read": False, "subject": "Hi",
             "created_at": "2024-03-10T09:00:00Z"},
        ],
        ContentKind.SKILL: [
            {"id": 1, "name": "Python", "category": "Backend", "proficiency": 90,
             "created_at": "2023-05-01T00:00:00Z"},
        ],
    }
    return build_snapshot(collections, "7d", now, failures={ContentKind.SERVICE: "timeout"})


@pytest.fixture
def mock_analytics(isolated_config, snapshot):
    """Patch ContentAnalytics so refresh() returns the fixture snapshot."""
    with patch("folio.analytics.ContentAnalytics") as MockAnalytics:
        instance = MockAnalytics.return_value
        instance.refresh = AsyncMock(return_value=snapshot)
        instance.error = None
        yield MockAnalytics


# ---------------------------------------------------------------------------
# analytics group tests
# ---------------------------------------------------------------------------


def test_analytics_group_help(runner):
    """Test that analytics group shows help."""
    result = runner.invoke(analytics, ["--help"])
    assert result.exit_code == 0
    assert "Content analytics" in result.output


# ---------------------------------------------------------------------------
# analytics stats tests
# ---------------------------------------------------------------------------


def test_analytics_stats_json(runner, mock_analytics):
    """Test analytics stats --json outputs counts and metrics."""
    result = runner.invoke(analytics_stats, ["--json"])

    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data["counts"]["project"] == 1
    assert data["metrics"]["unread_messages"] == 1


def test_analytics_stats_table(runner, mock_analytics):
    """Test analytics stats renders tables and the failure warning."""
    result = runner.invoke(analytics_stats, [])

    assert result.exit_code == 0
    assert "Content Collections" in result.output
    assert "unread messages" in result.output
    assert "Could not load service collection" in result.output


def test_analytics_total_failure_exits(runner, isolated_config):
    """Test that a refresh with every collection failing exits non-zero."""
    with patch("folio.analytics.ContentAnalytics") as MockAnalytics:
        instance = MockAnalytics.return_value
        instance.refresh = AsyncMock(return_value=None)
        instance.error = "Failed to load analytics data"

        result = runner.invoke(analytics_stats, [])

    assert result.exit_code == 1
    assert "Failed to load analytics data" in result.output


# ---------------------------------------------------------------------------
# analytics timeline tests
# ---------------------------------------------------------------------------


def test_analytics_timeline_json(runner, mock_analytics):
    """Test analytics timeline --json outputs one entry per day."""
    result = runner.invoke(analytics_timeline, ["--json", "--range", "7d"])

    assert result.exit_code == 0
    data = json.loads(result.output)
    assert len(data) == 7
    assert data[-1]["label"] == "Mar 10"
    assert data[-1]["counts"]["message"] == 1
    assert mock_analytics.call_args.kwargs["time_range"] == "7d"


def test_analytics_timeline_active_only(runner, mock_analytics):
    """Test --active-only drops empty days."""
    result = runner.invoke(analytics_timeline, ["--json", "--active-only"])

    assert result.exit_code == 0
    data = json.loads(result.output)
    assert [d["label"] for d in data] == ["Mar 08", "Mar 09", "Mar 10"]


def test_analytics_timeline_monthly(runner, mock_analytics):
    """Test --monthly shows the month table."""
    result = runner.invoke(analytics_timeline, ["--monthly"])

    assert result.exit_code == 0
    assert "Monthly Activity" in result.output
    assert "Mar 24" in result.output


def test_analytics_timeline_rejects_unknown_range(runner, mock_analytics):
    """Test that an unsupported range is a usage error."""
    result = runner.invoke(analytics_timeline, ["--range", "2w"])
    assert result.exit_code == 2


# ---------------------------------------------------------------------------
# analytics feed tests
# ---------------------------------------------------------------------------


def test_analytics_feed_json(runner, mock_analytics):
    """Test analytics feed --json lists events newest first."""
    result = runner.invoke(analytics_feed, ["--json"])

    assert result.exit_code == 0
    data = json.loads(result.output)
    assert [e["id"] for e in data] == ["message-1", "project-1", "blog-1"]
    assert data[0]["read"] is False


def test_analytics_feed_limit_passed_through(runner, mock_analytics):
    """Test that --limit configures the analytics feed length."""
    result = runner.invoke(analytics_feed, ["--json", "-n", "3"])

    assert result.exit_code == 0
    assert mock_analytics.call_args.kwargs["feed_limit"] == 3


def test_analytics_feed_dashboard_limit(runner, mock_analytics):
    """Test that --dashboard uses the dashboard feed length."""
    result = runner.invoke(analytics_feed, ["--json", "--dashboard"])

    assert result.exit_code == 0
    assert mock_analytics.call_args.kwargs["feed_limit"] == 5


def test_analytics_feed_table(runner, mock_analytics):
    """Test analytics feed table escapes user text."""
    result = runner.invoke(analytics_feed, [])

    assert result.exit_code == 0
    assert "Recent Activity" in result.output
    assert "(unread)" in result.output
    assert "[world]" in result.output


# ---------------------------------------------------------------------------
# analytics distribution / summary tests
# ---------------------------------------------------------------------------


def test_analytics_distribution_json(runner, mock_analytics):
    """Test analytics distribution --json."""
    result = runner.invoke(analytics_distribution, ["--json"])

    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data["skills_by_category"]["counts"] == {"Backend": 1}
    assert data["achievements_by_category"]["total"] == 0


def test_analytics_distribution_table(runner, mock_analytics):
    """Test analytics distribution renders non-empty distributions."""
    result = runner.invoke(analytics_distribution, [])

    assert result.exit_code == 0
    assert "Backend" in result.output
    assert "no entries" in result.output


def test_analytics_summary_json(runner, mock_analytics):
    """Test analytics summary --json outputs the whole snapshot."""
    result = runner.invoke(analytics_summary, ["--json"])

    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data["range"] == "7d"
    assert data["failures"] == {"service": "timeout"}
    assert {"stats", "timeline", "monthly", "feed", "performance"} <= set(data)


def test_analytics_summary_text(runner, mock_analytics):
    """Test analytics summary text output."""
    result = runner.invoke(analytics_summary, [])

    assert result.exit_code == 0
    assert "Content Overview" in result.output
    assert "Unread messages: 1" in result.output
    assert "Recent Activity" in result.output


def test_analytics_summary_shows_content_and_messages(runner, mock_analytics):
    """Test summary lists top content, messages by day and recent messages."""
    result = runner.invoke(analytics_summary, [])

    assert result.exit_code == 0
    assert "Top Content" in result.output
    assert "Hello [world]" in result.output
    assert "Messages by Day" in result.output
    assert "Mar 10: 1" in result.output
    assert "Recent Messages" in result.output
    assert "Ada" in result.output


def test_analytics_summary_json_has_panels(runner, mock_analytics):
    """Test summary --json carries top content and message panels."""
    result = runner.invoke(analytics_summary, ["--json"])

    data = json.loads(result.output)
    assert [r["title"] for r in data["top_content"]] == ["Portfolio", "Hello [world]"]
    assert data["message_stats"] == [{"date": "2024-03-10", "label": "Mar 10", "count": 1}]
    assert data["recent_messages"][0]["name"] == "Ada"
