"""Shared test fixtures for folio package."""

import asyncio
import logging
from datetime import datetime, timezone

import pytest

from folio.content.gateway import FetchResponse
from folio.content.models import ContentItem, ContentKind


class FakeGateway:
    """In-memory content gateway.

    Each kind maps to a list of raw records, a FetchResponse, or an exception
    instance to raise. Kinds may be held back with hold() until release().
    """

    def __init__(self, collections=None):
        self.collections = dict(collections or {})
        self.calls: list[ContentKind] = []
        self._gates: dict[ContentKind, asyncio.Event] = {}

    def hold(self, kind):
        self._gates[kind] = asyncio.Event()

    def release(self, kind):
        self._gates.pop(kind).set()

    async def fetch_kind(self, kind):
        self.calls.append(kind)
        gate = self._gates.get(kind)
        if gate is not None:
            await gate.wait()
        value = self.collections.get(kind, [])
        if isinstance(value, Exception):
            raise value
        if isinstance(value, FetchResponse):
            return value
        return FetchResponse(success=True, data=list(value))


@pytest.fixture(autouse=True)
def restore_logging():
    """Undo logging changes made by `folio -v` and friends."""
    root = logging.getLogger()
    folio_logger = logging.getLogger("folio")
    handlers, level = list(root.handlers), root.level
    folio_level = folio_logger.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    folio_logger.setLevel(folio_level)


@pytest.fixture
def fake_gateway():
    """Factory for FakeGateway instances."""
    return FakeGateway


@pytest.fixture
def now():
    """Fixed reference time used across analytics tests."""
    return datetime(2024, 3, 10, 15, 30, tzinfo=timezone.utc)


@pytest.fixture
def make_item():
    """Factory fixture for normalized content items."""
    counter = {"n": 0}

    def _make(kind=ContentKind.PROJECT, created_at="2024-03-01T12:00:00Z", item_id=None, **fields):
        counter["n"] += 1
        if isinstance(created_at, str):
            created_at = datetime.fromisoformat(created_at.replace("Z", "+00:00"))
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        record_id = str(item_id if item_id is not None else counter["n"])
        return ContentItem(
            id=record_id,
            kind=kind,
            created_at=created_at,
            fields={"id": record_id, **fields},
        )

    return _make


@pytest.fixture
def isolated_config(tmp_path, monkeypatch):
    """Run with no real config: empty XDG dir, tmp cwd, no FOLIO_* env vars."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    monkeypatch.delenv("FOLIO_API_URL", raising=False)
    monkeypatch.delenv("FOLIO_API_TOKEN", raising=False)
    workdir = tmp_path / "work"
    workdir.mkdir()
    monkeypatch.chdir(workdir)
    return workdir


@pytest.fixture
def local_config_dir(isolated_config):
    """Create a .folio/ directory in the working directory."""
    folio_dir = isolated_config / ".folio"
    folio_dir.mkdir()
    return folio_dir
