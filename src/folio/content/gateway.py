"""
Content API gateway.

The portfolio backend exposes one collection endpoint per content kind and
wraps every response in a ``{"success": bool, "data": [...]}`` envelope.

Usage:
    client = ContentAPIClient("https://example.com/api", token="...")

    # One collection
    response = await client.fetch_kind(ContentKind.MESSAGE)

    # Several collections at once; a failing kind never aborts the others
    results = await fetch_collections(client, list(ContentKind))
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

import requests

from folio.content.models import ContentKind

logger = logging.getLogger(__name__)

# Collection endpoints, relative to the API base URL
ENDPOINTS: dict[ContentKind, str] = {
    ContentKind.PROJECT: "content/projects",
    ContentKind.BLOG: "content/blogs",
    ContentKind.MESSAGE: "content/messages",
    ContentKind.TESTIMONIAL: "content/testimonials",
    ContentKind.EXPERIENCE: "content/experience",
    ContentKind.SKILL: "content/skills",
    ContentKind.SERVICE: "content/services",
    ContentKind.CERTIFICATE: "certificates",
    ContentKind.ACHIEVEMENT: "achievements",
}


class ContentAPIError(Exception):
    """Base exception for content API errors."""

    def __init__(self, message: str, status_code: int | None = None, response: dict | None = None):
        self.message = message
        self.status_code = status_code
        self.response = response
        super().__init__(message)


class ContentAPIAuthError(ContentAPIError):
    """The API rejected the session token."""
    pass


@dataclass
class FetchResponse:
    """Envelope returned by a collection endpoint."""

    success: bool
    data: list[dict[str, Any]] = field(default_factory=list)
    error: str | None = None

    @classmethod
    def from_api_response(cls, payload: Any) -> FetchResponse:
        """Create from a decoded JSON envelope."""
        if not isinstance(payload, dict):
            return cls(success=False, error="Malformed response envelope")
        data = payload.get("data")
        return cls(
            success=bool(payload.get("success", False)),
            data=list(data) if isinstance(data, list) else [],
            error=payload.get("error"),
        )


@runtime_checkable
class ContentGateway(Protocol):
    """Anything that can fetch a whole content collection."""

    async def fetch_kind(self, kind: ContentKind) -> FetchResponse:
        ...


@dataclass
class FetchResults:
    """Outcome of a settle-all fetch across several kinds."""

    collections: dict[ContentKind, list[dict[str, Any]]] = field(default_factory=dict)
    failures: dict[ContentKind, str] = field(default_factory=dict)

    @property
    def all_failed(self) -> bool:
        return bool(self.failures) and not self.collections

    @property
    def succeeded(self) -> list[ContentKind]:
        return list(self.collections)


class ContentAPIClient:
    """Client for the portfolio content API."""

    def __init__(self, base_url: str, token: str | None = None, timeout: float = 10.0):
        """Initialize content API client.

        Args:
            base_url: API root, e.g. https://example.com/api
            token: Bearer access token of the operator session
            timeout: Per-request timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = requests.Session()
        self._session.headers.update({"Accept": "application/json"})
        if token:
            self._session.headers.update({"Authorization": f"Bearer {token}"})

    def _request(self, method: str, endpoint: str, params: dict | None = None) -> Any:
        """Make a request to the content API.

        Returns:
            Decoded JSON body

        Raises:
            ContentAPIError: On transport or HTTP errors
        """
        url = f"{self.base_url}/{endpoint.lstrip('/')}"

        try:
            response = self._session.request(method, url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            raise ContentAPIError(f"Request failed: {e}") from e

        if response.status_code == 401:
            raise ContentAPIAuthError(
                "Session token rejected by the content API",
                status_code=401,
            )

        if not response.ok:
            try:
                error_data = response.json()
                message = error_data.get("error") or error_data.get("message") or response.text
            except Exception:
                error_data = None
                message = response.text
            raise ContentAPIError(
                f"API error ({response.status_code}): {message}",
                status_code=response.status_code,
                response=error_data if isinstance(error_data, dict) else None,
            )

        try:
            return response.json()
        except ValueError as e:
            raise ContentAPIError(
                "Response was not valid JSON", status_code=response.status_code
            ) from e

    def get_collection(self, kind: ContentKind) -> FetchResponse:
        """Fetch a full collection (blocking)."""
        payload = self._request("GET", ENDPOINTS[kind])
        return FetchResponse.from_api_response(payload)

    async def fetch_kind(self, kind: ContentKind) -> FetchResponse:
        """Fetch a full collection without blocking the event loop."""
        return await asyncio.to_thread(self.get_collection, kind)

    def close(self) -> None:
        self._session.close()


async def fetch_collections(
    gateway: ContentGateway,
    kinds: Iterable[ContentKind],
) -> FetchResults:
    """Fetch several collections concurrently and wait for all of them.

    A kind whose fetch raises or reports ``success: false`` is recorded in
    ``failures`` and left out of ``collections``; the other kinds are
    unaffected.
    """
    kinds = list(kinds)
    outcomes = await asyncio.gather(
        *(gateway.fetch_kind(kind) for kind in kinds),
        return_exceptions=True,
    )

    results = FetchResults()
    for kind, outcome in zip(kinds, outcomes):
        if isinstance(outcome, BaseException) and not isinstance(outcome, Exception):
            raise outcome
        if isinstance(outcome, Exception):
            logger.warning("Fetching %s collection failed: %s", kind.value, outcome)
            results.failures[kind] = str(outcome) or type(outcome).__name__
        elif not outcome.success:
            message = outcome.error or "API reported failure"
            logger.warning("Fetching %s collection failed: %s", kind.value, message)
            results.failures[kind] = message
        else:
            results.collections[kind] = outcome.data
    return results
