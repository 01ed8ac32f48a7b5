"""
Content collections: record normalization and the content API gateway.
"""

from folio.content.gateway import (
    ContentAPIAuthError,
    ContentAPIClient,
    ContentAPIError,
    ContentGateway,
    FetchResponse,
    FetchResults,
    fetch_collections,
)
from folio.content.models import (
    ContentItem,
    ContentKind,
    group_by_kind,
    normalize,
    parse_timestamp,
)

__all__ = [
    "ContentAPIAuthError",
    "ContentAPIClient",
    "ContentAPIError",
    "ContentGateway",
    "ContentItem",
    "ContentKind",
    "FetchResponse",
    "FetchResults",
    "fetch_collections",
    "group_by_kind",
    "normalize",
    "parse_timestamp",
]
