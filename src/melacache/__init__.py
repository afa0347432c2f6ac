"""melacache - Normalized entity cache for a marketplace storefront."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("melacache")
except PackageNotFoundError:
    __version__ = "0+local"
from melacache.client import MelaClient
from melacache.config import MelaConfig, paginate_ids
from melacache.exceptions import (
    MelaApiError,
    MelaConfigError,
    MelaError,
    MelaTransportError,
    NotFoundError,
)
from melacache.ingestion.apply import MergeReport, merge_document, merge_resources, merge_response
from melacache.ingestion.batch import BatchResult, fetch_batch
from melacache.ingestion.normalize import Invalid, Valid, validate_resource
from melacache.models import (
    EntityRecord,
    Pagination,
    RawResource,
    ResolvedEntity,
    ResourceRef,
    ResponseDocument,
)
from melacache.state.query import KeyedQueryState, QueryState, StoredError
from melacache.state.resolve import resolve, resolve_one
from melacache.state.store import EntityStore

__all__ = [
    "__version__",
    "BatchResult",
    "EntityRecord",
    "EntityStore",
    "Invalid",
    "KeyedQueryState",
    "MelaApiError",
    "MelaClient",
    "MelaConfig",
    "MelaConfigError",
    "MelaError",
    "MelaTransportError",
    "MergeReport",
    "NotFoundError",
    "Pagination",
    "QueryState",
    "RawResource",
    "ResolvedEntity",
    "ResourceRef",
    "ResponseDocument",
    "StoredError",
    "Valid",
    "fetch_batch",
    "merge_document",
    "merge_resources",
    "merge_response",
    "paginate_ids",
    "resolve",
    "resolve_one",
    "validate_resource",
]
