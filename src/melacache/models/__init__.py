"""Data models for marketplace documents and cached entities."""

from melacache.models._base import MelaBaseModel, ResourceId, unwrap_uuid
from melacache.models.document import Pagination, ResponseDocument
from melacache.models.resource import EntityRecord, RawResource, Relationship, ResolvedEntity, ResourceRef

__all__ = [
    "EntityRecord",
    "MelaBaseModel",
    "Pagination",
    "RawResource",
    "Relationship",
    "ResolvedEntity",
    "ResourceId",
    "ResourceRef",
    "ResponseDocument",
    "unwrap_uuid",
]
