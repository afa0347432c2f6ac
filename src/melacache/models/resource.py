"""Resource references, raw resources and stored entity records."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from melacache.models._base import MelaBaseModel, ResourceId

ResolvedEntity = dict[str, Any]
"""A denormalized entity: ``{"id", "type", "attributes", <relationship>: ...}``."""


class ResourceRef(MelaBaseModel):
    """A ``(type, id)`` pair identifying an entity without carrying its data.

    Identity is structural: two refs with equal type and id are the same
    entity. Instances are frozen and hashable.
    """

    type: str = Field(..., min_length=1)
    id: ResourceId = Field(..., min_length=1)

    @classmethod
    def of(cls, value: Any) -> ResourceRef:
        """Coerce a ref, a ``(type, id)`` tuple or a mapping into a :class:`ResourceRef`."""
        if isinstance(value, ResourceRef):
            return value
        if isinstance(value, tuple) and len(value) == 2:
            return cls(type=value[0], id=value[1])
        if isinstance(value, Mapping):
            return cls.model_validate(dict(value))
        raise TypeError(f"Cannot build a resource reference from {type(value).__name__}")

    def as_dict(self) -> dict[str, str]:
        return {"id": self.id, "type": self.type}

    def __str__(self) -> str:
        return f"{self.type}/{self.id}"


Relationship = ResourceRef | list[ResourceRef]


class RawResource(MelaBaseModel):
    """One resource as returned by the marketplace API."""

    type: str = Field(..., min_length=1)
    id: ResourceId = Field(..., min_length=1)
    attributes: dict[str, Any] | None = None
    relationships: dict[str, Any] | None = None

    @property
    def ref(self) -> ResourceRef:
        return ResourceRef(type=self.type, id=self.id)


class EntityRecord(BaseModel):
    """Merged knowledge about one entity.

    Mutated in place by :class:`melacache.state.store.EntityStore` only;
    everything handed out of the store is a deep copy.
    """

    model_config = ConfigDict(extra="forbid")

    type: str
    id: str
    attributes: dict[str, Any] = Field(default_factory=dict)
    relationships: dict[str, Relationship] = Field(default_factory=dict)

    @property
    def ref(self) -> ResourceRef:
        return ResourceRef(type=self.type, id=self.id)
