"""Validation helpers.

Every resource is checked before it reaches the store. The outcome is a
tagged result, :class:`Valid` or :class:`Invalid`, which the merge step
consumes explicitly. Validation never raises.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from melacache.models.document import ResponseDocument
from melacache.models.resource import RawResource, Relationship, ResourceRef


@dataclass(frozen=True, slots=True)
class Valid:
    resource: RawResource


@dataclass(frozen=True, slots=True)
class Invalid:
    reason: str
    raw: Any = None


Validation = Valid | Invalid


def _describe(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        loc = ".".join(str(item) for item in error.get("loc", ())) or "<root>"
        parts.append(f"{loc}: {error.get('msg', 'invalid')}")
    return "; ".join(parts)


def validate_resource(
    raw: Any,
    *,
    expected_type: str | None = None,
    require_attributes: bool = False,
) -> Validation:
    """Validate one raw resource.

    A resource needs a non-empty ``type``, a non-null id (string, integer or
    ``{"uuid": ...}``), and mapping-typed ``attributes``/``relationships``
    when those are present. ``expected_type`` additionally pins the type,
    ``require_attributes`` rejects resources without attributes.
    """
    if isinstance(raw, RawResource):
        resource = raw
    elif not isinstance(raw, Mapping):
        return Invalid(reason=f"expected a mapping, got {type(raw).__name__}", raw=raw)
    else:
        try:
            resource = RawResource.model_validate(dict(raw))
        except ValidationError as exc:
            return Invalid(reason=_describe(exc), raw=raw)

    if expected_type is not None and resource.type != expected_type:
        return Invalid(reason=f"expected type {expected_type!r}, got {resource.type!r}", raw=raw)
    if require_attributes and resource.attributes is None:
        return Invalid(reason="missing attributes", raw=raw)
    return Valid(resource=resource)


def _to_ref(value: Any) -> ResourceRef | None:
    if isinstance(value, ResourceRef):
        return value
    if not isinstance(value, Mapping):
        return None
    try:
        return ResourceRef.model_validate(dict(value))
    except ValidationError:
        return None


def prune_relationships(relationships: Mapping[str, Any] | None) -> dict[str, Relationship]:
    """Reduce wire relationships to refs, dropping entries whose ``data`` is null.

    ``{"author": {"data": None}}`` is treated as absent rather than as
    "no author", so a previously merged author survives a sparse refetch.
    Malformed refs inside a to-many list are skipped; an empty list is kept.
    """
    pruned: dict[str, Relationship] = {}
    if not relationships:
        return pruned

    for name, entry in relationships.items():
        if not isinstance(entry, Mapping):
            continue
        data = entry.get("data")
        if data is None:
            continue
        if isinstance(data, (list, tuple)):
            pruned[name] = [ref for ref in (_to_ref(item) for item in data) if ref is not None]
            continue
        ref = _to_ref(data)
        if ref is not None:
            pruned[name] = ref
    return pruned


def parse_document(payload: Any) -> ResponseDocument | None:
    """Parse a compound response, or return ``None`` when it is not one."""
    if isinstance(payload, ResponseDocument):
        return payload
    if not isinstance(payload, Mapping):
        return None
    try:
        return ResponseDocument.model_validate(dict(payload))
    except ValidationError:
        return None
