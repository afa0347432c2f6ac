"""Denormalization: expand references into nested, display-ready objects.

Results are plain dicts shaped as::

    {"id": ..., "type": ..., "attributes": {...}, <relationship>: {...} | [{...}, ...]}

Relationship targets are resolved against the same store. Targets that are
missing from the store are omitted; a target that is already being
resolved further up the current path is replaced by a reference-only stub
(``{"id", "type"}``), so cyclic graphs terminate.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any, Literal

from pydantic import ValidationError

from melacache.exceptions import NotFoundError
from melacache.models.resource import EntityRecord, ResolvedEntity, ResourceRef
from melacache.state.store import EntityStore

_logger = logging.getLogger(__name__)

OnMissing = Literal["drop", "fail"]

_RESERVED_KEYS = frozenset({"id", "type", "attributes"})


def resolve(
    store: EntityStore,
    refs: Iterable[Any],
    on_missing: OnMissing = "drop",
    *,
    depth: int | None = 1,
) -> list[ResolvedEntity]:
    """Resolve *refs* into nested entities, preserving input order.

    Parameters
    ----------
    on_missing
        ``"drop"`` omits refs that are not in the store, and malformed
        refs too; ``"fail"`` raises
        :class:`~melacache.exceptions.NotFoundError` for the first missing
        one and ``TypeError`` / ``pydantic.ValidationError`` for a
        malformed one.
    depth
        How many relationship hops to follow. ``1`` attaches direct
        relationships only, ``0`` yields attributes only and ``None``
        follows relationships until every path ends or cycles.
    """
    if on_missing not in ("drop", "fail"):
        raise ValueError(f"on_missing must be 'drop' or 'fail', got {on_missing!r}")

    results: list[ResolvedEntity] = []
    for value in refs:
        try:
            ref = ResourceRef.of(value)
        except (TypeError, ValidationError):
            if on_missing == "fail":
                raise
            _logger.debug("Dropping malformed reference %r", value)
            continue
        record = store.get_ref(ref)
        if record is None:
            if on_missing == "fail":
                raise NotFoundError(ref)
            _logger.debug("Dropping unresolvable reference %s", ref)
            continue
        results.append(_denormalize(store, record, depth, frozenset({ref})))
    return results


def resolve_one(
    store: EntityStore,
    ref: Any,
    on_missing: OnMissing = "fail",
    *,
    depth: int | None = 1,
) -> ResolvedEntity | None:
    """Resolve a single reference. Returns ``None`` when dropped."""
    resolved = resolve(store, [ref], on_missing, depth=depth)
    return resolved[0] if resolved else None


def _denormalize(
    store: EntityStore,
    record: EntityRecord,
    depth: int | None,
    path: frozenset[ResourceRef],
) -> ResolvedEntity:
    entity: ResolvedEntity = {"id": record.id, "type": record.type, "attributes": record.attributes}
    if depth is not None and depth <= 0:
        return entity

    next_depth = None if depth is None else depth - 1
    for name, target in record.relationships.items():
        if name in _RESERVED_KEYS:
            _logger.debug("Skipping relationship %r on %s: name collides with entity keys", name, record.ref)
            continue
        if isinstance(target, list):
            items = (_resolve_target(store, item, next_depth, path) for item in target)
            entity[name] = [item for item in items if item is not None]
            continue
        resolved = _resolve_target(store, target, next_depth, path)
        if resolved is not None:
            entity[name] = resolved
    return entity


def _resolve_target(
    store: EntityStore,
    ref: ResourceRef,
    depth: int | None,
    path: frozenset[ResourceRef],
) -> ResolvedEntity | None:
    if ref in path:
        return ref.as_dict()
    record = store.get_ref(ref)
    if record is None:
        return None
    return _denormalize(store, record, depth, path | {ref})
