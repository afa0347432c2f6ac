"""Merge engine: fold compound responses into an entity store.

The candidate list is ``primary ++ included``, applied in that order, so
for a key present in both copies of an entity the included value is kept.
Malformed resources are dropped and never fail the merge. Re-merging the
same document is idempotent.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from itertools import chain
from typing import Any

from melacache.ingestion.normalize import Invalid, parse_document, prune_relationships, validate_resource
from melacache.models.resource import ResourceRef
from melacache.state.store import EntityStore

_logger = logging.getLogger(__name__)


@dataclass(slots=True)
class MergeReport:
    """Outcome of one merge."""

    merged: int = 0
    dropped: int = 0
    primary_refs: list[ResourceRef] = field(default_factory=list)


def merge_resources(
    store: EntityStore,
    primary: Iterable[Any],
    included: Iterable[Any] = (),
) -> MergeReport:
    """Validate and merge resources. ``primary_refs`` keeps primary order."""

    report = MergeReport()
    candidates = chain(((True, raw) for raw in primary), ((False, raw) for raw in included))
    for is_primary, raw in candidates:
        result = validate_resource(raw)
        if isinstance(result, Invalid):
            report.dropped += 1
            _logger.debug("Dropping malformed resource: %s", result.reason)
            continue

        resource = result.resource
        store.put(
            resource.type,
            resource.id,
            resource.attributes,
            prune_relationships(resource.relationships),
        )
        report.merged += 1
        if is_primary:
            report.primary_refs.append(resource.ref)
    return report


def merge_response(store: EntityStore, payload: Any) -> MergeReport:
    """Merge a compound response document (model or raw mapping)."""

    document = parse_document(payload)
    if document is None:
        _logger.debug("Ignoring payload that is not a response document: %s", type(payload).__name__)
        return MergeReport()
    return merge_resources(store, document.primary, document.included)


def merge_document(store: EntityStore, payload: Any) -> EntityStore:
    """Merge *payload* into *store* and return the store."""

    merge_response(store, payload)
    return store
