"""Batch fetching with partial-failure tolerance.

A feature that needs N independent entities (e.g. the configured brand
ids) fetches them concurrently. Each fetch that fails at the transport or
API level, or that returns a structurally invalid primary resource, simply
contributes nothing. Surviving results are merged in one pass and their
references are reported in request order.

Only errors that are not :class:`~melacache.exceptions.MelaError` (i.e.
failures of the orchestration itself) propagate out of :func:`fetch_batch`.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field
from typing import Any

from melacache.exceptions import MelaError
from melacache.ingestion.apply import merge_resources
from melacache.ingestion.normalize import Invalid, parse_document, validate_resource
from melacache.models.resource import RawResource, ResourceRef
from melacache.state.store import EntityStore

_logger = logging.getLogger(__name__)

FetchOne = Callable[[str], Awaitable[Any]]


@dataclass(slots=True)
class BatchResult:
    """Outcome of :func:`fetch_batch`."""

    refs: list[ResourceRef] = field(default_factory=list)
    failed_ids: list[str] = field(default_factory=list)
    merged: int = 0
    dropped: int = 0


async def _fetch_or_none(id_: str, fetch_one: FetchOne) -> Any | None:
    try:
        return await fetch_one(id_)
    except MelaError as exc:
        _logger.warning("Fetch for %s failed, skipping: %s", id_, exc)
        return None


def _usable(id_: str, response: Any, expected_type: str | None) -> tuple[RawResource, list[Any]] | None:
    document = parse_document(response)
    if document is None:
        _logger.warning("Invalid response for %s", id_)
        return None

    primary = document.primary
    if len(primary) != 1:
        _logger.warning("Expected one primary resource for %s, got %d", id_, len(primary))
        return None

    result = validate_resource(primary[0], expected_type=expected_type, require_attributes=True)
    if isinstance(result, Invalid):
        _logger.warning("Invalid resource for %s: %s", id_, result.reason)
        return None
    return result.resource, document.included


async def fetch_batch(
    store: EntityStore,
    ids: Iterable[str],
    fetch_one: FetchOne,
    *,
    expected_type: str | None = None,
) -> BatchResult:
    """Fetch every id concurrently and merge the usable results into *store*.

    Parameters
    ----------
    fetch_one
        Coroutine function returning a compound response for one id.
    expected_type
        When set, a primary resource of any other type counts as a failure.
    """

    requested = list(ids)
    responses = await asyncio.gather(*(_fetch_or_none(id_, fetch_one) for id_ in requested))

    result = BatchResult()
    primary: list[RawResource] = []
    included: list[Any] = []
    for id_, response in zip(requested, responses, strict=True):
        usable = None if response is None else _usable(id_, response, expected_type)
        if usable is None:
            result.failed_ids.append(id_)
            continue
        resource, extra = usable
        primary.append(resource)
        included.extend(extra)

    report = merge_resources(store, primary, included)
    result.refs = report.primary_refs
    result.merged = report.merged
    result.dropped = report.dropped
    return result
