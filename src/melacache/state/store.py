"""Normalized in-memory entity store.

This is the only component that holds merged entity state. Records enter
through :mod:`melacache.ingestion.apply` and are read back through
:mod:`melacache.state.resolve`.
"""

from __future__ import annotations

import copy
from collections.abc import Iterator, Mapping
from typing import Any

from melacache.models.resource import EntityRecord, Relationship, ResourceRef


def _merge_patch(target: dict[str, Any], patch: Mapping[str, Any] | None) -> None:
    """Shallow key-wise merge: keys in the patch overwrite, absent keys are untouched."""

    if not patch:
        return
    for key, value in patch.items():
        target[key] = copy.deepcopy(value)


def _merge_relationships(target: dict[str, Relationship], patch: Mapping[str, Relationship | None] | None) -> None:
    """Like :func:`_merge_patch`, but a ``None`` value never erases a known relationship."""

    if not patch:
        return
    for key, value in patch.items():
        if value is None:
            continue
        target[key] = copy.deepcopy(value)


class EntityStore:
    """In-memory store keyed by ``(type, id)``.

    At most one record exists per key, merging never drops an attribute
    that the incoming payload does not explicitly overwrite, and there is
    no delete path. One store is created per browsing session and passed
    explicitly to whatever drives the fetches.
    """

    def __init__(self) -> None:
        self._entities: dict[str, dict[str, EntityRecord]] = {}

    def _record(self, type_: str, id_: str) -> EntityRecord:
        by_id = self._entities.setdefault(type_, {})
        record = by_id.get(id_)
        if record is None:
            record = EntityRecord(type=type_, id=id_)
            by_id[id_] = record
        return record

    def put(
        self,
        type_: str,
        id_: str,
        attributes: Mapping[str, Any] | None = None,
        relationships: Mapping[str, Relationship | None] | None = None,
    ) -> None:
        """Merge a partial record, creating it when missing."""
        record = self._record(type_, id_)
        _merge_patch(record.attributes, attributes)
        _merge_relationships(record.relationships, relationships)

    def get(self, type_: str, id_: str) -> EntityRecord | None:
        """Return a copy of the record for ``(type, id)``, or ``None``."""
        record = self._entities.get(type_, {}).get(id_)
        if record is None:
            return None
        return record.model_copy(deep=True)

    def get_ref(self, ref: ResourceRef) -> EntityRecord | None:
        return self.get(ref.type, ref.id)

    def types(self) -> list[str]:
        return list(self._entities)

    def ids(self, type_: str) -> list[str]:
        return list(self._entities.get(type_, {}))

    def snapshot(self) -> dict[str, dict[str, dict[str, Any]]]:
        """Plain nested dict of every record (``type -> id -> record``)."""
        return {
            type_: {id_: record.model_dump(mode="json") for id_, record in by_id.items()}
            for type_, by_id in self._entities.items()
        }

    def __contains__(self, ref: object) -> bool:
        if not isinstance(ref, ResourceRef):
            return False
        return ref.id in self._entities.get(ref.type, {})

    def __len__(self) -> int:
        return sum(len(by_id) for by_id in self._entities.values())

    def __iter__(self) -> Iterator[EntityRecord]:
        for by_id in self._entities.values():
            for record in by_id.values():
                yield record.model_copy(deep=True)

    def __repr__(self) -> str:
        counts = ", ".join(f"{type_}={len(by_id)}" for type_, by_id in self._entities.items())
        return f"EntityStore({counts})"
