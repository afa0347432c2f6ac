"""Caller-side query state kept alongside the entity store.

The store is agnostic to pages and requests. Feature code keeps, per query,
the ordered list of references it cares about plus progress/error flags.
Page 1 (or an unpaginated result) replaces the reference list; later pages
append to it.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from melacache.exceptions import MelaApiError, MelaTransportError
from melacache.models.document import Pagination
from melacache.models.resource import ResourceRef


class StoredError(BaseModel):
    """A serializable snapshot of an exception, safe to keep in state."""

    model_config = ConfigDict(frozen=True)

    name: str
    message: str
    status_code: int | None = None
    code: str = ""
    endpoint: str = ""

    @classmethod
    def from_exception(cls, exc: BaseException) -> StoredError:
        status_code: int | None = None
        code = ""
        endpoint = ""
        if isinstance(exc, MelaTransportError):
            status_code = exc.status_code
            endpoint = exc.endpoint
        elif isinstance(exc, MelaApiError):
            code = exc.code
            endpoint = exc.endpoint
        return cls(
            name=type(exc).__name__,
            message=str(exc),
            status_code=status_code,
            code=code,
            endpoint=endpoint,
        )


class QueryState(BaseModel):
    """References and progress flags for one query (e.g. "brands directory")."""

    model_config = ConfigDict(extra="forbid")

    refs: list[ResourceRef] = Field(default_factory=list)
    pagination: Pagination | None = None
    in_progress: bool = False
    error: StoredError | None = None

    def start(self) -> None:
        self.in_progress = True
        self.error = None

    def succeed(self, refs: Iterable[Any], pagination: Pagination | None = None) -> None:
        """Record a successful fetch.

        Appends when ``pagination.page > 1``, replaces otherwise.
        """
        incoming = [ResourceRef.of(ref) for ref in refs]
        if pagination is not None and pagination.page > 1:
            self.refs = [*self.refs, *incoming]
        else:
            self.refs = incoming
        self.pagination = pagination
        self.in_progress = False

    def fail(self, error: BaseException | StoredError) -> None:
        self.in_progress = False
        self.error = error if isinstance(error, StoredError) else StoredError.from_exception(error)


class KeyedQueryState:
    """One :class:`QueryState` per key, created on first access."""

    def __init__(self) -> None:
        self._states: dict[str, QueryState] = {}

    def __getitem__(self, key: str) -> QueryState:
        state = self._states.get(key)
        if state is None:
            state = QueryState()
            self._states[key] = state
        return state

    def __contains__(self, key: object) -> bool:
        return key in self._states

    def __iter__(self) -> Iterator[str]:
        return iter(self._states)

    def __len__(self) -> int:
        return len(self._states)
