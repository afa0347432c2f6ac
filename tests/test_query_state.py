from __future__ import annotations

from melacache.exceptions import MelaApiError, MelaTransportError
from melacache.models.document import Pagination
from melacache.models.resource import ResourceRef
from melacache.state.query import KeyedQueryState, QueryState, StoredError


def _refs(*ids: str) -> list[ResourceRef]:
    return [ResourceRef(type="user", id=id_) for id_ in ids]


def test_first_page_replaces_later_pages_append() -> None:
    state = QueryState()

    state.succeed(_refs("a", "b"), Pagination(page=1, per_page=2))
    state.succeed(_refs("c"), Pagination(page=2, per_page=2))
    assert [ref.id for ref in state.refs] == ["a", "b", "c"]

    state.succeed(_refs("z"), Pagination(page=1, per_page=2))
    assert [ref.id for ref in state.refs] == ["z"]


def test_unpaginated_success_replaces() -> None:
    state = QueryState(refs=_refs("old"))

    state.succeed([("user", "new")])

    assert state.refs == _refs("new")
    assert state.pagination is None


def test_progress_and_error_flags() -> None:
    state = QueryState()

    state.start()
    assert state.in_progress is True

    state.fail(MelaTransportError("HTTP 503 from /users/show", status_code=503, endpoint="/users/show"))
    assert state.in_progress is False
    assert state.error is not None
    assert state.error.name == "MelaTransportError"
    assert state.error.status_code == 503
    assert state.error.endpoint == "/users/show"

    state.start()
    assert state.error is None


def test_stored_error_from_api_and_generic_errors() -> None:
    api = StoredError.from_exception(MelaApiError("forbidden (403)", code="403", endpoint="/listings/query"))
    generic = StoredError.from_exception(RuntimeError("boom"))

    assert api.code == "403"
    assert api.endpoint == "/listings/query"
    assert generic == StoredError(name="RuntimeError", message="boom")
    assert generic.model_dump()["status_code"] is None


def test_keyed_state_creates_on_access() -> None:
    states = KeyedQueryState()

    assert "category:baby" not in states
    states["category:baby"].start()

    assert "category:baby" in states
    assert states["category:baby"].in_progress is True
    assert list(states) == ["category:baby"]
    assert len(states) == 1
