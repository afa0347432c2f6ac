from __future__ import annotations

import random
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import pytest

from melacache.client import MelaClient
from melacache.config import MelaConfig
from melacache.exceptions import MelaError, MelaTransportError, NotFoundError
from melacache.models.resource import ResourceRef


def _user(user_id: str) -> dict[str, Any]:
    return {
        "type": "user",
        "id": {"uuid": user_id},
        "attributes": {"profile": {"displayName": f"Brand {user_id}"}},
        "relationships": {"profileImage": {"data": {"type": "image", "id": {"uuid": f"logo-{user_id}"}}}},
    }


def _listing(listing_id: str, sku: str, author: str = "b1") -> dict[str, Any]:
    return {
        "type": "listing",
        "id": {"uuid": listing_id},
        "attributes": {"title": f"Item {listing_id}", "publicData": {"sku": sku}},
        "relationships": {
            "images": {"data": [{"type": "image", "id": {"uuid": f"img-{listing_id}"}}]},
            "author": {"data": {"type": "user", "id": {"uuid": author}}},
        },
    }


def _image(image_id: str) -> dict[str, Any]:
    return {"type": "image", "id": {"uuid": image_id}, "attributes": {"variants": {"listing-card": {"url": "x"}}}}


@dataclass
class FakeMarketplace:
    users: dict[str, Any] = field(default_factory=dict)
    listings: list[dict[str, Any]] = field(default_factory=list)
    listing_error: Exception | None = None
    meta: dict[str, Any] | None = None
    calls: list[tuple[str, dict[str, Any]]] = field(default_factory=list)

    async def get_json(self, endpoint: str, params: Mapping[str, Any]) -> dict[str, Any]:
        self.calls.append((endpoint, dict(params)))

        if endpoint == "/users/show":
            response = self.users.get(params["id"])
            if response is None:
                raise MelaTransportError("HTTP 404 from /users/show", status_code=404, endpoint=endpoint)
            if isinstance(response, Exception):
                raise response
            return response

        if endpoint == "/listings/query":
            if self.listing_error is not None:
                raise self.listing_error
            included = [_image(f"img-{item['id']['uuid']}") for item in self.listings]
            document: dict[str, Any] = {"data": list(self.listings), "included": included}
            if self.meta is not None:
                document["meta"] = self.meta
            return document

        raise AssertionError(f"unexpected endpoint {endpoint}")


def _config(**overrides: Any) -> MelaConfig:
    return MelaConfig(client_id="client-1", **overrides)


@pytest.mark.asyncio
async def test_fetch_brands_paginates_and_tolerates_failures() -> None:
    backend = FakeMarketplace(
        users={
            "b1": {"data": _user("b1"), "included": [_image("logo-b1")]},
            "b3": {"data": _user("b3"), "included": [_image("logo-b3")]},
            "b4": {"data": {**_user("b4"), "type": "listing"}},
            "b5": {"data": _user("b5"), "included": [_image("logo-b5")]},
        }
    )
    config = _config(brand_ids=("b1", "b2", "b3", "b4", "b5"), brands_per_page=4)

    async with MelaClient(config, transport=backend) as client:
        state = await client.fetch_brands(page=1)
        assert [ref.id for ref in state.refs] == ["b1", "b3"]
        assert state.pagination is not None
        assert state.pagination.total_pages == 2
        assert state.pagination.total_items == 5
        assert state.in_progress is False
        assert state.error is None

        state = await client.fetch_brands(page=2)
        assert [ref.id for ref in state.refs] == ["b1", "b3", "b5"]

        cards = client.entities(state)
        assert [card["attributes"]["profile"]["displayName"] for card in cards] == ["Brand b1", "Brand b3", "Brand b5"]
        assert cards[0]["profileImage"]["id"] == "logo-b1"

        state = await client.fetch_brands(page=1)
        assert [ref.id for ref in state.refs] == ["b1", "b3"]


@pytest.mark.asyncio
async def test_fetch_brands_records_orchestration_failure() -> None:
    async with MelaClient(_config(brand_ids=("b1",)), transport=FakeMarketplace()) as client:
        with pytest.raises(ValueError):
            await client.fetch_brands(page=0)

        assert client.brands.in_progress is False
        assert client.brands.error is not None
        assert client.brands.error.name == "ValueError"


@pytest.mark.asyncio
async def test_fetch_featured_brands() -> None:
    backend = FakeMarketplace(users={"b2": {"data": _user("b2")}})

    async with MelaClient(_config(featured_brand_ids=("b1", "b2")), transport=backend) as client:
        state = await client.fetch_featured_brands()

    assert state.refs == [ResourceRef(type="user", id="b2")]
    assert state.pagination is None


@pytest.mark.asyncio
async def test_recommended_products_follow_sku_order() -> None:
    backend = FakeMarketplace(
        listings=[_listing("L1", "SKU-A"), _listing("L2", "SKU-X"), _listing("L3", "SKU-C")],
    )

    async with MelaClient(_config(), transport=backend) as client:
        state = await client.fetch_recommended_products(["SKU-C", "SKU-B", "SKU-A"])

        assert [ref.id for ref in state.refs] == ["L3", "L1"]
        products = client.entities(state)
        assert [product["images"][0]["id"] for product in products] == ["img-L3", "img-L1"]
        # author was not part of the included documents
        assert "author" not in products[0]

    _endpoint, params = backend.calls[0]
    assert params["pub_sku"] == ["SKU-C", "SKU-B", "SKU-A"]
    assert params["states"] == ["published"]
    assert params["include"] == ["images"]


@pytest.mark.asyncio
async def test_recommended_products_noop_without_skus() -> None:
    backend = FakeMarketplace()

    async with MelaClient(_config(), transport=backend) as client:
        state = await client.fetch_recommended_products([])

    assert state.refs == []
    assert backend.calls == []


@pytest.mark.asyncio
async def test_listing_query_failure_is_recorded() -> None:
    backend = FakeMarketplace(
        listing_error=MelaTransportError("HTTP 503 from /listings/query", status_code=503, endpoint="/listings/query")
    )

    async with MelaClient(_config(), transport=backend) as client:
        state = await client.fetch_category_products("category", "baby")

        assert state.in_progress is False
        assert state.error is not None
        assert state.error.status_code == 503
        assert "category:baby" in client.categories


@pytest.mark.asyncio
async def test_unexpected_listing_error_is_recorded_and_raised() -> None:
    backend = FakeMarketplace(listing_error=RuntimeError("boom"))

    async with MelaClient(_config(), transport=backend) as client:
        with pytest.raises(RuntimeError, match="boom"):
            await client.search_listings()

        assert client.search.in_progress is False
        assert client.search.error is not None
        assert client.search.error.name == "RuntimeError"
        assert client.search.error.message == "boom"


@pytest.mark.asyncio
async def test_category_products_keyed_by_level_and_name() -> None:
    backend = FakeMarketplace(listings=[_listing("L1", "A"), _listing("L2", "B")])

    async with MelaClient(_config(), transport=backend) as client:
        await client.fetch_category_products("subcategory", "rompers")

        state = client.categories["subcategory:rompers"]
        assert [ref.id for ref in state.refs] == ["L1", "L2"]

    _endpoint, params = backend.calls[0]
    assert params["pub_subcategory"] == "rompers"
    assert params["perPage"] == 6


@pytest.mark.asyncio
async def test_hero_products_sample_from_pool() -> None:
    backend = FakeMarketplace(listings=[_listing(f"L{i}", f"S{i}") for i in range(6)])

    async with MelaClient(_config(), transport=backend, rng=random.Random(7)) as client:
        state = await client.fetch_hero_products()

    assert len(state.refs) == 3
    assert len(set(state.refs)) == 3
    assert {ref.id for ref in state.refs} <= {f"L{i}" for i in range(6)}
    _endpoint, params = backend.calls[0]
    assert params["sort"] == "createdAt"
    assert params["perPage"] == 25


@pytest.mark.asyncio
async def test_search_listings_appends_later_pages() -> None:
    backend = FakeMarketplace(
        listings=[_listing("L1", "A")],
        meta={"page": 1, "perPage": 1, "totalPages": 2, "totalItems": 2},
    )

    async with MelaClient(_config(), transport=backend) as client:
        await client.search_listings(page=1, per_page=1)
        backend.listings = [_listing("L2", "B")]
        backend.meta = {"page": 2, "perPage": 1, "totalPages": 2, "totalItems": 2}
        state = await client.search_listings(page=2, per_page=1)

        assert [ref.id for ref in state.refs] == ["L1", "L2"]
        assert state.pagination is not None
        assert state.pagination.page == 2


@pytest.mark.asyncio
async def test_shared_store_across_features() -> None:
    backend = FakeMarketplace(
        users={"b1": {"data": _user("b1")}},
        listings=[_listing("L1", "A", author="b1")],
    )

    async with MelaClient(_config(brand_ids=("b1",)), transport=backend) as client:
        await client.fetch_category_products("category", "baby")
        await client.fetch_brands()

        listing = client.resolve([ResourceRef(type="listing", id="L1")], on_missing="fail")[0]
        assert listing["author"]["attributes"]["profile"]["displayName"] == "Brand b1"

        with pytest.raises(NotFoundError):
            client.resolve([("listing", "nope")], on_missing="fail")


@pytest.mark.asyncio
async def test_client_requires_context() -> None:
    client = MelaClient(_config())

    with pytest.raises(MelaError):
        await client.fetch_featured_brands()
