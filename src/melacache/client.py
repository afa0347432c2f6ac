"""High-level async client for the marketplace storefront data."""

from __future__ import annotations

import functools
import logging
import random
from collections.abc import Iterable, Sequence
from typing import Any

import aiohttp

from melacache._api.listings import build_listing_card_params, query_listings
from melacache._api.users import show_user
from melacache._constants import RECOMMENDED_LISTING_FIELDS
from melacache._transport import MarketplaceTransport, Transport
from melacache.config import MelaConfig, paginate_ids
from melacache.exceptions import MelaError
from melacache.ingestion.apply import merge_resources
from melacache.ingestion.batch import BatchResult, fetch_batch
from melacache.ingestion.normalize import parse_document
from melacache.models.document import Pagination
from melacache.models.resource import ResolvedEntity, ResourceRef
from melacache.state.query import KeyedQueryState, QueryState
from melacache.state.resolve import OnMissing, resolve
from melacache.state.store import EntityStore

_logger = logging.getLogger(__name__)


class MelaClient:
    """Async client that fetches storefront data into one session-scoped store.

    Usage::

        async with MelaClient(config) as client:
            state = await client.fetch_brands(page=1)
            cards = client.entities(state)
    """

    def __init__(
        self,
        config: MelaConfig,
        *,
        session: aiohttp.ClientSession | None = None,
        store: EntityStore | None = None,
        transport: Transport | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._config = config
        self._external_session = session is not None
        self._http_session = session
        self._injected_transport = transport
        self._transport: Transport | None = transport
        self._store = store if store is not None else EntityStore()
        self._rng = rng or random.Random()

        self._brands = QueryState()
        self._featured_brands = QueryState()
        self._recommended = QueryState()
        self._hero = QueryState()
        self._search = QueryState()
        self._categories = KeyedQueryState()

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> MelaClient:
        if self._injected_transport is not None:
            return self
        if self._http_session is None:
            self._http_session = aiohttp.ClientSession()
        self._transport = MarketplaceTransport(self._config, self._http_session)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        self._transport = self._injected_transport

    # ------------------------------------------------------------------
    # State accessors
    # ------------------------------------------------------------------

    @property
    def store(self) -> EntityStore:
        return self._store

    @property
    def brands(self) -> QueryState:
        return self._brands

    @property
    def featured_brands(self) -> QueryState:
        return self._featured_brands

    @property
    def recommended(self) -> QueryState:
        return self._recommended

    @property
    def hero(self) -> QueryState:
        return self._hero

    @property
    def search(self) -> QueryState:
        return self._search

    @property
    def categories(self) -> KeyedQueryState:
        return self._categories

    def resolve(
        self,
        refs: Iterable[Any],
        on_missing: OnMissing = "drop",
        *,
        depth: int | None = 1,
    ) -> list[ResolvedEntity]:
        return resolve(self._store, refs, on_missing, depth=depth)

    def entities(self, state: QueryState, on_missing: OnMissing = "drop") -> list[ResolvedEntity]:
        """Resolve the references recorded in *state*, in order."""
        return resolve(self._store, state.refs, on_missing)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_transport(self) -> Transport:
        if self._transport is None:
            raise MelaError("Client not initialized. Use 'async with MelaClient(...) as client:'")
        return self._transport

    async def _fetch_users(self, user_ids: Sequence[str]) -> BatchResult:
        transport = self._require_transport()
        result = await fetch_batch(
            self._store,
            user_ids,
            functools.partial(show_user, transport),
            expected_type="user",
        )
        if result.failed_ids:
            _logger.info("Loaded %d/%d brands", len(result.refs), len(user_ids))
        return result

    async def _query_into(
        self,
        state: QueryState,
        params: dict[str, Any],
    ) -> tuple[list[ResourceRef], Pagination | None] | None:
        """Run a listing query and merge it.

        Returns ``None`` (state failed) on fetch errors. Any other exception
        is recorded on the state and re-raised.
        """
        transport = self._require_transport()
        state.start()
        try:
            response = await query_listings(transport, params)
            document = parse_document(response)
            if document is None:
                return [], None
            report = merge_resources(self._store, document.primary, document.included)
        except MelaError as exc:
            _logger.error("Listing query failed: %s", exc)
            state.fail(exc)
            return None
        except Exception as exc:
            state.fail(exc)
            raise
        return report.primary_refs, document.meta

    # ------------------------------------------------------------------
    # Brands
    # ------------------------------------------------------------------

    async def fetch_brands(self, page: int = 1, per_page: int | None = None) -> QueryState:
        """Fetch one page of the brand directory.

        Individual brand failures are skipped; only a failure of the batch
        itself is recorded on the state and re-raised.
        """
        per_page = per_page or self._config.brands_per_page
        state = self._brands
        state.start()
        try:
            brand_ids, _total_pages, total_items = paginate_ids(self._config.brand_ids, page, per_page)
            result = await self._fetch_users(brand_ids)
        except Exception as exc:
            state.fail(exc)
            raise

        pagination = Pagination.for_slice(page, per_page, total_items)
        state.succeed(result.refs, pagination)
        return state

    async def fetch_featured_brands(self) -> QueryState:
        state = self._featured_brands
        state.start()
        try:
            result = await self._fetch_users(self._config.featured_brand_ids)
        except Exception as exc:
            state.fail(exc)
            raise
        state.succeed(result.refs)
        return state

    # ------------------------------------------------------------------
    # Listings
    # ------------------------------------------------------------------

    async def fetch_recommended_products(self, skus: Sequence[str]) -> QueryState:
        """Fetch published listings by SKU, ordered as *skus* was given.

        Listings whose ``publicData.sku`` is not an exact match are left out.
        """
        wanted = [sku for sku in skus if sku]
        state = self._recommended
        if not wanted:
            return state

        params = build_listing_card_params(
            per_page=self._config.recommended_page_size,
            include=("images",),
            listing_fields=RECOMMENDED_LISTING_FIELDS,
            pub_sku=wanted,
            states=["published"],
        )
        outcome = await self._query_into(state, params)
        if outcome is None:
            return state

        refs, _meta = outcome
        by_sku: dict[str, ResourceRef] = {}
        for ref in refs:
            record = self._store.get_ref(ref)
            public_data = record.attributes.get("publicData") if record is not None else None
            sku = public_data.get("sku") if isinstance(public_data, dict) else None
            if isinstance(sku, str) and sku not in by_sku:
                by_sku[sku] = ref
        state.succeed([by_sku[sku] for sku in wanted if sku in by_sku])
        return state

    async def fetch_category_products(self, level: str, name: str) -> QueryState:
        """Fetch the showcase listings of one category (keyed ``"level:name"``)."""
        state = self._categories[f"{level}:{name}"]
        params = build_listing_card_params(
            per_page=self._config.category_page_size,
            **{f"pub_{level}": name},
        )
        outcome = await self._query_into(state, params)
        if outcome is not None:
            state.succeed(outcome[0])
        return state

    async def fetch_hero_products(self, count: int | None = None) -> QueryState:
        """Pick a random sample of the newest listings for the homepage hero."""
        count = self._config.hero_count if count is None else count
        state = self._hero
        params = build_listing_card_params(per_page=self._config.hero_pool_size, sort="createdAt")
        outcome = await self._query_into(state, params)
        if outcome is None:
            return state

        pool = outcome[0]
        state.succeed(self._rng.sample(pool, min(count, len(pool))))
        return state

    async def search_listings(self, page: int = 1, per_page: int = 24, **filters: Any) -> QueryState:
        """Paginated listing search. Page 1 replaces the results, later pages append."""
        state = self._search
        params = build_listing_card_params(per_page=per_page, page=page, **filters)
        outcome = await self._query_into(state, params)
        if outcome is None:
            return state

        refs, meta = outcome
        if meta is None:
            meta = Pagination(page=page, per_page=per_page)
        state.succeed(refs, meta)
        return state
