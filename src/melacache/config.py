"""Client configuration for melacache."""

from __future__ import annotations

import dataclasses
import math
import os
from collections.abc import Sequence
from typing import Any

from melacache._constants import BASE_URL
from melacache.exceptions import MelaConfigError


def _env_ids(value: str | None) -> tuple[str, ...] | None:
    if value is None:
        return None
    return tuple(item.strip() for item in value.split(",") if item.strip())


def _env_number(env_key: str, value: str, cast: type[int] | type[float]) -> int | float:
    try:
        return cast(value)
    except ValueError as exc:
        raise MelaConfigError(f"{env_key} must be a number, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class MelaConfig:
    """Client configuration.

    Parameters
    ----------
    client_id : str
        Marketplace application client id.
    base_url : str
        Marketplace API base URL.
    access_token : str or None
        Bearer token sent with every request, if any.
    request_timeout : float
        Total timeout per request in seconds.
    brands_per_page : int
        Default page size of the brand directory.
    featured_brand_ids : tuple of str
        Brand (user) ids shown in the featured section.
    brand_ids : tuple of str
        Every brand id in the directory, in display order.
    hero_pool_size : int
        How many newest listings to sample hero products from.
    hero_count : int
        How many hero products to pick.
    category_page_size : int
        Listings fetched per category showcase.
    recommended_page_size : int
        Upper bound on listings fetched for a SKU recommendation query.
    """

    client_id: str = ""
    base_url: str = BASE_URL
    access_token: str | None = None
    request_timeout: float = 30.0
    brands_per_page: int = 24
    featured_brand_ids: tuple[str, ...] = ()
    brand_ids: tuple[str, ...] = ()
    hero_pool_size: int = 25
    hero_count: int = 3
    category_page_size: int = 6
    recommended_page_size: int = 20

    @classmethod
    def from_env(cls, **overrides: Any) -> MelaConfig:
        """Create configuration from ``MELA_*`` environment variables.

        Id lists (``MELA_BRAND_IDS``, ``MELA_FEATURED_BRAND_IDS``) are
        comma-separated. Explicit keyword arguments override environment
        values.

        Raises
        ------
        MelaConfigError
            When a numeric variable cannot be parsed.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        _ENV_STR_MAP = {
            "MELA_CLIENT_ID": "client_id",
            "MELA_BASE_URL": "base_url",
            "MELA_ACCESS_TOKEN": "access_token",
        }
        for env_key, field_name in _ENV_STR_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        _ENV_NUMBER_MAP: dict[str, tuple[str, type[int] | type[float]]] = {
            "MELA_REQUEST_TIMEOUT": ("request_timeout", float),
            "MELA_BRANDS_PER_PAGE": ("brands_per_page", int),
            "MELA_HERO_POOL_SIZE": ("hero_pool_size", int),
            "MELA_HERO_COUNT": ("hero_count", int),
            "MELA_CATEGORY_PAGE_SIZE": ("category_page_size", int),
            "MELA_RECOMMENDED_PAGE_SIZE": ("recommended_page_size", int),
        }
        for env_key, (field_name, cast) in _ENV_NUMBER_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = _env_number(env_key, val, cast)

        for env_key, field_name in (
            ("MELA_BRAND_IDS", "brand_ids"),
            ("MELA_FEATURED_BRAND_IDS", "featured_brand_ids"),
        ):
            ids = _env_ids(env.get(env_key))
            if ids is not None:
                config_kwargs[field_name] = ids

        for field_name in ("brand_ids", "featured_brand_ids"):
            if field_name in overrides:
                overrides[field_name] = tuple(overrides[field_name])

        config_kwargs.update(overrides)

        return cls(**config_kwargs)


def paginate_ids(ids: Sequence[str], page: int = 1, per_page: int = 24) -> tuple[list[str], int, int]:
    """Slice a configured id list for one page.

    Returns ``(ids_on_page, total_pages, total_items)``. Pages are 1-indexed.
    """
    if page < 1:
        raise ValueError(f"page must be >= 1, got {page}")
    if per_page < 1:
        raise ValueError(f"per_page must be >= 1, got {per_page}")
    start = (page - 1) * per_page
    total_items = len(ids)
    return list(ids[start : start + per_page]), math.ceil(total_items / per_page), total_items
