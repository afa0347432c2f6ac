"""Listing query endpoint.

Endpoints:
  - /listings/query
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from melacache._constants import AUTHOR_FIELDS, LISTING_CARD_FIELDS, LISTING_CARD_VARIANTS
from melacache._transport import Transport


def build_listing_card_params(
    *,
    per_page: int,
    include: Sequence[str] = ("author", "images"),
    listing_fields: Sequence[str] = LISTING_CARD_FIELDS,
    **filters: Any,
) -> dict[str, Any]:
    """Query params for listing cards (listing + author + card image variants).

    ``filters`` are passed through verbatim, e.g. ``pub_sku=[...]`` or
    ``sort="createdAt"``.
    """
    params: dict[str, Any] = {
        "include": list(include),
        "fields.listing": list(listing_fields),
        "fields.image": [f"variants.{name}" for name in LISTING_CARD_VARIANTS],
        "perPage": per_page,
    }
    if "author" in include:
        params["fields.user"] = list(AUTHOR_FIELDS)
    for name, transform in LISTING_CARD_VARIANTS.items():
        params[f"imageVariant.{name}"] = transform
    params.update(filters)
    return params


async def query_listings(transport: Transport, params: dict[str, Any]) -> dict[str, Any]:
    """Run a listing query (``data`` is a list of listing resources)."""
    return await transport.get_json("/listings/query", params)
