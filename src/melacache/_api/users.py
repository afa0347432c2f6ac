"""User endpoints.

Brands are marketplace users; the directory shows their profile and logo.

Endpoints:
  - /users/show
"""

from __future__ import annotations

from typing import Any

from melacache._constants import BRAND_LOGO_VARIANTS, BRAND_USER_FIELDS
from melacache._transport import Transport


def build_show_user_params(user_id: str) -> dict[str, Any]:
    """Query params for a brand profile with its profile image."""
    return {
        "id": user_id,
        "include": ["profileImage"],
        "fields.user": list(BRAND_USER_FIELDS),
        "fields.image": [f"variants.{name}" for name in BRAND_LOGO_VARIANTS],
    }


async def show_user(transport: Transport, user_id: str) -> dict[str, Any]:
    """Fetch one user document (``data`` is a single user resource)."""
    return await transport.get_json("/users/show", build_show_user_params(user_id))
