"""Base model for marketplace API documents.

Every wire model inherits from :class:`MelaBaseModel` which provides:

* ``alias_generator=to_camel`` so camelCase API keys (``perPage``,
  ``totalItems``) map automatically to snake_case fields.
* ``extra="ignore"`` so new upstream keys never break parsing.
* :data:`ResourceId`, an annotated id type that accepts both the SDK
  shape ``{"uuid": "..."}``, a plain string and an integer.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict
from pydantic.alias_generators import to_camel


def unwrap_uuid(value: Any) -> Any:
    """Return the bare identifier for an SDK ``{"uuid": ...}`` id.

    Integer ids are opaque identifiers too and become strings. Anything
    else is returned unchanged so the field validator can reject it.
    """
    if isinstance(value, Mapping):
        value = value.get("uuid")
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value


ResourceId = Annotated[str, BeforeValidator(unwrap_uuid)]
"""Annotated type that normalizes ``{"uuid": ...}`` and integer ids to strings."""


class MelaBaseModel(BaseModel):
    """Base for marketplace wire models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )
