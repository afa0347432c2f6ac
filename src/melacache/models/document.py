"""Compound response documents."""

from __future__ import annotations

import math
from typing import Any

from pydantic import Field, ValidationError, field_validator

from melacache.models._base import MelaBaseModel


class Pagination(MelaBaseModel):
    """Pagination metadata (``meta`` of a query response)."""

    page: int = 1
    per_page: int = 0
    total_pages: int = 0
    total_items: int = 0

    @classmethod
    def for_slice(cls, page: int, per_page: int, total_items: int) -> Pagination:
        total_pages = math.ceil(total_items / per_page) if per_page > 0 else 0
        return cls(page=page, per_page=per_page, total_pages=total_pages, total_items=total_items)


class ResponseDocument(MelaBaseModel):
    """A compound response: primary ``data`` plus supplementary ``included``.

    Items are kept loose (``Any``) on purpose. One malformed resource must
    not fail parsing of the whole document; per-resource validation lives
    in :mod:`melacache.ingestion.normalize`.
    """

    data: Any = None
    included: list[Any] = Field(default_factory=list)
    meta: Pagination | None = None

    @field_validator("included", mode="before")
    @classmethod
    def _coerce_included(cls, value: Any) -> list[Any]:
        if isinstance(value, (list, tuple)):
            return list(value)
        return []

    @field_validator("meta", mode="before")
    @classmethod
    def _tolerate_meta(cls, value: Any) -> Pagination | None:
        if not isinstance(value, dict):
            return None
        try:
            return Pagination.model_validate(value)
        except ValidationError:
            return None

    @property
    def primary(self) -> list[Any]:
        """The primary resources as a list, whether ``data`` was a single item or a list."""
        if self.data is None:
            return []
        if isinstance(self.data, (list, tuple)):
            return list(self.data)
        return [self.data]
