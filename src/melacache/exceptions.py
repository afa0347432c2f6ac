"""Custom exception hierarchy for melacache."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from melacache.models.resource import ResourceRef


class MelaError(Exception):
    """Base exception for all melacache errors."""


class MelaConfigError(MelaError):
    """Invalid or missing configuration."""


class MelaTransportError(MelaError):
    """HTTP-level failure (network, non-200, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class MelaApiError(MelaError):
    """Marketplace API returned an error document."""

    def __init__(
        self,
        message: str,
        *,
        code: str = "",
        endpoint: str = "",
    ) -> None:
        self.code = code
        self.endpoint = endpoint
        super().__init__(message)


class NotFoundError(MelaError, LookupError):
    """A reference could not be resolved against the entity store.

    Only raised by strict-mode resolution (``on_missing="fail"``).
    """

    def __init__(self, ref: ResourceRef) -> None:
        self.ref = ref
        super().__init__(f"Entity not found: {ref.type}/{ref.id}")
