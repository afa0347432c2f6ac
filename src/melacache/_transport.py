"""HTTP transport for the marketplace API."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from melacache._constants import USER_AGENT
from melacache._redact import describe_request
from melacache.config import MelaConfig
from melacache.exceptions import MelaApiError, MelaTransportError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by endpoint modules.

    Having a protocol here makes it easy to pass test doubles while keeping
    the production implementation (`MarketplaceTransport`) concrete.
    """

    async def get_json(self, endpoint: str, params: Mapping[str, Any]) -> dict[str, Any]:
        ...


def encode_params(params: Mapping[str, Any]) -> dict[str, str]:
    """Flatten query params the way the marketplace SDK does.

    Sequences are comma-joined, booleans lower-cased, ``None`` dropped.
    """
    encoded: dict[str, str] = {}
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, bool):
            encoded[key] = "true" if value else "false"
        elif isinstance(value, (list, tuple)):
            encoded[key] = ",".join(str(item) for item in value)
        else:
            encoded[key] = str(value)
    return encoded


def _api_error(endpoint: str, status: int, body: Any) -> MelaTransportError | MelaApiError:
    """Map an error response to an exception.

    Marketplace error bodies look like ``{"errors": [{"code": ..., "title": ...}]}``.
    """
    errors = body.get("errors") if isinstance(body, dict) else None
    if isinstance(errors, list) and errors and isinstance(errors[0], dict):
        first = errors[0]
        code = str(first.get("code") or first.get("status") or status)
        title = str(first.get("title") or first.get("detail") or "API error")
        if status >= 500:
            return MelaTransportError(f"HTTP {status} from {endpoint}: {title}", status_code=status, endpoint=endpoint)
        return MelaApiError(f"{title} ({code})", code=code, endpoint=endpoint)
    return MelaTransportError(f"HTTP {status} from {endpoint}", status_code=status, endpoint=endpoint)


class MarketplaceTransport:
    """aiohttp-backed GET transport returning decoded JSON documents."""

    def __init__(self, config: MelaConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=config.request_timeout)

    def _headers(self) -> dict[str, str]:
        headers: dict[str, str] = {
            "accept": "application/json",
            "user-agent": USER_AGENT,
        }
        if self._config.access_token:
            headers["authorization"] = f"Bearer {self._config.access_token}"
        return headers

    async def get_json(self, endpoint: str, params: Mapping[str, Any]) -> dict[str, Any]:
        """GET ``endpoint`` and return the decoded JSON object.

        Raises
        ------
        MelaTransportError
            Network failure, timeout, 5xx, or a body that is not a JSON object.
        MelaApiError
            4xx response carrying a marketplace error document.
        """
        url = f"{self._config.base_url}{endpoint}"
        query = encode_params(params)
        headers = self._headers()

        _logger.debug("%s", describe_request("GET", url, query, headers))

        try:
            async with self._http.get(url, params=query, headers=headers, timeout=self._timeout) as resp:
                text = await resp.text()
                status = resp.status
        except aiohttp.ClientError as exc:
            raise MelaTransportError(f"Request to {endpoint} failed: {exc}", endpoint=endpoint) from exc
        except asyncio.TimeoutError as exc:
            raise MelaTransportError(f"Request to {endpoint} timed out", endpoint=endpoint) from exc

        try:
            body = json.loads(text) if text else None
        except json.JSONDecodeError as exc:
            if status != 200:
                raise MelaTransportError(
                    f"HTTP {status} from {endpoint}: {text[:200]}",
                    status_code=status,
                    endpoint=endpoint,
                ) from exc
            raise MelaTransportError(f"Invalid JSON from {endpoint}: {text[:200]}", endpoint=endpoint) from exc

        if status != 200:
            raise _api_error(endpoint, status, body)

        if not isinstance(body, dict):
            raise MelaTransportError(f"Expected a JSON object from {endpoint}", status_code=status, endpoint=endpoint)
        return body
