"""Async client for the HubSpot CRM REST API."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from types import TracebackType
from typing import Any

import httpx

from hubspot_mcp.exceptions import HubSpotError
from hubspot_mcp.utilities.logging import redact_headers

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.hubapi.com"

QueryValue = str | int | float | bool | Sequence[str] | None


def create_hubspot_http_client(token: str, **kwargs: Any) -> httpx.AsyncClient:
    """Create an httpx AsyncClient that authenticates against HubSpot.

    Defaults: the public API base URL, a 30 second timeout and redirects
    followed. Any keyword argument accepted by ``httpx.AsyncClient`` overrides
    them (tests pass ``transport=httpx.MockTransport(...)``).

    The returned client must be closed by the caller.
    """
    default_kwargs: dict[str, Any] = {
        "base_url": DEFAULT_BASE_URL,
        "follow_redirects": True,
        "timeout": httpx.Timeout(30.0),
    }
    default_kwargs.update(kwargs)
    headers = dict(default_kwargs.pop("headers", None) or {})
    headers["Authorization"] = f"Bearer {token}"
    headers.setdefault("Accept", "application/json")
    return httpx.AsyncClient(headers=headers, **default_kwargs)


def _encode_query(query: Mapping[str, QueryValue]) -> dict[str, str | int | float | bool]:
    """Drop unset values and join list values with commas, the way HubSpot expects them."""
    params: dict[str, str | int | float | bool] = {}
    for key, value in query.items():
        if value is None:
            continue
        if isinstance(value, str | int | float | bool):
            params[key] = value
        else:
            params[key] = ",".join(value)
    return params


class HubSpotClient:
    """Thin JSON-over-HTTP wrapper around the HubSpot API.

    Every call either returns the decoded JSON body of a 2xx response or
    raises ``HubSpotError`` carrying the status code and body text verbatim.
    No retries are attempted.

    Usage:
        async with HubSpotClient.from_token(token) as hubspot:
            owners = await hubspot.get("/crm/v3/owners", {"limit": 100})
    """

    def __init__(self, http_client: httpx.AsyncClient):
        self._http = http_client

    @classmethod
    def from_token(
        cls,
        token: str,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float | None = 30.0,
        **kwargs: Any,
    ) -> HubSpotClient:
        return cls(create_hubspot_http_client(token, base_url=base_url, timeout=httpx.Timeout(timeout), **kwargs))

    async def __aenter__(self) -> HubSpotClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def get(self, path: str, query: Mapping[str, QueryValue] | None = None) -> Any:
        return await self._request("GET", path, params=_encode_query(query or {}))

    async def post(self, path: str, body: Mapping[str, Any] | None = None) -> Any:
        return await self._request("POST", path, json=dict(body or {}))

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        logger.debug("HubSpot %s %s headers=%s", method, path, redact_headers(self._http.headers))
        try:
            response = await self._http.request(method, path, **kwargs)
        except httpx.HTTPError as err:
            logger.warning("HubSpot %s %s failed: %s", method, path, err)
            raise HubSpotError(None, f"{type(err).__name__}: {err}") from err

        if not response.is_success:
            logger.warning("HubSpot %s %s returned %d", method, path, response.status_code)
            raise HubSpotError(response.status_code, response.text)

        try:
            return response.json()
        except ValueError as err:
            raise HubSpotError(response.status_code, response.text) from err
