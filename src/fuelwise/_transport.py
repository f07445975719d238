"""Async JSON-over-HTTP transport shared by all remote adapters."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from fuelwise.exceptions import FuelwiseTransportError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by the adapter modules.

    Having a protocol here makes it easy to pass test doubles while keeping
    the production implementation (`HttpTransport`) concrete.
    """

    async def request_json(
        self,
        method: str,
        url: str,
        *,
        params: Mapping[str, Any] | None = None,
        json_body: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        ...


class HttpTransport:
    """aiohttp transport that decodes JSON and normalizes failures."""

    def __init__(
        self,
        http_session: aiohttp.ClientSession,
        *,
        timeout: float,
        user_agent: str | None = None,
    ) -> None:
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._user_agent = user_agent

    async def request_json(
        self,
        method: str,
        url: str,
        *,
        params: Mapping[str, Any] | None = None,
        json_body: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        """Send a request and return the decoded JSON body.

        Returns ``None`` when the response has no body (e.g. ``DELETE``).
        Raises :class:`FuelwiseTransportError` for network failures,
        timeouts, non-2xx statuses and undecodable bodies.
        """
        request_headers: dict[str, str] = {"accept": "application/json"}
        if self._user_agent:
            request_headers["user-agent"] = self._user_agent
        if headers:
            request_headers.update(headers)

        _logger.debug("%s %s", method, url)

        try:
            async with self._http.request(
                method,
                url,
                params=dict(params) if params else None,
                json=json_body,
                headers=request_headers,
                timeout=self._timeout,
            ) as resp:
                text = await resp.text()
                if not 200 <= resp.status < 300:
                    raise FuelwiseTransportError(
                        f"HTTP {resp.status} from {url}: {text[:200]}",
                        status_code=resp.status,
                        url=url,
                    )
        except FuelwiseTransportError:
            raise
        except TimeoutError as exc:
            raise FuelwiseTransportError(f"Request to {url} timed out", url=url) from exc
        except UnicodeDecodeError as exc:
            raise FuelwiseTransportError(f"Undecodable body from {url}: {exc}", url=url) from exc
        except aiohttp.ClientError as exc:
            raise FuelwiseTransportError(f"Request to {url} failed: {exc}", url=url) from exc

        if not text.strip():
            return None

        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise FuelwiseTransportError(
                f"Invalid JSON from {url}: {text[:200]}",
                status_code=resp.status,
                url=url,
            ) from exc
