"""HTTP transport for the row API (PostgREST dialect)."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from fleettrack._constants import USER_AGENT
from fleettrack._redact import redact_for_log
from fleettrack.config import TrackingConfig
from fleettrack.exceptions import FleetTrackApiError, FleetTrackTransportError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by the query modules.

    Having a protocol here makes it easy to pass test doubles while keeping
    the production implementation (`RestTransport`) concrete.
    """

    async def get_rows(self, table: str, params: Mapping[str, str]) -> list[dict[str, Any]]:
        ...


def _raise_for_error_body(endpoint: str, status: int, text: str) -> None:
    """Map a structured PostgREST error body to :class:`FleetTrackApiError`."""
    try:
        body = json.loads(text)
    except json.JSONDecodeError:
        return
    if isinstance(body, dict) and "message" in body:
        code = str(body.get("code") or "")
        raise FleetTrackApiError(
            f"{endpoint} failed: status={status} code={code} message={body.get('message')}",
            code=code,
            endpoint=endpoint,
        )


class RestTransport:
    """Read-only row transport backed by an :class:`aiohttp.ClientSession`."""

    def __init__(self, config: TrackingConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=config.request_timeout)

    def _headers(self) -> dict[str, str]:
        return {
            "accept": "application/json",
            "apikey": self._config.api_key,
            "authorization": f"Bearer {self._config.api_key}",
            "user-agent": USER_AGENT,
        }

    async def get_rows(self, table: str, params: Mapping[str, str]) -> list[dict[str, Any]]:
        """Fetch rows from *table* filtered by PostgREST query *params*.

        Returns the decoded JSON array. Raises
        :class:`FleetTrackTransportError` on network failures, non-2xx
        responses or malformed bodies, and :class:`FleetTrackApiError` when the
        server returns a structured error.
        """
        url = f"{self._config.rest_url}/{table}"
        _logger.debug("GET %s params=%s", url, redact_for_log(dict(params)))

        try:
            async with self._http.get(url, params=dict(params), headers=self._headers(), timeout=self._timeout) as resp:
                text = await resp.text()
                if resp.status >= 400:
                    _raise_for_error_body(table, resp.status, text)
                    raise FleetTrackTransportError(
                        f"HTTP {resp.status} from {table}: {text[:200]}",
                        status_code=resp.status,
                        endpoint=table,
                    )
        except (FleetTrackTransportError, FleetTrackApiError):
            raise
        except aiohttp.ClientError as exc:
            raise FleetTrackTransportError(
                f"Request to {table} failed: {exc}",
                endpoint=table,
            ) from exc
        except TimeoutError as exc:
            raise FleetTrackTransportError(
                f"Request to {table} timed out after {self._config.request_timeout}s",
                endpoint=table,
            ) from exc

        try:
            body = json.loads(text)
        except json.JSONDecodeError as exc:
            raise FleetTrackTransportError(
                f"Invalid JSON from {table}: {text[:200]}",
                endpoint=table,
            ) from exc

        if not isinstance(body, list):
            raise FleetTrackTransportError(
                f"Expected a JSON array from {table}, got {type(body).__name__}",
                endpoint=table,
            )

        return [row for row in body if isinstance(row, dict)]
