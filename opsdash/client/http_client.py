"""httpx implementation of BackendClient.

Two instances are normally built from one config: the default client
(short timeout, one transparent retry of network-layer failures) and the
long-running client used for bulk imports (long timeout, no retry).
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

import httpx
import structlog

from opsdash.core.errors import (
    BackendError,
    BackendUnreachable,
    Forbidden,
    Unauthorized,
    extract_error_message,
)

if TYPE_CHECKING:
    from opsdash.core.session import SessionStore

log = structlog.get_logger()


class HttpBackendClient:
    """BackendClient backed by httpx.AsyncClient."""

    def __init__(
        self,
        base_url: str,
        session: SessionStore,
        *,
        timeout: float = 60.0,
        retry_network_errors: bool = True,
        retry_delay: float = 2.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._session = session
        self._retry = retry_network_errors
        self._retry_delay = retry_delay
        self._http = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    @property
    def base_url(self) -> str:
        return str(self._http.base_url).rstrip("/")

    async def aclose(self) -> None:
        await self._http.aclose()

    def _headers(self, multipart: bool = False) -> dict[str, str]:
        headers = {}
        token = self._session.token
        if token:
            headers["Authorization"] = f"Bearer {token}"
        if not multipart:
            headers["Content-Type"] = "application/json"
        return headers

    async def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        multipart = "files" in kwargs
        attempts = 2 if self._retry else 1
        for attempt in range(1, attempts + 1):
            try:
                log.debug("backend_request", method=method, path=path)
                return await self._http.request(
                    method, path, headers=self._headers(multipart), **kwargs,
                )
            except httpx.TimeoutException as exc:
                log.error("backend_timeout", method=method, path=path)
                raise BackendUnreachable(f"Request to {path} timed out.") from exc
            except httpx.TransportError as exc:
                if attempt < attempts:
                    log.warning("backend_retry", method=method, path=path,
                                error=str(exc))
                    await asyncio.sleep(self._retry_delay)
                    continue
                log.error("backend_unreachable", method=method, path=path,
                          base_url=self.base_url, error=str(exc))
                raise BackendUnreachable() from exc
        raise AssertionError("unreachable")

    def _check(self, method: str, path: str, response: httpx.Response) -> httpx.Response:
        if response.is_success:
            return response

        try:
            payload = response.json()
        except ValueError:
            payload = None

        status = response.status_code
        message = extract_error_message(
            payload, response.reason_phrase or f"Request failed with status {status}",
        )
        log.error("backend_error", method=method, path=path, status=status,
                  message=message)

        if status == 401:
            log.warning("backend_unauthorized", path=path)
            self._session.clear()
            raise Unauthorized(status, message, payload)
        if status == 403:
            log.warning("backend_forbidden", path=path)
            raise Forbidden(status, message, payload)
        raise BackendError(status, message, payload)

    async def _json(self, method: str, path: str, **kwargs: Any) -> Any:
        response = self._check(method, path, await self._send(method, path, **kwargs))
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise BackendError(response.status_code, "Malformed response from server") from exc

    async def get(self, path: str, params: dict | None = None) -> Any:
        return await self._json("GET", path, params=params)

    async def get_bytes(self, path: str, params: dict | None = None) -> bytes:
        response = await self._send("GET", path, params=params)
        return self._check("GET", path, response).content

    async def post(self, path: str, json: Any = None, params: dict | None = None) -> Any:
        return await self._json("POST", path, json=json, params=params)

    async def put(self, path: str, json: Any = None) -> Any:
        return await self._json("PUT", path, json=json)

    async def delete(self, path: str) -> Any:
        return await self._json("DELETE", path)

    async def upload(self, path: str, field: str, filename: str, content: bytes) -> Any:
        return await self._json("POST", path, files={field: (filename, content)})
