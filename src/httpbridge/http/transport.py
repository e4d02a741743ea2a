# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Transport abstraction and the httpx-backed implementation."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Mapping
from http.cookiejar import CookieJar, DefaultCookiePolicy
from typing import Any, Protocol

import httpx

from ..config import HttpSettings, load_http_settings
from ..tls import TrustConfig
from .models import RequestSpec

logger = logging.getLogger(__name__)


class RawResponse(Protocol):
    """A live response whose body has not been read yet."""

    status_code: int
    headers: Mapping[str, str]
    url: str
    remote_address: str | None

    async def next_chunk(self) -> bytes | None:
        """Next body chunk, or None at end of stream. Raises on a read fault."""
        ...

    async def read_text(self) -> str: ...

    async def aclose(self) -> None: ...


class Transport(Protocol):
    """Minimal protocol for delivering a RequestSpec over the network."""

    async def send(self, spec: RequestSpec) -> RawResponse: ...

    async def aclose(self) -> None:  # pragma: no cover - optional for adapters
        ...


def _peer_ip(response: httpx.Response) -> str | None:
    stream = response.extensions.get("network_stream")
    if stream is None:
        return None
    try:
        server_addr = stream.get_extra_info("server_addr")
    except Exception:  # noqa: BLE001
        return None
    if isinstance(server_addr, tuple) and server_addr:
        return str(server_addr[0])
    if isinstance(server_addr, str) and server_addr:
        return server_addr
    return None


class HttpxRawResponse:
    """RawResponse over an ``httpx.Response`` opened with ``stream=True``."""

    def __init__(self, response: httpx.Response):
        self._response = response
        self._chunks: AsyncIterator[bytes] | None = None
        self._fault: Exception | None = None
        self.remote_address = _peer_ip(response)

    @property
    def status_code(self) -> int:
        return self._response.status_code

    @property
    def headers(self) -> httpx.Headers:
        return self._response.headers

    @property
    def url(self) -> str:
        return str(self._response.url)

    async def next_chunk(self) -> bytes | None:
        # A failed aiter_bytes generator is finished; keep reporting the fault, not EOF.
        if self._fault is not None:
            raise self._fault
        if self._chunks is None:
            self._chunks = self._response.aiter_bytes()
        while True:
            try:
                chunk = await self._chunks.__anext__()
            except StopAsyncIteration:
                return None
            except Exception as exc:
                self._fault = exc
                raise
            # httpx may hand back empty decoder flushes; they are not data.
            if chunk:
                return chunk

    async def read_text(self) -> str:
        content = await self._response.aread()
        return content.decode("utf-8", errors="replace")

    async def aclose(self) -> None:
        await self._response.aclose()


def _reject_all_cookies() -> CookieJar:
    return CookieJar(policy=DefaultCookiePolicy(allowed_domains=[]))


class HttpxTransport(Transport):
    """Asynchronous httpx transport configured from HttpSettings and a TrustConfig."""

    def __init__(
        self,
        settings: HttpSettings | None = None,
        trust: TrustConfig | None = None,
        client: httpx.AsyncClient | None = None,
        **client_kwargs: Any,
    ):
        self.settings = settings or load_http_settings()
        self.trust = trust or TrustConfig()
        if self.settings.use_alternate_dns:
            logger.debug("use_alternate_dns has no effect with the httpx backend; the system resolver is used")
        self._client = client or httpx.AsyncClient(
            follow_redirects=self.settings.allow_redirects,
            timeout=self.settings.timeout,
            verify=self._verify(),
            cookies=None if self.settings.use_cookies else _reject_all_cookies(),
            **client_kwargs,
        )

    def _verify(self) -> Any:
        if not self.settings.verify_ssl:
            return False
        if self.trust.is_default:
            return True
        return self.trust.build_ssl_context()

    async def send(self, spec: RequestSpec) -> HttpxRawResponse:
        request = self._client.build_request(
            spec.method.value,
            spec.url,
            headers=spec.headers.to_dict(),
            params=spec.params or None,
            content=spec.body,
        )
        response = await self._client.send(request, stream=True)
        return HttpxRawResponse(response)

    async def aclose(self) -> None:
        await self._client.aclose()


def create_default_transport(settings: HttpSettings | None = None, trust: TrustConfig | None = None) -> Transport:
    """Factory for the default httpx-backed transport."""
    return HttpxTransport(settings or load_http_settings(), trust)


__all__ = [
    "HttpxRawResponse",
    "HttpxTransport",
    "RawResponse",
    "Transport",
    "create_default_transport",
]
