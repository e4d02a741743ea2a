# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Request dispatch: method selection, header merging, payload encoding and extraction."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

from ..config import HttpSettings, load_http_settings
from ..errors import TransportSendError, UnsupportedMethodError
from ..tls import DangerOverrides, TrustConfig, TrustConfigurator
from .extract import extract_response
from .headers import HeaderStore
from .models import ContentType, HttpMethod, RequestSpec, Response
from .stream import StreamHandle
from .transport import RawResponse, Transport, create_default_transport
from .url import resolve_url

logger = logging.getLogger(__name__)

CONTENT_TYPE_HEADER = "Content-Type"
USER_AGENT_HEADER = "User-Agent"


def encode_body(params: Mapping[str, str], content_type: ContentType) -> bytes:
    """JSON object for JSON; unescaped ``key=value`` pairs joined by ``&`` for TEXT."""
    if content_type is ContentType.JSON:
        return json.dumps(dict(params)).encode("utf-8")
    body = "&".join(f"{key}={value}" for key, value in params.items())
    logger.debug("TEXT body: %s", body)
    return body.encode("utf-8")


class HttpClient:
    """
    Asynchronous HTTP client with default headers, URL templating and tolerant body reads.

    One client may serve many concurrent calls: each call builds its own header snapshot and
    RequestSpec, and only reads the client's defaults.
    """

    def __init__(
        self,
        settings: HttpSettings | None = None,
        *,
        danger_accept_invalid: DangerOverrides | None = None,
        transport: Transport | None = None,
        trust: TrustConfig | None = None,
    ):
        self.settings = settings or load_http_settings()
        if transport is None:
            if trust is None:
                trust = TrustConfigurator(self.settings.cert_dir).build(danger_accept_invalid)
            transport = create_default_transport(self.settings, trust)
        self.trust = trust or TrustConfig()
        self._transport = transport
        self._headers = HeaderStore({USER_AGENT_HEADER: self.settings.user_agent})

    async def aclose(self) -> None:
        await self._transport.aclose()

    async def __aenter__(self) -> HttpClient:
        return self

    async def __aexit__(self, *_args: Any) -> None:
        await self.aclose()

    def set_header(self, name: str, value: str) -> None:
        """Add or replace a default header sent with every call."""
        self._headers[name] = value

    def get_default_headers(self) -> dict[str, str]:
        return self._headers.to_dict()

    def _merge_headers(
        self,
        extra_headers: Mapping[str, str] | None,
        content_type: ContentType | None = None,
    ) -> HeaderStore:
        headers = self._headers.copy().merge(extra_headers)
        if content_type is not None:
            headers[CONTENT_TYPE_HEADER] = content_type.mime_type
        return headers

    def build_request(
        self,
        method: str,
        url_template: str,
        extra_headers: Mapping[str, str] | None = None,
        body_params: Mapping[str, str] | None = None,
        params: Mapping[str, str] | None = None,
        content_type: ContentType = ContentType.JSON,
    ) -> RequestSpec:
        """Resolve a call into a RequestSpec. Raises UnsupportedMethodError before any I/O."""
        http_method = HttpMethod.parse(method)
        if http_method is None:
            raise UnsupportedMethodError(method)

        url, remaining = resolve_url(url_template, params)
        spec = RequestSpec(
            method=http_method,
            url=url,
            headers=self._merge_headers(extra_headers, content_type),
            content_type=content_type,
        )

        if http_method is HttpMethod.GET:
            spec.params = remaining
            return spec

        unused = [key for key in remaining if not body_params or key not in body_params]
        if unused:
            logger.debug("Unused parameters for %s %s: %s", http_method.value, url, ", ".join(unused))
        if body_params is not None:
            spec.body = encode_body(body_params, content_type)
        return spec

    async def _send(self, spec: RequestSpec, *, detail: str | None = None) -> RawResponse:
        try:
            return await self._transport.send(spec)
        except Exception as exc:  # noqa: BLE001
            error = TransportSendError(spec.method.value, spec.url, exc, detail=detail)
            logger.error("%s", error)
            raise error from exc

    async def request(
        self,
        method: str,
        url_template: str,
        extra_headers: Mapping[str, str] | None = None,
        body_params: Mapping[str, str] | None = None,
        params: Mapping[str, str] | None = None,
        content_type: ContentType = ContentType.JSON,
    ) -> Response:
        """
        Issue GET/POST/PUT/DELETE/PATCH against a templated URL.

        ``params`` fill ``{name}`` placeholders; leftovers become the query string for GET and
        are ignored otherwise. ``body_params`` is encoded per ``content_type`` for every method
        except GET.
        """
        spec = self.build_request(method, url_template, extra_headers, body_params, params, content_type)
        raw = await self._send(spec, detail=content_type.name)
        return await extract_response(raw, spec.url, spec.method.value, max_read_errors=self.settings.max_read_errors)

    async def request_stream(
        self,
        method: str,
        url_template: str,
        extra_headers: Mapping[str, str] | None = None,
        body_params: Mapping[str, str] | None = None,
        params: Mapping[str, str] | None = None,
        content_type: ContentType = ContentType.JSON,
    ) -> StreamHandle:
        """Same as ``request`` but hands back a StreamHandle over the live body."""
        spec = self.build_request(method, url_template, extra_headers, body_params, params, content_type)
        raw = await self._send(spec, detail=content_type.name)
        return StreamHandle(raw, max_read_errors=self.settings.max_read_errors)

    async def get(self, url: str, extra_headers: Mapping[str, str] | None = None) -> Response:
        spec = RequestSpec(method=HttpMethod.GET, url=url, headers=self._merge_headers(extra_headers))
        raw = await self._send(spec)
        return await extract_response(raw, url, spec.method.value, max_read_errors=self.settings.max_read_errors)

    def _post_spec(
        self,
        url: str,
        extra_headers: Mapping[str, str] | None,
        body: str | bytes,
        content_type: ContentType,
    ) -> RequestSpec:
        return RequestSpec(
            method=HttpMethod.POST,
            url=url,
            headers=self._merge_headers(extra_headers, content_type),
            body=body.encode("utf-8") if isinstance(body, str) else body,
            content_type=content_type,
        )

    async def post(
        self,
        url: str,
        extra_headers: Mapping[str, str] | None = None,
        body: str | bytes = "",
        content_type: ContentType = ContentType.JSON,
    ) -> Response:
        """POST a pre-serialized body."""
        spec = self._post_spec(url, extra_headers, body, content_type)
        raw = await self._send(spec, detail=content_type.name)
        return await extract_response(raw, url, spec.method.value, max_read_errors=self.settings.max_read_errors)

    async def post_stream(
        self,
        url: str,
        extra_headers: Mapping[str, str] | None = None,
        body: str | bytes = "",
        content_type: ContentType = ContentType.JSON,
    ) -> StreamHandle:
        """POST a pre-serialized body and return a StreamHandle for incremental reads."""
        spec = self._post_spec(url, extra_headers, body, content_type)
        raw = await self._send(spec, detail=content_type.name)
        return StreamHandle(raw, max_read_errors=self.settings.max_read_errors)


__all__ = ["HttpClient", "encode_body"]
