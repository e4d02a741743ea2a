# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""HTTP client exports."""

from .adapters import StubRawResponse, StubTransport
from .client import HttpClient, encode_body
from .extract import extract_response
from .headers import HeaderStore, normalize_headers
from .models import ContentType, HttpMethod, RequestSpec, Response
from .stream import StreamHandle
from .transport import HttpxTransport, RawResponse, Transport, create_default_transport
from .url import resolve_url

__all__ = [
    "ContentType",
    "HeaderStore",
    "HttpClient",
    "HttpMethod",
    "HttpxTransport",
    "RawResponse",
    "RequestSpec",
    "Response",
    "StreamHandle",
    "StubRawResponse",
    "StubTransport",
    "Transport",
    "create_default_transport",
    "encode_body",
    "extract_response",
    "normalize_headers",
    "resolve_url",
]
