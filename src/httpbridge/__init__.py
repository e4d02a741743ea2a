# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
httpbridge package entrypoint.

An asynchronous HTTP client that resolves templated URLs, encodes parameters as query strings
or JSON/text bodies, and reads response bodies with a bounded read-error budget, either fully
buffered or chunk by chunk. The network engine sits behind an injectable Transport; local PEM
trust anchors and TLS validation overrides are applied when the default httpx transport is built.
"""

from .config import MAX_READ_ERRORS, HttpSettings, load_http_settings
from .errors import (
    CertificateLoadError,
    ErrorCategory,
    HttpBridgeError,
    TransportSendError,
    UnsupportedMethodError,
)
from .http import (
    ContentType,
    HeaderStore,
    HttpClient,
    HttpxTransport,
    Response,
    StreamHandle,
    Transport,
    resolve_url,
)
from .log import setup_logging
from .tls import (
    DANGER_ACCEPT_INVALID_CERTS,
    DANGER_ACCEPT_INVALID_HOSTNAMES,
    TrustConfig,
    TrustConfigurator,
)
from .version import __version__

__all__ = [
    "CertificateLoadError",
    "ContentType",
    "DANGER_ACCEPT_INVALID_CERTS",
    "DANGER_ACCEPT_INVALID_HOSTNAMES",
    "ErrorCategory",
    "HeaderStore",
    "HttpBridgeError",
    "HttpClient",
    "HttpSettings",
    "HttpxTransport",
    "MAX_READ_ERRORS",
    "Response",
    "StreamHandle",
    "Transport",
    "TransportSendError",
    "TrustConfig",
    "TrustConfigurator",
    "UnsupportedMethodError",
    "load_http_settings",
    "resolve_url",
    "setup_logging",
    "__version__",
]
