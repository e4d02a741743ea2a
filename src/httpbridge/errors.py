# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Error taxonomy and exception helpers."""

from __future__ import annotations

import socket
import ssl as ssl_module
from enum import Enum

import httpx


class ErrorCategory(str, Enum):
    TIMEOUT = "TIMEOUT"
    SSL_ERROR = "SSL_ERROR"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    DNS_ERROR = "DNS_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    NONE = "NONE"


class HttpBridgeError(Exception):
    """Base class for errors raised by httpbridge."""


class UnsupportedMethodError(HttpBridgeError):
    """The HTTP method is not one of GET, POST, PUT, DELETE or PATCH."""

    def __init__(self, method: str):
        self.method = method
        super().__init__(f"Unsupported HTTP method: {method}")


class TransportSendError(HttpBridgeError):
    """The transport could not deliver the request (DNS, connect, TLS, timeout)."""

    def __init__(self, method: str, url: str, cause: BaseException, *, detail: str | None = None):
        self.method = method
        self.url = url
        self.cause = cause
        self.category = categorize_exception(cause)
        self.reason = error_category_to_reason(self.category)
        target = f"{method} ({detail})" if detail else method
        super().__init__(f"Failed to get response from {target}: {url}. Error: {cause}")


class CertificateLoadError(HttpBridgeError):
    """A local PEM file could not be read or parsed."""

    def __init__(self, path: str, cause: BaseException | str):
        self.path = path
        self.cause = cause
        super().__init__(f"Could not read PEM file at path: {path}. Error: {cause}")


def _is_dns_failure(exc: BaseException) -> bool:
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        if isinstance(current, (socket.gaierror, socket.herror)):
            return True
        seen.add(id(current))
        current = current.__cause__ or current.__context__
    return False


def categorize_exception(exc: BaseException) -> ErrorCategory:
    """
    Map Python/httpx exceptions to ErrorCategory.
    """
    if isinstance(exc, httpx.TimeoutException):
        return ErrorCategory.TIMEOUT

    if _is_dns_failure(exc):
        return ErrorCategory.DNS_ERROR

    if isinstance(exc, (ssl_module.SSLError, ssl_module.CertificateError)):
        return ErrorCategory.SSL_ERROR

    if isinstance(exc, httpx.ConnectError) and "certificate" in str(exc).lower():
        return ErrorCategory.SSL_ERROR

    if isinstance(exc, (httpx.ConnectError, httpx.RemoteProtocolError, httpx.NetworkError, httpx.ProxyError)):
        return ErrorCategory.CONNECTION_ERROR

    if isinstance(exc, (ConnectionError, ConnectionRefusedError, ConnectionResetError)):
        return ErrorCategory.CONNECTION_ERROR

    return ErrorCategory.UNKNOWN_ERROR


def error_category_to_reason(category: ErrorCategory | None) -> str:
    """User-facing reason string."""
    mapping = {
        ErrorCategory.TIMEOUT: "Network timeout while sending request",
        ErrorCategory.SSL_ERROR: "TLS/certificate issue",
        ErrorCategory.CONNECTION_ERROR: "Network connectivity issue",
        ErrorCategory.DNS_ERROR: "DNS resolution failure",
        ErrorCategory.UNKNOWN_ERROR: "Network error while sending request",
        ErrorCategory.NONE: "",
        None: "",
    }
    return mapping.get(category, "Request failed due to network error")


__all__ = [
    "CertificateLoadError",
    "ErrorCategory",
    "HttpBridgeError",
    "TransportSendError",
    "UnsupportedMethodError",
    "categorize_exception",
    "error_category_to_reason",
]
