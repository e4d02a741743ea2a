# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""HTTP request/response data models used across httpbridge."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .headers import HeaderStore

DEFAULT_REMOTE_ADDRESS = "0.0.0.0"


class HttpMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"

    @classmethod
    def parse(cls, method: str) -> HttpMethod | None:
        """Case-insensitive lookup; returns None for unrecognized names."""
        try:
            return cls(str(method).strip().upper())
        except ValueError:
            return None


class ContentType(str, Enum):
    JSON = "application/json"
    TEXT = "application/text"

    @property
    def mime_type(self) -> str:
        return self.value


def is_error_status(status_code: int) -> bool:
    """True for client and server error statuses (4xx/5xx)."""
    return 400 <= status_code <= 599


def is_success_status(status_code: int) -> bool:
    return 200 <= status_code <= 299


@dataclass
class RequestSpec:
    """One outbound request, built per call and handed to the Transport."""

    method: HttpMethod
    url: str
    headers: HeaderStore = field(default_factory=HeaderStore)
    params: dict[str, str] = field(default_factory=dict)
    body: bytes | None = None
    content_type: ContentType | None = None


@dataclass
class Response:
    """Materialized HTTP response: a buffered body or a single streamed chunk."""

    status_code: int
    headers: HeaderStore = field(default_factory=HeaderStore)
    body: str = ""
    remote_address: str = DEFAULT_REMOTE_ADDRESS

    def is_error(self) -> bool:
        return is_error_status(self.status_code)

    def json(self) -> Any:
        return json.loads(self.body)


__all__ = [
    "ContentType",
    "DEFAULT_REMOTE_ADDRESS",
    "HttpMethod",
    "RequestSpec",
    "Response",
    "is_error_status",
    "is_success_status",
]
