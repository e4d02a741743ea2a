# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Caller-driven cursor over one streaming response."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from typing import Any

from ..config import MAX_READ_ERRORS
from .extract import reason_of, release, remote_address_of
from .headers import HeaderStore
from .models import Response, is_error_status
from .transport import RawResponse

logger = logging.getLogger(__name__)


class StreamHandle:
    """
    Pulls one chunk per ``read_next`` call from a single live response.

    A handle whose response carried a 4xx/5xx status keeps returning the same diagnostic
    Response. Otherwise each call yields the next chunk, an empty-body Response after a
    tolerated read fault, or None once the body is exhausted or more than
    ``max_read_errors`` faults have occurred. The handle owns the response exclusively and
    must be driven by one task at a time.
    """

    def __init__(self, raw: RawResponse, *, max_read_errors: int = MAX_READ_ERRORS):
        self._raw = raw
        self._status_code = raw.status_code
        self._initial_status_reason = reason_of(raw.status_code)
        self._initial_headers = HeaderStore(raw.headers)
        self._url = raw.url
        self._remote_address = remote_address_of(raw)
        self._max_read_errors = max_read_errors
        self._error_count = 0
        self._exhausted = False

    @property
    def status_code(self) -> int:
        return self._status_code

    @property
    def initial_status_reason(self) -> str:
        return self._initial_status_reason

    @property
    def initial_headers(self) -> HeaderStore:
        return self._initial_headers.copy()

    @property
    def url(self) -> str:
        return self._url

    @property
    def remote_address(self) -> str:
        return self._remote_address

    @property
    def error_count(self) -> int:
        return self._error_count

    @property
    def exhausted(self) -> bool:
        return self._exhausted

    def is_error(self) -> bool:
        return is_error_status(self._status_code)

    def _response(self, body: str, headers: HeaderStore) -> Response:
        return Response(
            status_code=self._status_code,
            headers=headers,
            body=body,
            remote_address=self._remote_address,
        )

    async def read_next(self) -> Response | None:
        if self.is_error():
            logger.error(
                "Failed to read stream response from %s. Status Code: %s (%s)",
                self._url,
                self._status_code,
                self._initial_status_reason,
            )
            await self.aclose()
            return self._response(
                f"ERROR: Failed to read stream response from {self._url}. Status: {self._initial_status_reason}.",
                self.initial_headers,
            )

        if self._exhausted:
            return None

        try:
            chunk = await self._raw.next_chunk()
        except Exception as exc:  # noqa: BLE001
            self._error_count += 1
            if self._error_count > self._max_read_errors:
                logger.error(
                    "Error reading stream from %s (>%d errors). Stopping. Error: %s",
                    self._url,
                    self._max_read_errors,
                    exc,
                )
                await self.aclose()
                return None
            logger.error("Error reading stream from %s. Returning empty body. Error: %s", self._url, exc)
            return self._response("", HeaderStore(self._raw.headers))

        if chunk is None:
            await self.aclose()
            return None
        return self._response(chunk.decode("utf-8", errors="replace"), HeaderStore(self._raw.headers))

    async def aclose(self) -> None:
        """Release the connection. Further reads return None (or the error Response)."""
        if not self._exhausted:
            self._exhausted = True
            await release(self._raw)

    async def __aenter__(self) -> StreamHandle:
        return self

    async def __aexit__(self, *_args: Any) -> None:
        await self.aclose()

    async def __aiter__(self) -> AsyncIterator[Response]:
        while True:
            response = await self.read_next()
            if response is None:
                return
            yield response
            if self.is_error():
                return

    def __repr__(self) -> str:
        return f"StreamHandle(url={self._url!r}, status_code={self._status_code}, error_count={self._error_count})"


__all__ = ["StreamHandle"]
