# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""In-memory Transport implementations for tests and offline use."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from .models import RequestSpec

ChunkSource = Iterable[bytes | BaseException]


class StubRawResponse:
    """
    Scripted RawResponse.

    ``chunks`` is replayed in order; an exception instance in the sequence is raised by the
    corresponding ``next_chunk`` call instead of being returned.
    """

    def __init__(
        self,
        status_code: int = 200,
        chunks: ChunkSource = (),
        *,
        headers: Mapping[str, str] | None = None,
        url: str = "http://stub.invalid/",
        remote_address: str | None = "127.0.0.1",
    ):
        self.status_code = status_code
        self.headers = dict(headers or {})
        self.url = url
        self.remote_address = remote_address
        self._chunks = list(chunks)
        self.reads = 0
        self.closed = False

    async def next_chunk(self) -> bytes | None:
        self.reads += 1
        if not self._chunks:
            return None
        item = self._chunks.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item

    async def read_text(self) -> str:
        data = bytearray()
        for item in self._chunks:
            if isinstance(item, BaseException):
                raise item
            data.extend(item)
        self._chunks = []
        return bytes(data).decode("utf-8", errors="replace")

    async def aclose(self) -> None:
        self.closed = True


class StubTransport:
    """Deterministic, programmable Transport keyed by exact URL."""

    def __init__(self, responses: dict[str, StubRawResponse | BaseException] | None = None):
        self._responses = responses or {}
        self.requests: list[RequestSpec] = []
        self.closed = False

    def add(self, url: str, response: StubRawResponse | BaseException) -> None:
        self._responses[url] = response

    async def send(self, spec: RequestSpec) -> StubRawResponse:
        self.requests.append(spec)
        response = self._responses.get(spec.url)
        if response is None:
            raise ConnectionError(f"No stubbed response configured for {spec.url}")
        if isinstance(response, BaseException):
            raise response
        return response

    async def aclose(self) -> None:
        self.closed = True


__all__ = ["StubRawResponse", "StubTransport"]
