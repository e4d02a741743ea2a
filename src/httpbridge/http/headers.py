# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Header storage and normalization utilities.

HTTP header field names are case-insensitive (RFC 9110). HeaderStore keeps the casing of the
most recent write for display while matching keys case-insensitively, so default headers and
per-call overrides merge the way the wire treats them.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping, MutableMapping
from typing import Any


def _coerce_headers_mapping(headers: Any) -> Mapping[object, object] | None:
    """
    Best-effort coercion of "dict-like" header containers into a Mapping.

    Accepts plain dicts, HeaderStore, httpx.Headers and iterable-of-pairs.
    """
    if not headers:
        return None
    if isinstance(headers, Mapping):
        return headers

    items = getattr(headers, "items", None)
    if callable(items):
        try:
            return dict(items())
        except (TypeError, ValueError):
            pass

    try:
        return dict(headers)
    except (TypeError, ValueError):
        return None


class HeaderStore(MutableMapping[str, str]):
    """Ordered header container with case-insensitive keys."""

    def __init__(self, headers: Any = None):
        self._items: dict[str, tuple[str, str]] = {}
        if headers:
            self.merge(headers)

    def __getitem__(self, name: str) -> str:
        return self._items[name.lower()][1]

    def __setitem__(self, name: str, value: str) -> None:
        key = str(name).strip()
        if not key:
            raise ValueError("Header name must not be empty")
        self._items[key.lower()] = (key, "" if value is None else str(value))

    def __delitem__(self, name: str) -> None:
        del self._items[name.lower()]

    def __iter__(self) -> Iterator[str]:
        return (original for original, _ in self._items.values())

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._items

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Mapping):
            return normalize_headers(self) == normalize_headers(other)
        return NotImplemented

    def __repr__(self) -> str:
        return f"HeaderStore({self.to_dict()!r})"

    def merge(self, headers: Any) -> HeaderStore:
        """Overwrite entries with those from ``headers``; returns self."""
        coerced = _coerce_headers_mapping(headers)
        if coerced:
            for key, value in coerced.items():
                if key is None:
                    continue
                self[str(key)] = value  # type: ignore[assignment]
        return self

    def copy(self) -> HeaderStore:
        clone = HeaderStore()
        clone._items = dict(self._items)
        return clone

    def to_dict(self) -> dict[str, str]:
        return {original: value for original, value in self._items.values()}


def normalize_headers(headers: Mapping[object, object] | None) -> dict[str, str]:
    """Return a lowercase-keyed copy of a header mapping."""
    coerced = _coerce_headers_mapping(headers)
    if not coerced:
        return {}
    out: dict[str, str] = {}
    for key, value in coerced.items():
        if key is None:
            continue
        name = str(key).strip().lower()
        if not name:
            continue
        out[name] = "" if value is None else str(value)
    return out


__all__ = ["HeaderStore", "normalize_headers"]
