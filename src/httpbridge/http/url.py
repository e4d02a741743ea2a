# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""URL template resolution."""

from __future__ import annotations

import logging
from collections.abc import Mapping

logger = logging.getLogger(__name__)


def placeholder(name: str) -> str:
    return "{" + name + "}"


def resolve_url(template: str, params: Mapping[str, str] | None = None) -> tuple[str, dict[str, str]]:
    """
    Substitute ``{name}`` placeholders in ``template`` from ``params``.

    Matching is exact (no case folding) and values are inserted verbatim. Every parameter
    without a matching placeholder is returned in the second element, to be used as a
    query parameter by the caller.

    Example:
      resolve_url("/api/{id}", {"id": "7", "x": "9"}) -> ("/api/7", {"x": "9"})
    """
    if not params:
        return template, {}

    url = template
    remaining: dict[str, str] = {}
    for key, value in params.items():
        marker = placeholder(key)
        if marker in url:
            url = url.replace(marker, str(value))
        else:
            logger.debug("Path parameter %r not in URL template; keeping it as a query parameter", key)
            remaining[key] = value
    return url, remaining


__all__ = ["placeholder", "resolve_url"]
