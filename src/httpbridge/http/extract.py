# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Turn a live transport response into a finalized Response."""

from __future__ import annotations

import codecs
import logging

import httpx

from ..config import MAX_READ_ERRORS
from .headers import HeaderStore
from .models import DEFAULT_REMOTE_ADDRESS, Response, is_error_status, is_success_status
from .transport import RawResponse

logger = logging.getLogger(__name__)

UNKNOWN_REASON = "UNKNOWN ERROR!"


def remote_address_of(raw: RawResponse) -> str:
    address = raw.remote_address
    if not address:
        logger.warning("Remote address not found for %s. Using default %s", raw.url, DEFAULT_REMOTE_ADDRESS)
        return DEFAULT_REMOTE_ADDRESS
    return address


async def release(raw: RawResponse) -> None:
    """Close the underlying connection; close failures are logged only."""
    try:
        await raw.aclose()
    except Exception as exc:  # noqa: BLE001
        logger.debug("Failed to release response for %s: %s", raw.url, exc)


def reason_of(status_code: int) -> str:
    """Canonical reason phrase for the status, ignoring whatever text the server sent."""
    return httpx.codes.get_reason_phrase(status_code) or UNKNOWN_REASON


async def read_body(raw: RawResponse, url: str, *, max_read_errors: int = MAX_READ_ERRORS) -> str:
    """
    Accumulate the body chunk by chunk.

    Read faults are retried until more than ``max_read_errors`` have occurred; after that the
    text gathered so far is returned. Invalid UTF-8 is replaced, never raised.
    """
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    parts: list[str] = []
    errors = 0
    while True:
        try:
            chunk = await raw.next_chunk()
        except Exception as exc:  # noqa: BLE001
            errors += 1
            if errors > max_read_errors:
                logger.error(
                    "Error reading body from %s (>%d errors). Returning partial body. Error: %s",
                    url,
                    max_read_errors,
                    exc,
                )
                break
            logger.error("Error reading body chunk from %s (attempt %d). Error: %s", url, errors, exc)
            continue
        if chunk is None:
            break
        parts.append(decoder.decode(chunk))
    parts.append(decoder.decode(b"", final=True))
    return "".join(parts)


async def extract_response(
    raw: RawResponse,
    url: str,
    method: str,
    *,
    max_read_errors: int = MAX_READ_ERRORS,
) -> Response:
    """Materialize ``raw`` into a Response. Never raises for body-level faults."""
    remote_address = remote_address_of(raw)
    headers = HeaderStore(raw.headers)
    status_code = raw.status_code

    try:
        if is_error_status(status_code):
            logger.error("Failed to get response from %s: %s Status Code: %s", method, url, status_code)
            body = f"ERROR: Failed to get response from {method}:{url} -Error: {reason_of(status_code)}"
        elif is_success_status(status_code):
            body = await read_body(raw, url, max_read_errors=max_read_errors)
        else:
            try:
                body = await raw.read_text()
            except Exception as exc:  # noqa: BLE001
                logger.error("Failed to get payload from %s:%s. Error: %s", method, url, exc)
                body = ""
    finally:
        await release(raw)

    return Response(
        status_code=status_code,
        headers=headers,
        body=body,
        remote_address=remote_address,
    )


__all__ = ["UNKNOWN_REASON", "extract_response", "read_body", "reason_of", "release", "remote_address_of"]
