# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Configuration helpers for httpbridge."""

import os
from dataclasses import dataclass

from .version import __version__

DEFAULT_USER_AGENT = f"Mozilla/5.0 (compatible; httpbridge/{__version__})"
DEFAULT_CERT_DIR = "certs"
CERT_DIR_ENV_VAR = "HTTPBRIDGE_LOCAL_PEM_CERTIFICATES"

# Chunk read failures tolerated per response before the body is cut short.
MAX_READ_ERRORS = 3


def _float_env(name: str, default: float) -> float:
    try:
        value = os.getenv(name)
        return float(value) if value is not None else default
    except ValueError:
        return default


def _int_env(name: str, default: int) -> int:
    try:
        value = os.getenv(name)
        return int(value) if value is not None else default
    except ValueError:
        return default


def _bool_env(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class HttpSettings:
    """HTTP client defaults."""

    timeout: float = 30.0
    user_agent: str = DEFAULT_USER_AGENT
    allow_redirects: bool = True
    verify_ssl: bool = True
    # Accepted for configuration parity only: the httpx backend always uses the system resolver.
    use_alternate_dns: bool = False
    use_cookies: bool = True
    cert_dir: str = DEFAULT_CERT_DIR
    max_read_errors: int = MAX_READ_ERRORS

    @classmethod
    def from_env(cls) -> "HttpSettings":
        """Create settings from environment variables (evaluated at call time)."""
        max_read_errors = _int_env("HTTPBRIDGE_MAX_READ_ERRORS", cls.max_read_errors)
        if max_read_errors < 0:
            max_read_errors = cls.max_read_errors
        cert_dir = os.getenv(CERT_DIR_ENV_VAR) or cls.cert_dir
        return cls(
            timeout=_float_env("HTTPBRIDGE_HTTP_TIMEOUT", cls.timeout),
            user_agent=os.getenv("HTTPBRIDGE_USER_AGENT", cls.user_agent),
            allow_redirects=_bool_env("HTTPBRIDGE_HTTP_REDIRECTS", cls.allow_redirects),
            verify_ssl=_bool_env("HTTPBRIDGE_HTTP_VERIFY_SSL", cls.verify_ssl),
            use_alternate_dns=_bool_env("HTTPBRIDGE_ALTERNATE_DNS", cls.use_alternate_dns),
            use_cookies=_bool_env("HTTPBRIDGE_USE_COOKIES", cls.use_cookies),
            cert_dir=cert_dir,
            max_read_errors=max_read_errors,
        )


def load_http_settings() -> HttpSettings:
    """Load HTTP settings from environment with sensible defaults."""
    return HttpSettings.from_env()
