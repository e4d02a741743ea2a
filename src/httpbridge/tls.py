# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Local trust anchors and TLS validation overrides.

Certificates are read from a directory of ``.pem`` files (non-recursive) and added on top of
the system trust store. Danger overrides switch off hostname or certificate verification for
controlled environments such as self-signed test servers.
"""

from __future__ import annotations

import logging
import os
import ssl
from collections.abc import Iterable
from dataclasses import dataclass

from .config import DEFAULT_CERT_DIR
from .errors import CertificateLoadError

logger = logging.getLogger(__name__)

DANGER_ACCEPT_INVALID_HOSTNAMES = "danger_accept_invalid_hostnames"
DANGER_ACCEPT_INVALID_CERTS = "danger_accept_invalid_certs"
DANGER_FLAGS = frozenset({DANGER_ACCEPT_INVALID_HOSTNAMES, DANGER_ACCEPT_INVALID_CERTS})

PEM_EXTENSION = ".pem"

DangerOverrides = Iterable[tuple[str, bool]]


@dataclass(frozen=True)
class TrustConfig:
    """Loaded trust anchors plus the danger overrides, fixed at client construction."""

    certificates: tuple[bytes, ...] = ()
    overrides: tuple[tuple[str, bool], ...] = ()

    @property
    def accept_invalid_hostnames(self) -> bool:
        return self._flag(DANGER_ACCEPT_INVALID_HOSTNAMES)

    @property
    def accept_invalid_certs(self) -> bool:
        return self._flag(DANGER_ACCEPT_INVALID_CERTS)

    @property
    def is_default(self) -> bool:
        """True when nothing differs from the stock verification behaviour."""
        return not self.certificates and not self.accept_invalid_hostnames and not self.accept_invalid_certs

    def _flag(self, name: str) -> bool:
        # Last write wins, like repeated builder calls.
        value = False
        for flag, enabled in self.overrides:
            if flag == name:
                value = enabled
        return value

    def build_ssl_context(self) -> ssl.SSLContext:
        """System trust store + local anchors, with overrides applied."""
        context = ssl.create_default_context()
        for pem in self.certificates:
            context.load_verify_locations(cadata=pem.decode("ascii"))
        if self.accept_invalid_hostnames or self.accept_invalid_certs:
            context.check_hostname = False
        if self.accept_invalid_certs:
            context.verify_mode = ssl.CERT_NONE
        return context


def list_cert_files(cert_dir: str) -> list[str]:
    """Return the ``.pem`` files directly inside ``cert_dir`` (sorted)."""
    try:
        entries = sorted(os.listdir(cert_dir))
    except OSError:
        logger.info("Could not read directory %r. Assuming no local certificates (PEM files)", cert_dir)
        return []

    files = []
    for name in entries:
        path = os.path.join(cert_dir, name)
        if os.path.isfile(path) and name.endswith(PEM_EXTENSION):
            files.append(path)
    return files


def load_certificate(path: str) -> bytes:
    """Read one PEM file and check that it parses as a certificate."""
    try:
        with open(path, "rb") as fh:
            data = fh.read()
    except OSError as exc:
        raise CertificateLoadError(path, exc) from exc

    try:
        text = data.decode("ascii")
        ssl.create_default_context().load_verify_locations(cadata=text)
    except (UnicodeDecodeError, ssl.SSLError, ValueError) as exc:
        raise CertificateLoadError(path, exc) from exc
    return data


class TrustConfigurator:
    """Builds a TrustConfig from a certificate directory and a danger override list."""

    def __init__(self, cert_dir: str = DEFAULT_CERT_DIR):
        self.cert_dir = cert_dir

    def load_certificates(self) -> tuple[bytes, ...]:
        certificates = []
        for path in list_cert_files(self.cert_dir):
            try:
                certificates.append(load_certificate(path))
            except CertificateLoadError as exc:
                logger.error("%s", exc)
                continue
            logger.info("Loaded local certificate %s", path)
        return tuple(certificates)

    def build(self, danger_accept_invalid: DangerOverrides | None = None) -> TrustConfig:
        overrides = []
        for name, enabled in danger_accept_invalid or ():
            if name not in DANGER_FLAGS:
                logger.warning("Invalid danger accept invalid key %s; ignoring it", name)
                continue
            overrides.append((name, bool(enabled)))
        return TrustConfig(certificates=self.load_certificates(), overrides=tuple(overrides))


def load_trust_config(cert_dir: str = DEFAULT_CERT_DIR, danger_accept_invalid: DangerOverrides | None = None) -> TrustConfig:
    return TrustConfigurator(cert_dir).build(danger_accept_invalid)


__all__ = [
    "DANGER_ACCEPT_INVALID_CERTS",
    "DANGER_ACCEPT_INVALID_HOSTNAMES",
    "TrustConfig",
    "TrustConfigurator",
    "list_cert_files",
    "load_certificate",
    "load_trust_config",
]
