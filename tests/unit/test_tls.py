# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import logging
import ssl

import certifi
import pytest

from httpbridge.config import HttpSettings
from httpbridge.errors import CertificateLoadError
from httpbridge.http.adapters import StubTransport
from httpbridge.http.client import HttpClient
from httpbridge.tls import (
    DANGER_ACCEPT_INVALID_CERTS,
    DANGER_ACCEPT_INVALID_HOSTNAMES,
    TrustConfig,
    TrustConfigurator,
    list_cert_files,
    load_certificate,
    load_trust_config,
)

END_MARKER = "-----END CERTIFICATE-----"


@pytest.fixture()
def ca_pem() -> str:
    with open(certifi.where(), encoding="ascii") as fh:
        bundle = fh.read()
    begin = bundle.index("-----BEGIN CERTIFICATE-----")
    end = bundle.index(END_MARKER, begin) + len(END_MARKER)
    return bundle[begin:end] + "\n"


@pytest.fixture()
def cert_dir(tmp_path, ca_pem):
    (tmp_path / "root.pem").write_text(ca_pem)
    (tmp_path / "broken.pem").write_text("-----BEGIN CERTIFICATE-----\nnot base64\n" + END_MARKER + "\n")
    (tmp_path / "notes.txt").write_text(ca_pem)
    nested = tmp_path / "nested"
    nested.mkdir()
    (nested / "inner.pem").write_text(ca_pem)
    return tmp_path


def test_list_cert_files_is_non_recursive_and_filters_extension(cert_dir):
    files = list_cert_files(str(cert_dir))
    assert [f.rsplit("/", 1)[-1] for f in files] == ["broken.pem", "root.pem"]


def test_list_cert_files_missing_directory_is_empty(tmp_path, caplog):
    with caplog.at_level(logging.INFO, logger="httpbridge.tls"):
        assert list_cert_files(str(tmp_path / "absent")) == []
    assert "Assuming no local certificates" in caplog.text


def test_load_certificate_accepts_valid_and_rejects_invalid(cert_dir, ca_pem):
    assert load_certificate(str(cert_dir / "root.pem")) == ca_pem.encode("ascii")
    with pytest.raises(CertificateLoadError):
        load_certificate(str(cert_dir / "broken.pem"))
    with pytest.raises(CertificateLoadError):
        load_certificate(str(cert_dir / "missing.pem"))


def test_configurator_skips_bad_certificates(cert_dir, ca_pem, caplog):
    with caplog.at_level(logging.ERROR, logger="httpbridge.tls"):
        trust = TrustConfigurator(str(cert_dir)).build()
    assert trust.certificates == (ca_pem.encode("ascii"),)
    assert "broken.pem" in caplog.text
    assert trust.is_default is False


def test_configurator_ignores_unknown_flags(tmp_path, caplog):
    overrides = [(DANGER_ACCEPT_INVALID_CERTS, True), ("invalid_key", True)]
    with caplog.at_level(logging.WARNING, logger="httpbridge.tls"):
        trust = load_trust_config(str(tmp_path), overrides)
    assert trust.overrides == ((DANGER_ACCEPT_INVALID_CERTS, True),)
    assert trust.accept_invalid_certs is True
    assert trust.accept_invalid_hostnames is False
    assert "invalid_key" in caplog.text


def test_trust_config_last_override_wins():
    trust = TrustConfig(overrides=((DANGER_ACCEPT_INVALID_HOSTNAMES, True), (DANGER_ACCEPT_INVALID_HOSTNAMES, False)))
    assert trust.accept_invalid_hostnames is False
    assert trust.is_default is True


def test_build_ssl_context_loads_anchors(ca_pem):
    context = TrustConfig(certificates=(ca_pem.encode("ascii"),)).build_ssl_context()
    assert context.verify_mode == ssl.CERT_REQUIRED
    assert context.check_hostname is True
    assert context.cert_store_stats()["x509_ca"] >= 1


def test_client_builds_trust_from_settings(cert_dir, ca_pem, monkeypatch):
    captured = {}

    def fake_transport(settings, trust):
        captured["trust"] = trust
        return StubTransport()

    monkeypatch.setattr("httpbridge.http.client.create_default_transport", fake_transport)
    client = HttpClient(
        HttpSettings(cert_dir=str(cert_dir)),
        danger_accept_invalid=[(DANGER_ACCEPT_INVALID_HOSTNAMES, True)],
    )

    assert client.trust is captured["trust"]
    assert client.trust.certificates == (ca_pem.encode("ascii"),)
    assert client.trust.accept_invalid_hostnames is True


def test_client_cert_dir_from_environment(tmp_path, monkeypatch):
    monkeypatch.setenv("HTTPBRIDGE_LOCAL_PEM_CERTIFICATES", str(tmp_path))
    monkeypatch.setattr("httpbridge.http.client.create_default_transport", lambda settings, trust: StubTransport())
    client = HttpClient()
    assert client.settings.cert_dir == str(tmp_path)
    assert client.trust.certificates == ()
