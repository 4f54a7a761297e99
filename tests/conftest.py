"""
Shared test fixtures and helpers for the jks-truststore test suite.

Certificates are generated on the fly with cryptography (self-signed EC
certificates), so every test works on real PEM and DER data.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID

from jks_truststore.adapters.clock import FixedClock

FIXED_INSTANT = datetime(2024, 3, 1, 12, 0, 0, tzinfo=UTC)


@dataclass(frozen=True, slots=True)
class GeneratedCertificate:
    """A certificate in both encodings, plus its key as an EC PRIVATE KEY block."""

    pem: str
    der: bytes
    key_pem: str
    key_der: bytes


def make_certificate(common_name: str) -> GeneratedCertificate:
    """Create a self-signed P-256 certificate for `common_name`."""
    key = ec.generate_private_key(ec.SECP256R1())
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])
    now = datetime.now(UTC)
    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - timedelta(days=1))
        .not_valid_after(now + timedelta(days=30))
        .sign(key, hashes.SHA256())
    )
    key_pem = key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.TraditionalOpenSSL,
        serialization.NoEncryption(),
    )
    key_der = key.private_bytes(
        serialization.Encoding.DER,
        serialization.PrivateFormat.TraditionalOpenSSL,
        serialization.NoEncryption(),
    )
    return GeneratedCertificate(
        pem=cert.public_bytes(serialization.Encoding.PEM).decode("ascii"),
        der=cert.public_bytes(serialization.Encoding.DER),
        key_pem=key_pem.decode("ascii"),
        key_der=key_der,
    )


def make_pkcs8_key() -> tuple[str, bytes]:
    """A "PRIVATE KEY" block (PEM, DER) — a type the decoder does not accept by default."""
    key = ec.generate_private_key(ec.SECP256R1())
    pem = key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    )
    der = key.private_bytes(
        serialization.Encoding.DER,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    )
    return pem.decode("ascii"), der


@pytest.fixture(scope="session")
def root_ca() -> GeneratedCertificate:
    return make_certificate("Test Root CA")


@pytest.fixture(scope="session")
def intermediate_ca() -> GeneratedCertificate:
    return make_certificate("Test Intermediate CA")


@pytest.fixture(scope="session")
def other_ca() -> GeneratedCertificate:
    return make_certificate("Other Root CA")


@pytest.fixture()
def fixed_clock() -> FixedClock:
    return FixedClock(FIXED_INSTANT)
