"""
JKS codec adapter — drives pyjks to write and read Java KeyStore bytes.

Adapter layer — implements the KeystoreCodec port using pyjks
(`jks.KeyStore.new` / `saves` / `loads`). The binary format itself is not
implemented here.

Write path:
  Keystore (domain)
    → jks.TrustedCertEntry per alias (timestamp in ms since the epoch)
    → jks.KeyStore.new("jks", entries).saves(password)
    → BufferedWriter over BytesIO, flushed explicitly
    → bytes

A failure while generating the store and a failure while flushing the
buffer are reported separately. Both abort the generation.
"""

from __future__ import annotations

import io
from datetime import UTC, datetime

import jks
import structlog
from railway import ErrorCode, FailureDescription
from railway.result import Result

from jks_truststore.domain.models import Keystore, TrustedCertificateEntry

log = structlog.get_logger()

STORE_TYPE = "jks"


def _to_millis(created_at: datetime) -> int:
    # Whole seconds, as keytool and pyjks record them.
    return int(created_at.timestamp()) * 1000


def _to_jks_entry(entry: TrustedCertificateEntry) -> jks.TrustedCertEntry:
    return jks.TrustedCertEntry(
        alias=entry.alias,
        timestamp=_to_millis(entry.created_at),
        type=entry.certificate_type,
        cert=entry.content,
        store_type=STORE_TYPE,
    )


def _from_jks_entry(alias: str, entry: jks.TrustedCertEntry) -> TrustedCertificateEntry:
    return TrustedCertificateEntry(
        alias=alias,
        created_at=datetime.fromtimestamp(entry.timestamp / 1000, UTC),
        content=entry.cert,
        certificate_type=entry.type,
    )


class PyjksKeystoreCodec:
    """
    Serialize a domain Keystore to JKS bytes and back.

    Implements the KeystoreCodec port.
    All exceptions are caught at this adapter boundary via Result.from_computation().
    """

    def write(self, keystore: Keystore, password: str) -> Result[bytes]:
        """
        Produce the password-protected JKS byte stream for `keystore`.

        Returns Result.failure(TECHNICAL_ERROR, "Failed to generate JKS: …")
        when pyjks rejects the store, or "Failed to flush JKS: …" when the
        output buffer cannot be flushed.
        """
        buffer = io.BytesIO()
        writer = io.BufferedWriter(buffer)
        return (
            Result.from_computation(
                lambda: self._store(keystore, password, writer),
                ErrorCode.TECHNICAL_ERROR,
                "Failed to generate JKS",
            )
            .map_failure(FailureDescription.with_cause)
            .flat_map(lambda _written: self._flush(writer, buffer))
            .peek(lambda data: log.info("codec.stored", entries=len(keystore), store_bytes=len(data)))
        )

    def read(self, data: bytes, password: str) -> Result[Keystore]:
        """Load JKS bytes, verifying the store signature with `password`."""
        return Result.from_computation(
            lambda: self._load(data, password),
            ErrorCode.TECHNICAL_ERROR,
            "Failed to load JKS",
        ).map_failure(FailureDescription.with_cause)

    def _store(self, keystore: Keystore, password: str, writer: io.BufferedWriter) -> int:
        entries = [_to_jks_entry(entry) for entry in keystore.values()]
        store = jks.KeyStore.new(STORE_TYPE, entries)
        return writer.write(store.saves(password))

    def _flush(self, writer: io.BufferedWriter, buffer: io.BytesIO) -> Result[bytes]:
        def flush() -> bytes:
            writer.flush()
            return buffer.getvalue()

        return Result.from_computation(
            flush,
            ErrorCode.TECHNICAL_ERROR,
            "Failed to flush JKS",
        ).map_failure(FailureDescription.with_cause)

    def _load(self, data: bytes, password: str) -> Keystore:
        store = jks.KeyStore.loads(data, password, try_decrypt_keys=False)
        if store.private_keys or store.secret_keys:
            raise ValueError("keystore holds key entries; only trusted certificates are supported")
        return Keystore({alias: _from_jks_entry(alias, entry) for alias, entry in store.certs.items()})
