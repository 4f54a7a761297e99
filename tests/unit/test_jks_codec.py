"""
Unit tests for the pyjks keystore codec adapter.

Writes real JKS bytes and reads them back through pyjks; generation and
flush failures are forced with mocks.
"""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import jks
import pytest
from railway import ErrorCode, ResultAssertions

from jks_truststore.adapters.jks_codec import PyjksKeystoreCodec
from jks_truststore.domain.models import Keystore, TrustedCertificateEntry
from jks_truststore.domain.ports import KeystoreCodec
from tests.conftest import FIXED_INSTANT, GeneratedCertificate

JKS_MAGIC = b"\xfe\xed\xfe\xed"


@pytest.fixture()
def codec() -> PyjksKeystoreCodec:
    return PyjksKeystoreCodec()


@pytest.fixture()
def keystore(root_ca: GeneratedCertificate, intermediate_ca: GeneratedCertificate) -> Keystore:
    return Keystore(
        {
            "0": TrustedCertificateEntry("0", FIXED_INSTANT, root_ca.der),
            "1": TrustedCertificateEntry("1", FIXED_INSTANT, intermediate_ca.der + root_ca.der),
        }
    )


class TestWrite:
    def test_satisfies_keystore_codec_protocol(self, codec: PyjksKeystoreCodec) -> None:
        assert isinstance(codec, KeystoreCodec)

    def test_produces_jks_bytes(self, codec: PyjksKeystoreCodec, keystore: Keystore) -> None:
        data = ResultAssertions.assert_success(codec.write(keystore, "changeit"))

        assert data[:4] == JKS_MAGIC

    def test_pyjks_sees_trusted_cert_entries(
        self, codec: PyjksKeystoreCodec, keystore: Keystore, intermediate_ca: GeneratedCertificate, root_ca: GeneratedCertificate
    ) -> None:
        """
        GIVEN a two-entry keystore
        WHEN written and loaded directly with pyjks
        THEN both aliases are trusted-certificate entries with the original content.
        """
        data = ResultAssertions.assert_success(codec.write(keystore, "changeit"))

        store = jks.KeyStore.loads(data, "changeit")

        assert sorted(store.certs) == ["0", "1"]
        assert store.private_keys == {}
        assert store.certs["1"].cert == intermediate_ca.der + root_ca.der
        assert store.certs["0"].type == "X.509"
        assert store.certs["0"].timestamp == int(FIXED_INSTANT.timestamp()) * 1000

    def test_same_keystore_and_time_gives_same_bytes(self, codec: PyjksKeystoreCodec, keystore: Keystore) -> None:
        first = ResultAssertions.assert_success(codec.write(keystore, "pw"))
        second = ResultAssertions.assert_success(codec.write(keystore, "pw"))

        assert first == second

    def test_empty_password_is_allowed(self, codec: PyjksKeystoreCodec, keystore: Keystore) -> None:
        ResultAssertions.assert_success(codec.write(keystore, ""))

    def test_generation_failure(self, codec: PyjksKeystoreCodec, keystore: Keystore) -> None:
        with patch.object(jks.KeyStore, "new", side_effect=RuntimeError("unsupported entry")):
            result = codec.write(keystore, "pw")

        error = ResultAssertions.assert_failure(result, ErrorCode.TECHNICAL_ERROR)
        assert error.message == "Failed to generate JKS: unsupported entry"

    def test_flush_failure(self, codec: PyjksKeystoreCodec, keystore: Keystore) -> None:
        """
        GIVEN an output buffer whose flush fails
        WHEN the keystore is written
        THEN the failure names the flush step, not generation.
        """
        writer = MagicMock()
        writer.write.return_value = 42
        writer.flush.side_effect = OSError("disk full")

        with patch("jks_truststore.adapters.jks_codec.io.BufferedWriter", return_value=writer):
            result = codec.write(keystore, "pw")

        error = ResultAssertions.assert_failure(result, ErrorCode.TECHNICAL_ERROR)
        assert error.message == "Failed to flush JKS: disk full"
        writer.write.assert_called_once()


class TestRead:
    def test_round_trip(self, codec: PyjksKeystoreCodec, keystore: Keystore) -> None:
        data = ResultAssertions.assert_success(codec.write(keystore, "changeit"))

        loaded = ResultAssertions.assert_success(codec.read(data, "changeit"))

        assert sorted(loaded) == sorted(keystore)
        for alias, entry in keystore.items():
            assert loaded[alias].content == entry.content
            assert loaded[alias].created_at == FIXED_INSTANT
            assert loaded[alias].certificate_type == "X.509"

    def test_wrong_password(self, codec: PyjksKeystoreCodec, keystore: Keystore) -> None:
        data = ResultAssertions.assert_success(codec.write(keystore, "changeit"))

        result = codec.read(data, "wrong")

        ResultAssertions.assert_failure(result, ErrorCode.TECHNICAL_ERROR)
        ResultAssertions.assert_failure_message_contains(result, "Failed to load JKS")

    def test_not_a_keystore(self, codec: PyjksKeystoreCodec) -> None:
        ResultAssertions.assert_failure_message_contains(codec.read(b"not a keystore", ""), "Failed to load JKS")
