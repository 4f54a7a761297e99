"""
Unit tests for domain models.

Covers Diagnostic helpers, the Keystore alias invariant and the
GenerationReport summary properties.
"""

from __future__ import annotations

import dataclasses

import pytest
from railway import ErrorCode, FailureDescription, ResultAssertions

from jks_truststore.domain.models import (
    X509_CERTIFICATE_TYPE,
    DecodedChain,
    Diagnostic,
    GenerationReport,
    Keystore,
    Severity,
    Stage,
    TrustedCertificateEntry,
    TrustStoreArtifact,
    TrustStoreConfig,
)
from tests.conftest import FIXED_INSTANT


def _entry(alias: str, content: bytes = b"\x30\x00") -> TrustedCertificateEntry:
    return TrustedCertificateEntry(alias=alias, created_at=FIXED_INSTANT, content=content)


class TestDiagnostic:
    def test_advisory_factory(self) -> None:
        failure = FailureDescription(ErrorCode.VALIDATION_ERROR, "chain 0, certificate 1: failed to load PEM")

        diagnostic = Diagnostic.advisory(Stage.DECODE, failure, chain_index=0, block_index=1)

        assert diagnostic.severity is Severity.ADVISORY
        assert not diagnostic.is_fatal
        assert diagnostic.code is ErrorCode.VALIDATION_ERROR
        assert diagnostic.message == "chain 0, certificate 1: failed to load PEM"
        assert (diagnostic.chain_index, diagnostic.block_index) == (0, 1)

    def test_fatal_factory_without_position(self) -> None:
        failure = FailureDescription(ErrorCode.TECHNICAL_ERROR, "Failed to generate JKS: boom")

        diagnostic = Diagnostic.fatal(Stage.SERIALIZATION, failure)

        assert diagnostic.is_fatal
        assert diagnostic.chain_index is None
        assert diagnostic.block_index is None

    def test_is_immutable(self) -> None:
        diagnostic = Diagnostic.fatal(Stage.INPUT, FailureDescription(ErrorCode.VALIDATION_ERROR, "x"))

        with pytest.raises(dataclasses.FrozenInstanceError):
            diagnostic.severity = Severity.ADVISORY  # type: ignore[misc]


class TestTrustStoreConfig:
    def test_password_defaults_to_empty(self) -> None:
        assert TrustStoreConfig(certificates=("pem",)).password == ""

    def test_password_is_not_in_repr(self) -> None:
        assert "s3cret" not in repr(TrustStoreConfig(certificates=(), password="s3cret"))


class TestDecodedChain:
    def test_alias_is_decimal_index(self) -> None:
        assert DecodedChain(chain_index=12).alias == "12"

    def test_defaults_are_empty(self) -> None:
        chain = DecodedChain(chain_index=0)

        assert chain.der == b""
        assert chain.blocks == ()
        assert chain.diagnostics == ()


class TestKeystore:
    """
    GIVEN an in-memory keystore
    WHEN entries are added
    THEN aliases stay unique and insertion order is kept.
    """

    def test_add_returns_entry(self) -> None:
        keystore = Keystore()

        entry = ResultAssertions.assert_success(keystore.add(_entry("0")))

        assert entry.alias == "0"
        assert entry.certificate_type == X509_CERTIFICATE_TYPE
        assert len(keystore) == 1

    def test_duplicate_alias_is_refused(self) -> None:
        keystore = Keystore()
        keystore.add(_entry("0", b"first"))

        error = ResultAssertions.assert_failure(keystore.add(_entry("0", b"second")), ErrorCode.BUSINESS_RULE_ERROR)

        assert error.message == "duplicate alias '0'"
        assert keystore["0"].content == b"first"

    def test_insertion_order_is_preserved(self) -> None:
        keystore = Keystore()
        for alias in ("0", "1", "2"):
            keystore.add(_entry(alias))

        assert list(keystore) == ["0", "1", "2"]

    def test_is_not_assignable_by_key(self) -> None:
        keystore = Keystore({"0": _entry("0")})

        with pytest.raises(TypeError):
            keystore["1"] = _entry("1")  # type: ignore[index]

    def test_repr_lists_aliases(self) -> None:
        assert repr(Keystore({"0": _entry("0")})) == "Keystore(aliases=['0'])"


class TestGenerationReport:
    _artifact = TrustStoreArtifact(store_bytes=b"\xfe\xed", jks="/u0=", id="0" * 40)

    def test_succeeded_with_artifact_and_advisories(self) -> None:
        advisory = Diagnostic.advisory(Stage.DECODE, FailureDescription(ErrorCode.VALIDATION_ERROR, "warn"))

        report = GenerationReport(artifact=self._artifact, diagnostics=(advisory,))

        assert report.succeeded
        assert not report.has_fatal
        assert report.messages == ["warn"]

    def test_fatal_diagnostic_means_failure(self) -> None:
        fatal = Diagnostic.fatal(Stage.INPUT, FailureDescription(ErrorCode.VALIDATION_ERROR, "no certificates supplied"))

        report = GenerationReport(diagnostics=(fatal,))

        assert report.has_fatal
        assert not report.succeeded
        assert report.artifact is None
