"""
Pipeline — the trust store generation run, end to end.

Domain layer — pure apart from the injected ports (decoder, codec, clock):

  TrustStoreConfig
    → require at least one chain            (fatal: no certificates supplied)
    → decoder.decode(i, chain) per chain    (advisory, fatal in strict mode)
    → assemble_keystore(chains, clock)      (advisory)
    → codec.write(keystore, password)       (fatal: generate / flush)
    → build_artifact(bytes)                 (base64 + id)
    → GenerationReport

Unlike a short-circuiting railway, advisory diagnostics accumulate and the
run continues; only fatal stages stop it. Every diagnostic collected is
returned, in order, in the report.
"""

from __future__ import annotations

import structlog
from railway import ErrorCode, FailureDescription
from railway.result import Result

from jks_truststore.assembler import assemble_keystore
from jks_truststore.domain.identity import build_artifact
from jks_truststore.domain.models import (
    DecodedChain,
    Diagnostic,
    GenerationReport,
    Stage,
    TrustStoreArtifact,
    TrustStoreConfig,
)
from jks_truststore.domain.ports import ChainDecoder, Clock, KeystoreCodec

log = structlog.get_logger()

NO_CERTIFICATES_MESSAGE = "no certificates supplied"


def _require_certificates(config: TrustStoreConfig) -> Result[TrustStoreConfig]:
    return Result.success(config).ensure(
        lambda c: len(c.certificates) > 0,
        ErrorCode.VALIDATION_ERROR,
        NO_CERTIFICATES_MESSAGE,
    )


def _decode_chains(config: TrustStoreConfig, decoder: ChainDecoder) -> list[DecodedChain]:
    return [decoder.decode(index, chain) for index, chain in enumerate(config.certificates)]


def _failed(diagnostics: list[Diagnostic]) -> GenerationReport:
    log.error(
        "pipeline.failed",
        fatal=[d.message for d in diagnostics if d.is_fatal],
        diagnostics=len(diagnostics),
    )
    return GenerationReport(artifact=None, diagnostics=tuple(diagnostics))


def _completed(artifact: TrustStoreArtifact, diagnostics: list[Diagnostic]) -> GenerationReport:
    log.info("pipeline.completed", id=artifact.id, diagnostics=len(diagnostics))
    return GenerationReport(artifact=artifact, diagnostics=tuple(diagnostics))


def generate_trust_store(
    config: TrustStoreConfig,
    decoder: ChainDecoder,
    codec: KeystoreCodec,
    clock: Clock,
) -> GenerationReport:
    """
    Run one complete trust store generation.

    Returns a GenerationReport whose artifact is None when the input was
    empty, strict decoding produced a fatal diagnostic, or serialization
    failed. Never raises for input or codec problems.
    """
    required = _require_certificates(config)
    if required.is_failure():
        return _failed([Diagnostic.fatal(Stage.INPUT, required.error())])

    diagnostics: list[Diagnostic] = []

    chains = _decode_chains(config, decoder)
    for chain in chains:
        diagnostics.extend(chain.diagnostics)
    if any(d.is_fatal for d in diagnostics):
        return _failed(diagnostics)

    keystore, assembly_diagnostics = assemble_keystore(chains, clock)
    diagnostics.extend(assembly_diagnostics)

    return (
        codec.write(keystore, config.password)
        .map(build_artifact)
        .either(
            on_success=lambda artifact: _completed(artifact, diagnostics),
            on_failure=lambda err: _failed(diagnostics + [_serialization_failure(err)]),
        )
    )


def _serialization_failure(err: FailureDescription) -> Diagnostic:
    return Diagnostic.fatal(Stage.SERIALIZATION, err)
