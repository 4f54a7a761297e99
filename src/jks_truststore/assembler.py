"""
Trust store assembler — one trusted-certificate entry per decoded chain.

Domain layer — pure apart from the injected Clock. Entries are named by
their chain position ("0", "1", …), stamped with the clock time and typed
X.509. An insertion failure is recorded as an advisory diagnostic and the
remaining chains are still assembled.
"""

from __future__ import annotations

from collections.abc import Sequence

import structlog
from railway import FailureDescription

from jks_truststore.domain.models import (
    DecodedChain,
    Diagnostic,
    Keystore,
    Stage,
    TrustedCertificateEntry,
)
from jks_truststore.domain.ports import Clock

log = structlog.get_logger()


def _insertion_failure(chain: DecodedChain, err: FailureDescription) -> Diagnostic:
    failure = FailureDescription(err.code, f"chain {chain.chain_index}: {err.message}", err.exception)
    return Diagnostic.advisory(Stage.ASSEMBLY, failure, chain_index=chain.chain_index)


def assemble_keystore(
    chains: Sequence[DecodedChain],
    clock: Clock,
    keystore: Keystore | None = None,
) -> tuple[Keystore, list[Diagnostic]]:
    """
    Build the in-memory keystore from decoded chains.

    A chain with no DER bytes still gets an (empty) entry. Returns the
    keystore together with the assembly diagnostics, in chain order.
    """
    keystore = keystore if keystore is not None else Keystore()
    diagnostics: list[Diagnostic] = []

    for chain in chains:
        entry = TrustedCertificateEntry(
            alias=chain.alias,
            created_at=clock.now(),
            content=chain.der,
        )
        keystore.add(entry).either(
            on_success=lambda added: log.debug(
                "assembler.entry_added", alias=added.alias, content_bytes=len(added.content)
            ),
            on_failure=lambda err, chain=chain: diagnostics.append(_insertion_failure(chain, err)),
        )

    log.info("assembler.complete", entries=len(keystore), failures=len(diagnostics))
    return keystore, diagnostics
