"""
Ports — Protocol-based interfaces for infrastructure adapters.

These define WHAT the pipeline needs without specifying HOW:

  Domain ← Ports (protocols) ← Adapters (implementations)

Adapters satisfy a port structurally by implementing its methods.

  1. ChainDecoder  → PEM chain string → DecodedChain
  2. Clock         → creation time for keystore entries
  3. KeystoreCodec → Keystore + password ↔ JKS bytes
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol, runtime_checkable

from railway.result import Result

from jks_truststore.domain.models import DecodedChain, Keystore


@runtime_checkable
class ChainDecoder(Protocol):
    """
    Port: split one PEM chain into blocks and concatenate their DER payloads.

    Never fails as a whole; problems inside the chain are reported as
    diagnostics on the returned DecodedChain.
    """

    def decode(self, chain_index: int, chain: str) -> DecodedChain: ...


@runtime_checkable
class Clock(Protocol):
    """Port: the wall-clock time recorded on each keystore entry."""

    def now(self) -> datetime: ...


@runtime_checkable
class KeystoreCodec(Protocol):
    """
    Port: the binary keystore format.

    write() produces the complete, flushed byte stream for a keystore
    protected by `password`; read() loads such a stream back, verifying its
    integrity with the same password.
    """

    def write(self, keystore: Keystore, password: str) -> Result[bytes]: ...

    def read(self, data: bytes, password: str) -> Result[Keystore]: ...
