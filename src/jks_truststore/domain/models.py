"""
Domain models — value objects for one trust store generation run.

Configuration, decoded chains, keystore entries, the final artifact and the
diagnostics collected along the way. Everything except the Keystore (which
accumulates entries while a run assembles it) is a frozen dataclass.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, unique

from railway import ErrorCode, FailureDescription
from railway.result import Result

X509_CERTIFICATE_TYPE = "X.509"


@unique
class Stage(Enum):
    """Pipeline stage a diagnostic originates from."""

    INPUT = "input"
    DECODE = "decode"
    ASSEMBLY = "assembly"
    SERIALIZATION = "serialization"
    PERSISTENCE = "persistence"


@unique
class Severity(Enum):
    """Advisory diagnostics are reported alongside an artifact; fatal ones replace it."""

    ADVISORY = "advisory"
    FATAL = "fatal"


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """
    One structured error collected during a generation run.

    Carries the chain and block position where applicable, so a caller
    can localize the problem in the original certificates list.
    """

    stage: Stage
    severity: Severity
    failure: FailureDescription
    chain_index: int | None = None
    block_index: int | None = None

    @property
    def code(self) -> ErrorCode:
        return self.failure.code

    @property
    def message(self) -> str:
        return self.failure.message

    @property
    def is_fatal(self) -> bool:
        return self.severity is Severity.FATAL

    @staticmethod
    def advisory(
        stage: Stage,
        failure: FailureDescription,
        chain_index: int | None = None,
        block_index: int | None = None,
    ) -> Diagnostic:
        return Diagnostic(stage, Severity.ADVISORY, failure, chain_index, block_index)

    @staticmethod
    def fatal(
        stage: Stage,
        failure: FailureDescription,
        chain_index: int | None = None,
        block_index: int | None = None,
    ) -> Diagnostic:
        return Diagnostic(stage, Severity.FATAL, failure, chain_index, block_index)


@dataclass(frozen=True, slots=True)
class TrustStoreConfig:
    """
    Input of one generation: ordered PEM chains plus the store password.

    Each chain is one PEM document that may hold several concatenated blocks
    (a certificate and its intermediates). Changing either field means
    generating a new artifact.
    """

    certificates: tuple[str, ...]
    password: str = field(default="", repr=False)


@dataclass(frozen=True, slots=True)
class PemBlock:
    """A single decoded PEM block: its type label and DER payload."""

    block_type: str
    payload: bytes = field(repr=False)


@dataclass(frozen=True, slots=True)
class DecodedChain:
    """
    Result of decoding one chain string.

    `der` is the in-order concatenation of the payloads of every block the
    decoder included; `blocks` lists exactly those blocks.
    """

    chain_index: int
    der: bytes = field(default=b"", repr=False)
    blocks: tuple[PemBlock, ...] = ()
    diagnostics: tuple[Diagnostic, ...] = ()

    @property
    def alias(self) -> str:
        return str(self.chain_index)


@dataclass(frozen=True, slots=True)
class TrustedCertificateEntry:
    """A named trusted-certificate record inside the keystore."""

    alias: str
    created_at: datetime
    content: bytes = field(repr=False)
    certificate_type: str = X509_CERTIFICATE_TYPE


class Keystore(Mapping[str, TrustedCertificateEntry]):
    """
    In-memory keystore: alias → trusted-certificate entry, in insertion order.

    Owned by a single generation run and handed whole to the codec.
    """

    def __init__(self, entries: Mapping[str, TrustedCertificateEntry] | None = None) -> None:
        self._entries: dict[str, TrustedCertificateEntry] = dict(entries or {})

    def add(self, entry: TrustedCertificateEntry) -> Result[TrustedCertificateEntry]:
        """Insert an entry; a second entry under the same alias is refused."""
        if entry.alias in self._entries:
            return Result.failure(
                ErrorCode.BUSINESS_RULE_ERROR,
                f"duplicate alias {entry.alias!r}",
            )
        self._entries[entry.alias] = entry
        return Result.success(entry)

    def __getitem__(self, alias: str) -> TrustedCertificateEntry:
        return self._entries[alias]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"Keystore(aliases={list(self._entries)!r})"


@dataclass(frozen=True, slots=True)
class TrustStoreArtifact:
    """
    The generated trust store.

    `jks` is the standard base64 encoding of `store_bytes`; `id` is the
    lowercase hex SHA-1 of the UTF-8 bytes of `jks` (not of the raw bytes).
    """

    store_bytes: bytes = field(repr=False)
    jks: str = field(repr=False)
    id: str


@dataclass(frozen=True, slots=True)
class GenerationReport:
    """
    Everything one generation run produced.

    `artifact` is None when a fatal stage failed. Diagnostics are kept in the
    order they were collected.
    """

    artifact: TrustStoreArtifact | None = None
    diagnostics: tuple[Diagnostic, ...] = ()

    @property
    def has_fatal(self) -> bool:
        return any(d.is_fatal for d in self.diagnostics)

    @property
    def succeeded(self) -> bool:
        return self.artifact is not None and not self.has_fatal

    @property
    def messages(self) -> list[str]:
        return [d.message for d in self.diagnostics]
