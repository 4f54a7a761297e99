"""
PEM chain decoder adapter — splits a chain string into PEM blocks.

Adapter layer — implements the ChainDecoder port using:
  - re: locating the next BEGIN/END frame in the remaining bytes
  - asn1crypto.pem: decoding each frame body into DER

Pipeline, per chain:
  chain string
    → strip surrounding whitespace
    → next frame (text before a BEGIN line is skipped)
    → asn1crypto: pem.unarmor(re-armored body) → PemBlock (label kept as is)
    → type check against the accepted block types
    → DecodedChain (concatenated DER + diagnostics)

Compatibility policy (strict=False, the default): a block with an
unexpected type is reported but its payload is still appended, and every
decode diagnostic is advisory. With strict=True such blocks are left out and
decode diagnostics are fatal.

"EC PRIVATE KEY" is accepted by default even though it places private key
material in a trusted-certificate entry. Each such inclusion is logged as a
warning.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass

import structlog
from asn1crypto import pem
from railway import ErrorCode, FailureDescription
from railway.result import Failure, Result, Success

from jks_truststore.domain.models import DecodedChain, Diagnostic, PemBlock, Stage

log = structlog.get_logger()

CERTIFICATE_BLOCK_TYPE = "CERTIFICATE"
EC_PRIVATE_KEY_BLOCK_TYPE = "EC PRIVATE KEY"
DEFAULT_ACCEPTED_BLOCK_TYPES: tuple[str, ...] = (CERTIFICATE_BLOCK_TYPE, EC_PRIVATE_KEY_BLOCK_TYPE)

_BEGIN_LINE = re.compile(rb"-----BEGIN ([^\r\n]*?)-----")

# asn1crypto only recognizes [A-Z0-9 ] labels; frames are re-armored under this one.
_ARMOR_LABEL = b"BLOCK"


def _end_line(block_type: bytes) -> re.Pattern[bytes]:
    return re.compile(rb"-----END " + re.escape(block_type) + rb"-----")


@dataclass(frozen=True, slots=True)
class _Frame:
    """The label and armored body of one BEGIN line; `terminated` is False when its END is missing."""

    label: str
    body: bytes
    terminated: bool = True


def _next_frame(rest: bytes) -> tuple[_Frame, bytes] | None:
    """
    Locate the next BEGIN … END frame.

    Returns (frame, remaining bytes after the frame), or None when no
    complete frame exists in `rest`. A BEGIN line followed by another BEGIN
    line before its own END yields an unterminated frame, and scanning resumes
    at that next BEGIN line.
    """
    begin = _BEGIN_LINE.search(rest)
    if begin is None:
        return None
    end = _end_line(begin.group(1)).search(rest, begin.end())
    label = begin.group(1).decode("utf-8", errors="replace")
    nested = _BEGIN_LINE.search(rest, begin.end(), end.start() if end is not None else len(rest))
    if nested is not None:
        return _Frame(label, rest[begin.end():nested.start()], terminated=False), rest[nested.start():]
    if end is None:
        return None
    return _Frame(label, rest[begin.end():end.start()]), rest[end.end():]


def _unarmor(frame: _Frame) -> PemBlock:
    if not frame.terminated:
        raise ValueError(f"BEGIN {frame.label} line has no matching END line")
    armored = (
        b"-----BEGIN " + _ARMOR_LABEL + b"-----\n"
        + frame.body.strip()
        + b"\n-----END " + _ARMOR_LABEL + b"-----\n"
    )
    _type, _headers, der_bytes = pem.unarmor(armored)
    return PemBlock(block_type=frame.label, payload=der_bytes)


class AsnPemChainDecoder:
    """
    Decode a PEM chain into a DecodedChain.

    Implements the ChainDecoder port. Never raises: malformed frames and
    unexpected block types become diagnostics naming the chain and block
    index.
    """

    def __init__(
        self,
        accepted_block_types: Iterable[str] = DEFAULT_ACCEPTED_BLOCK_TYPES,
        strict: bool = False,
    ) -> None:
        self._accepted = frozenset(accepted_block_types)
        self._strict = strict

    def decode(self, chain_index: int, chain: str) -> DecodedChain:
        rest = chain.strip().encode("utf-8")
        der = bytearray()
        blocks: list[PemBlock] = []
        diagnostics: list[Diagnostic] = []

        block_index = -1
        while True:
            block_index += 1
            located = _next_frame(rest)
            if located is None:
                if rest.strip():
                    # Unparsable remainder: report it and stop this chain.
                    diagnostics.append(self._load_failure(chain_index, block_index))
                break

            frame, rest = located
            match self._parse_frame(frame, chain_index, block_index):
                case Failure(err):
                    diagnostics.append(self._diagnostic(err, chain_index, block_index))
                    log.warning("decoder.pem_load_failed", chain=chain_index, block=block_index)
                case Success(block):
                    if self._check_type(block, chain_index, block_index, diagnostics):
                        der.extend(block.payload)
                        blocks.append(block)

        log.debug(
            "decoder.chain_decoded",
            chain=chain_index,
            blocks=len(blocks),
            der_bytes=len(der),
            diagnostics=len(diagnostics),
        )
        return DecodedChain(
            chain_index=chain_index,
            der=bytes(der),
            blocks=tuple(blocks),
            diagnostics=tuple(diagnostics),
        )

    def _parse_frame(self, frame: _Frame, chain_index: int, block_index: int) -> Result[PemBlock]:
        return Result.from_computation(
            lambda: _unarmor(frame),
            ErrorCode.VALIDATION_ERROR,
            f"chain {chain_index}, certificate {block_index}: failed to load PEM",
        )

    def _check_type(
        self,
        block: PemBlock,
        chain_index: int,
        block_index: int,
        diagnostics: list[Diagnostic],
    ) -> bool:
        """Record a type mismatch; return whether the payload is to be included."""
        if block.block_type in self._accepted:
            if block.block_type == EC_PRIVATE_KEY_BLOCK_TYPE:
                log.warning("decoder.private_key_as_certificate", chain=chain_index, block=block_index)
            return True

        failure = FailureDescription(
            ErrorCode.VALIDATION_ERROR,
            f'chain {chain_index}, certificate {block_index}: '
            f'expected {CERTIFICATE_BLOCK_TYPE} but found "{block.block_type}"',
        )
        diagnostics.append(self._diagnostic(failure, chain_index, block_index))
        log.warning(
            "decoder.unexpected_block_type",
            chain=chain_index,
            block=block_index,
            block_type=block.block_type,
            included=not self._strict,
        )
        return not self._strict

    def _load_failure(self, chain_index: int, block_index: int) -> Diagnostic:
        log.warning("decoder.trailing_data", chain=chain_index, block=block_index)
        failure = FailureDescription(
            ErrorCode.VALIDATION_ERROR,
            f"chain {chain_index}, certificate {block_index}: failed to load PEM",
        )
        return self._diagnostic(failure, chain_index, block_index)

    def _diagnostic(self, failure: FailureDescription, chain_index: int, block_index: int) -> Diagnostic:
        if self._strict:
            return Diagnostic.fatal(Stage.DECODE, failure, chain_index, block_index)
        return Diagnostic.advisory(Stage.DECODE, failure, chain_index, block_index)
