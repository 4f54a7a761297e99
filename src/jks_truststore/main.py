"""
Application entry point — wires dependencies and runs one CLI command.

Composition root: creates concrete adapters, injects them into the
pipeline, and hands the wired pipeline to the trust store resource.

This is the ONLY place where concrete classes are instantiated.
Everything else depends on Protocol interfaces.

Commands:
  create  [INPUT]              input record (JSON) → output record (JSON)
  inspect [INPUT] --password   base64 JKS → entry listing (JSON)

INPUT defaults to stdin. Results go to stdout, logs to stderr.
"""

from __future__ import annotations

import argparse
import base64
import hashlib
import json
import logging
import sys
from functools import partial
from typing import TextIO, TypeAlias

import structlog
from railway import ErrorCode, LoggingExecutionContext
from railway.result import Result

from jks_truststore import __version__
from jks_truststore.adapters.clock import FixedClock, SystemClock
from jks_truststore.adapters.jks_codec import PyjksKeystoreCodec
from jks_truststore.adapters.pem_decoder import AsnPemChainDecoder
from jks_truststore.config import AppSettings
from jks_truststore.domain.models import Keystore
from jks_truststore.pipeline import generate_trust_store
from jks_truststore.resource import ResourceResponse, TrustStoreInput, TrustStoreResource


def configure_structlog(log_level: str = "INFO", file: TextIO | None = None) -> None:
    """
    Configure structlog for structured logging on `file` (stderr by default).

    stdout is reserved for the command's JSON result.
    """
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, log_level.upper(), logging.INFO)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=file if file is not None else sys.stderr),
        cache_logger_on_first_use=True,
    )


_Adapters: TypeAlias = tuple[
    AsnPemChainDecoder,
    PyjksKeystoreCodec,
    SystemClock | FixedClock,
]


def _create_adapters(settings: AppSettings) -> _Adapters:
    """Instantiate the decoder, codec and clock from application settings."""
    decoder = AsnPemChainDecoder(
        accepted_block_types=settings.decoder.accepted_block_types,
        strict=settings.decoder.strict,
    )
    codec = PyjksKeystoreCodec()
    creation_time = settings.keystore.creation_time
    clock = FixedClock(creation_time) if creation_time is not None else SystemClock()
    return decoder, codec, clock


def build_resource(settings: AppSettings) -> TrustStoreResource:
    """Wire the pipeline (partial application with ports) into the resource."""
    decoder, codec, clock = _create_adapters(settings)
    generate = partial(generate_trust_store, decoder=decoder, codec=codec, clock=clock)
    return TrustStoreResource(generate)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jks-truststore",
        description="Generate JKS trust stores from PEM certificate chains",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    commands = parser.add_subparsers(dest="command", required=True)

    create = commands.add_parser("create", help="Generate a trust store from an input record")
    create.add_argument(
        "input",
        nargs="?",
        default="-",
        help='JSON input record {"certificates": [...], "password": "..."}; "-" for stdin (default)',
    )
    create.add_argument(
        "--allow-advisory",
        action="store_true",
        help="Exit 0 when a trust store was produced with advisory diagnostics only",
    )

    inspect = commands.add_parser("inspect", help="List the entries of a base64 JKS trust store")
    inspect.add_argument(
        "input",
        nargs="?",
        default="-",
        help="base64-encoded JKS data; \"-\" for stdin (default)",
    )
    inspect.add_argument("--password", default="", help="Trust store password (default: empty)")
    return parser


def _exit_code(response: ResourceResponse, allow_advisory: bool) -> int:
    if response.state is None:
        return 1
    if not response.diagnostics:
        return 0
    fatal = any(d.is_fatal for d in response.diagnostics)
    return 0 if allow_advisory and not fatal else 1


def _read_input(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    with open(path, encoding="utf-8") as source:
        return source.read()


def _run_create(resource: TrustStoreResource, raw: str, allow_advisory: bool, out: TextIO) -> int:
    log = structlog.get_logger()
    ctx = LoggingExecutionContext(operation="TrustStoreCreate")

    result = ctx.execute(
        lambda: Result.from_computation(
            lambda: TrustStoreInput.model_validate_json(raw),
            ErrorCode.VALIDATION_ERROR,
            "Invalid input record",
        ).map(resource.create)
    )
    if result.is_failure():
        error = result.error()
        log.error("cli.create_failed", error=error.with_cause().message)
        return 2 if error.code is ErrorCode.VALIDATION_ERROR else 1

    response = result.value()
    for diagnostic in response.diagnostics:
        emit = log.error if diagnostic.is_fatal else log.warning
        emit("cli.diagnostic", severity=diagnostic.severity.value, summary=diagnostic.message)
    out.write(response.to_output().model_dump_json(indent=2))
    out.write("\n")
    return _exit_code(response, allow_advisory)


def _describe(keystore: Keystore) -> list[dict[str, object]]:
    return [
        {
            "alias": entry.alias,
            "type": entry.certificate_type,
            "created_at": entry.created_at.isoformat(),
            "content_bytes": len(entry.content),
            "content_sha1": hashlib.sha1(entry.content).hexdigest(),
        }
        for entry in keystore.values()
    ]


def _run_inspect(codec: PyjksKeystoreCodec, raw: str, password: str, out: TextIO) -> int:
    log = structlog.get_logger()
    ctx = LoggingExecutionContext(operation="TrustStoreInspect")
    text = raw.strip()

    result = ctx.execute(
        lambda: Result.from_computation(
            lambda: base64.b64decode(text, validate=True),
            ErrorCode.VALIDATION_ERROR,
            "Input is not valid base64",
        ).flat_map(lambda data: codec.read(data, password))
    )
    if result.is_failure():
        log.error("cli.inspect_failed", error=result.error().with_cause().message)
        return 1

    out.write(json.dumps(_describe(result.value()), indent=2))
    out.write("\n")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Parse arguments, load settings, wire dependencies and run the command."""
    args = _build_parser().parse_args(argv)

    try:
        settings = AppSettings()
    except Exception as e:
        print(f"FATAL: Configuration error — {e}", file=sys.stderr)  # noqa: T201
        return 1

    configure_structlog(settings.log_level)
    log = structlog.get_logger()
    log.info("app.starting", version=__version__, command=args.command, log_level=settings.log_level)

    if args.command == "inspect":
        _decoder, codec, _clock = _create_adapters(settings)
        return _run_inspect(codec, _read_input(args.input), args.password, sys.stdout)
    return _run_create(build_resource(settings), _read_input(args.input), args.allow_advisory, sys.stdout)


if __name__ == "__main__":
    sys.exit(main())
