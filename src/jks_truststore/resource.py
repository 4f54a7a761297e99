"""
Trust store resource — the declarative create/read/update/delete contract.

The host resource manager hands over an input record and keeps the returned
state. Inputs are immutable once created: any change to `certificates` or
`password` means destroying the resource and creating a new one.

  create  → run the pipeline, return state with `jks` and `id`
  read    → re-run the identical pipeline from the stored inputs
  update  → refused when inputs changed (replacement required)
  delete  → clear the id; nothing outside the state exists to undo
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TypeAlias

import structlog
from pydantic import BaseModel, ConfigDict, Field, SecretStr
from railway import ErrorCode, FailureDescription
from railway.result import Result

from jks_truststore.domain.models import (
    Diagnostic,
    GenerationReport,
    Stage,
    TrustStoreArtifact,
    TrustStoreConfig,
)

log = structlog.get_logger()

RESOURCE_TYPE = "jks_trust_store"
RESOURCE_DESCRIPTION = "JKS trust store generated from one or more PEM encoded certificates."

GenerateFn: TypeAlias = Callable[[TrustStoreConfig], GenerationReport]


class TrustStoreInput(BaseModel):
    """Input record supplied by the resource manager."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    certificates: list[str] = Field(
        description="CA certificates or chains to include in generated trust store; in PEM format.",
    )
    password: SecretStr = Field(
        default=SecretStr(""),
        description="Password to secure trust store. Defaults to empty string.",
    )

    def to_config(self) -> TrustStoreConfig:
        return TrustStoreConfig(
            certificates=tuple(self.certificates),
            password=self.password.get_secret_value(),
        )


class TrustStoreState(TrustStoreInput):
    """Stored state: the inputs plus the computed trust store and its id."""

    jks: str = Field(description="JKS trust store data; base64 encoded.")
    id: str = Field(description="Hex SHA-1 of the base64 trust store; empty once deleted.")

    def inputs(self) -> TrustStoreInput:
        return TrustStoreInput(certificates=self.certificates, password=self.password)


class DiagnosticRecord(BaseModel):
    """A diagnostic as surfaced to the resource manager."""

    severity: str
    stage: str
    code: str
    summary: str
    chain: int | None = None
    block: int | None = None

    @staticmethod
    def from_diagnostic(diagnostic: Diagnostic) -> DiagnosticRecord:
        return DiagnosticRecord(
            severity=diagnostic.severity.value,
            stage=diagnostic.stage.value,
            code=diagnostic.code.value,
            summary=diagnostic.message,
            chain=diagnostic.chain_index,
            block=diagnostic.block_index,
        )


class TrustStoreOutput(BaseModel):
    """Output record: computed attributes plus every collected diagnostic."""

    id: str | None = None
    jks: str | None = None
    diagnostics: list[DiagnosticRecord] = Field(default_factory=list)


@dataclass(frozen=True, slots=True)
class ResourceResponse:
    """State after an operation (None when nothing was produced) and its diagnostics."""

    state: TrustStoreState | None
    diagnostics: tuple[Diagnostic, ...] = ()

    @property
    def has_errors(self) -> bool:
        return len(self.diagnostics) > 0

    def to_output(self) -> TrustStoreOutput:
        return TrustStoreOutput(
            id=self.state.id if self.state is not None else None,
            jks=self.state.jks if self.state is not None else None,
            diagnostics=[DiagnosticRecord.from_diagnostic(d) for d in self.diagnostics],
        )


def requires_replacement(prior: TrustStoreInput, planned: TrustStoreInput) -> bool:
    """Both inputs force a new resource when they change."""
    return prior.certificates != planned.certificates or prior.password != planned.password


def has_drifted(prior: TrustStoreState, current: TrustStoreState) -> bool:
    return prior.id != current.id


class TrustStoreResource:
    """
    Lifecycle operations for one trust store resource.

    `generate` is the wired pipeline: TrustStoreConfig → GenerationReport.
    """

    def __init__(self, generate: GenerateFn) -> None:
        self._generate = generate

    def create(self, inputs: TrustStoreInput) -> ResourceResponse:
        report = self._generate(inputs.to_config())
        diagnostics = list(report.diagnostics)
        if report.artifact is None:
            return ResourceResponse(state=None, diagnostics=tuple(diagnostics))

        artifact = report.artifact
        state = self._save(inputs, artifact).either(
            on_success=lambda saved: saved,
            on_failure=lambda err: self._save_failed(artifact, err, diagnostics),
        )

        log.info("resource.created", id=artifact.id, diagnostics=len(diagnostics))
        return ResourceResponse(state=state, diagnostics=tuple(diagnostics))

    def read(self, state: TrustStoreState) -> ResourceResponse:
        """Regenerate from the stored inputs; a new id signals drift."""
        response = self.create(state.inputs())
        if response.state is not None and has_drifted(state, response.state):
            log.info("resource.drift_detected", previous_id=state.id, current_id=response.state.id)
        return response

    def update(self, prior: TrustStoreState, planned: TrustStoreInput) -> ResourceResponse:
        if not requires_replacement(prior.inputs(), planned):
            return ResourceResponse(state=prior)
        failure = FailureDescription(
            ErrorCode.BUSINESS_RULE_ERROR,
            "certificates and password cannot be changed in place; the trust store must be replaced",
        )
        log.warning("resource.update_refused", id=prior.id)
        return ResourceResponse(state=prior, diagnostics=(Diagnostic.fatal(Stage.INPUT, failure),))

    def delete(self, state: TrustStoreState) -> ResourceResponse:
        log.info("resource.deleted", id=state.id)
        return ResourceResponse(state=state.model_copy(update={"id": ""}))

    def _save(self, inputs: TrustStoreInput, artifact: TrustStoreArtifact) -> Result[TrustStoreState]:
        return Result.from_computation(
            lambda: TrustStoreState(
                certificates=inputs.certificates,
                password=inputs.password,
                jks=artifact.jks,
                id=artifact.id,
            ),
            ErrorCode.TECHNICAL_ERROR,
            "Failed to save JKS",
        ).map_failure(FailureDescription.with_cause)

    def _save_failed(
        self,
        artifact: TrustStoreArtifact,
        err: FailureDescription,
        diagnostics: list[Diagnostic],
    ) -> None:
        diagnostics.append(Diagnostic.advisory(Stage.PERSISTENCE, err))
        log.error("resource.save_failed", id=artifact.id, error=err.message)
        return None
