from __future__ import annotations

import json
from dataclasses import asdict
from datetime import UTC, datetime
from pathlib import Path
from uuid import uuid4

from teammix.contracts import ForensicArtifact, ValidationIssue


class DistributionIntegrityError(RuntimeError):
    """Fatal, unrecoverable distribution failure. Callers must treat it as program-ending."""

    def __init__(self, artifact: ForensicArtifact) -> None:
        super().__init__(artifact.message)
        self.artifact = artifact

    @property
    def error_code(self) -> str:
        return self.artifact.error_code


class PreconditionViolation(DistributionIntegrityError):
    def __init__(self, artifact: ForensicArtifact, issues: list[ValidationIssue]) -> None:
        super().__init__(artifact)
        self.issues = issues


class InfeasibleAnchorage(DistributionIntegrityError):
    def __init__(self, artifact: ForensicArtifact, anchorage_id: int) -> None:
        super().__init__(artifact)
        self.anchorage_id = anchorage_id


def build_forensic_artifact(
    engine_scope: str,
    error_code: str,
    message: str,
    state_snapshot: dict[str, object],
    context: dict[str, object],
    identifiers: dict[str, str],
    causal_fragment: list[str],
) -> ForensicArtifact:
    return ForensicArtifact(
        artifact_id=str(uuid4()),
        timestamp=datetime.now(UTC),
        engine_scope=engine_scope,
        error_code=error_code,
        message=message,
        state_snapshot=state_snapshot,
        context=context,
        identifiers=identifiers,
        causal_fragment=causal_fragment,
    )


def precondition_violation(
    issues: list[ValidationIssue],
    *,
    engine_scope: str,
    identifiers: dict[str, str] | None = None,
    causal_fragment: list[str] | None = None,
) -> PreconditionViolation:
    codes = sorted({i.code for i in issues})
    artifact = build_forensic_artifact(
        engine_scope=engine_scope,
        error_code="PRECONDITION_VIOLATION",
        message="; ".join(f"{i.code}:{i.entity_id}:{i.message}" for i in issues),
        state_snapshot={"issue_codes": codes},
        context={"issues": [asdict(i) for i in issues]},
        identifiers=identifiers or {},
        causal_fragment=causal_fragment or ["precondition_check"],
    )
    return PreconditionViolation(artifact, issues)


def persist_forensic_artifact(artifact: ForensicArtifact, output_dir: Path) -> Path:
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / f"forensic_{artifact.artifact_id}.json"
    path.write_text(json.dumps(asdict(artifact), default=str, indent=2), encoding="utf-8")
    return path
