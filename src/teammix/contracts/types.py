from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any, Mapping, Protocol, Sequence

if TYPE_CHECKING:
    from teammix.roster.entities import Team


class Position(str, Enum):
    """Closed set of role categories. Declaration order drives iteration and display order."""

    CENTRAL_DEFENDER = "central_defender"
    LATERAL_DEFENDER = "lateral_defender"
    MIDFIELDER = "midfielder"
    FORWARD = "forward"
    GOALKEEPER = "goalkeeper"


class DistributionStrategy(str, Enum):
    RANDOM = "random"
    SKILL_BALANCED = "skill"


class RandomSource(Protocol):
    def randint(self, a: int, b: int) -> int: ...

    def choice(self, items: Sequence[Any]) -> Any: ...

    def spawn(self, substream_id: str) -> RandomSource: ...


@dataclass(slots=True)
class ValidationIssue:
    code: str
    severity: str
    field_path: str
    entity_id: str
    message: str


@dataclass(slots=True)
class ValidationResult:
    ok: bool
    issues: list[ValidationIssue]


class ValidationError(ValueError):
    def __init__(self, issues: list[ValidationIssue]) -> None:
        message = "; ".join(f"{i.code}:{i.entity_id}:{i.message}" for i in issues)
        super().__init__(message)
        self.issues = issues


@dataclass(slots=True)
class ForensicArtifact:
    artifact_id: str
    timestamp: datetime
    engine_scope: str
    error_code: str
    message: str
    state_snapshot: Mapping[str, Any]
    context: Mapping[str, Any]
    identifiers: Mapping[str, str]
    causal_fragment: Sequence[str]


@dataclass(frozen=True, slots=True)
class DistributionResult:
    """Immutable record of one successful distribution run."""

    run_id: str
    strategy: DistributionStrategy
    anchorages_enabled: bool
    teams: tuple[Team, Team]
    assignment: Mapping[str, int]
    completed_at: datetime

    @property
    def skill_totals(self) -> tuple[int, int]:
        return (self.teams[0].skill_total, self.teams[1].skill_total)

    @property
    def skill_difference(self) -> int:
        first, second = self.skill_totals
        return abs(first - second)


@dataclass(slots=True)
class FairnessCalibrationRequest:
    sample_count: int
    anchorages_enabled: bool = False
    seed: int | None = None


@dataclass(slots=True)
class FairnessCalibrationResult:
    run_id: str
    sample_count: int
    anchorages_enabled: bool
    player_team1_rates: dict[str, float]
    max_rate_deviation: float
    same_side_rate: float
    expected_same_side_rate: float
    distinct_splits: int
    mean_skill_difference: float
    seed: int | None = None
    created_at: datetime | None = None
