from __future__ import annotations

from collections import Counter
from typing import TYPE_CHECKING, Mapping, Sequence

from teammix.contracts import DistributionStrategy, Position, ValidationIssue, ValidationResult
from teammix.core import DistributionConfig, precondition_violation
from teammix.roster.entities import Player

if TYPE_CHECKING:
    from teammix.distribution.anchorage import AnchorageGroup
    from teammix.roster.roster import Roster


class RosterValidator:
    """Blocking checks run before any assignment work. Blocking issues raise PreconditionViolation."""

    def __init__(self, config: DistributionConfig) -> None:
        self._config = config

    def validate_structure(self, players_by_position: Mapping[Position, Sequence[Player]]) -> ValidationResult:
        issues: list[ValidationIssue] = []
        total = 0
        for position, players in players_by_position.items():
            total += len(players)
            if len(players) % 2:
                issues.append(
                    ValidationIssue(
                        code="ODD_POSITION_COUNT",
                        severity="blocking",
                        field_path=f"roster.{position.value}",
                        entity_id=position.value,
                        message=f"{len(players)} players registered; count must be even",
                    )
                )
            for player in players:
                issues.extend(self._validate_player(position, player))

        expected = self._config.team_size * 2
        if total != expected:
            issues.append(
                ValidationIssue(
                    code="TEAM_SIZE_MISMATCH",
                    severity="blocking",
                    field_path="roster",
                    entity_id="roster",
                    message=f"{total} players registered, expected {expected} for two teams of {self._config.team_size}",
                )
            )

        names = Counter(p.name for players in players_by_position.values() for p in players)
        for name in sorted(n for n, count in names.items() if count > 1):
            issues.append(
                ValidationIssue(
                    code="DUPLICATE_PLAYER_NAME",
                    severity="blocking",
                    field_path="roster.name",
                    entity_id=name,
                    message=f"name registered {names[name]} times",
                )
            )
        return self._finalize(issues, causal_fragment=["roster_construction"])

    def validate_run(
        self,
        roster: Roster,
        *,
        strategy: DistributionStrategy,
        anchorages_enabled: bool,
        groups: Sequence[AnchorageGroup] = (),
        run_id: str = "",
    ) -> ValidationResult:
        issues: list[ValidationIssue] = []
        for player in roster.all_players():
            if player.is_assigned:
                issues.append(
                    ValidationIssue(
                        code="PLAYER_ALREADY_ASSIGNED",
                        severity="blocking",
                        field_path="player.team",
                        entity_id=player.name,
                        message=f"player already on team {player.team}; reset the roster before mixing",
                    )
                )
            if strategy == DistributionStrategy.SKILL_BALANCED and not player.is_rated:
                issues.append(
                    ValidationIssue(
                        code="UNRATED_PLAYER",
                        severity="blocking",
                        field_path="player.skill",
                        entity_id=player.name,
                        message="skill-balanced mixing requires every player to be rated",
                    )
                )
        if anchorages_enabled:
            issues.extend(self._validate_groups(roster, groups))
        return self._finalize(issues, causal_fragment=["precondition_check", strategy.value], run_id=run_id)

    def _validate_player(self, position: Position, player: Player) -> list[ValidationIssue]:
        issues: list[ValidationIssue] = []
        if player.position != position:
            issues.append(
                ValidationIssue(
                    code="POSITION_MISMATCH",
                    severity="blocking",
                    field_path=f"roster.{position.value}",
                    entity_id=player.name,
                    message=f"player plays {player.position.value} but is registered under {position.value}",
                )
            )
        if player.skill != 0 and not self._config.skill_in_range(player.skill):
            issues.append(
                ValidationIssue(
                    code="SKILL_OUT_OF_RANGE",
                    severity="blocking",
                    field_path="player.skill",
                    entity_id=player.name,
                    message=(
                        f"skill {player.skill} outside [{self._config.skill_min}, {self._config.skill_max}]"
                    ),
                )
            )
        if player.anchorage < 0:
            issues.append(
                ValidationIssue(
                    code="NEGATIVE_ANCHORAGE",
                    severity="blocking",
                    field_path="player.anchorage",
                    entity_id=player.name,
                    message=f"anchorage id {player.anchorage} must be 0 or positive",
                )
            )
        return issues

    def _validate_groups(self, roster: Roster, groups: Sequence[AnchorageGroup]) -> list[ValidationIssue]:
        issues: list[ValidationIssue] = []
        for group in groups:
            entity = f"anchorage_{group.anchorage_id}"
            if group.size > roster.team_size:
                issues.append(
                    ValidationIssue(
                        code="ANCHORAGE_EXCEEDS_TEAM_SIZE",
                        severity="blocking",
                        field_path="anchorage.size",
                        entity_id=entity,
                        message=f"{group.size} anchored players cannot fit a team of {roster.team_size}",
                    )
                )
            for position, count in group.position_counts().items():
                if count > roster.capacity(position):
                    issues.append(
                        ValidationIssue(
                            code="ANCHORAGE_EXCEEDS_POSITION_CAPACITY",
                            severity="blocking",
                            field_path=f"anchorage.{position.value}",
                            entity_id=entity,
                            message=(
                                f"{count} anchored {position.value} players exceed the per-team "
                                f"capacity of {roster.capacity(position)}"
                            ),
                        )
                    )
            if group.size == 1:
                issues.append(
                    ValidationIssue(
                        code="SINGLE_ANCHORAGE_GROUP",
                        severity="warning",
                        field_path="anchorage.size",
                        entity_id=entity,
                        message="anchorage has a single member and constrains nothing",
                    )
                )
        return issues

    def _finalize(
        self,
        issues: list[ValidationIssue],
        *,
        causal_fragment: list[str],
        run_id: str = "",
    ) -> ValidationResult:
        ordered = sorted(issues, key=lambda x: (x.severity, x.code, x.entity_id, x.field_path))
        blocking = [i for i in ordered if i.severity == "blocking"]
        if blocking:
            raise precondition_violation(
                blocking,
                engine_scope="roster",
                identifiers={"run_id": run_id} if run_id else {},
                causal_fragment=causal_fragment,
            )
        return ValidationResult(ok=True, issues=ordered)
