from __future__ import annotations

import logging
from types import MappingProxyType

from teammix.contracts import DistributionResult, DistributionStrategy, Position, RandomSource
from teammix.core import DistributionIntegrityError, build_forensic_artifact, make_id, mix_random, now_utc
from teammix.distribution.anchorage import AnchorageGrouper
from teammix.distribution.context import DistributionContext, Distributor
from teammix.distribution.random_mixer import RandomDistributor
from teammix.distribution.skill_mixer import SkillBalancedDistributor
from teammix.roster import Roster, RosterValidator, Team

logger = logging.getLogger(__name__)


class DistributionEngine:
    """Splits a roster into two teams.

    Single-writer: concurrent runs against the same roster must be serialized by the
    caller, and a roster that was already mixed must go through ``reset`` first.
    Players' team fields are only written after the split passes the invariant audit,
    so a failed run leaves them untouched.
    """

    def __init__(
        self,
        *,
        random_source: RandomSource | None = None,
        grouper: AnchorageGrouper | None = None,
    ) -> None:
        self._random = random_source or mix_random()
        self._grouper = grouper or AnchorageGrouper()
        self._distributors: dict[DistributionStrategy, Distributor] = {
            DistributionStrategy.RANDOM: RandomDistributor(self._random),
            DistributionStrategy.SKILL_BALANCED: SkillBalancedDistributor(),
        }

    def reset(self, roster: Roster) -> None:
        roster.reset()

    def distribute(
        self,
        roster: Roster,
        strategy: DistributionStrategy | str,
        anchorages_enabled: bool,
    ) -> tuple[Team, Team]:
        return self.run(roster, strategy, anchorages_enabled).teams

    def run(
        self,
        roster: Roster,
        strategy: DistributionStrategy | str,
        anchorages_enabled: bool,
    ) -> DistributionResult:
        strategy = DistributionStrategy(strategy)
        run_id = make_id("mix")
        logger.info(
            "mix %s: strategy=%s anchorages=%s players=%d", run_id, strategy.value, anchorages_enabled, len(roster)
        )

        groups = self._grouper.group(roster) if anchorages_enabled else []
        validator = RosterValidator(roster.config)
        try:
            validator.validate_structure({position: roster.players(position) for position in Position})
            report = validator.validate_run(
                roster,
                strategy=strategy,
                anchorages_enabled=anchorages_enabled,
                groups=groups,
                run_id=run_id,
            )
        except DistributionIntegrityError as exc:
            logger.error("mix %s rejected: %s", run_id, exc)
            raise
        for issue in report.issues:
            logger.warning("mix %s: %s %s: %s", run_id, issue.code, issue.entity_id, issue.message)

        context = DistributionContext(
            run_id=run_id,
            roster=roster,
            strategy=strategy,
            anchorages_enabled=anchorages_enabled,
            groups=groups,
        )
        distributor = self._distributors[strategy]
        try:
            if anchorages_enabled:
                teams = distributor.with_anchorages(context)
            else:
                teams = distributor.without_anchorages(context)
            self._audit(context, teams)
        except DistributionIntegrityError as exc:
            logger.error("mix %s failed with %s: %s", run_id, exc.error_code, exc)
            raise

        for team in teams:
            for player in team.all_players():
                player.team = team.index

        result = DistributionResult(
            run_id=run_id,
            strategy=strategy,
            anchorages_enabled=anchorages_enabled,
            teams=teams,
            assignment=MappingProxyType({p.name: p.team for p in roster.all_players()}),
            completed_at=now_utc(),
        )
        logger.info("mix %s done: skill %d vs %d", run_id, *result.skill_totals)
        return result

    def _audit(self, context: DistributionContext, teams: tuple[Team, Team]) -> None:
        roster = context.roster
        problems: list[str] = []

        placed: dict[int, int] = {}
        for team in teams:
            if team.player_count > roster.team_size:
                problems.append(f"team {team.index} has {team.player_count} players")
            for player in team.all_players():
                if id(player) in placed:
                    problems.append(f"'{player.name}' placed twice")
                placed[id(player)] = team.index
        missing = [p.name for p in roster.all_players() if id(p) not in placed]
        if missing:
            problems.append(f"unplaced players: {', '.join(missing)}")

        for position in Position:
            first, second = teams[0].count(position), teams[1].count(position)
            if first + second != len(roster.players(position)):
                problems.append(f"{position.value} split {first}+{second} does not cover the roster")
            if max(first, second) > roster.capacity(position):
                problems.append(f"{position.value} split {first}+{second} exceeds capacity {roster.capacity(position)}")

        for group in context.groups:
            sides = {placed.get(id(p)) for p in group.players}
            if len(sides) != 1:
                problems.append(f"anchorage {group.anchorage_id} split across teams")

        if problems:
            raise DistributionIntegrityError(
                build_forensic_artifact(
                    engine_scope="distribution",
                    error_code="DISTRIBUTION_INVARIANT_BROKEN",
                    message="; ".join(problems),
                    state_snapshot={"team_counts": {team.index: team.player_count for team in teams}},
                    context={"strategy": context.strategy.value, "anchorages_enabled": context.anchorages_enabled},
                    identifiers={"run_id": context.run_id},
                    causal_fragment=["post_distribution_audit"],
                )
            )
