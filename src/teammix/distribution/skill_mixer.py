from __future__ import annotations

import logging
from dataclasses import dataclass

from teammix.contracts import Position
from teammix.core import DistributionIntegrityError, build_forensic_artifact
from teammix.distribution.anchorage import AnchorageGroup
from teammix.distribution.context import DistributionContext, infeasible_anchorage
from teammix.roster import Player, Team

logger = logging.getLogger(__name__)

_POSITIONS = tuple(Position)


@dataclass(frozen=True, slots=True)
class _Unit:
    players: tuple[Player, ...]
    skill: int
    counts: tuple[int, ...]
    first_index: int

    @property
    def size(self) -> int:
        return len(self.players)


class _PartitionSearch:
    """Depth-first search over atomic units, team 1 branch first.

    Units are ordered by their lowest registration index, so complete team-1
    compositions are reached in lexicographic order and the first one found at a
    given difference is the tie-break winner.

    A partial state is fully described by the unit index, team 1's per-position
    counts and team 1's skill, since team 2 holds the rest of the prefix. A state
    reached a second time can only lead to differences already seen from a
    lexicographically earlier prefix, so it is skipped.
    """

    def __init__(
        self,
        units: list[_Unit],
        capacities: tuple[int, ...],
        team_size: int,
        *,
        first_feasible: bool = False,
    ) -> None:
        self._units = units
        self._capacities = capacities
        self._team_size = team_size
        self._first_feasible = first_feasible
        self._total = sum(u.skill for u in units)
        self._floor = self._total % 2
        self._suffix = [0] * (len(units) + 1)
        for idx in range(len(units) - 1, -1, -1):
            self._suffix[idx] = self._suffix[idx + 1] + units[idx].skill
        self._choice: list[bool] = []
        self._counts = ([0] * len(capacities), [0] * len(capacities))
        self._sizes = [0, 0]
        self._seen: set[tuple[int, tuple[int, ...], int]] = set()
        self.best: tuple[bool, ...] | None = None
        self.best_diff: int | None = None
        self.nodes = 0
        self._done = False

    def run(self) -> tuple[bool, ...] | None:
        self._visit(0, 0)
        return self.best

    def _visit(self, idx: int, team1_skill: int) -> None:
        if self._done:
            return
        self.nodes += 1
        if idx == len(self._units):
            diff = abs(2 * team1_skill - self._total)
            if self.best_diff is None or diff < self.best_diff:
                self.best = tuple(self._choice)
                self.best_diff = diff
                self._done = self._first_feasible or diff == self._floor
            return

        state = (idx, tuple(self._counts[0]), team1_skill)
        if state in self._seen:
            return
        self._seen.add(state)

        if self.best_diff is not None:
            low = 2 * team1_skill - self._total
            high = 2 * (team1_skill + self._suffix[idx]) - self._total
            bound = 0 if low <= 0 <= high else min(abs(low), abs(high))
            if bound >= self.best_diff:
                return

        unit = self._units[idx]
        for side, to_team1 in ((0, True), (1, False)):
            if not self._fits(side, unit):
                continue
            self._place(side, unit, 1)
            self._choice.append(to_team1)
            self._visit(idx + 1, team1_skill + (unit.skill if to_team1 else 0))
            self._choice.pop()
            self._place(side, unit, -1)

    def _fits(self, side: int, unit: _Unit) -> bool:
        if self._sizes[side] + unit.size > self._team_size:
            return False
        counts = self._counts[side]
        return all(counts[k] + unit.counts[k] <= self._capacities[k] for k in range(len(counts)))

    def _place(self, side: int, unit: _Unit, sign: int) -> None:
        self._sizes[side] += sign * unit.size
        counts = self._counts[side]
        for k, count in enumerate(unit.counts):
            counts[k] += sign * count


class SkillBalancedDistributor:
    """Exact minimum skill-difference split under position and anchorage constraints."""

    def without_anchorages(self, context: DistributionContext) -> tuple[Team, Team]:
        return self._distribute(context, [(p,) for p in context.roster.all_players()])

    def with_anchorages(self, context: DistributionContext) -> tuple[Team, Team]:
        blocks = [g.players for g in context.groups] + [(p,) for p in context.unanchored_players()]
        return self._distribute(context, blocks)

    def _distribute(self, context: DistributionContext, blocks: list[tuple[Player, ...]]) -> tuple[Team, Team]:
        roster = context.roster
        units = self._units(context, blocks)
        search = _PartitionSearch(units, self._capacities(context), roster.team_size)
        choice = search.run()
        logger.debug("skill search visited %d nodes, best difference %s", search.nodes, search.best_diff)

        team1, team2 = context.new_teams()
        if choice is None:
            if context.anchorages_enabled and context.groups:
                raise infeasible_anchorage(
                    context,
                    self._blocking_group(context),
                    (team1, team2),
                    message="no split keeps every anchorage together within capacities",
                    causal_fragment=["skill_mix", "partition_search"],
                )
            raise DistributionIntegrityError(
                build_forensic_artifact(
                    engine_scope="distribution",
                    error_code="NO_FEASIBLE_PARTITION",
                    message="no split satisfies the per-position capacities",
                    state_snapshot={"capacities": {p.value: c for p, c in roster.capacities().items()}},
                    context={"strategy": context.strategy.value},
                    identifiers={"run_id": context.run_id},
                    causal_fragment=["skill_mix", "partition_search"],
                )
            )

        side1 = [p for unit, to_team1 in zip(units, choice) if to_team1 for p in unit.players]
        side2 = [p for unit, to_team1 in zip(units, choice) if not to_team1 for p in unit.players]
        team1.add_all(sorted(side1, key=roster.registration_index))
        team2.add_all(sorted(side2, key=roster.registration_index))
        return team1, team2

    def _blocking_group(self, context: DistributionContext) -> AnchorageGroup:
        """First group, in placement order, whose addition leaves no feasible split."""
        roster = context.roster
        for count in range(1, len(context.groups) + 1):
            kept = context.groups[:count]
            anchored = {id(p) for group in kept for p in group.players}
            blocks = [g.players for g in kept] + [(p,) for p in roster.all_players() if id(p) not in anchored]
            search = _PartitionSearch(
                self._units(context, blocks), self._capacities(context), roster.team_size, first_feasible=True
            )
            if search.run() is None:
                return kept[-1]
        return context.groups[-1]

    def _capacities(self, context: DistributionContext) -> tuple[int, ...]:
        return tuple(context.roster.capacity(position) for position in _POSITIONS)

    def _units(self, context: DistributionContext, blocks: list[tuple[Player, ...]]) -> list[_Unit]:
        return sorted((self._unit(context, block) for block in blocks), key=lambda u: u.first_index)

    def _unit(self, context: DistributionContext, players: tuple[Player, ...]) -> _Unit:
        return _Unit(
            players=players,
            skill=sum(p.skill for p in players),
            counts=tuple(sum(1 for p in players if p.position == position) for position in _POSITIONS),
            first_index=min(context.roster.registration_index(p) for p in players),
        )
