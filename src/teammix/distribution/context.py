from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

from teammix.contracts import DistributionStrategy
from teammix.core import InfeasibleAnchorage, build_forensic_artifact
from teammix.distribution.anchorage import AnchorageGroup
from teammix.roster import Player, Roster, Team


@dataclass(slots=True)
class DistributionContext:
    """Everything one mix run needs, passed explicitly to the strategies."""

    run_id: str
    roster: Roster
    strategy: DistributionStrategy
    anchorages_enabled: bool
    groups: list[AnchorageGroup] = field(default_factory=list)

    def new_teams(self) -> tuple[Team, Team]:
        capacities = self.roster.capacities()
        return (
            Team(index=1, capacities=dict(capacities), team_size=self.roster.team_size),
            Team(index=2, capacities=dict(capacities), team_size=self.roster.team_size),
        )

    def unanchored_players(self) -> list[Player]:
        grouped = {id(p) for g in self.groups for p in g.players}
        return [p for p in self.roster.all_players() if id(p) not in grouped]


class Distributor(Protocol):
    def with_anchorages(self, context: DistributionContext) -> tuple[Team, Team]: ...

    def without_anchorages(self, context: DistributionContext) -> tuple[Team, Team]: ...


def infeasible_anchorage(
    context: DistributionContext,
    group: AnchorageGroup,
    teams: tuple[Team, Team],
    *,
    message: str,
    causal_fragment: list[str],
) -> InfeasibleAnchorage:
    return InfeasibleAnchorage(
        build_forensic_artifact(
            engine_scope="distribution",
            error_code="INFEASIBLE_ANCHORAGE",
            message=message,
            state_snapshot={
                "anchorage_id": group.anchorage_id,
                "group_size": group.size,
                "group_positions": {pos.value: count for pos, count in group.position_counts().items()},
                "team_counts": {team.index: team.player_count for team in teams},
                "team_position_counts": {
                    team.index: {pos.value: len(members) for pos, members in team.players.items()} for team in teams
                },
            },
            context={"strategy": context.strategy.value, "team_size": context.roster.team_size},
            identifiers={"run_id": context.run_id, "anchorage_id": str(group.anchorage_id)},
            causal_fragment=causal_fragment,
        ),
        anchorage_id=group.anchorage_id,
    )
