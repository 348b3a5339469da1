from __future__ import annotations

import logging

from teammix.contracts import Position, RandomSource
from teammix.core import mix_random
from teammix.distribution.context import DistributionContext, infeasible_anchorage
from teammix.roster import Team

logger = logging.getLogger(__name__)


class RandomDistributor:
    """Uniform-random mixing. Every draw goes through the injected random source."""

    def __init__(self, random_source: RandomSource | None = None) -> None:
        self._random = random_source or mix_random()

    def without_anchorages(self, context: DistributionContext) -> tuple[Team, Team]:
        team1, team2 = context.new_teams()
        teams = {1: team1, 2: team2}

        for position in Position:
            registered = context.roster.players(position)
            if not registered:
                continue
            first, second = self._flip()
            unassigned = list(registered)
            for _ in range(len(registered) // 2):
                chosen = self._random.choice(unassigned)
                unassigned.remove(chosen)
                teams[first].add(chosen)
            for player in unassigned:
                teams[second].add(player)
            logger.debug("position %s: first half to team %d", position.value, first)

        return team1, team2

    def with_anchorages(self, context: DistributionContext) -> tuple[Team, Team]:
        team1, team2 = context.new_teams()
        teams = {1: team1, 2: team2}

        for group in context.groups:
            first, second = self._flip()
            if teams[first].can_accept(group.players):
                target = first
            elif teams[second].can_accept(group.players):
                target = second
            else:
                raise infeasible_anchorage(
                    context,
                    group,
                    (team1, team2),
                    message=f"anchorage {group.anchorage_id} fits neither team",
                    causal_fragment=["random_mix", "anchored_placement"],
                )
            teams[target].add_all(group.players)
            logger.debug("anchorage %d (%d players) to team %d", group.anchorage_id, group.size, target)

        # The other team always has room once the preferred one is rejected.
        for player in context.unanchored_players():
            first, second = self._flip()
            target = first if teams[first].can_accept([player]) else second
            teams[target].add(player)

        return team1, team2

    def _flip(self) -> tuple[int, int]:
        first = self._random.randint(1, 2)
        return first, 3 - first
