from __future__ import annotations

from dataclasses import dataclass

from teammix.contracts import Position
from teammix.roster import Player, Roster


@dataclass(frozen=True, slots=True)
class AnchorageGroup:
    """Players sharing one positive anchorage id. All members end on the same team."""

    anchorage_id: int
    players: tuple[Player, ...]

    @property
    def size(self) -> int:
        return len(self.players)

    @property
    def skill_total(self) -> int:
        return sum(p.skill for p in self.players)

    def position_counts(self) -> dict[Position, int]:
        counts: dict[Position, int] = {}
        for position in Position:
            count = sum(1 for p in self.players if p.position == position)
            if count:
                counts[position] = count
        return counts


class AnchorageGrouper:
    def group(self, roster: Roster) -> list[AnchorageGroup]:
        """Groups anchored players, largest groups first and ascending id on ties.

        Unanchored players are left out; strategies handle them one by one.
        """
        members: dict[int, list[Player]] = {}
        for player in roster.all_players():
            if player.is_anchored:
                members.setdefault(player.anchorage, []).append(player)
        groups = [AnchorageGroup(anchorage_id=aid, players=tuple(players)) for aid, players in members.items()]
        return sorted(groups, key=lambda g: (-g.size, g.anchorage_id))
