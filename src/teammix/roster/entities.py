from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from teammix.contracts import Position
from teammix.core import DistributionIntegrityError, build_forensic_artifact

UNASSIGNED = 0
TEAM_INDICES = (1, 2)


@dataclass(slots=True, eq=False)
class Player:
    name: str
    position: Position
    skill: int = 0
    anchorage: int = 0
    team: int = UNASSIGNED

    @property
    def is_anchored(self) -> bool:
        return self.anchorage > 0

    @property
    def is_rated(self) -> bool:
        return self.skill > 0

    @property
    def is_assigned(self) -> bool:
        return self.team != UNASSIGNED


@dataclass(slots=True, eq=False)
class Team:
    """One side of a mix. Filled by a strategy, read-only once handed to the caller."""

    index: int
    capacities: dict[Position, int]
    team_size: int
    players: dict[Position, list[Player]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.index not in TEAM_INDICES:
            raise ValueError(f"team index must be one of {TEAM_INDICES}, got {self.index}")
        self.players = {position: list(self.players.get(position, [])) for position in Position}
        self.capacities = {position: self.capacities.get(position, 0) for position in Position}

    @property
    def player_count(self) -> int:
        return sum(len(members) for members in self.players.values())

    @property
    def skill_total(self) -> int:
        return sum(p.skill for members in self.players.values() for p in members)

    def count(self, position: Position) -> int:
        return len(self.players[position])

    def remaining(self, position: Position) -> int:
        return self.capacities[position] - len(self.players[position])

    def is_position_full(self, position: Position) -> bool:
        return self.remaining(position) <= 0

    def can_accept(self, players: Iterable[Player]) -> bool:
        incoming: dict[Position, int] = {}
        total = 0
        for player in players:
            incoming[player.position] = incoming.get(player.position, 0) + 1
            total += 1
        if self.player_count + total > self.team_size:
            return False
        return all(self.remaining(position) >= count for position, count in incoming.items())

    def add(self, player: Player) -> None:
        if not self.can_accept([player]):
            raise DistributionIntegrityError(
                build_forensic_artifact(
                    engine_scope="team",
                    error_code="TEAM_CAPACITY_EXCEEDED",
                    message=f"team {self.index} cannot take '{player.name}' at {player.position.value}",
                    state_snapshot={
                        "team": self.index,
                        "player_count": self.player_count,
                        "position_count": self.count(player.position),
                        "position_capacity": self.capacities[player.position],
                    },
                    context={"team_size": self.team_size},
                    identifiers={"player": player.name},
                    causal_fragment=["placement", "capacity_guard"],
                )
            )
        self.players[player.position].append(player)

    def add_all(self, players: Iterable[Player]) -> None:
        for player in players:
            self.add(player)

    def all_players(self) -> list[Player]:
        return [p for members in self.players.values() for p in members]

    def contains(self, player: Player) -> bool:
        return any(p is player for p in self.players[player.position])
