from __future__ import annotations

from dataclasses import replace
from typing import Iterable, Iterator, Mapping, Sequence

from teammix.contracts import Position
from teammix.core import DistributionConfig, default_distribution_config
from teammix.roster.entities import UNASSIGNED, Player
from teammix.roster.validation import RosterValidator


class Roster:
    """Registered players per position, in declaration order of Position.

    Per-team capacity of a position is half of its registered count. Construction
    raises PreconditionViolation when the roster cannot be split into two equal teams.
    """

    def __init__(
        self,
        players_by_position: Mapping[Position, Sequence[Player]],
        *,
        config: DistributionConfig | None = None,
    ) -> None:
        self._config = config or default_distribution_config()
        self._config.validate()
        self._players: dict[Position, list[Player]] = {
            position: list(players_by_position.get(position, ())) for position in Position
        }
        RosterValidator(self._config).validate_structure(self._players)
        self._order = {id(p): idx for idx, p in enumerate(self.all_players())}

    @classmethod
    def from_players(cls, players: Iterable[Player], *, config: DistributionConfig | None = None) -> Roster:
        grouped: dict[Position, list[Player]] = {position: [] for position in Position}
        for player in players:
            grouped[player.position].append(player)
        return cls(grouped, config=config)

    @property
    def config(self) -> DistributionConfig:
        return self._config

    @property
    def team_size(self) -> int:
        return self._config.team_size

    @property
    def total_players(self) -> int:
        return len(self._order)

    def players(self, position: Position) -> tuple[Player, ...]:
        return tuple(self._players[position])

    def capacity(self, position: Position) -> int:
        return len(self._players[position]) // 2

    def capacities(self) -> dict[Position, int]:
        return {position: self.capacity(position) for position in Position}

    def all_players(self) -> list[Player]:
        return [p for position in Position for p in self._players[position]]

    def registration_index(self, player: Player) -> int:
        return self._order[id(player)]

    def find(self, name: str) -> Player:
        for player in self.all_players():
            if player.name == name:
                return player
        raise KeyError(name)

    def is_reset(self) -> bool:
        return all(p.team == UNASSIGNED for p in self.all_players())

    def reset(self) -> None:
        for player in self.all_players():
            player.team = UNASSIGNED

    def unassigned_copy(self) -> Roster:
        """Same registrations with fresh, unassigned players. The original is left untouched."""
        return Roster(
            {position: [replace(p, team=UNASSIGNED) for p in members] for position, members in self._players.items()},
            config=self._config,
        )

    def reset_skills(self) -> None:
        for player in self.all_players():
            player.skill = 0

    def __iter__(self) -> Iterator[Player]:
        return iter(self.all_players())

    def __len__(self) -> int:
        return self.total_players
