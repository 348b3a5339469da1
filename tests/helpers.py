from __future__ import annotations

from itertools import combinations

from teammix.contracts import Position
from teammix.core import DistributionConfig
from teammix.roster import Player, Roster, Team

SEVEN_A_SIDE_SKILLS: dict[Position, list[int]] = {
    Position.CENTRAL_DEFENDER: [4, 2],
    Position.LATERAL_DEFENDER: [5, 3, 3, 1],
    Position.MIDFIELDER: [5, 4, 2, 2],
    Position.FORWARD: [5, 1],
    Position.GOALKEEPER: [3, 4],
}


def player_name(position: Position, idx: int) -> str:
    return f"{position.value}_{idx + 1}"


def build_roster(
    skills: dict[Position, list[int]],
    *,
    anchorages: dict[str, int] | None = None,
) -> Roster:
    players: list[Player] = []
    for position in Position:
        for idx, skill in enumerate(skills.get(position, [])):
            players.append(Player(name=player_name(position, idx), position=position, skill=skill))
    for player in players:
        player.anchorage = (anchorages or {}).get(player.name, 0)
    team_size = len(players) // 2
    return Roster.from_players(players, config=DistributionConfig(team_size=team_size))


def seven_a_side_roster(anchorages: dict[str, int] | None = None) -> Roster:
    return build_roster(SEVEN_A_SIDE_SKILLS, anchorages=anchorages)


def feasible_team1_sets(roster: Roster, *, anchorages_enabled: bool) -> list[tuple[int, ...]]:
    """Every valid team-1 composition as sorted registration indices, in lexicographic order."""
    players = roster.all_players()
    capacities = roster.capacities()
    groups: dict[int, set[int]] = {}
    if anchorages_enabled:
        for idx, player in enumerate(players):
            if player.anchorage > 0:
                groups.setdefault(player.anchorage, set()).add(idx)

    valid: list[tuple[int, ...]] = []
    for team1 in combinations(range(len(players)), roster.team_size):
        chosen = set(team1)
        counts = {position: 0 for position in Position}
        for idx in team1:
            counts[players[idx].position] += 1
        if counts != capacities:
            continue
        if any(0 < len(members & chosen) < len(members) for members in groups.values()):
            continue
        valid.append(team1)
    return valid


def brute_force_best(roster: Roster, *, anchorages_enabled: bool) -> tuple[int, tuple[int, ...]] | None:
    players = roster.all_players()
    total = sum(p.skill for p in players)
    best: tuple[int, tuple[int, ...]] | None = None
    for team1 in feasible_team1_sets(roster, anchorages_enabled=anchorages_enabled):
        diff = abs(2 * sum(players[idx].skill for idx in team1) - total)
        if best is None or diff < best[0]:
            best = (diff, team1)
    return best


def team_indices(roster: Roster, team: Team) -> tuple[int, ...]:
    return tuple(sorted(roster.registration_index(p) for p in team.all_players()))


def assert_valid_split(roster: Roster, teams: tuple[Team, Team], *, anchorages_enabled: bool) -> None:
    team1, team2 = teams
    assert team1.player_count + team2.player_count == roster.total_players
    assert team1.player_count <= roster.team_size
    assert team2.player_count <= roster.team_size
    for position in Position:
        assert team1.count(position) + team2.count(position) == len(roster.players(position))
        assert team1.count(position) <= roster.capacity(position)
        assert team2.count(position) <= roster.capacity(position)
    for player in roster.all_players():
        assert player.team in (1, 2)
        assert (teams[player.team - 1]).contains(player)
    if anchorages_enabled:
        by_anchorage: dict[int, set[int]] = {}
        for player in roster.all_players():
            if player.anchorage > 0:
                by_anchorage.setdefault(player.anchorage, set()).add(player.team)
        assert all(len(sides) == 1 for sides in by_anchorage.values())
