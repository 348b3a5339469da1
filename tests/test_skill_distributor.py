from __future__ import annotations

import random
import time

import pytest

from teammix.contracts import DistributionStrategy, Position
from teammix.core import InfeasibleAnchorage, PreconditionViolation, seeded_random
from teammix.distribution import DistributionEngine
from tests.helpers import assert_valid_split, brute_force_best, build_roster, seven_a_side_roster, team_indices

SMALL_LAYOUTS: list[dict[Position, int]] = [
    {Position.CENTRAL_DEFENDER: 4, Position.MIDFIELDER: 4},
    {Position.LATERAL_DEFENDER: 2, Position.MIDFIELDER: 4, Position.GOALKEEPER: 2},
    {Position.MIDFIELDER: 6, Position.FORWARD: 2},
    {Position.CENTRAL_DEFENDER: 2, Position.LATERAL_DEFENDER: 2, Position.FORWARD: 2, Position.GOALKEEPER: 2},
]


def _random_skills(rng: random.Random, layout: dict[Position, int]) -> dict[Position, list[int]]:
    return {position: [rng.randint(1, 5) for _ in range(count)] for position, count in layout.items()}


def _skill_run(roster, anchorages_enabled: bool = False):
    return DistributionEngine(random_source=seeded_random(0)).run(
        roster, DistributionStrategy.SKILL_BALANCED, anchorages_enabled
    )


def test_two_position_example_matches_brute_force_minimum():
    roster = build_roster({Position.CENTRAL_DEFENDER: [5, 4, 3, 2], Position.MIDFIELDER: [1, 5, 4, 3]})
    result = _skill_run(roster)
    team1, team2 = result.teams

    assert team1.count(Position.CENTRAL_DEFENDER) == team2.count(Position.CENTRAL_DEFENDER) == 2
    assert team1.count(Position.MIDFIELDER) == team2.count(Position.MIDFIELDER) == 2
    best_diff, _ = brute_force_best(roster, anchorages_enabled=False)
    assert result.skill_difference == best_diff
    assert_valid_split(roster, result.teams, anchorages_enabled=False)


def test_optimal_difference_on_random_small_fixtures():
    rng = random.Random(2024)
    for trial in range(40):
        layout = SMALL_LAYOUTS[trial % len(SMALL_LAYOUTS)]
        roster = build_roster(_random_skills(rng, layout))
        result = _skill_run(roster)
        best_diff, best_team1 = brute_force_best(roster, anchorages_enabled=False)
        assert result.skill_difference == best_diff
        assert team_indices(roster, result.teams[0]) == best_team1


def test_optimal_difference_with_anchorages_on_small_fixtures():
    rng = random.Random(77)
    for trial in range(30):
        layout = SMALL_LAYOUTS[trial % len(SMALL_LAYOUTS)]
        roster = build_roster(_random_skills(rng, layout))
        players = roster.all_players()
        for player in rng.sample(players, 3):
            player.anchorage = rng.randint(1, 2)
        best = brute_force_best(roster, anchorages_enabled=True)
        if best is None:
            with pytest.raises((InfeasibleAnchorage, PreconditionViolation)):
                _skill_run(roster, anchorages_enabled=True)
            assert roster.is_reset()
            continue
        result = _skill_run(roster, anchorages_enabled=True)
        assert result.skill_difference == best[0]
        assert team_indices(roster, result.teams[0]) == best[1]
        assert_valid_split(roster, result.teams, anchorages_enabled=True)


def test_seven_a_side_matches_brute_force():
    roster = seven_a_side_roster(anchorages={"forward_1": 4, "goalkeeper_1": 4, "midfielder_4": 4})
    for anchorages_enabled in (False, True):
        roster.reset()
        result = _skill_run(roster, anchorages_enabled)
        best_diff, best_team1 = brute_force_best(roster, anchorages_enabled=anchorages_enabled)
        assert result.skill_difference == best_diff
        assert team_indices(roster, result.teams[0]) == best_team1


def test_ties_pick_lexicographically_smallest_team_one():
    roster = build_roster({Position.MIDFIELDER: [3, 3, 3, 3]})
    team1, team2 = _skill_run(roster).teams
    assert [p.name for p in team1.all_players()] == ["midfielder_1", "midfielder_2"]
    assert [p.name for p in team2.all_players()] == ["midfielder_3", "midfielder_4"]


def test_skill_split_is_deterministic_regardless_of_seed():
    roster = seven_a_side_roster()
    first = DistributionEngine(random_source=seeded_random(1)).run(roster, "skill", False)
    roster.reset()
    second = DistributionEngine(random_source=seeded_random(999)).run(roster, "skill", False)
    assert dict(first.assignment) == dict(second.assignment)


def test_unrated_players_block_skill_mixing():
    roster = seven_a_side_roster()
    roster.find("goalkeeper_1").skill = 0
    with pytest.raises(PreconditionViolation) as ex:
        _skill_run(roster)
    assert [i.code for i in ex.value.issues] == ["UNRATED_PLAYER"]
    assert roster.is_reset()


def test_team_lists_follow_registration_order():
    roster = seven_a_side_roster()
    team1, team2 = _skill_run(roster).teams
    for team in (team1, team2):
        for members in team.players.values():
            indices = [roster.registration_index(p) for p in members]
            assert indices == sorted(indices)


def test_single_position_roster_with_unreachable_floor_finishes_quickly():
    # Odd one out at skill 4 makes the best difference 2 while the parity floor is 0.
    roster = build_roster({Position.MIDFIELDER: [2] * 25 + [4]})
    started = time.perf_counter()
    result = _skill_run(roster)
    elapsed = time.perf_counter() - started

    assert elapsed < 5.0
    assert result.skill_difference == 2
    assert [p.name for p in result.teams[0].all_players()] == [f"midfielder_{i}" for i in range(1, 14)]


def _best_difference_by_position_sums(roster) -> int:
    reachable = {0}
    for position in Position:
        capacity = roster.capacity(position)
        picks = {(0, 0)}
        for player in roster.players(position):
            picks |= {(count + 1, total + player.skill) for count, total in picks if count < capacity}
        sums = {total for count, total in picks if count == capacity}
        reachable = {r + s for r in reachable for s in sums}
    total = sum(p.skill for p in roster)
    return min(abs(2 * r - total) for r in reachable)


def test_large_mixed_roster_finishes_quickly():
    rng = random.Random(31)
    layout = {
        Position.CENTRAL_DEFENDER: 6,
        Position.LATERAL_DEFENDER: 8,
        Position.MIDFIELDER: 10,
        Position.FORWARD: 6,
        Position.GOALKEEPER: 2,
    }
    roster = build_roster(_random_skills(rng, layout))
    started = time.perf_counter()
    result = _skill_run(roster)

    assert time.perf_counter() - started < 5.0
    assert result.skill_difference == _best_difference_by_position_sums(roster)
    assert_valid_split(roster, result.teams, anchorages_enabled=False)
