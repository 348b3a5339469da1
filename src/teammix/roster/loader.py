from __future__ import annotations

import json
from collections import Counter
from pathlib import Path
from typing import Any

from teammix.contracts import Position, ValidationError, ValidationIssue
from teammix.core import DistributionConfig, config_for_formation
from teammix.roster.entities import Player
from teammix.roster.roster import Roster

REQUIRED_PLAYER_KEYS = {"name", "position"}


def _is_integer(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def parse_players(payload: dict[str, Any]) -> list[Player]:
    raw_players = payload.get("players")
    if not isinstance(raw_players, list):
        raise ValidationError(
            [
                ValidationIssue(
                    code="ROSTER_PLAYERS_MISSING",
                    severity="blocking",
                    field_path="players",
                    entity_id="roster",
                    message="roster payload must contain a 'players' list",
                )
            ]
        )

    issues: list[ValidationIssue] = []
    players: list[Player] = []
    for idx, raw in enumerate(raw_players):
        field_path = f"players[{idx}]"
        if not isinstance(raw, dict):
            issues.append(ValidationIssue("PLAYER_NOT_OBJECT", "blocking", field_path, str(idx), "entry must be an object"))
            continue
        missing = sorted(REQUIRED_PLAYER_KEYS - set(raw.keys()))
        if missing:
            issues.append(
                ValidationIssue(
                    "PLAYER_KEYS_MISSING", "blocking", field_path, str(idx), f"missing keys: {', '.join(missing)}"
                )
            )
            continue
        try:
            position = Position(str(raw["position"]).lower())
        except ValueError:
            issues.append(
                ValidationIssue(
                    "UNKNOWN_POSITION", "blocking", f"{field_path}.position", str(raw["name"]), f"unknown position '{raw['position']}'"
                )
            )
            continue
        skill = raw.get("skill", 0)
        anchorage = raw.get("anchorage", 0)
        if not _is_integer(skill) or not _is_integer(anchorage):
            issues.append(
                ValidationIssue(
                    "NON_INTEGER_FIELD", "blocking", field_path, str(raw["name"]), "skill and anchorage must be integers"
                )
            )
            continue
        players.append(Player(name=str(raw["name"]), position=position, skill=skill, anchorage=anchorage))

    if issues:
        raise ValidationError(issues)
    return players


def roster_from_payload(
    payload: dict[str, Any],
    config: DistributionConfig | None = None,
    *,
    formation: str | None = None,
) -> Roster:
    players = parse_players(payload)
    if formation is not None:
        preset_config, capacities = config_for_formation(formation)
        check_formation(players, formation, capacities)
        config = config or preset_config
    if config is None:
        team_size = payload.get("team_size")
        config = DistributionConfig(team_size=team_size) if _is_integer(team_size) else DistributionConfig()
    return Roster.from_players(players, config=config)


def check_formation(players: list[Player], name: str, capacities: dict[Position, int]) -> None:
    """Each position must register exactly twice the preset's per-team capacity."""
    registered = Counter(p.position for p in players)
    issues = [
        ValidationIssue(
            "FORMATION_MISMATCH",
            "blocking",
            f"players.{position.value}",
            name,
            f"{name} needs {2 * capacity} {position.value} players, got {registered[position]}",
        )
        for position, capacity in capacities.items()
        if registered[position] != 2 * capacity
    ]
    if issues:
        raise ValidationError(issues)


def load_roster(path: Path, config: DistributionConfig | None = None, *, formation: str | None = None) -> Roster:
    if not path.exists():
        raise ValueError(f"roster file not found: {path}")
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"roster file is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise ValueError("roster file must contain a JSON object")
    return roster_from_payload(payload, config, formation=formation)
