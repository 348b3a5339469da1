from __future__ import annotations

import json
from pathlib import Path

from teammix.cli import main

PLAYERS = [
    {"name": "Ana", "position": "midfielder", "skill": 5},
    {"name": "Beto", "position": "midfielder", "skill": 1},
    {"name": "Caro", "position": "forward", "skill": 4},
    {"name": "Dani", "position": "forward", "skill": 2},
]


def _write(tmp_path: Path, players: list[dict]) -> Path:
    path = tmp_path / "roster.json"
    path.write_text(json.dumps({"team_size": 2, "players": players}), encoding="utf-8")
    return path


def test_cli_prints_skill_balanced_teams(tmp_path: Path, capsys):
    code = main(["--roster", str(_write(tmp_path, PLAYERS)), "--strategy", "skill"])
    out = capsys.readouterr().out
    assert code == 0
    assert "Team 1 (skill 7):" in out
    assert "Team 2 (skill 5):" in out
    assert "Skill difference: 2" in out


def test_cli_seeded_random_is_reproducible(tmp_path: Path, capsys):
    path = _write(tmp_path, PLAYERS)
    main(["--roster", str(path), "--seed", "4"])
    first = capsys.readouterr().out
    main(["--roster", str(path), "--seed", "4"])
    assert capsys.readouterr().out == first


def test_cli_fatal_failure_writes_forensics(tmp_path: Path, capsys):
    players = [dict(p, anchorage=1) for p in PLAYERS[:2]] + PLAYERS[2:]
    forensics = tmp_path / "forensics"
    code = main(
        ["--roster", str(_write(tmp_path, players)), "--anchorages", "--forensics-dir", str(forensics)]
    )
    err = capsys.readouterr().err
    assert code == 1
    assert "Fatal PRECONDITION_VIOLATION" in err
    assert len(list(forensics.glob("forensic_*.json"))) == 1


def test_cli_rejects_invalid_roster_file(tmp_path: Path, capsys):
    code = main(["--roster", str(_write(tmp_path, [{"name": "Ana"}]))])
    assert code == 2
    assert "Invalid roster" in capsys.readouterr().err


def test_cli_calibration_mode(tmp_path: Path, capsys):
    code = main(["--roster", str(_write(tmp_path, PLAYERS)), "--calibrate", "30", "--seed", "2"])
    out = capsys.readouterr().out
    assert code == 0
    assert "Samples: 30" in out
    assert "Same-side rate" in out


def _five_a_side_players() -> list[dict]:
    layout = [("central_defender", 2), ("midfielder", 4), ("forward", 2), ("goalkeeper", 2)]
    return [
        {"name": f"{position}_{idx}", "position": position, "skill": 1 + idx % 5}
        for position, count in layout
        for idx in range(count)
    ]


def test_cli_formation_accepts_matching_roster(tmp_path: Path, capsys):
    path = tmp_path / "roster.json"
    path.write_text(json.dumps({"players": _five_a_side_players()}), encoding="utf-8")
    code = main(["--roster", str(path), "--formation", "five_a_side", "--strategy", "skill"])
    out = capsys.readouterr().out
    assert code == 0
    assert out.count("goalkeeper: ") == 2


def test_cli_formation_rejects_roster_that_does_not_fill_it(tmp_path: Path, capsys):
    code = main(["--roster", str(_write(tmp_path, PLAYERS)), "--formation", "seven_a_side"])
    err = capsys.readouterr().err
    assert code == 2
    assert "FORMATION_MISMATCH:seven_a_side" in err
    assert "seven_a_side needs 2 goalkeeper players, got 0" in err
