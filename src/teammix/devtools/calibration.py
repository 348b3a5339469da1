from __future__ import annotations

import json
from pathlib import Path

from teammix.contracts import (
    DistributionStrategy,
    FairnessCalibrationRequest,
    FairnessCalibrationResult,
    Position,
)
from teammix.core import make_id, mix_random, now_utc, seeded_random
from teammix.distribution import DistributionEngine
from teammix.roster import Roster


class FairnessCalibrationService:
    """Dev-only batch runner measuring how evenly random mixing spreads players."""

    def __init__(self, roster: Roster) -> None:
        self._roster = roster

    def run_batch(self, request: FairnessCalibrationRequest) -> FairnessCalibrationResult:
        if request.sample_count <= 0:
            raise ValueError("sample_count must be > 0")
        random_source = seeded_random(request.seed) if request.seed is not None else mix_random()

        roster = self._roster.unassigned_copy()
        players = roster.all_players()
        team1_hits = {p.name: 0 for p in players}
        leaders = [roster.players(position)[0] for position in Position if roster.players(position)]
        same_side = 0
        splits: set[tuple[int, ...]] = set()
        total_difference = 0

        for idx in range(request.sample_count):
            engine = DistributionEngine(random_source=random_source.spawn(f"fairness:{idx}"))
            result = engine.run(roster, DistributionStrategy.RANDOM, request.anchorages_enabled)
            for name, team in result.assignment.items():
                if team == 1:
                    team1_hits[name] += 1
            if len({p.team for p in leaders}) == 1:
                same_side += 1
            splits.add(tuple(result.assignment.values()))
            total_difference += result.skill_difference
            roster.reset()

        rates = {name: hits / request.sample_count for name, hits in team1_hits.items()}
        return FairnessCalibrationResult(
            run_id=make_id("fair"),
            sample_count=request.sample_count,
            anchorages_enabled=request.anchorages_enabled,
            player_team1_rates=rates,
            max_rate_deviation=max((abs(rate - 0.5) for rate in rates.values()), default=0.0),
            same_side_rate=same_side / request.sample_count,
            expected_same_side_rate=0.5 ** (len(leaders) - 1) if leaders else 1.0,
            distinct_splits=len(splits),
            mean_skill_difference=total_difference / request.sample_count,
            seed=request.seed,
            created_at=now_utc(),
        )

    def persist_result(self, result: FairnessCalibrationResult, duckdb_path: Path) -> None:
        try:
            import duckdb
        except ModuleNotFoundError as exc:  # pragma: no cover
            raise RuntimeError("duckdb is required for calibration persistence") from exc

        duckdb_path.parent.mkdir(parents=True, exist_ok=True)
        with duckdb.connect(str(duckdb_path)) as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS dev_fairness_runs (
                    run_id VARCHAR PRIMARY KEY,
                    sample_count INTEGER,
                    anchorages_enabled BOOLEAN,
                    max_rate_deviation DOUBLE,
                    same_side_rate DOUBLE,
                    expected_same_side_rate DOUBLE,
                    distinct_splits INTEGER,
                    mean_skill_difference DOUBLE,
                    player_rates_json VARCHAR,
                    seed BIGINT,
                    created_at VARCHAR
                )
                """
            )
            conn.execute(
                "INSERT OR REPLACE INTO dev_fairness_runs VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                [
                    result.run_id,
                    result.sample_count,
                    result.anchorages_enabled,
                    result.max_rate_deviation,
                    result.same_side_rate,
                    result.expected_same_side_rate,
                    result.distinct_splits,
                    result.mean_skill_difference,
                    json.dumps(result.player_team1_rates, sort_keys=True),
                    result.seed,
                    result.created_at.isoformat() if result.created_at else None,
                ],
            )

    def load_results(self, duckdb_path: Path) -> list[dict[str, object]]:
        try:
            import duckdb
        except ModuleNotFoundError as exc:  # pragma: no cover
            raise RuntimeError("duckdb is required for calibration persistence") from exc

        with duckdb.connect(str(duckdb_path)) as conn:
            cursor = conn.execute(
                "SELECT run_id, sample_count, anchorages_enabled, max_rate_deviation, same_side_rate, "
                "distinct_splits, mean_skill_difference, player_rates_json, seed "
                "FROM dev_fairness_runs ORDER BY created_at"
            )
            columns = [d[0] for d in cursor.description]
            rows = cursor.fetchall()
        return [dict(zip(columns, row)) for row in rows]
