from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from teammix.contracts import DistributionResult, DistributionStrategy, FairnessCalibrationRequest, ValidationError
from teammix.core import (
    DEFAULT_FORMATION,
    DistributionIntegrityError,
    formation_presets,
    mix_random,
    persist_forensic_artifact,
    seeded_random,
)
from teammix.devtools import FairnessCalibrationService
from teammix.distribution import DistributionEngine
from teammix.roster import load_roster


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Split a roster into two even teams")
    parser.add_argument("--roster", type=Path, required=True, help="JSON roster file")
    parser.add_argument(
        "--strategy",
        choices=[s.value for s in DistributionStrategy],
        default=DistributionStrategy.RANDOM.value,
        help="random or skill-balanced mixing",
    )
    parser.add_argument(
        "--formation",
        choices=sorted(formation_presets()),
        default=None,
        help=f"require the roster to fill a preset, e.g. {DEFAULT_FORMATION}",
    )
    parser.add_argument("--anchorages", action="store_true", help="keep anchored players together")
    parser.add_argument("--seed", type=int, default=None, help="seed for reproducible random mixes")
    parser.add_argument("--forensics-dir", type=Path, default=None, help="write fatal failure artifacts here")
    parser.add_argument("--calibrate", type=int, default=0, metavar="N", help="dev: run N random mixes and report fairness")
    parser.add_argument("--calibration-db", type=Path, default=None, help="dev: DuckDB file to store calibration runs")
    parser.add_argument("--verbose", action="store_true", help="debug logging")
    return parser


def format_result(result: DistributionResult) -> list[str]:
    lines: list[str] = []
    for team in result.teams:
        lines.append(f"Team {team.index} (skill {team.skill_total}):")
        for position, players in team.players.items():
            if players:
                names = ", ".join(p.name for p in players)
                lines.append(f"  {position.value}: {names}")
    lines.append(f"Skill difference: {result.skill_difference}")
    return lines


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        roster = load_roster(args.roster, formation=args.formation)
    except ValidationError as exc:
        print(f"Invalid roster: {exc}", file=sys.stderr)
        return 2
    except ValueError as exc:
        print(str(exc), file=sys.stderr)
        return 2
    except DistributionIntegrityError as exc:
        return _fatal(exc, args.forensics_dir)

    if args.calibrate:
        service = FairnessCalibrationService(roster)
        report = service.run_batch(
            FairnessCalibrationRequest(sample_count=args.calibrate, anchorages_enabled=args.anchorages, seed=args.seed)
        )
        print(f"Samples: {report.sample_count}, distinct splits: {report.distinct_splits}")
        print(f"Max team-1 rate deviation: {report.max_rate_deviation:.3f}")
        print(f"Same-side rate: {report.same_side_rate:.3f} (expected {report.expected_same_side_rate:.3f})")
        if args.calibration_db is not None:
            service.persist_result(report, args.calibration_db)
        return 0

    random_source = seeded_random(args.seed) if args.seed is not None else mix_random()
    engine = DistributionEngine(random_source=random_source)
    try:
        result = engine.run(roster, args.strategy, args.anchorages)
    except DistributionIntegrityError as exc:
        return _fatal(exc, args.forensics_dir)

    for line in format_result(result):
        print(line)
    return 0


def _fatal(exc: DistributionIntegrityError, forensics_dir: Path | None) -> int:
    print(f"Fatal {exc.error_code}: {exc}", file=sys.stderr)
    if forensics_dir is not None:
        path = persist_forensic_artifact(exc.artifact, forensics_dir)
        print(f"Forensic artifact: {path}", file=sys.stderr)
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
