"""Run workforce analytics over a JSON dataset bundle."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import asdict
from datetime import datetime
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from workforce_engine.adapters import json_adapter
from workforce_engine.adapters.records import parse_timestamp
from workforce_engine.assignment import AssignmentRecommender
from workforce_engine.config import EngineSettings
from workforce_engine.productivity import ProductivityScorer, utcnow
from workforce_engine.schema import TaskRequirements
from workforce_engine.skill_gap import SkillGapAnalyzer
from workforce_engine.trend import TrendPredictor


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run workforce-engine analytics")
    parser.add_argument("--data", required=True, help="Path to JSON dataset bundle")
    parser.add_argument("--org", required=True, help="Organization id")
    parser.add_argument("--now", help="ISO timestamp used as the current time (default: now, UTC)")
    parser.add_argument("--output", help="Also write the JSON report to this path")
    parser.add_argument("--log-level", default="WARNING", help="Logging level (default: WARNING)")

    sub = parser.add_subparsers(dest="command", required=True)

    scores = sub.add_parser("scores", help="Recalculate and list productivity scores")
    scores.add_argument("--employee", help="Only this employee")

    gaps = sub.add_parser("skill-gaps", help="Skill gap report")
    gaps.add_argument("--employee", help="Per-employee report with recommendations")

    trends = sub.add_parser("trends", help="Performance trend forecast")
    trends.add_argument("--employee", help="Only this employee")
    trends.add_argument("--at-risk", action="store_true", help="Only declining, confident trends")

    assign = sub.add_parser("assign", help="Recommend employees for a task")
    assign.add_argument("--skills", default="", help="Comma-separated required skills")
    assign.add_argument("--complexity", default="medium", choices=["low", "medium", "high"])
    assign.add_argument("--department")
    assign.add_argument("--validate", metavar="EMPLOYEE_ID", help="Validate one employee instead of ranking")
    return parser


def run(args: argparse.Namespace) -> object:
    dataset = json_adapter.parse(args.data)
    store = dataset.build_store()
    settings = EngineSettings.from_env()
    now = parse_timestamp(args.now, "--now", "timestamp") if args.now else utcnow()

    def clock() -> datetime:
        return now

    if args.command == "scores":
        scorer = ProductivityScorer(store, settings, clock=clock)
        if args.employee:
            return asdict(scorer.calculate_score(args.org, args.employee))
        batch = scorer.batch_calculate_scores(args.org)
        return {
            "scores": [asdict(item) for item in scorer.get_all_scores(args.org)],
            "errors": batch.errors,
        }

    if args.command == "skill-gaps":
        analyzer = SkillGapAnalyzer(store, dataset.build_catalog(), settings)
        if args.employee:
            return asdict(analyzer.get_skill_gap_recommendations(args.employee, args.org))
        return [asdict(gap) for gap in analyzer.calculate_organization_skill_gaps(args.org)]

    if args.command == "trends":
        predictor = TrendPredictor(store, settings, clock=clock)
        if args.employee:
            result = predictor.predict_performance_trend(args.employee, args.org)
            return asdict(result) if result else None
        results = predictor.get_employees_at_risk(args.org) if args.at_risk else predictor.predict_organization_trends(args.org)
        return [asdict(result) for result in results]

    requirements = TaskRequirements(
        required_skills=[skill.strip() for skill in args.skills.split(",") if skill.strip()],
        complexity=args.complexity,
        department=args.department,
    )
    recommender = AssignmentRecommender(store, settings, clock=clock)
    if args.validate:
        return asdict(recommender.validate_employee_for_task(args.validate, requirements, args.org))
    return [asdict(candidate) for candidate in recommender.recommend_employees_for_task(requirements, args.org)]


def main() -> None:
    args = _build_parser().parse_args()
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    report = run(args)
    text = json.dumps(report, indent=2, default=str)
    print(text)

    if args.output:
        out_path = Path(args.output)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(text, encoding="utf-8")
        print(f"Saved report to {out_path}", file=sys.stderr)


if __name__ == "__main__":
    main()
