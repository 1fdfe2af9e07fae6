"""Demo script for workforce-engine."""

import sys
from datetime import datetime
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from workforce_engine.adapters.json_adapter import parse
from workforce_engine.assignment import AssignmentRecommender
from workforce_engine.explain import explain_candidate, explain_trend
from workforce_engine.productivity import ProductivityScorer
from workforce_engine.schema import TaskRequirements
from workforce_engine.skill_gap import SkillGapAnalyzer
from workforce_engine.trend import TrendPredictor

ORG = "acme"
NOW = datetime.fromisoformat("2025-03-01T12:00:00")


def main() -> None:
    dataset = parse(str(Path(__file__).with_name("sample_dataset.json")))
    store = dataset.build_store()

    scorer = ProductivityScorer(store, clock=lambda: NOW)
    scorer.batch_calculate_scores(ORG)
    for item in scorer.get_all_scores(ORG):
        print(f"{item.employee_name:<16} {item.score:6.2f}")

    analyzer = SkillGapAnalyzer(store, dataset.build_catalog())
    print("Skill gaps:", [(gap.skill, gap.priority, gap.employees_missing) for gap in analyzer.calculate_organization_skill_gaps(ORG)])

    predictor = TrendPredictor(store, clock=lambda: NOW)
    for result in predictor.predict_organization_trends(ORG):
        print("Trend:", explain_trend(result))

    recommender = AssignmentRecommender(store, clock=lambda: NOW)
    requirements = TaskRequirements(required_skills=["Python", "SQL"], complexity="high")
    for candidate in recommender.recommend_employees_for_task(requirements, ORG):
        print(explain_candidate(candidate))
        print()


if __name__ == "__main__":
    main()
