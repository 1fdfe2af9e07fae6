"""Multi-criteria task assignment recommendations."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional, Sequence

from workforce_engine.config import DEFAULT_SETTINGS, EngineSettings
from workforce_engine.metrics import count_active, count_recent_completions, round_half_up
from workforce_engine.productivity import utcnow
from workforce_engine.schema import AssignmentCandidate, Employee, TaskRequirements, ValidationResult
from workforce_engine.store import DataStore

logger = logging.getLogger(__name__)

SKILLS_WEIGHT = 0.4
WORKLOAD_WEIGHT = 0.3
PRODUCTIVITY_WEIGHT = 0.2
AVAILABILITY_WEIGHT = 0.1

MAX_ACTIVE_TASKS = 10
HIGH_WORKLOAD_TASKS = 8
MIN_SKILLS_MATCH = 50
MIN_PRODUCTIVITY = 40
MIN_SUITABILITY = 50


def skills_match_percent(employee_skills: Sequence[str], required_skills: Sequence[str]) -> int:
    if not required_skills:
        return 100
    owned = {skill.lower() for skill in employee_skills}
    matched = sum(1 for skill in required_skills if skill.lower() in owned)
    return round_half_up(matched / len(required_skills) * 100)


def workload_score(active_tasks: int) -> int:
    """0 active tasks -> 100, 5 -> 50, 10 or more -> 0."""

    if active_tasks <= 0:
        return 100
    if active_tasks >= MAX_ACTIVE_TASKS:
        return 0
    return 100 - active_tasks * 10


def availability_score(recent_completions: int) -> int:
    if recent_completions >= 3:
        return 100
    if recent_completions >= 2:
        return 80
    if recent_completions >= 1:
        return 60
    return 40


def _skills_reason(skills_match: int) -> str:
    if skills_match == 100:
        return "Has all required skills"
    if skills_match >= 75:
        return "Has most required skills"
    if skills_match >= 50:
        return "Has some required skills"
    if skills_match > 0:
        return "Has few required skills"
    return "Missing required skills"


def _workload_reason(score: int) -> str:
    if score >= 80:
        return "Low current workload"
    if score >= 50:
        return "Moderate workload"
    return "High current workload"


def _productivity_reason(score: float) -> str:
    if score >= 80:
        return "High productivity score"
    if score >= 60:
        return "Good productivity score"
    return "Average productivity score"


class AssignmentRecommender:
    """Ranks active employees by suitability for a task."""

    def __init__(
        self,
        store: DataStore,
        settings: EngineSettings = DEFAULT_SETTINGS,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.store = store
        self.settings = settings
        self.clock = clock

    def score_candidate(self, employee: Employee, requirements: TaskRequirements) -> AssignmentCandidate:
        organization_id = employee.organization_id
        tasks = self.store.tasks_for_employee(organization_id, employee.employee_id)
        reasoning = []

        skills_match = skills_match_percent(employee.skills, requirements.required_skills)
        reasoning.append(_skills_reason(skills_match))

        workload = workload_score(count_active(tasks))
        reasoning.append(_workload_reason(workload))

        latest = self.store.latest_score(organization_id, employee.employee_id)
        productivity = latest.score if latest is not None else self.settings.baseline_score
        reasoning.append(_productivity_reason(productivity))

        since = self.clock() - self.settings.availability_window
        availability = availability_score(count_recent_completions(tasks, since))
        if availability >= 80:
            reasoning.append("Recently active")

        suitability = round_half_up(
            skills_match * SKILLS_WEIGHT
            + workload * WORKLOAD_WEIGHT
            + productivity * PRODUCTIVITY_WEIGHT
            + availability * AVAILABILITY_WEIGHT
        )

        current_workload = round_half_up((100 - workload) / 10)
        if current_workload >= MAX_ACTIVE_TASKS:
            reasoning.append("At maximum task capacity")

        return AssignmentCandidate(
            employee_id=employee.employee_id,
            employee_name=employee.name,
            role=employee.role,
            department=employee.department,
            suitability_score=suitability,
            reasoning=reasoning,
            current_workload=current_workload,
            productivity_score=productivity,
            skills_match=skills_match,
        )

    def rank_all_candidates(self, requirements: TaskRequirements, organization_id: str) -> list[AssignmentCandidate]:
        employees = self.store.list_employees(
            organization_id, active_only=True, department=requirements.department or None
        )
        candidates = [self.score_candidate(employee, requirements) for employee in employees]
        candidates.sort(key=lambda candidate: candidate.suitability_score, reverse=True)
        return candidates

    def recommend_employees_for_task(
        self, requirements: TaskRequirements, organization_id: str
    ) -> list[AssignmentCandidate]:
        """Top candidates for the task, best first."""

        ranked = self.rank_all_candidates(requirements, organization_id)
        top = ranked[: self.settings.max_candidates]
        logger.info(
            "Ranked %d candidates for task requiring %s, returning %d",
            len(ranked),
            requirements.required_skills or "no specific skills",
            len(top),
        )
        return top

    def validate_employee_for_task(
        self, employee_id: str, requirements: TaskRequirements, organization_id: str
    ) -> ValidationResult:
        candidate: Optional[AssignmentCandidate] = next(
            (c for c in self.recommend_employees_for_task(requirements, organization_id) if c.employee_id == employee_id),
            None,
        )
        if candidate is None:
            return ValidationResult(suitable=False, score=0, warnings=["Employee not found or not active"])

        warnings = []
        if candidate.skills_match < MIN_SKILLS_MATCH:
            warnings.append("Employee missing most required skills")
        if candidate.current_workload >= HIGH_WORKLOAD_TASKS:
            warnings.append("Employee has high workload")
        if candidate.productivity_score < MIN_PRODUCTIVITY:
            warnings.append("Employee has low productivity score")

        suitable = candidate.suitability_score >= MIN_SUITABILITY and not warnings
        return ValidationResult(suitable=suitable, score=candidate.suitability_score, warnings=warnings)
