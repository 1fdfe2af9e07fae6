"""Skill-gap analysis against role requirements."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence

from workforce_engine.catalog import RoleCatalog, resolve_required_skills
from workforce_engine.config import DEFAULT_SETTINGS, EngineSettings
from workforce_engine.fanout import run_per_employee
from workforce_engine.metrics import round_half_up
from workforce_engine.priority_policy import classify_skill_priority, more_severe, priority_rank
from workforce_engine.schema import (
    Employee,
    EmployeeSkillGap,
    OrganizationSkillGap,
    SkillGapEntry,
    SkillGapRecommendations,
)
from workforce_engine.store import DataStore

logger = logging.getLogger(__name__)

TRAINING_THRESHOLD = 50
MENTORSHIP_THRESHOLD = 70


def find_missing_skills(current_skills: Sequence[str], required_skills: Sequence[str], role: str) -> list[SkillGapEntry]:
    """Required skills absent from ``current_skills``, most severe first.

    Entries of equal priority keep their requirement order.
    """

    owned = {skill.lower() for skill in current_skills}
    missing = [
        SkillGapEntry(skill=skill, priority=classify_skill_priority(skill), reason=f"Required for {role} role")
        for skill in required_skills
        if skill.lower() not in owned
    ]
    return sorted(missing, key=lambda entry: priority_rank(entry.priority))


def skill_gap_score(missing_count: int, required_count: int) -> int:
    if required_count == 0:
        return 0
    return round_half_up(missing_count / required_count * 100)


def build_recommendations(skill_gap: EmployeeSkillGap) -> list[str]:
    """Turn a skill gap into human-readable development guidance."""

    recommendations = []
    critical = [entry.skill for entry in skill_gap.missing_skills if entry.priority == "critical"]
    high = [entry.skill for entry in skill_gap.missing_skills if entry.priority == "high"]

    if critical:
        recommendations.append(f"Focus on critical skills: {', '.join(critical)}")
    if high:
        recommendations.append(f"Develop high-priority skills: {', '.join(high)}")
    if skill_gap.skill_gap_score > TRAINING_THRESHOLD:
        recommendations.append("Consider enrolling in training programs or online courses")
    if skill_gap.skill_gap_score > MENTORSHIP_THRESHOLD:
        recommendations.append("Significant skill gap detected. Recommend mentorship or role adjustment")
    if not skill_gap.missing_skills:
        recommendations.append("All required skills present! Consider advanced certifications")
    return recommendations


@dataclass
class _SkillAggregate:
    count: int
    priority: str
    roles: dict = field(default_factory=dict)


class SkillGapAnalyzer:
    """Compares employee skills with the requirements of their role."""

    def __init__(
        self,
        store: DataStore,
        catalog: Optional[RoleCatalog] = None,
        settings: EngineSettings = DEFAULT_SETTINGS,
    ) -> None:
        self.store = store
        self.catalog = catalog
        self.settings = settings

    def required_skills_for(self, role: str) -> tuple[str, ...]:
        return resolve_required_skills(role, self.catalog)

    def gap_for_employee(self, employee: Employee) -> EmployeeSkillGap:
        required = self.required_skills_for(employee.role)
        missing = find_missing_skills(employee.skills, required, employee.role)
        return EmployeeSkillGap(
            employee_id=employee.employee_id,
            employee_name=employee.name,
            role=employee.role,
            current_skills=list(employee.skills),
            required_skills=list(required),
            missing_skills=missing,
            skill_gap_score=skill_gap_score(len(missing), len(required)),
        )

    def calculate_employee_skill_gap(self, employee_id: str, organization_id: str) -> Optional[EmployeeSkillGap]:
        employee = self.store.get_employee(organization_id, employee_id)
        if employee is None:
            return None
        return self.gap_for_employee(employee)

    def calculate_organization_skill_gaps(self, organization_id: str) -> list[OrganizationSkillGap]:
        """Aggregate missing skills across all active employees.

        Sorted by priority severity, then by the number of employees
        missing the skill (descending).
        """

        employees = {e.employee_id: e for e in self.store.list_employees(organization_id, active_only=True)}
        batch = run_per_employee(
            lambda employee_id: self.gap_for_employee(employees[employee_id]),
            list(employees),
            max_workers=self.settings.max_workers,
            label="Skill gap analysis",
        )

        aggregates: dict[str, _SkillAggregate] = {}
        for gap in batch.results.values():
            for entry in gap.missing_skills:
                aggregate = aggregates.get(entry.skill)
                if aggregate is None:
                    aggregate = aggregates[entry.skill] = _SkillAggregate(count=0, priority=entry.priority)
                aggregate.count += 1
                aggregate.roles[gap.role] = None
                aggregate.priority = more_severe(aggregate.priority, entry.priority)

        gaps = [
            OrganizationSkillGap(
                skill=skill,
                employees_missing=aggregate.count,
                priority=aggregate.priority,
                affected_roles=list(aggregate.roles),
            )
            for skill, aggregate in aggregates.items()
        ]
        gaps.sort(key=lambda gap: (priority_rank(gap.priority), -gap.employees_missing))
        logger.info("Organization %s: %d distinct missing skills", organization_id, len(gaps))
        return gaps

    def get_skill_gap_recommendations(self, employee_id: str, organization_id: str) -> SkillGapRecommendations:
        skill_gap = self.calculate_employee_skill_gap(employee_id, organization_id)
        if skill_gap is None:
            return SkillGapRecommendations(skill_gap=None, recommendations=[])
        return SkillGapRecommendations(skill_gap=skill_gap, recommendations=build_recommendations(skill_gap))
