"""Skill priority classification policy.

Rules are evaluated in order and the first rule whose keyword occurs in
the lowercased skill name decides the priority. Anything unmatched is
``low``. Bump ``POLICY_VERSION`` whenever the table changes so stored
reports can be traced to the rules that produced them.
"""

from __future__ import annotations

from workforce_engine.schema import PRIORITY_LEVELS

POLICY_VERSION = "2024.1"

SKILL_PRIORITY_RULES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("critical", ("javascript", "python", "java", "sql", "react", "node")),
    ("high", ("typescript", "api", "database", "testing", "git")),
    ("medium", ("agile", "scrum", "ci/cd", "docker")),
)

DEFAULT_PRIORITY = "low"

PRIORITY_ORDER = {level: rank for rank, level in enumerate(PRIORITY_LEVELS)}


def classify_skill_priority(skill: str) -> str:
    skill_lower = skill.lower()
    for priority, keywords in SKILL_PRIORITY_RULES:
        if any(keyword in skill_lower for keyword in keywords):
            return priority
    return DEFAULT_PRIORITY


def priority_rank(priority: str) -> int:
    return PRIORITY_ORDER[priority]


def more_severe(left: str, right: str) -> str:
    """Return whichever of two priorities is more severe."""

    return left if PRIORITY_ORDER[left] <= PRIORITY_ORDER[right] else right
