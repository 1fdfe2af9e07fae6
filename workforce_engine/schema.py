"""Core data schema for workforce analytics."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Generic, Optional, TypeVar

TASK_STATUSES = ("assigned", "in_progress", "completed")
ACTIVE_STATUSES = ("assigned", "in_progress")
COMPLEXITY_LEVELS = ("low", "medium", "high")
PRIORITY_LEVELS = ("critical", "high", "medium", "low")
TREND_LABELS = ("improving", "declining", "stable")

T = TypeVar("T")


@dataclass
class Task:
    """Task record as supplied by the data store."""

    task_id: str
    organization_id: str
    assigned_to: str
    status: str
    complexity: str
    created_at: datetime
    completed_at: Optional[datetime] = None

    @property
    def is_completed(self) -> bool:
        return self.status == "completed"

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES

    def duration_hours(self) -> Optional[float]:
        if self.completed_at is None or self.created_at is None:
            return None
        return (self.completed_at - self.created_at).total_seconds() / 3600.0


@dataclass
class Employee:
    """Employee identity with an unordered set of skill names."""

    employee_id: str
    organization_id: str
    name: str
    role: str
    department: str
    skills: tuple[str, ...] = ()
    email: str = ""
    is_active: bool = True

    def has_skill(self, skill: str) -> bool:
        wanted = skill.lower()
        return any(own.lower() == wanted for own in self.skills)


@dataclass(frozen=True)
class ProductivityScoreRecord:
    """Immutable historical productivity fact."""

    organization_id: str
    employee_id: str
    score: float
    completion_rate: float
    avg_completion_time_hours: float
    avg_complexity_handled: float
    calculated_at: datetime


@dataclass
class ScoredEmployee:
    """Latest score joined with the employee identity for display."""

    record: ProductivityScoreRecord
    employee_name: str
    role: str
    department: str

    @property
    def employee_id(self) -> str:
        return self.record.employee_id

    @property
    def score(self) -> float:
        return self.record.score


@dataclass
class SkillGapEntry:
    skill: str
    priority: str
    reason: str


@dataclass
class EmployeeSkillGap:
    employee_id: str
    employee_name: str
    role: str
    current_skills: list[str]
    required_skills: list[str]
    missing_skills: list[SkillGapEntry]
    skill_gap_score: int


@dataclass
class OrganizationSkillGap:
    skill: str
    employees_missing: int
    priority: str
    affected_roles: list[str]


@dataclass
class SkillGapRecommendations:
    skill_gap: Optional[EmployeeSkillGap]
    recommendations: list[str]


@dataclass
class TrendResult:
    """Performance trend forecast for one employee."""

    employee_id: str
    employee_name: str
    trend: str
    confidence: int
    current_score: float
    predicted_score: float
    data_points: int
    contributing_factors: list[str]
    recommendation: str

    def __post_init__(self) -> None:
        if self.trend not in TREND_LABELS:
            raise ValueError(f"Unsupported trend label: {self.trend}")


@dataclass
class TaskRequirements:
    required_skills: list[str] = field(default_factory=list)
    complexity: str = "medium"
    department: Optional[str] = None
    estimated_hours: Optional[float] = None


@dataclass
class AssignmentCandidate:
    """Ranked candidate for a task with the factors that produced the rank."""

    employee_id: str
    employee_name: str
    role: str
    department: str
    suitability_score: int
    reasoning: list[str]
    current_workload: int
    productivity_score: float
    skills_match: int


@dataclass
class ValidationResult:
    suitable: bool
    score: int
    warnings: list[str]


@dataclass
class BatchResult(Generic[T]):
    """Per-employee results of a fan-out, with failures kept alongside."""

    results: dict[str, T] = field(default_factory=dict)
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def succeeded(self) -> int:
        return len(self.results)

    @property
    def failed(self) -> int:
        return len(self.errors)

    @property
    def ok(self) -> bool:
        return not self.errors
