"""Productivity scoring with append-only score history."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, Iterable, Optional

from workforce_engine.config import DEFAULT_SETTINGS, EngineSettings
from workforce_engine.fanout import run_per_employee
from workforce_engine.metrics import clamp, compute_task_metrics
from workforce_engine.schema import BatchResult, ProductivityScoreRecord, ScoredEmployee, Task
from workforce_engine.store import DataStore

logger = logging.getLogger(__name__)

COMPLETION_RATE_WEIGHT = 0.4
COMPLETION_TIME_WEIGHT = 0.3
COMPLEXITY_WEIGHT = 0.3

BASELINE_HOURS = 24.0
MAX_COMPLEXITY_WEIGHT = 2.0


def utcnow() -> datetime:
    """Naive UTC timestamp, the convention used by every stored record."""

    return datetime.now(timezone.utc).replace(tzinfo=None)


def score_tasks(tasks: Iterable[Task], baseline_score: float = 50.0) -> dict:
    """Compute the productivity score and its factors from task outcomes."""

    metrics = compute_task_metrics(tasks)
    if metrics["total_tasks"] == 0:
        return {
            "score": float(baseline_score),
            "completion_rate": 0.0,
            "avg_completion_time_hours": 0.0,
            "avg_complexity_handled": 0.0,
        }

    completion_rate = metrics["completion_rate"]
    avg_hours = metrics["avg_completion_hours"]
    if avg_hours is None:
        avg_hours = BASELINE_HOURS
    avg_complexity = metrics["avg_complexity"] or 1.0

    # zero average duration is as fast as it gets
    completion_time_score = clamp((BASELINE_HOURS / avg_hours) * 100.0) if avg_hours != 0 else 100.0
    complexity_score = (avg_complexity / MAX_COMPLEXITY_WEIGHT) * 100.0

    raw_score = (
        completion_rate * COMPLETION_RATE_WEIGHT
        + completion_time_score * COMPLETION_TIME_WEIGHT
        + complexity_score * COMPLEXITY_WEIGHT
    )
    return {
        "score": round(clamp(raw_score), 2),
        "completion_rate": round(completion_rate, 2),
        "avg_completion_time_hours": round(avg_hours, 2),
        "avg_complexity_handled": round(avg_complexity, 2),
    }


class ProductivityScorer:
    """Computes productivity scores and appends them to the score history."""

    def __init__(
        self,
        store: DataStore,
        settings: EngineSettings = DEFAULT_SETTINGS,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.store = store
        self.settings = settings
        self.clock = clock

    def calculate_score(self, organization_id: str, employee_id: str) -> ProductivityScoreRecord:
        """Score one employee from all of their tasks and persist a new record.

        Each call appends; earlier records are never touched. Store errors
        propagate to the caller.
        """

        tasks = self.store.tasks_for_employee(organization_id, employee_id)
        factors = score_tasks(tasks, baseline_score=self.settings.baseline_score)
        record = ProductivityScoreRecord(
            organization_id=organization_id,
            employee_id=employee_id,
            calculated_at=self.clock(),
            **factors,
        )
        self.store.append_score(record)

        if tasks:
            logger.info("Productivity score calculated for employee %s: %.2f", employee_id, record.score)
        else:
            logger.info("No tasks for employee %s, stored baseline score %.2f", employee_id, record.score)
        return record

    def get_latest_score(self, organization_id: str, employee_id: str) -> Optional[ProductivityScoreRecord]:
        return self.store.latest_score(organization_id, employee_id)

    def get_all_scores(self, organization_id: str, order_by_score: bool = True) -> list[ScoredEmployee]:
        """Most recent record per employee, joined with identity for display."""

        scored = []
        for record in self.store.latest_scores(organization_id):
            employee = self.store.get_employee(organization_id, record.employee_id)
            if employee is None:
                logger.debug("Skipping score for unknown employee %s", record.employee_id)
                continue
            scored.append(
                ScoredEmployee(
                    record=record,
                    employee_name=employee.name,
                    role=employee.role,
                    department=employee.department,
                )
            )

        if order_by_score:
            scored.sort(key=lambda item: item.score, reverse=True)
        return scored

    def batch_calculate_scores(self, organization_id: str) -> BatchResult[ProductivityScoreRecord]:
        """Recalculate every employee of the organization, isolating failures."""

        employee_ids = [e.employee_id for e in self.store.list_employees(organization_id)]
        logger.info("Batch calculating scores for %d employees", len(employee_ids))
        return run_per_employee(
            lambda employee_id: self.calculate_score(organization_id, employee_id),
            employee_ids,
            max_workers=self.settings.max_workers,
            label="Productivity score",
        )
