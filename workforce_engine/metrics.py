"""Task outcome metrics."""

from __future__ import annotations

import math
from collections import Counter
from datetime import datetime
from typing import Iterable, Optional

from workforce_engine.schema import Task

COMPLEXITY_WEIGHTS = {"low": 1.0, "medium": 1.5, "high": 2.0}


def clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up (72.5 -> 73)."""

    return int(math.floor(value + 0.5))


def compute_task_metrics(
    tasks: Iterable[Task],
    created_after: Optional[datetime] = None,
    completed_after: Optional[datetime] = None,
) -> dict:
    """Compute completion, timing and complexity metrics over task records.

    ``created_after`` restricts the count-based metrics (total, completed,
    active, completion rate) to tasks created after the cutoff.
    ``completed_after`` restricts the completed-task metrics (average
    hours, complexity mix) to tasks completed after the cutoff.
    """

    total = 0
    completed = 0
    active = 0
    durations = []
    weights = []
    complexity_counts = Counter()

    for task in tasks:
        if created_after is None or (task.created_at is not None and task.created_at > created_after):
            total += 1
            completed += 1 if task.is_completed else 0
            active += 1 if task.is_active else 0

        if not task.is_completed:
            continue
        if completed_after is not None and (task.completed_at is None or task.completed_at <= completed_after):
            continue

        hours = task.duration_hours()
        if hours is not None:
            durations.append(hours)
        weight = COMPLEXITY_WEIGHTS.get(task.complexity)
        if weight is not None:
            weights.append(weight)
        complexity_counts[task.complexity] += 1

    return {
        "total_tasks": total,
        "completed_tasks": completed,
        "active_tasks": active,
        "completion_rate": (completed / total * 100.0) if total else 0.0,
        "avg_completion_hours": sum(durations) / len(durations) if durations else None,
        "avg_complexity": sum(weights) / len(weights) if weights else None,
        "completed_by_complexity": dict(complexity_counts),
        "completed_in_window": sum(complexity_counts.values()),
    }


def count_recent_completions(tasks: Iterable[Task], since: datetime) -> int:
    """Count tasks completed strictly after ``since``."""

    return sum(1 for task in tasks if task.is_completed and task.completed_at is not None and task.completed_at > since)


def count_active(tasks: Iterable[Task]) -> int:
    return sum(1 for task in tasks if task.is_active)
