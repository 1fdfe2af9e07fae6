"""Performance trend prediction from stored productivity scores."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional, Sequence

import numpy as np
from sklearn.linear_model import LinearRegression
from sklearn.metrics import r2_score

from workforce_engine.config import DEFAULT_SETTINGS, EngineSettings
from workforce_engine.fanout import run_per_employee
from workforce_engine.metrics import clamp, compute_task_metrics, round_half_up
from workforce_engine.productivity import utcnow
from workforce_engine.schema import Task, TrendResult
from workforce_engine.store import DataStore

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 86400.0

INSUFFICIENT_DATA_FACTOR = "Insufficient data for trend analysis (need {n}+ scores)"
INSUFFICIENT_DATA_RECOMMENDATION = "Continue monitoring performance. More data needed for accurate prediction."

URGENT_CONFIDENCE = 70
AT_RISK_CONFIDENCE = 50


@dataclass
class TrendFit:
    slope: float
    intercept: float
    r_squared: float
    last_x: float


def _safe_r2(y_true: np.ndarray, y_pred: np.ndarray) -> float:
    if len(np.unique(y_true)) < 2:
        return 0.0
    return float(r2_score(y_true, y_pred))


def fit_linear_trend(points: Sequence[tuple[datetime, float]]) -> TrendFit:
    """Ordinary least squares of score against days since the first point."""

    if len(points) < 2:
        return TrendFit(slope=0.0, intercept=0.0, r_squared=0.0, last_x=0.0)

    first = points[0][0]
    x = np.asarray([(when - first).total_seconds() / SECONDS_PER_DAY for when, _ in points], dtype=float)
    y = np.asarray([score for _, score in points], dtype=float)

    if np.ptp(x) == 0:
        slope, intercept = 0.0, float(np.mean(y))
    else:
        model = LinearRegression().fit(x.reshape(-1, 1), y)
        slope, intercept = float(model.coef_[0]), float(model.intercept_)

    predicted = slope * x + intercept
    return TrendFit(slope=slope, intercept=intercept, r_squared=_safe_r2(y, predicted), last_x=float(x[-1]))


def classify_trend(slope: float, threshold: float = 0.5) -> str:
    if slope > threshold:
        return "improving"
    if slope < -threshold:
        return "declining"
    return "stable"


def contributing_factors(tasks: Sequence[Task], trend: str, since: datetime) -> list[str]:
    """Heuristic explanation of a trend from recent task activity."""

    metrics = compute_task_metrics(tasks, created_after=since, completed_after=since)
    completion_rate = metrics["completion_rate"]
    avg_hours = metrics["avg_completion_hours"]
    high_share_met = metrics["completed_by_complexity"].get("high", 0) > metrics["completed_in_window"] * 0.3

    factors = []
    if trend == "declining":
        if completion_rate < 50:
            factors.append("Low task completion rate (< 50%)")
        if metrics["active_tasks"] > 5:
            factors.append("High number of pending tasks")
        if avg_hours and avg_hours > 72:
            factors.append("Slow task completion times")
    elif trend == "improving":
        if completion_rate > 75:
            factors.append("High task completion rate (> 75%)")
        if metrics["completed_tasks"] > 5:
            factors.append("Consistently completing tasks")
        if avg_hours and avg_hours < 24:
            factors.append("Fast task completion times")
        if high_share_met:
            factors.append("Successfully handling complex tasks")

    if not factors:
        if trend == "stable":
            factors.append("Consistent performance over time")
        elif trend == "improving":
            factors.append("General improvement in work quality")
        else:
            factors.append("Performance variation detected")
    return factors


def recommend_for_trend(trend: str, confidence: int) -> str:
    if trend == "declining":
        if confidence > URGENT_CONFIDENCE:
            return (
                "Immediate attention needed. Consider one-on-one meeting to discuss challenges "
                "and provide support."
            )
        return "Monitor closely. May need intervention if trend continues."
    if trend == "improving":
        return "Positive trend! Consider recognizing achievements and providing growth opportunities."
    return "Performance is stable. Continue current approach and monitor for changes."


class TrendPredictor:
    """Fits a trend line over an employee's recent productivity history."""

    def __init__(
        self,
        store: DataStore,
        settings: EngineSettings = DEFAULT_SETTINGS,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.store = store
        self.settings = settings
        self.clock = clock

    def predict_performance_trend(self, employee_id: str, organization_id: str) -> Optional[TrendResult]:
        employee = self.store.get_employee(organization_id, employee_id)
        if employee is None:
            return None

        settings = self.settings
        since = self.clock() - settings.history_window
        history = self.store.score_history(organization_id, employee_id, since)

        if len(history) < settings.min_trend_points:
            last_score = history[-1].score if history else settings.baseline_score
            return TrendResult(
                employee_id=employee_id,
                employee_name=employee.name,
                trend="stable",
                confidence=0,
                current_score=last_score,
                predicted_score=last_score,
                data_points=len(history),
                contributing_factors=[INSUFFICIENT_DATA_FACTOR.format(n=settings.min_trend_points)],
                recommendation=INSUFFICIENT_DATA_RECOMMENDATION,
            )

        fit = fit_linear_trend([(record.calculated_at, record.score) for record in history])
        trend = classify_trend(fit.slope, settings.slope_threshold)
        confidence = int(clamp(round_half_up(abs(fit.r_squared) * 100)))
        horizon = fit.last_x + settings.forecast_horizon_days
        predicted_score = int(clamp(round_half_up(fit.slope * horizon + fit.intercept)))

        tasks = self.store.tasks_for_employee(organization_id, employee_id)
        logger.debug(
            "Trend for employee %s: slope=%.3f r2=%.3f points=%d", employee_id, fit.slope, fit.r_squared, len(history)
        )
        return TrendResult(
            employee_id=employee_id,
            employee_name=employee.name,
            trend=trend,
            confidence=confidence,
            current_score=history[-1].score,
            predicted_score=predicted_score,
            data_points=len(history),
            contributing_factors=contributing_factors(tasks, trend, since),
            recommendation=recommend_for_trend(trend, confidence),
        )

    def predict_organization_trends(self, organization_id: str) -> list[TrendResult]:
        """Trends for all active employees, declining first, then by confidence."""

        employee_ids = [e.employee_id for e in self.store.list_employees(organization_id, active_only=True)]
        batch = run_per_employee(
            lambda employee_id: self.predict_performance_trend(employee_id, organization_id),
            employee_ids,
            max_workers=self.settings.max_workers,
            label="Trend prediction",
        )
        trends = [trend for trend in batch.results.values() if trend is not None]
        trends.sort(key=lambda t: (t.trend != "declining", -t.confidence))
        return trends

    def get_employees_at_risk(self, organization_id: str) -> list[TrendResult]:
        return [
            trend
            for trend in self.predict_organization_trends(organization_id)
            if trend.trend == "declining" and trend.confidence > AT_RISK_CONFIDENCE
        ]
