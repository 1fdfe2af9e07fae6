from datetime import datetime, timedelta

import pytest

from workforce_engine.config import EngineSettings
from workforce_engine.explain import explain_trend
from workforce_engine.schema import Employee, ProductivityScoreRecord, Task, TrendResult
from workforce_engine.store import InMemoryDataStore
from workforce_engine.trend import TrendPredictor, classify_trend, contributing_factors, fit_linear_trend

START = datetime.fromisoformat("2025-02-01T09:00:00")
NOW = START + timedelta(days=12)


def history(employee_id, scores, start=START, step=timedelta(days=1)):
    return [
        ProductivityScoreRecord("org", employee_id, float(score), 0.0, 0.0, 0.0, start + i * step)
        for i, score in enumerate(scores)
    ]


def predictor_for(employees, scores=(), tasks=(), settings=None):
    store = InMemoryDataStore(employees=employees, tasks=tasks, scores=scores)
    return TrendPredictor(store, settings or EngineSettings(), clock=lambda: NOW)


def person(employee_id, active=True):
    return Employee(employee_id, "org", f"Employee {employee_id}", "Designer", "Design", is_active=active)


def test_fit_linear_trend_perfect_line():
    fit = fit_linear_trend([(START + timedelta(days=i), 50 + 5 * i) for i in range(4)])
    assert fit.slope == pytest.approx(5.0)
    assert fit.intercept == pytest.approx(50.0)
    assert fit.r_squared == pytest.approx(1.0)
    assert fit.last_x == pytest.approx(3.0)


def test_fit_linear_trend_degenerate_inputs():
    flat = fit_linear_trend([(START + timedelta(days=i), 70.0) for i in range(5)])
    assert flat.slope == pytest.approx(0.0)
    assert flat.r_squared == 0.0

    same_day = fit_linear_trend([(START, 40.0), (START, 60.0)])
    assert same_day.slope == 0.0
    assert same_day.intercept == pytest.approx(50.0)

    single = fit_linear_trend([(START, 40.0)])
    assert (single.slope, single.intercept, single.r_squared) == (0.0, 0.0, 0.0)


def test_classify_trend_thresholds():
    assert classify_trend(1.0) == "improving"
    assert classify_trend(0.5) == "stable"
    assert classify_trend(0.0) == "stable"
    assert classify_trend(-0.5) == "stable"
    assert classify_trend(-0.51) == "declining"
    assert classify_trend(0.3, threshold=0.25) == "improving"


def test_four_point_improving_scenario():
    predictor = predictor_for([person("e1")], history("e1", [50, 55, 60, 65]))

    result = predictor.predict_performance_trend("e1", "org")

    assert result.trend == "improving"
    assert result.confidence == 100
    assert result.current_score == 65.0
    assert result.predicted_score == 100
    assert result.data_points == 4
    assert result.contributing_factors == ["General improvement in work quality"]
    assert result.recommendation.startswith("Positive trend!")


def test_ten_point_unit_slope_is_improving():
    predictor = predictor_for([person("e1")], history("e1", range(50, 60), start=NOW - timedelta(days=10)))
    result = predictor.predict_performance_trend("e1", "org")
    assert result.trend == "improving"
    assert result.predicted_score == 66


def test_flat_series_is_stable_with_zero_confidence():
    predictor = predictor_for([person("e1")], history("e1", [70] * 6))
    result = predictor.predict_performance_trend("e1", "org")
    assert result.trend == "stable"
    assert result.confidence == 0
    assert result.predicted_score == 70
    assert result.contributing_factors == ["Consistent performance over time"]
    assert result.recommendation.startswith("Performance is stable")


@pytest.mark.parametrize("scores, expected", [([], 50.0), ([61], 61.0), ([61, 64, 58], 58.0)])
def test_insufficient_history_degrades(scores, expected):
    predictor = predictor_for([person("e1")], history("e1", scores))

    result = predictor.predict_performance_trend("e1", "org")

    assert result.trend == "stable"
    assert result.confidence == 0
    assert result.current_score == expected
    assert result.predicted_score == expected
    assert result.data_points == len(scores)
    assert result.contributing_factors == ["Insufficient data for trend analysis (need 4+ scores)"]


def test_scores_outside_window_are_ignored():
    old = history("e1", [10, 20, 30, 40], start=NOW - timedelta(days=60))
    recent = history("e1", [80, 81], start=NOW - timedelta(days=2))
    result = predictor_for([person("e1")], old + recent).predict_performance_trend("e1", "org")
    assert result.data_points == 2
    assert result.confidence == 0


def test_declining_with_pending_work():
    tasks = [
        Task(f"t{i}", "org", "e1", "assigned", "medium", NOW - timedelta(days=3)) for i in range(6)
    ]
    predictor = predictor_for([person("e1")], history("e1", [80, 70, 60, 50]), tasks)

    result = predictor.predict_performance_trend("e1", "org")

    assert result.trend == "declining"
    assert result.confidence == 100
    assert result.predicted_score == 0
    assert result.contributing_factors == ["Low task completion rate (< 50%)", "High number of pending tasks"]
    assert result.recommendation.startswith("Immediate attention needed")


def test_improving_factors_from_recent_tasks():
    since = NOW - timedelta(days=30)
    tasks = [
        Task(f"t{i}", "org", "e1", "completed", "high" if i < 3 else "low", NOW - timedelta(days=5), NOW - timedelta(days=5, hours=-6))
        for i in range(6)
    ]
    factors = contributing_factors(tasks, "improving", since)
    assert factors == [
        "High task completion rate (> 75%)",
        "Consistently completing tasks",
        "Fast task completion times",
        "Successfully handling complex tasks",
    ]


def test_slow_completions_flagged_when_declining():
    since = NOW - timedelta(days=30)
    tasks = [Task("t1", "org", "e1", "completed", "low", NOW - timedelta(days=10), NOW - timedelta(days=5))]
    assert contributing_factors(tasks, "declining", since) == ["Slow task completion times"]


def test_unknown_employee_returns_none():
    assert predictor_for([]).predict_performance_trend("ghost", "org") is None


def test_organization_trends_and_at_risk():
    noisy_decline = [80, 60, 75, 50, 65, 40]
    predictor = predictor_for(
        [person("up"), person("down"), person("noisy"), person("flat"), person("gone", active=False)],
        history("up", [50, 55, 60, 65])
        + history("down", [80, 70, 60, 50])
        + history("noisy", noisy_decline)
        + history("flat", [70, 70, 70, 70])
        + history("gone", [90, 80, 70, 60]),
        settings=EngineSettings(max_workers=3),
    )

    trends = predictor.predict_organization_trends("org")

    assert [t.employee_id for t in trends][:2] == ["down", "noisy"]
    assert "gone" not in {t.employee_id for t in trends}
    assert {t.employee_id for t in trends[2:]} == {"up", "flat"}
    assert trends[2].employee_id == "up"
    noisy = trends[1]
    assert noisy.trend == "declining"
    # slope -6/day, R^2 = 630 / 1133.33
    assert noisy.confidence == 56
    assert noisy.recommendation == "Monitor closely. May need intervention if trend continues."

    at_risk = predictor.get_employees_at_risk("org")
    assert [t.employee_id for t in at_risk] == ["down", "noisy"]


def test_explain_trend_summary():
    result = predictor_for([person("e1")], history("e1", [50, 55, 60, 65])).predict_performance_trend("e1", "org")
    summary = explain_trend(result)
    assert summary["trend"] == "improving"
    assert summary["score_change"] == 35.0
    assert summary["top_factors"] == ["General improvement in work quality"]


def test_declining_without_heuristic_signal_falls_back():
    since = NOW - timedelta(days=30)
    tasks = [Task("t1", "org", "e1", "completed", "medium", NOW - timedelta(days=2), NOW - timedelta(days=1))]
    assert contributing_factors(tasks, "declining", since) == ["Performance variation detected"]


def test_empty_task_window_counts_as_low_completion():
    since = NOW - timedelta(days=30)
    assert contributing_factors([], "declining", since) == ["Low task completion rate (< 50%)"]


def test_predicted_score_is_integer_at_bounds():
    down = predictor_for([person("e1")], history("e1", [80, 70, 60, 50])).predict_performance_trend("e1", "org")
    up = predictor_for([person("e1")], history("e1", [50, 55, 60, 65])).predict_performance_trend("e1", "org")
    assert (down.predicted_score, up.predicted_score) == (0, 100)
    assert type(down.predicted_score) is int
    assert type(up.predicted_score) is int


def test_trend_result_rejects_unknown_label():
    with pytest.raises(ValueError, match="Unsupported trend label"):
        TrendResult("e1", "Ana", "sideways", 0, 50.0, 50.0, 0, [], "")
