from datetime import datetime, timedelta

import pytest

from workforce_engine.config import EngineSettings
from workforce_engine.errors import DataStoreError
from workforce_engine.productivity import ProductivityScorer, score_tasks
from workforce_engine.schema import Employee, Task
from workforce_engine.store import InMemoryDataStore

NOW = datetime.fromisoformat("2025-03-01T12:00:00")


def task(task_id, status, complexity, created, completed=None, employee="e1"):
    return Task(
        task_id=task_id,
        organization_id="org",
        assigned_to=employee,
        status=status,
        complexity=complexity,
        created_at=datetime.fromisoformat(created),
        completed_at=datetime.fromisoformat(completed) if completed else None,
    )


def employee(employee_id, name="Someone", role="Backend Developer", department="Engineering", active=True):
    return Employee(employee_id, "org", name, role, department, skills=("Python",), is_active=active)


def sample_tasks():
    return [
        task("t1", "completed", "high", "2025-01-01T09:00:00", "2025-01-01T21:00:00"),
        task("t2", "completed", "medium", "2025-01-02T09:00:00", "2025-01-03T09:00:00"),
        task("t3", "in_progress", "medium", "2025-01-04T09:00:00"),
    ]


class FailingStore(InMemoryDataStore):
    def __init__(self, failing_ids, **kwargs):
        super().__init__(**kwargs)
        self.failing_ids = set(failing_ids)

    def tasks_for_employee(self, organization_id, employee_id):
        if employee_id in self.failing_ids:
            raise DataStoreError(f"tasks query failed for {employee_id}")
        return super().tasks_for_employee(organization_id, employee_id)


def test_score_tasks_weighted_factors():
    result = score_tasks(sample_tasks())
    # rate 66.67 * 0.4 + time score capped at 100 * 0.3 + complexity 87.5 * 0.3
    assert result["score"] == 82.92
    assert result["completion_rate"] == 66.67
    assert result["avg_completion_time_hours"] == 18.0
    assert result["avg_complexity_handled"] == 1.75


def test_score_tasks_slow_completion_penalised():
    result = score_tasks([task("t1", "completed", "medium", "2025-01-01T00:00:00", "2025-01-03T00:00:00")])
    assert result["avg_completion_time_hours"] == 48.0
    assert result["score"] == 77.5


def test_score_tasks_defaults_without_completed_tasks():
    result = score_tasks(
        [
            task("t1", "assigned", "high", "2025-01-01T09:00:00"),
            task("t2", "in_progress", "low", "2025-01-01T09:00:00"),
        ]
    )
    assert result["completion_rate"] == 0.0
    assert result["avg_completion_time_hours"] == 24.0
    assert result["avg_complexity_handled"] == 1.0
    assert result["score"] == 45.0


def test_score_tasks_completed_without_timing_uses_default_hours():
    result = score_tasks([task("t1", "completed", "low", "2025-01-01T09:00:00")])
    assert result["avg_completion_time_hours"] == 24.0
    assert result["score"] == 85.0


def test_score_always_within_bounds():
    tasks = [task(f"t{i}", "completed", "high", "2025-01-01T09:00:00", "2025-01-01T09:01:00") for i in range(20)]
    assert 0.0 <= score_tasks(tasks)["score"] <= 100.0


def test_zero_tasks_stores_baseline_record():
    store = InMemoryDataStore(employees=[employee("e1")])
    scorer = ProductivityScorer(store, clock=lambda: NOW)

    record = scorer.calculate_score("org", "e1")

    assert record.score == 50.0
    assert record.completion_rate == 0.0
    assert record.avg_completion_time_hours == 0.0
    assert record.avg_complexity_handled == 0.0
    assert record.calculated_at == NOW
    assert store.latest_score("org", "e1") == record


def test_baseline_score_follows_settings():
    store = InMemoryDataStore(employees=[employee("e1")])
    scorer = ProductivityScorer(store, EngineSettings(baseline_score=60), clock=lambda: NOW)
    assert scorer.calculate_score("org", "e1").score == 60.0


def test_calculate_score_appends_history():
    store = InMemoryDataStore(employees=[employee("e1")], tasks=sample_tasks())
    times = iter([NOW, NOW + timedelta(minutes=5)])
    scorer = ProductivityScorer(store, clock=lambda: next(times))

    first = scorer.calculate_score("org", "e1")
    second = scorer.calculate_score("org", "e1")

    assert store.all_scores("org", "e1") == [first, second]
    assert scorer.get_latest_score("org", "e1") == second


def test_get_latest_score_none_without_history():
    scorer = ProductivityScorer(InMemoryDataStore(employees=[employee("e1")]))
    assert scorer.get_latest_score("org", "e1") is None


def test_calculate_score_propagates_store_failure():
    store = FailingStore({"e1"}, employees=[employee("e1")])
    scorer = ProductivityScorer(store, clock=lambda: NOW)
    with pytest.raises(DataStoreError):
        scorer.calculate_score("org", "e1")
    assert store.latest_score("org", "e1") is None


def test_get_all_scores_latest_per_employee_joined_and_sorted():
    store = InMemoryDataStore(
        employees=[employee("e1", name="Ana", role="Designer"), employee("e2", name="Ben", department="Sales")],
        tasks=sample_tasks(),
    )
    times = iter([NOW - timedelta(days=1), NOW, NOW])
    scorer = ProductivityScorer(store, clock=lambda: next(times))
    scorer.calculate_score("org", "e2")
    latest_e1 = scorer.calculate_score("org", "e1")
    scorer.calculate_score("org", "e2")

    scored = scorer.get_all_scores("org")

    assert [item.employee_id for item in scored] == ["e1", "e2"]
    assert scored[0].record == latest_e1
    assert scored[0].employee_name == "Ana"
    assert scored[0].role == "Designer"
    assert scored[1].department == "Sales"
    assert scored[1].score == 50.0


@pytest.mark.parametrize("workers", [1, 4])
def test_batch_isolates_failures(workers):
    store = FailingStore(
        {"e2"},
        employees=[employee("e1"), employee("e2"), employee("e3", active=False)],
        tasks=sample_tasks(),
    )
    scorer = ProductivityScorer(store, EngineSettings(max_workers=workers), clock=lambda: NOW)

    batch = scorer.batch_calculate_scores("org")

    assert list(batch.results) == ["e1", "e3"]
    assert "e2" in batch.errors
    assert batch.failed == 1
    assert not batch.ok
    assert store.latest_score("org", "e1").score == 82.92
    assert store.latest_score("org", "e3").score == 50.0
    assert store.latest_score("org", "e2") is None
