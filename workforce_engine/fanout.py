"""Fan-out/fan-in over independent per-employee computations."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Sequence, TypeVar

from workforce_engine.schema import BatchResult

logger = logging.getLogger(__name__)

T = TypeVar("T")


def run_per_employee(
    fn: Callable[[str], T],
    employee_ids: Sequence[str],
    max_workers: int = 1,
    label: str = "task",
) -> BatchResult[T]:
    """Call ``fn`` once per employee id and collect results and failures.

    A failing employee is logged and recorded in ``errors``; the others
    still run. Result order follows ``employee_ids``.
    """

    batch: BatchResult[T] = BatchResult()
    if not employee_ids:
        return batch

    def collect(employee_id: str, call: Callable[[], T]) -> None:
        try:
            batch.results[employee_id] = call()
        except Exception as exc:  # noqa: BLE001
            logger.error("%s failed for employee %s: %s", label, employee_id, exc, exc_info=True)
            batch.errors[employee_id] = str(exc) or type(exc).__name__

    if max_workers <= 1 or len(employee_ids) == 1:
        for employee_id in employee_ids:
            collect(employee_id, lambda employee_id=employee_id: fn(employee_id))
    else:
        workers = min(max_workers, len(employee_ids))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [(employee_id, executor.submit(fn, employee_id)) for employee_id in employee_ids]
            for employee_id, future in futures:
                collect(employee_id, future.result)

    logger.info("%s completed: %d succeeded, %d failed", label, batch.succeeded, batch.failed)
    return batch
