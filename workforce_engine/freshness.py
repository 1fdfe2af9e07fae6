"""Recompute-if-stale policy around the productivity scorer."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Callable, Optional

from workforce_engine.productivity import ProductivityScorer
from workforce_engine.schema import ProductivityScoreRecord

logger = logging.getLogger(__name__)


class ScoreFreshnessPolicy:
    """Serve the latest stored score unless it is older than ``max_age``.

    The scorer itself never enforces freshness; callers that want cached
    scores go through this wrapper instead.
    """

    def __init__(
        self,
        scorer: ProductivityScorer,
        max_age: Optional[timedelta] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.scorer = scorer
        self.max_age = max_age if max_age is not None else scorer.settings.freshness_max_age
        self.clock = clock or scorer.clock

    def is_stale(self, record: Optional[ProductivityScoreRecord]) -> bool:
        if record is None:
            return True
        return self.clock() - record.calculated_at > self.max_age

    def get_score(self, organization_id: str, employee_id: str) -> ProductivityScoreRecord:
        record = self.scorer.get_latest_score(organization_id, employee_id)
        if not self.is_stale(record):
            return record
        logger.debug("Score for employee %s missing or stale, recalculating", employee_id)
        return self.scorer.calculate_score(organization_id, employee_id)
