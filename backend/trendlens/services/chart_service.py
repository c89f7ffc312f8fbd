"""
Chart Service
=============

End-to-end chart pipeline: DSL -> plan -> DailyTotals -> ChartSeries.

WHAT: Thin orchestrator over the pure DSL package and the aggregation layer
WHY: Callers (saved charts, the chart builder) need one entry point that
     validates, fetches only what the grouping needs, and executes
HOW: parse_dsl() -> build_plan() -> DailyTotalsService -> execute_dsl()

Usage:
    >>> with get_sync_session() as db:
    ...     series = ChartService(db).run(
    ...         {"source": "food", "metric": "calories", "groupBy": "date", "aggregation": "sum"},
    ...         period_days=7,
    ...     )
    >>> series.model_dump(by_alias=True, exclude_none=True)["chartType"]
    'bar'

References:
- trendlens/dsl/planner.py: build_plan()
- trendlens/services/daily_totals_service.py: DailyTotalsService
- trendlens/dsl/executor.py: execute_dsl()
"""

from __future__ import annotations

import logging
import time
from datetime import date
from typing import Any, Mapping, Optional, Union

from sqlalchemy.orm import Session

from trendlens.config import get_settings
from trendlens.dsl.executor import execute_dsl
from trendlens.dsl.planner import build_plan
from trendlens.dsl.schema import ChartDSL, ChartSeries, parse_dsl
from trendlens.services.daily_totals_service import DailyTotalsService

logger = logging.getLogger(__name__)


class ChartService:
    """
    Run chart DSL queries against the record store.

    Errors:
        ChartQueryError: malformed DSL (raised before any store read)
        SQLAlchemyError: store read failed (propagates unchanged)
    """

    def __init__(self, db: Session, totals_service: Optional[DailyTotalsService] = None):
        self.db = db
        self.totals_service = totals_service or DailyTotalsService(db)

    def run(
        self,
        dsl: Union[ChartDSL, Mapping[str, Any]],
        *,
        period_days: Optional[int] = None,
        today: Optional[date] = None,
    ) -> ChartSeries:
        """
        Execute one chart query.

        Args:
            dsl: ChartDSL or its camelCase JSON object
            period_days: Window length; defaults to CHART_DEFAULT_PERIOD_DAYS
            today: Window end (tests pin it); defaults to date.today()

        Returns:
            ChartSeries ready for `model_dump(by_alias=True)`
        """
        started = time.time()
        chart = parse_dsl(dsl)
        if period_days is None:
            period_days = get_settings().CHART_DEFAULT_PERIOD_DAYS

        plan = build_plan(chart, period_days=period_days, today=today)
        logger.info(
            f"[CHART] source={chart.source.value} metric={chart.metric} "
            f"groupBy={chart.group_by.value} aggregation={chart.aggregation.value} "
            f"window={plan.window_start}..{plan.window_end}"
        )

        totals = self.totals_service.fetch_daily_totals(plan)
        series = execute_dsl(chart, totals)

        latency_ms = int((time.time() - started) * 1000)
        logger.info(f"[CHART] Produced {len(series.data)} points in {latency_ms}ms")
        return series
