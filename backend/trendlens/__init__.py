"""trendlens: chart DSL engine over nutrition and exercise logs."""

from trendlens.dsl import ChartDSL, ChartSeries, DailyTotals, execute_dsl, parse_dsl
from trendlens.errors import ChartQueryError
from trendlens.services import ChartService, DailyTotalsService

__version__ = "0.1.0"

__all__ = [
    "ChartDSL",
    "ChartQueryError",
    "ChartSeries",
    "ChartService",
    "DailyTotals",
    "DailyTotalsService",
    "execute_dsl",
    "parse_dsl",
]
