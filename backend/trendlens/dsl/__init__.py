"""Chart DSL: schema, derived formulas, planner and executor.

Nothing in this package performs I/O; the record store is read by
trendlens.services.
"""

from trendlens.dsl.executor import aggregate_values, execute_dsl
from trendlens.dsl.formulas import DERIVED_FORMULAS
from trendlens.dsl.planner import FetchPlan, build_plan
from trendlens.dsl.schema import (
    Aggregation,
    ChartDSL,
    ChartFilter,
    ChartPoint,
    ChartSeries,
    ChartType,
    GroupBy,
    SortOrder,
    Source,
    parse_dsl,
)
from trendlens.dsl.totals import (
    DailyTotals,
    ExerciseDayTotals,
    ExerciseItemTotals,
    FoodDayTotals,
    FoodItemTotals,
)

__all__ = [
    "Aggregation",
    "ChartDSL",
    "ChartFilter",
    "ChartPoint",
    "ChartSeries",
    "ChartType",
    "DERIVED_FORMULAS",
    "DailyTotals",
    "ExerciseDayTotals",
    "ExerciseItemTotals",
    "FetchPlan",
    "FoodDayTotals",
    "FoodItemTotals",
    "GroupBy",
    "SortOrder",
    "Source",
    "aggregate_values",
    "build_plan",
    "execute_dsl",
    "parse_dsl",
]
