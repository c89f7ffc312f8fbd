"""
Chart Executor
==============

Executes a ChartDSL against a DailyTotals snapshot and returns a ChartSeries.

WHY separate executor?
- Pure function: no I/O, no shared state, never mutates DailyTotals
- Safe to call concurrently against distinct (or the same) snapshots
- Lookup tables (formulas, colors, legacy keys) are injected, so tests can
  run the engine in isolation

Algorithm:
1. Normalize legacy metric keys, select the source map, sort dates
2. Apply the dayOfWeek filter (0=Sun ... 6=Sat)
3. Extract one value per date (derived formula or raw metric; missing -> dropped)
4. Group: date, dayOfWeek, weekdayVsWeekend, week, hourOfDay, item, category
5. Sort non-chronological groupings by value when requested, then apply limit
6. Shape the output (area -> line, color, axis labels)

Aggregation semantics:
- Time buckets (week) and categorical buckets (dayOfWeek, weekdayVsWeekend,
  hourOfDay) reduce their values with aggregate_values()
- date points are single values, never re-aggregated
- item and category read window totals that were folded by the aggregation
  layer; they are not re-aggregated either

Related files:
- trendlens/dsl/schema.py: ChartDSL in, ChartSeries out
- trendlens/dsl/totals.py: DailyTotals
- trendlens/dsl/formulas.py: DERIVED_FORMULAS
- trendlens/dsl/catalog.py: METRIC_COLORS, LEGACY_METRIC_KEYS
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from trendlens.dsl import dates
from trendlens.dsl.catalog import (
    DEFAULT_COLOR,
    LEGACY_METRIC_KEYS,
    METRIC_COLORS,
    SOURCE_METRICS,
    normalize_metric_key,
)
from trendlens.dsl.formulas import DERIVED_FORMULAS, Formula, round_half_up
from trendlens.dsl.schema import (
    Aggregation,
    AxisSpec,
    ChartDSL,
    ChartPoint,
    ChartSeries,
    ChartType,
    DetailPair,
    GroupBy,
    SortOrder,
    Source,
    parse_dsl,
)
from trendlens.dsl.totals import DailyTotals
from trendlens.errors import invalid_enum

logger = logging.getLogger(__name__)


ITEM_LABEL_MAX = 25
ITEM_LABEL_KEEP = 22
ELLIPSIS = "…"

# Companion metrics listed in tooltips next to the plotted one
_DAY_DETAIL_KEYS = {
    Source.FOOD: ("calories", "protein", "carbs", "fat", "fiber", "entries"),
    Source.EXERCISE: ("sets", "duration_minutes", "distance_miles", "calories_burned", "entries"),
}
_ITEM_DETAIL_KEYS = {
    Source.FOOD: ("entries", "calories", "protein"),
    Source.EXERCISE: ("entries", "sets", "duration_minutes", "calories_burned"),
}
_CATEGORY_DETAIL_KEYS = ("sets", "duration_minutes", "distance_miles", "calories_burned", "entries")
_CATEGORY_ORDER = ("Cardio", "Strength")


# =====================================================================
# Aggregation
# =====================================================================

def aggregate_values(values: Sequence[float], method: Union[Aggregation, str]) -> float:
    """
    Reduce a non-empty bucket of values.

    Args:
        values: Bucket values (must not be empty; callers skip empty buckets)
        method: sum | average | max | min | count

    Returns:
        The reduced value. `count` is len(values) and deliberately ignores the
        values themselves: it answers "how often", never "how much".

    Raises:
        ValueError: values is empty
        ChartQueryError: method outside the closed Aggregation set

    Example:
        >>> aggregate_values([5, 5000, 1], "count")
        3
        >>> aggregate_values([600, 400], "average")
        500.0
    """
    if not values:
        raise ValueError("aggregate_values() requires at least one value")

    if method == Aggregation.SUM:
        return sum(values)
    if method == Aggregation.AVERAGE:
        return sum(values) / len(values)
    if method == Aggregation.MAX:
        return max(values)
    if method == Aggregation.MIN:
        return min(values)
    if method == Aggregation.COUNT:
        return len(values)
    raise invalid_enum("aggregation", method, list(Aggregation))


# =====================================================================
# Helpers
# =====================================================================

def _format_detail(value: float) -> str:
    if value >= 1000:
        return f"{value:,.0f}"
    return str(round_half_up(value))


def _build_details(bag, keys: Sequence[str], exclude: Optional[str]) -> List[DetailPair]:
    """Non-zero companion values of `bag`, skipping the plotted metric."""
    details = []
    for key in keys:
        if key == exclude:
            continue
        value = bag.get(key) if bag is not None else None
        if not value:
            continue
        details.append(DetailPair(label=key, value=_format_detail(value)))
    return details


def _count_detail(label: str, n: int) -> List[DetailPair]:
    return [DetailPair(label=label, value=str(n))]


def _truncate_label(label: str) -> str:
    if len(label) > ITEM_LABEL_MAX:
        return label[:ITEM_LABEL_KEEP] + ELLIPSIS
    return label


def _source_map(source: Source, totals: DailyTotals) -> Mapping[str, Any]:
    if source == Source.FOOD:
        return totals.food
    if source == Source.EXERCISE:
        return totals.exercise
    raise invalid_enum("source", source, list(Source))


class _Context:
    """Resolved per-call inputs shared by the grouping strategies."""

    def __init__(
        self,
        dsl: ChartDSL,
        metric: str,
        totals: DailyTotals,
        formula: Optional[Formula],
    ):
        self.dsl = dsl
        self.metric = metric
        self.totals = totals
        self.formula = formula
        self.plotted = dsl.derived_metric if formula is not None else metric

    def value_of(self, bag) -> Optional[float]:
        """Scalar for one bag: derived formula if set, else the raw metric."""
        if bag is None:
            return None
        if self.formula is not None:
            return self.formula(bag)
        return bag.get(self.metric)

    def reduce(self, values: Sequence[float]) -> float:
        return round_half_up(aggregate_values(values, self.dsl.aggregation))


# =====================================================================
# Grouping strategies
# =====================================================================

DateValues = List[Tuple[str, float]]
Grouper = Callable[[_Context, DateValues], List[ChartPoint]]


def _group_by_date(ctx: _Context, date_values: DateValues) -> List[ChartPoint]:
    source_map = _source_map(ctx.dsl.source, ctx.totals)
    return [
        ChartPoint(
            label=dates.month_day_label(day),
            value=round_half_up(value),
            raw_date=day,
            details=_build_details(source_map.get(day), _DAY_DETAIL_KEYS[ctx.dsl.source], ctx.plotted),
        )
        for day, value in date_values
    ]


def _group_by_day_of_week(ctx: _Context, date_values: DateValues) -> List[ChartPoint]:
    buckets: Dict[int, List[float]] = defaultdict(list)
    for day, value in date_values:
        buckets[dates.day_of_week(day)].append(value)

    points = []
    for dow in dates.WEEKDAY_ORDER:
        values = buckets.get(dow)
        if not values:
            continue
        points.append(ChartPoint(
            label=dates.DAY_NAMES[dow],
            value=ctx.reduce(values),
            details=_count_detail("days", len(values)),
        ))
    return points


def _group_weekday_vs_weekend(ctx: _Context, date_values: DateValues) -> List[ChartPoint]:
    weekday: List[float] = []
    weekend: List[float] = []
    for day, value in date_values:
        (weekend if dates.is_weekend(day) else weekday).append(value)

    points = []
    for label, values in (("Weekdays", weekday), ("Weekends", weekend)):
        if values:
            points.append(ChartPoint(
                label=label,
                value=ctx.reduce(values),
                details=_count_detail("days", len(values)),
            ))
    return points


def _group_by_week(ctx: _Context, date_values: DateValues) -> List[ChartPoint]:
    buckets: Dict[Tuple[int, int], List[float]] = defaultdict(list)
    latest: Dict[Tuple[int, int], str] = {}
    for day, value in date_values:
        key = dates.iso_week_key(day)
        buckets[key].append(value)
        if key not in latest or day > latest[key]:
            latest[key] = day

    return [
        ChartPoint(
            label=dates.week_label(key),
            value=ctx.reduce(buckets[key]),
            raw_date=latest[key],
            details=_count_detail("days", len(buckets[key])),
        )
        for key in sorted(buckets)
    ]


def _group_by_hour(ctx: _Context, _date_values: DateValues) -> List[ChartPoint]:
    hourly = ctx.totals.food_by_hour if ctx.dsl.source == Source.FOOD else ctx.totals.exercise_by_hour
    if hourly is None:
        return []

    points = []
    for hour in range(24):
        records = hourly.get(hour)
        if not records:
            continue
        values = [v for v in (ctx.value_of(record) for record in records) if v is not None]
        if not values:
            continue
        points.append(ChartPoint(
            label=dates.hour_label(hour),
            value=ctx.reduce(values),
            details=_count_detail("entries", len(records)),
        ))
    return points


def _group_by_item(ctx: _Context, _date_values: DateValues) -> List[ChartPoint]:
    items = ctx.totals.food_by_item if ctx.dsl.source == Source.FOOD else ctx.totals.exercise_by_item
    if items is None:
        return []

    points = []
    for key, item in items.items():
        if ctx.dsl.aggregation == Aggregation.COUNT:
            value = item.count
        else:
            value = ctx.value_of(item)
        if value is None:
            continue
        points.append(ChartPoint(
            label=_truncate_label(item.description or key),
            value=round_half_up(value),
            details=_build_details(item, _ITEM_DETAIL_KEYS[ctx.dsl.source], ctx.plotted),
        ))
    return points


def _group_by_category(ctx: _Context, _date_values: DateValues) -> List[ChartPoint]:
    if ctx.dsl.source != Source.EXERCISE or ctx.totals.exercise_by_category is None:
        return []

    points = []
    for label in _CATEGORY_ORDER:
        totals = ctx.totals.exercise_by_category.get(label)
        if totals is None:
            continue
        # Window totals: read directly, no re-aggregation
        value = totals.get(ctx.metric)
        if value is None:
            continue
        points.append(ChartPoint(
            label=label,
            value=round_half_up(value),
            details=_build_details(totals, _CATEGORY_DETAIL_KEYS, ctx.metric),
        ))
    return points


GROUPERS: Mapping[GroupBy, Grouper] = {
    GroupBy.DATE: _group_by_date,
    GroupBy.DAY_OF_WEEK: _group_by_day_of_week,
    GroupBy.WEEKDAY_VS_WEEKEND: _group_weekday_vs_weekend,
    GroupBy.WEEK: _group_by_week,
    GroupBy.HOUR_OF_DAY: _group_by_hour,
    GroupBy.ITEM: _group_by_item,
    GroupBy.CATEGORY: _group_by_category,
}


# =====================================================================
# Entry point
# =====================================================================

def _extract_date_values(ctx: _Context) -> DateValues:
    """Steps 1-3: sorted dates, dayOfWeek filter, one value per surviving date."""
    source_map = _source_map(ctx.dsl.source, ctx.totals)
    days = sorted(source_map)

    chart_filter = ctx.dsl.filter
    if chart_filter is not None and chart_filter.day_of_week is not None:
        allowed = set(chart_filter.day_of_week)
        days = [d for d in days if dates.day_of_week(d) in allowed]

    date_values: DateValues = []
    for day in days:
        # Derived formulas are food formulas: they read the food bag for that date
        bag = ctx.totals.food.get(day) if ctx.formula is not None else source_map.get(day)
        value = ctx.value_of(bag)
        if value is not None:
            date_values.append((day, value))
    return date_values


def _closed(enum_cls, value, field_name: str):
    try:
        return enum_cls(value)
    except ValueError:
        raise invalid_enum(field_name, value, list(enum_cls)) from None


def _normalize(dsl: ChartDSL, legacy_keys: Mapping[str, str]) -> ChartDSL:
    """
    Re-check the closed enumerations and translate legacy metric keys.

    parse_dsl() already validates dict payloads; this also covers ChartDSL
    instances built without validation (model_construct).
    """
    update: Dict[str, Any] = {
        "source": _closed(Source, dsl.source, "source"),
        "group_by": _closed(GroupBy, dsl.group_by, "groupBy"),
        "aggregation": _closed(Aggregation, dsl.aggregation, "aggregation"),
        "chart_type": _closed(ChartType, dsl.chart_type, "chartType"),
        "metric": normalize_metric_key(dsl.metric, legacy_keys),
    }
    if dsl.compare is not None:
        update["compare"] = dsl.compare.model_copy(
            update={"metric": normalize_metric_key(dsl.compare.metric, legacy_keys)}
        )
    return dsl.model_copy(update=update)


def _sort_points(points: List[ChartPoint], sort: Optional[SortOrder]) -> List[ChartPoint]:
    if sort == SortOrder.VALUE_ASC:
        return sorted(points, key=lambda p: p.value)
    if sort == SortOrder.VALUE_DESC:
        return sorted(points, key=lambda p: p.value, reverse=True)
    return points


def execute_dsl(
    dsl: Union[ChartDSL, Mapping[str, Any]],
    daily_totals: DailyTotals,
    *,
    formulas: Mapping[str, Formula] = DERIVED_FORMULAS,
    colors: Mapping[str, str] = METRIC_COLORS,
    default_color: str = DEFAULT_COLOR,
    legacy_keys: Mapping[str, str] = LEGACY_METRIC_KEYS,
) -> ChartSeries:
    """
    Execute a chart DSL against a DailyTotals snapshot.

    Args:
        dsl: Validated ChartDSL, or a raw JSON object validated here
        daily_totals: Read-only snapshot from the aggregation layer
        formulas: Derived metric formula table
        colors: metric -> display color
        default_color: Color for metrics missing from `colors`
        legacy_keys: Abbreviated metric key -> canonical key

    Returns:
        ChartSeries; `data` is empty (never an error) when the window has no
        data or the grouping's optional map was not computed.

    Raises:
        ChartQueryError: DSL is malformed (missing field, enumeration value
            outside its closed set)

    Example:
        >>> series = execute_dsl(
        ...     {"source": "food", "metric": "calories", "groupBy": "date", "aggregation": "sum"},
        ...     totals,
        ... )
        >>> [p.value for p in series.data]
        [2000, 1800, 2200]
    """
    dsl = _normalize(parse_dsl(dsl), legacy_keys)
    metric = dsl.metric
    grouper = GROUPERS[dsl.group_by]

    formula = formulas.get(dsl.derived_metric) if dsl.derived_metric else None
    if dsl.derived_metric and formula is None:
        logger.debug(f"[DSL] Unknown derivedMetric {dsl.derived_metric!r}, using metric {metric!r}")
    if formula is None and metric not in SOURCE_METRICS[dsl.source]:
        logger.debug(f"[DSL] Metric {metric!r} is not a {dsl.source.value} metric; days without it are dropped")
    if dsl.window is not None or dsl.transform is not None:
        logger.debug(f"[DSL] window={dsl.window} transform={dsl.transform} are reserved and not applied")

    ctx = _Context(dsl=dsl, metric=metric, totals=daily_totals, formula=formula)

    date_values = _extract_date_values(ctx)
    points = grouper(ctx, date_values)

    if not dsl.group_by.is_chronological:
        points = _sort_points(points, dsl.sort)

    if dsl.limit:
        points = points[: dsl.limit]

    y_label = ctx.plotted
    x_label = "Date" if dsl.group_by == GroupBy.DATE else dsl.group_by.value

    series = ChartSeries(
        chart_type=ChartType.LINE if dsl.chart_type == ChartType.AREA else dsl.chart_type,
        title=dsl.title or f"{y_label} by {x_label}",
        x_axis=AxisSpec(field="label", label=x_label),
        y_axis=AxisSpec(label=y_label),
        color=colors.get(metric, default_color),
        data=points,
        data_key="value",
        data_source=dsl.source,
    )

    logger.debug(
        f"[DSL] Executed source={dsl.source.value} metric={y_label} "
        f"groupBy={dsl.group_by.value} -> {len(points)} points"
    )
    return series
