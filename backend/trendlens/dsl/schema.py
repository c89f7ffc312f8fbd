"""
Chart DSL Schema
================

Pydantic models defining the chart DSL contract and the chart series output.

The DSL is produced upstream (chart builder UI or the natural-language
translator) and consumed once by the executor. JSON uses camelCase keys
(`groupBy`, `derivedMetric`, ...); Python attributes are snake_case.

Related files:
- trendlens/dsl/planner.py: Derives what DailyTotals must contain
- trendlens/dsl/executor.py: Executes the DSL against DailyTotals
- trendlens/errors.py: ChartQueryError raised by parse_dsl()
"""

from __future__ import annotations

from enum import Enum
from typing import Any, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from trendlens.errors import from_validation_error


_DSL_CONFIG = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    frozen=True,
    extra="ignore",
)


class ChartType(str, Enum):
    """Requested visualization. AREA is rendered as LINE downstream."""
    BAR = "bar"
    LINE = "line"
    AREA = "area"


class Source(str, Enum):
    """Which half of DailyTotals a chart reads."""
    FOOD = "food"
    EXERCISE = "exercise"


class GroupBy(str, Enum):
    """
    Grouping dimension.

    - DATE / WEEK: chronological, never re-sorted
    - DAY_OF_WEEK / WEEKDAY_VS_WEEKEND: canonical bucket order
    - HOUR_OF_DAY / ITEM / CATEGORY: need optional DailyTotals maps
    """
    DATE = "date"
    DAY_OF_WEEK = "dayOfWeek"
    HOUR_OF_DAY = "hourOfDay"
    WEEKDAY_VS_WEEKEND = "weekdayVsWeekend"
    WEEK = "week"
    ITEM = "item"
    CATEGORY = "category"

    @property
    def is_chronological(self) -> bool:
        return self in (GroupBy.DATE, GroupBy.WEEK)


class Aggregation(str, Enum):
    """How bucket values are reduced. COUNT counts contributors, not magnitude."""
    SUM = "sum"
    AVERAGE = "average"
    MAX = "max"
    MIN = "min"
    COUNT = "count"


class SortOrder(str, Enum):
    LABEL = "label"
    VALUE_ASC = "value_asc"
    VALUE_DESC = "value_desc"


class ExerciseCategory(str, Enum):
    CARDIO = "Cardio"
    STRENGTH = "Strength"


class Transform(str, Enum):
    CUMULATIVE = "cumulative"


class ChartFilter(BaseModel):
    """
    Optional scoping filters. All filters are ANDed together.

    Fields:
    - exercise_key: Canonical exercise identifier (e.g. "bench_press")
    - exercise_subtype: Exercise subtype (e.g. "running", "indoor")
    - day_of_week: Weekdays to keep, 0=Sun ... 6=Sat
    - category: Cardio or Strength

    exercise_* and category only apply to the exercise source; they are
    resolved while building DailyTotals, not by the executor.
    """
    model_config = _DSL_CONFIG

    exercise_key: Optional[str] = None
    exercise_subtype: Optional[str] = None
    day_of_week: Optional[List[int]] = None
    category: Optional[ExerciseCategory] = None

    @field_validator("day_of_week")
    @classmethod
    def _check_days(cls, v):
        if v is None:
            return v
        for day in v:
            if day < 0 or day > 6:
                raise ValueError("dayOfWeek values must be between 0 (Sun) and 6 (Sat)")
        return v


class ChartCompare(BaseModel):
    """Secondary series request. Carried through metric normalization only."""
    model_config = _DSL_CONFIG

    metric: str
    source: Optional[Source] = None


class ChartDSL(BaseModel):
    """
    DSL contract for a single chart.

    Required: source, metric, group_by, aggregation.

    Examples:
        # "Average calories by weekday"
        {
            "chartType": "bar",
            "source": "food",
            "metric": "calories",
            "groupBy": "dayOfWeek",
            "aggregation": "average",
            "sort": "value_desc"
        }

        # "Protein share of calories per day"
        {
            "chartType": "line",
            "source": "food",
            "metric": "calories",
            "derivedMetric": "protein_pct",
            "groupBy": "date",
            "aggregation": "sum"
        }

    Notes:
    - derived_metric overrides metric for value extraction
    - window and transform are reserved; they are accepted but not applied
    """
    model_config = _DSL_CONFIG

    chart_type: ChartType = Field(default=ChartType.BAR, description="Visualization type")
    title: Optional[str] = Field(default=None, description="Chart title")

    source: Source = Field(description="Record source to read")
    metric: str = Field(min_length=1, description="Key into the per-day bag")
    derived_metric: Optional[str] = Field(default=None, description="Key into the derived formula table")

    group_by: GroupBy = Field(description="Grouping dimension")
    aggregation: Aggregation = Field(description="Bucket reduction method")

    filter: Optional[ChartFilter] = None
    compare: Optional[ChartCompare] = None

    sort: Optional[SortOrder] = Field(default=None, description="Ordering for non-chronological groupings")
    limit: Optional[int] = Field(default=None, ge=1, description="Keep only the first N points")

    window: Optional[int] = Field(default=None, ge=1, description="Reserved: rolling window size")
    transform: Optional[Transform] = Field(default=None, description="Reserved: post-processing transform")

    @field_validator("derived_metric", mode="before")
    @classmethod
    def _blank_to_none(cls, v):
        # The translator emits "" / null interchangeably for "no derived metric"
        if isinstance(v, str) and not v.strip():
            return None
        return v


def parse_dsl(payload: Union[ChartDSL, Mapping[str, Any]]) -> ChartDSL:
    """
    Validate a raw DSL payload.

    Args:
        payload: Parsed JSON object (camelCase or snake_case keys) or a ChartDSL

    Returns:
        Validated, frozen ChartDSL

    Raises:
        ChartQueryError: Missing required field, bad type, or enumeration
            value outside its closed set
    """
    if isinstance(payload, ChartDSL):
        return payload
    try:
        return ChartDSL.model_validate(payload)
    except ValidationError as exc:
        raise from_validation_error(exc) from exc


# =====================================================================
# Output
# =====================================================================

_SERIES_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DetailPair(BaseModel):
    """Secondary context shown in tooltips, e.g. {"label": "protein", "value": "150"}."""
    model_config = _SERIES_CONFIG

    label: str
    value: str


class ChartPoint(BaseModel):
    """
    One rendered point.

    raw_date is set for date and week groupings (the latest day in the bucket
    for weeks) so the presentation layer can navigate to that day.
    """
    model_config = _SERIES_CONFIG

    label: str
    value: float
    raw_date: Optional[str] = None
    details: List[DetailPair] = Field(default_factory=list)


class AxisSpec(BaseModel):
    model_config = _SERIES_CONFIG

    field: Optional[str] = None
    label: str


class ChartSeries(BaseModel):
    """
    Executor response structure, ready for direct rendering.

    Serialize with `series.model_dump(by_alias=True, exclude_none=True)`
    to get the camelCase JSON the renderer expects.
    """
    model_config = _SERIES_CONFIG

    chart_type: ChartType
    title: str
    x_axis: AxisSpec
    y_axis: AxisSpec
    color: str
    data: List[ChartPoint] = Field(default_factory=list)
    data_key: str = "value"
    data_source: Source
