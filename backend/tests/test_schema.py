"""
DSL Schema Tests
================

WHAT: Unit tests for ChartDSL parsing and ChartQueryError conversion.
WHY: Malformed DSL is the only caller-facing failure; it must always surface
     as a SCHEMA ChartQueryError with the offending field named.

REFERENCES:
- trendlens/dsl/schema.py
- trendlens/errors.py
"""

import pytest
from pydantic import ValidationError

from trendlens.dsl.schema import Aggregation, ChartDSL, ChartType, GroupBy, SortOrder, Source, parse_dsl
from trendlens.errors import ChartQueryError, ErrorCategory, ErrorCode


BASE = {"source": "food", "metric": "calories", "groupBy": "date", "aggregation": "sum"}


def test_parse_camel_case_payload() -> None:
    dsl = parse_dsl({
        **BASE,
        "chartType": "line",
        "derivedMetric": "protein_pct",
        "sort": "value_desc",
        "limit": 5,
        "filter": {"dayOfWeek": [1, 2], "exerciseKey": "squat"},
        "compare": {"metric": "cal", "source": "food"},
    })

    assert dsl.source == Source.FOOD
    assert dsl.group_by == GroupBy.DATE
    assert dsl.aggregation == Aggregation.SUM
    assert dsl.chart_type == ChartType.LINE
    assert dsl.derived_metric == "protein_pct"
    assert dsl.sort == SortOrder.VALUE_DESC
    assert dsl.limit == 5
    assert dsl.filter.day_of_week == [1, 2]
    assert dsl.filter.exercise_key == "squat"
    assert dsl.compare.metric == "cal"


def test_defaults() -> None:
    dsl = parse_dsl(BASE)

    assert dsl.chart_type == ChartType.BAR
    assert dsl.title is None
    assert dsl.filter is None
    assert dsl.sort is None


def test_unknown_keys_are_ignored() -> None:
    dsl = parse_dsl({**BASE, "yAxisLabel": "kcal"})

    assert dsl.metric == "calories"


def test_dsl_is_frozen() -> None:
    dsl = parse_dsl(BASE)

    with pytest.raises(ValidationError):
        dsl.metric = "protein"


def test_parse_dsl_passes_models_through() -> None:
    dsl = ChartDSL(**BASE)

    assert parse_dsl(dsl) is dsl


@pytest.mark.parametrize("missing", ["source", "metric", "groupBy", "aggregation"])
def test_missing_required_field(missing) -> None:
    payload = {k: v for k, v in BASE.items() if k != missing}

    with pytest.raises(ChartQueryError) as exc_info:
        parse_dsl(payload)

    assert exc_info.value.code == ErrorCode.MISSING_REQUIRED_FIELD
    assert exc_info.value.field_name == missing
    assert exc_info.value.category == ErrorCategory.SCHEMA


def test_invalid_day_of_week_is_rejected() -> None:
    with pytest.raises(ChartQueryError) as exc_info:
        parse_dsl({**BASE, "filter": {"dayOfWeek": [7]}})

    assert exc_info.value.field_name.startswith("filter.dayOfWeek")


def test_non_positive_limit_is_out_of_range() -> None:
    with pytest.raises(ChartQueryError) as exc_info:
        parse_dsl({**BASE, "limit": 0})

    assert exc_info.value.code == ErrorCode.OUT_OF_RANGE


def test_non_object_payload_is_malformed() -> None:
    with pytest.raises(ChartQueryError) as exc_info:
        parse_dsl(["food", "calories"])

    assert exc_info.value.code == ErrorCode.MALFORMED_DSL


def test_error_to_dict() -> None:
    with pytest.raises(ChartQueryError) as exc_info:
        parse_dsl({**BASE, "groupBy": "month"})

    payload = exc_info.value.to_dict()
    assert payload["code"] == "ERR_003"
    assert payload["category"] == "schema"
    assert payload["field"] == "groupBy"
    assert payload["details"]["errors"][0]["type"] == "enum"
    assert str(exc_info.value).startswith("[ERR_003] groupBy:")
