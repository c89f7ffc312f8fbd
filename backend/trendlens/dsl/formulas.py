"""
Derived Metric Formulas
=======================

Pure functions computing derived food metrics from a day bag.

Every formula is total: it never raises and returns 0 for degenerate input
(no macro calories, no entries) instead of NaN or infinity. Results are
rounded to the nearest integer, halves rounding up.

`net_carbs` is NOT floored at 0 here; a day with more fiber than carbs yields
a negative value and any clamping belongs to the presentation layer.

Formulas accept anything with `.get(key)` (day bags, item bags, or plain
dicts), so hourly per-entry bags and per-item totals go through the same code.

Related files:
- trendlens/dsl/executor.py: Applies DERIVED_FORMULAS during value extraction
"""

from __future__ import annotations

import math
from types import MappingProxyType
from typing import Any, Callable, Mapping

Formula = Callable[[Any], float]


def _num(bag, key: str) -> float:
    value = bag.get(key)
    return float(value) if value else 0.0


def round_half_up(value: float) -> int:
    """Round to nearest integer, halves up (Python's round() is banker's rounding)."""
    return int(math.floor(value + 0.5))


def _macro_calories(bag) -> float:
    return _num(bag, "protein") * 4 + _num(bag, "carbs") * 4 + _num(bag, "fat") * 9


def _macro_share(macro: str, kcal_per_gram: int) -> Formula:
    def formula(bag) -> float:
        total = _macro_calories(bag)
        if total <= 0:
            return 0
        return round_half_up(_num(bag, macro) * kcal_per_gram / total * 100)

    formula.__name__ = f"{macro}_pct"
    return formula


def net_carbs(bag) -> float:
    return round_half_up(_num(bag, "carbs") - _num(bag, "fiber"))


def _per_meal(field_name: str) -> Formula:
    def formula(bag) -> float:
        entries = _num(bag, "entries")
        if entries <= 0:
            return 0
        return round_half_up(_num(bag, field_name) / entries)

    formula.__name__ = f"{field_name}_per_meal"
    return formula


protein_pct = _macro_share("protein", 4)
carbs_pct = _macro_share("carbs", 4)
fat_pct = _macro_share("fat", 9)
cal_per_meal = _per_meal("calories")
protein_per_meal = _per_meal("protein")


DERIVED_FORMULAS: Mapping[str, Formula] = MappingProxyType({
    "protein_pct": protein_pct,
    "carbs_pct": carbs_pct,
    "fat_pct": fat_pct,
    "net_carbs": net_carbs,
    "cal_per_meal": cal_per_meal,
    "protein_per_meal": protein_per_meal,
})

DERIVED_METRICS = frozenset(DERIVED_FORMULAS)
