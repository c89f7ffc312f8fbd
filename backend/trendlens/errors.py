"""
Chart Query Errors
==================

Error classification for chart DSL execution.

WHY THIS FILE EXISTS
--------------------
Only two things can make a chart request fail:

    1. Malformed DSL
       - Missing required field (source, metric, groupBy, aggregation)
       - Enumeration value outside its closed set
       - Wrong data type

    2. Upstream read failures
       - Record store unavailable, query errors

Malformed DSL is a caller contract bug and is raised as ChartQueryError.
Upstream failures are SQLAlchemy exceptions and are NOT wrapped here; they
reach the caller unchanged so that DSL bugs never look like transient
database problems.

Data absence (a grouping whose map was not computed, a day without the
requested metric) is not an error at all - the engine just emits fewer points.

RELATED FILES
-------------
- trendlens/dsl/schema.py: parse_dsl() converts pydantic errors via from_validation_error()
- trendlens/dsl/executor.py: raises for enumeration values it cannot dispatch
"""

from dataclasses import dataclass, field as dataclass_field
from enum import Enum
from typing import Any, Dict, Optional
import logging

from pydantic import ValidationError


logger = logging.getLogger(__name__)


class ErrorCategory(Enum):
    """
    Categories of errors for classification and handling.

    Callers branch on category, not on message text.
    """
    SCHEMA = "schema"              # DSL structure, types, enumerations


class ErrorCode(Enum):
    """Machine-readable codes for chart query errors."""
    MISSING_REQUIRED_FIELD = "ERR_001"
    INVALID_FIELD_TYPE = "ERR_002"
    INVALID_ENUM_VALUE = "ERR_003"
    MALFORMED_DSL = "ERR_004"
    OUT_OF_RANGE = "ERR_016"


# pydantic error "type" -> ErrorCode
_PYDANTIC_ERROR_CODES = {
    "missing": ErrorCode.MISSING_REQUIRED_FIELD,
    "enum": ErrorCode.INVALID_ENUM_VALUE,
    "literal_error": ErrorCode.INVALID_ENUM_VALUE,
    "greater_than": ErrorCode.OUT_OF_RANGE,
    "greater_than_equal": ErrorCode.OUT_OF_RANGE,
    "less_than": ErrorCode.OUT_OF_RANGE,
    "less_than_equal": ErrorCode.OUT_OF_RANGE,
    "model_type": ErrorCode.MALFORMED_DSL,
    "model_attributes_type": ErrorCode.MALFORMED_DSL,
}


@dataclass
class ChartQueryError(Exception):
    """
    Exception raised for malformed chart DSL.

    ATTRIBUTES:
        code: ErrorCode (machine-readable)
        message: Human-readable description
        category: Error category for classification
        field_name: Dotted path of the offending DSL field (optional)
        details: Additional debug information (e.g. every pydantic error)

    USAGE:
        try:
            series = execute_dsl(parse_dsl(payload), totals)
        except ChartQueryError as e:
            logger.error(f"[CHART] Bad DSL: {e}", extra=e.to_dict())
    """
    code: ErrorCode
    message: str
    category: ErrorCategory = ErrorCategory.SCHEMA
    field_name: Optional[str] = None
    details: Dict[str, Any] = dataclass_field(default_factory=dict)

    def __str__(self) -> str:
        if self.field_name:
            return f"[{self.code.value}] {self.field_name}: {self.message}"
        return f"[{self.code.value}] {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        """Structured representation for logs and API error bodies."""
        result = {
            "code": self.code.value,
            "message": self.message,
            "category": self.category.value,
        }
        if self.field_name:
            result["field"] = self.field_name
        if self.details:
            result["details"] = self.details
        return result


def invalid_enum(field_name: str, value: Any, allowed) -> ChartQueryError:
    """Build the error for an enumeration value outside its closed set."""
    options = ", ".join(str(getattr(a, "value", a)) for a in allowed)
    return ChartQueryError(
        code=ErrorCode.INVALID_ENUM_VALUE,
        message=f"Unsupported value {value!r}; expected one of: {options}",
        field_name=field_name,
        details={"value": str(value)},
    )


def from_validation_error(exc: ValidationError) -> ChartQueryError:
    """
    Convert a pydantic ValidationError into a ChartQueryError.

    The first error decides code and field; every error is kept in details
    so nothing is lost for debugging.
    """
    errors = exc.errors()
    first = errors[0] if errors else {}
    loc = ".".join(str(part) for part in first.get("loc", ()))
    code = _PYDANTIC_ERROR_CODES.get(first.get("type", ""), ErrorCode.INVALID_FIELD_TYPE)

    error = ChartQueryError(
        code=code,
        message=first.get("msg", "Invalid chart DSL"),
        field_name=loc or None,
        details={
            "errors": [
                {
                    "field": ".".join(str(part) for part in e.get("loc", ())),
                    "type": e.get("type"),
                    "message": e.get("msg"),
                }
                for e in errors
            ]
        },
    )
    logger.debug(f"[DSL] Validation failed: {error}")
    return error
