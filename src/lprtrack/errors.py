"""
Error taxonomy and two-variant results for lprtrack.

Core calculations raise the exceptions defined here when they are handed
input they cannot compute with (a malformed date, an unknown eligibility
category). The validated entry points in lprtrack.safe catch them and
return a Result instead, so callers at an API boundary never need
exception handling:

    result = safe_calculate_presence_status(913, "five_year")
    if result.success:
        print(result.data.status)
    else:
        print(result.error.code, result.error.field)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Generic, List, Optional, Sequence, TypeVar, Union


# =============================================================================
# ERROR CODES
# =============================================================================

CODE_DATE_FORMAT = "DATE_FORMAT_ERROR"
CODE_DATE_RANGE = "DATE_RANGE_ERROR"
CODE_TRIP_VALIDATION = "TRIP_VALIDATION_ERROR"
CODE_VALIDATION = "VALIDATION_ERROR"
CODE_CALCULATION = "CALCULATION_ERROR"
CODE_LPR_STATUS = "LPR_STATUS_ERROR"
CODE_COMPLIANCE = "COMPLIANCE_ERROR"


# =============================================================================
# EXCEPTIONS
# =============================================================================

class LPRTrackError(Exception):
    """Base class for every error raised by the engine."""

    code = CODE_CALCULATION

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.field = field
        self.details = dict(details or {})

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "field": self.field,
            "details": self.details,
        }


class DateFormatError(LPRTrackError, ValueError):
    """Date string is not YYYY-MM-DD or does not denote a real calendar day."""
    code = CODE_DATE_FORMAT


class DateRangeError(LPRTrackError, ValueError):
    """Dates are individually valid but out of order or out of bounds."""
    code = CODE_DATE_RANGE


class TripValidationError(LPRTrackError, ValueError):
    """Trip record is internally inconsistent."""
    code = CODE_TRIP_VALIDATION


class DomainValidationError(LPRTrackError, ValueError):
    """Value is well-formed but outside the accepted vocabulary."""
    code = CODE_VALIDATION


class CalculationError(LPRTrackError):
    """Calculation could not produce a defined result."""
    code = CODE_CALCULATION


class LPRStatusError(CalculationError):
    """Risk assessment for LPR status failed."""
    code = CODE_LPR_STATUS


class ComplianceCalculationError(CalculationError):
    """One of the compliance areas could not be computed."""
    code = CODE_COMPLIANCE


# =============================================================================
# RESULT TYPE
# =============================================================================

T = TypeVar("T")
U = TypeVar("U")


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful result carrying data."""
    data: T

    @property
    def success(self) -> bool:
        return True

    def to_dict(self) -> Dict[str, Any]:
        from lprtrack.utils.serialize import to_plain

        return {"success": True, "data": to_plain(self.data)}


@dataclass(frozen=True)
class Err:
    """Failed result carrying a typed error."""
    error: LPRTrackError
    context: Dict[str, Any] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return False

    def to_dict(self) -> Dict[str, Any]:
        return {"success": False, "error": self.error.to_dict()}


Result = Union[Ok[T], Err]


def ok(data: T) -> Ok[T]:
    return Ok(data)


def err(error: LPRTrackError, **context: Any) -> Err:
    return Err(error, context)


def is_ok(result: Result) -> bool:
    return isinstance(result, Ok)


def is_err(result: Result) -> bool:
    return isinstance(result, Err)


def map_result(result: Result, fn: Callable[[T], U]) -> Result:
    """Apply fn to the data of a successful result; failures pass through."""
    if isinstance(result, Ok):
        return Ok(fn(result.data))
    return result


def chain_result(result: Result, fn: Callable[[T], Result]) -> Result:
    """Feed the data of a successful result into fn, which returns a Result."""
    if isinstance(result, Ok):
        return fn(result.data)
    return result


def unwrap(result: Result) -> Any:
    """
    Return the data of a successful result.

    Raises:
        LPRTrackError: The carried error, if the result is a failure.
    """
    if isinstance(result, Ok):
        return result.data
    raise result.error


def unwrap_or(result: Result, default: Any) -> Any:
    if isinstance(result, Ok):
        return result.data
    return default


def combine_results(results: Sequence[Result]) -> Result:
    """
    Combine results into one result holding a list of data.

    The first failure wins; no partial list is ever returned.
    """
    values: List[Any] = []
    for result in results:
        if isinstance(result, Err):
            return result
        values.append(result.data)
    return Ok(values)
