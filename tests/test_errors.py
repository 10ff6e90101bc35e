from datetime import date

import pytest

from lprtrack.core.models import EligibilityDates
from lprtrack.errors import (
    CalculationError,
    ComplianceCalculationError,
    DateFormatError,
    DateRangeError,
    DomainValidationError,
    Err,
    LPRStatusError,
    LPRTrackError,
    Ok,
    chain_result,
    combine_results,
    err,
    is_err,
    is_ok,
    map_result,
    ok,
    unwrap,
    unwrap_or,
)


class TestTaxonomy:

    @pytest.mark.parametrize("error_cls,code", [
        (DateFormatError, "DATE_FORMAT_ERROR"),
        (DateRangeError, "DATE_RANGE_ERROR"),
        (DomainValidationError, "VALIDATION_ERROR"),
        (CalculationError, "CALCULATION_ERROR"),
        (LPRStatusError, "LPR_STATUS_ERROR"),
        (ComplianceCalculationError, "COMPLIANCE_ERROR"),
    ])
    def test_codes(self, error_cls, code):
        error = error_cls("boom", field="x")
        assert error.code == code
        assert isinstance(error, LPRTrackError)

    def test_input_errors_are_value_errors(self):
        assert issubclass(DateFormatError, ValueError)
        assert issubclass(DateRangeError, ValueError)
        assert issubclass(DomainValidationError, ValueError)
        assert not issubclass(CalculationError, ValueError)

    def test_to_dict(self):
        error = DomainValidationError("Unknown category", field="category", details={"allowed": ["a"]})
        assert error.to_dict() == {
            "code": "VALIDATION_ERROR",
            "message": "Unknown category",
            "field": "category",
            "details": {"allowed": ["a"]},
        }


class TestResult:

    def test_ok_and_err_flags(self):
        good = ok(5)
        bad = err(CalculationError("nope"), operation="test")
        assert good.success and is_ok(good) and not is_err(good)
        assert not bad.success and is_err(bad)
        assert bad.context == {"operation": "test"}

    def test_map_and_chain(self):
        assert map_result(ok(2), lambda x: x * 3) == Ok(6)
        assert chain_result(ok(2), lambda x: ok(x + 1)) == Ok(3)

        failure = err(CalculationError("nope"))
        assert map_result(failure, lambda x: x * 3) is failure
        assert chain_result(failure, lambda x: ok(x)) is failure

    def test_unwrap_raises_carried_error(self):
        error = DateRangeError("reversed", field="returnDate")
        with pytest.raises(DateRangeError):
            unwrap(Err(error))
        assert unwrap(ok(1)) == 1
        assert unwrap_or(Err(error), 0) == 0

    def test_combine_first_failure_wins(self):
        first = err(DateFormatError("a"))
        second = err(DomainValidationError("b"))
        assert combine_results([ok(1), first, second]) is first
        assert combine_results([ok(1), ok(2)]) == Ok([1, 2])
        assert combine_results([]) == Ok([])

    def test_serialized_shapes(self):
        data = EligibilityDates(date(2025, 1, 14), date(2024, 10, 16))
        assert ok(data).to_dict() == {
            "success": True,
            "data": {"eligibility_date": "2025-01-14", "earliest_filing_date": "2024-10-16"},
        }
        assert Err(DateRangeError("reversed", field="returnDate")).to_dict() == {
            "success": False,
            "error": {
                "code": "DATE_RANGE_ERROR",
                "message": "reversed",
                "field": "returnDate",
                "details": {},
            },
        }
