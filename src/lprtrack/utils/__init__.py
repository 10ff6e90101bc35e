"""
Utility modules for lprtrack.

Submodules:
    dates: Calendar arithmetic (parsing, anniversaries, tax deadline shifting)
    serialize: Conversion of result dataclasses to JSON-ready values
"""

from lprtrack.utils.dates import (
    parse_date,
    coerce_date,
    format_date,
    is_leap_year,
    days_in_month,
    add_days,
    sub_days,
    add_years,
    add_months,
    sub_months,
    days_between,
    inclusive_span,
    months_between,
    years_between,
    iter_days,
    ranges_overlap,
    next_business_day,
    adjust_tax_deadline,
)
from lprtrack.utils.serialize import to_plain, records_to_dicts

__all__ = [
    # Calendar utilities
    "parse_date",
    "coerce_date",
    "format_date",
    "is_leap_year",
    "days_in_month",
    "add_days",
    "sub_days",
    "add_years",
    "add_months",
    "sub_months",
    "days_between",
    "inclusive_span",
    "months_between",
    "years_between",
    "iter_days",
    "ranges_overlap",
    "next_business_day",
    "adjust_tax_deadline",
    # Serialization utilities
    "to_plain",
    "records_to_dicts",
]
