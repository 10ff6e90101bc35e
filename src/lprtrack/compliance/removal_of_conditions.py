"""
Removal of conditions (Form I-751).

Conditional residents hold a 2-year card and must file during the 90 days
before its second anniversary:

    window_end   = green card date + 2 years (leap-day adjusted)
    window_start = window_end - 90 days

A caller-supplied "filed" or "approved" state always wins over the
date-derived state.
"""

from datetime import date
from typing import Optional, Tuple, Union

from lprtrack.compliance.models import RemovalOfConditionsStatus, RemovalStatus
from lprtrack.constants import CONDITIONAL_CARD_YEARS, REMOVAL_FILING_WINDOW_DAYS
from lprtrack.errors import DomainValidationError
from lprtrack.utils.dates import add_years, days_between, sub_days

FILING_OVERRIDES = (RemovalStatus.FILED, RemovalStatus.APPROVED)


def get_filing_window(green_card_date: date) -> Tuple[date, date]:
    """Return (window_start, window_end) for the I-751 filing window."""
    window_end = add_years(green_card_date, CONDITIONAL_CARD_YEARS)
    return sub_days(window_end, REMOVAL_FILING_WINDOW_DAYS), window_end


def get_removal_of_conditions_deadline(green_card_date: date) -> date:
    return add_years(green_card_date, CONDITIONAL_CARD_YEARS)


def is_in_filing_window(green_card_date: date, current_date: date) -> bool:
    window_start, window_end = get_filing_window(green_card_date)
    return window_start <= current_date <= window_end


def days_until_filing_window(green_card_date: date, current_date: date) -> int:
    """Days until the window opens; 0 once it has opened."""
    window_start, _ = get_filing_window(green_card_date)
    if current_date >= window_start:
        return 0
    return days_between(window_start, current_date)


def _resolve_filing_status(
    filing_status: Optional[Union[RemovalStatus, str]],
) -> Optional[RemovalStatus]:
    if filing_status is None:
        return None
    try:
        status = RemovalStatus(filing_status) if isinstance(filing_status, str) else filing_status
    except ValueError:
        status = None
    if status not in FILING_OVERRIDES:
        raise DomainValidationError(
            f"Filing status must be 'filed' or 'approved', got {filing_status!r}",
            field="filingStatus",
        )
    return status


def calculate_removal_of_conditions_status(
    is_conditional_resident: bool,
    green_card_date: date,
    current_date: date,
    filing_status: Optional[Union[RemovalStatus, str]] = None,
) -> Optional[RemovalOfConditionsStatus]:
    """
    I-751 status for a conditional resident.

    Args:
        is_conditional_resident: Holder of a 2-year conditional card.
        green_card_date: Date conditional residence began.
        current_date: Date the status is evaluated on.
        filing_status: Optional "filed" / "approved" override.

    Returns:
        RemovalOfConditionsStatus, or None for non-conditional residents.

    Raises:
        DomainValidationError: If filing_status is not filed or approved.
    """
    if not is_conditional_resident:
        return None

    override = _resolve_filing_status(filing_status)
    window_start, window_end = get_filing_window(green_card_date)

    if override is not None:
        status = override
    elif current_date > window_end:
        status = RemovalStatus.OVERDUE
    elif current_date >= window_start:
        status = RemovalStatus.IN_WINDOW
    else:
        status = RemovalStatus.NOT_YET

    if status in (RemovalStatus.IN_WINDOW, RemovalStatus.OVERDUE):
        days_until_window = None
    else:
        days_until_window = days_until_filing_window(green_card_date, current_date)

    days_until_deadline = (
        days_between(window_end, current_date) if current_date <= window_end else None
    )

    return RemovalOfConditionsStatus(
        applies=True,
        green_card_date=green_card_date,
        filing_window_start=window_start,
        filing_window_end=window_end,
        current_status=status,
        days_until_window=days_until_window,
        days_until_deadline=days_until_deadline,
    )
