"""
Green card renewal (Form I-90).

For 10-year cards only; conditional 2-year cards are handled by the
removal-of-conditions calculator and cannot be renewed.

The renewal window opens 6 calendar months before expiration, clamped to
month end (Aug 29 -> Feb 29 in a leap year, Feb 28 otherwise).
"""

from datetime import date

from lprtrack.compliance.models import GreenCardRenewalStatus, Priority, RenewalStatus
from lprtrack.constants import RENEWAL_MEDIUM_MONTHS, RENEWAL_URGENT_MONTHS, RENEWAL_WINDOW_MONTHS
from lprtrack.utils.dates import months_between, sub_months


def get_renewal_window_start(expiration_date: date) -> date:
    return sub_months(expiration_date, RENEWAL_WINDOW_MONTHS)


def months_until_expiration(expiration_date: date, current_date: date) -> int:
    """Whole months until expiration; negative once expired."""
    return months_between(expiration_date, current_date)


def is_in_renewal_window(expiration_date: date, current_date: date) -> bool:
    return current_date >= get_renewal_window_start(expiration_date)


def calculate_green_card_renewal_status(
    expiration_date: date,
    current_date: date,
) -> GreenCardRenewalStatus:
    """
    Renewal status of a 10-year green card.

    expired once the expiration date has passed; renewal_urgent with fewer
    than 2 whole months left; renewal_recommended inside the 6-month
    window; valid otherwise.
    """
    months = months_until_expiration(expiration_date, current_date)
    in_window = is_in_renewal_window(expiration_date, current_date)

    if current_date > expiration_date:
        status = RenewalStatus.EXPIRED
    elif months < RENEWAL_URGENT_MONTHS:
        status = RenewalStatus.RENEWAL_URGENT
    elif in_window:
        status = RenewalStatus.RENEWAL_RECOMMENDED
    else:
        status = RenewalStatus.VALID

    return GreenCardRenewalStatus(
        expiration_date=expiration_date,
        renewal_window_start=get_renewal_window_start(expiration_date),
        current_status=status,
        months_until_expiration=months,
        is_in_renewal_window=in_window,
    )


def get_renewal_urgency(expiration_date: date, current_date: date) -> Priority:
    months = months_until_expiration(expiration_date, current_date)
    if months < 0:
        return Priority.CRITICAL
    if months < RENEWAL_URGENT_MONTHS:
        return Priority.HIGH
    if months < RENEWAL_MEDIUM_MONTHS:
        return Priority.MEDIUM
    if months <= RENEWAL_WINDOW_MONTHS:
        return Priority.LOW
    return Priority.NONE
