"""
Tax filing reminders.

LPRs file U.S. returns on worldwide income. Deadlines:
- April 15 (standard)
- June 15, automatic when abroad during the filing season
- October 15 with Form 4868

Every deadline is shifted past weekends; April deadlines also honor the
April 16 holiday (see adjust_tax_deadline), which can push the effective
date to the following Tuesday.
"""

import logging
from datetime import date
from typing import Iterable, Tuple, Union

from lprtrack.compliance.models import ExtensionInfo, TaxDeadlineType, TaxReminderStatus
from lprtrack.constants import (
    TAX_ABROAD_EXTENSION_DEADLINE,
    TAX_OCTOBER_EXTENSION_DEADLINE,
    TAX_SEASON_END,
    TAX_SEASON_START,
    TAX_STANDARD_DEADLINE,
)
from lprtrack.core.models import Trip
from lprtrack.errors import DomainValidationError
from lprtrack.utils.dates import adjust_tax_deadline, days_between, ranges_overlap

logger = logging.getLogger(__name__)

BASE_DEADLINES = {
    TaxDeadlineType.STANDARD: TAX_STANDARD_DEADLINE,
    TaxDeadlineType.ABROAD_EXTENSION: TAX_ABROAD_EXTENSION_DEADLINE,
    TaxDeadlineType.OCTOBER_EXTENSION: TAX_OCTOBER_EXTENSION_DEADLINE,
}

FORM_4868 = "Form 4868"
EXTENSION_DISPLAY_JUNE = "June 15"
EXTENSION_DISPLAY_OCTOBER = "October 15"


def _resolve_deadline_type(deadline_type: Union[TaxDeadlineType, str]) -> TaxDeadlineType:
    if isinstance(deadline_type, TaxDeadlineType):
        return deadline_type
    try:
        return TaxDeadlineType(deadline_type)
    except ValueError:
        raise DomainValidationError(
            f"Unknown tax deadline type: {deadline_type!r}",
            field="deadlineType",
        ) from None


def base_deadline_for_year(
    year: int,
    deadline_type: Union[TaxDeadlineType, str] = TaxDeadlineType.STANDARD,
) -> date:
    month, day = BASE_DEADLINES[_resolve_deadline_type(deadline_type)]
    return date(year, month, day)


def get_next_tax_deadline(current_date: date) -> date:
    """Unadjusted April 15 of this year, or next year once it has passed."""
    this_year = base_deadline_for_year(current_date.year)
    if current_date > this_year:
        return base_deadline_for_year(current_date.year + 1)
    return this_year


def get_actual_tax_deadline(
    current_date: date,
    deadline_type: Union[TaxDeadlineType, str] = TaxDeadlineType.STANDARD,
) -> date:
    """
    Effective deadline after weekend and holiday adjustment.

    Rolls to next year only once this year's adjusted deadline has passed,
    so the days between April 15 and a shifted deadline still count toward
    this year.
    """
    deadline = adjust_tax_deadline(base_deadline_for_year(current_date.year, deadline_type))
    if current_date > deadline:
        deadline = adjust_tax_deadline(base_deadline_for_year(current_date.year + 1, deadline_type))
    return deadline


def get_october_extension_deadline(current_date: date) -> date:
    """Form 4868 extension deadline, adjusted like every other deadline."""
    return get_actual_tax_deadline(current_date, TaxDeadlineType.OCTOBER_EXTENSION)


def get_tax_season_range(year: int) -> Tuple[date, date]:
    """Filing season for a year: Jan 23 through Apr 15, inclusive."""
    start_month, start_day = TAX_SEASON_START
    end_month, end_day = TAX_SEASON_END
    return date(year, start_month, start_day), date(year, end_month, end_day)


def is_tax_season(current_date: date) -> bool:
    season_start, season_end = get_tax_season_range(current_date.year)
    return season_start <= current_date <= season_end


def will_be_abroad_during_tax_season(trips: Iterable[Trip], current_date: date) -> bool:
    """
    True if any real trip overlaps the upcoming filing season.

    The season checked is the one ending at the next (unadjusted) April 15.
    Simulated trips are ignored.
    """
    season_start, season_end = get_tax_season_range(get_next_tax_deadline(current_date).year)
    return any(
        ranges_overlap(trip.departure_date, trip.return_date, season_start, season_end)
        for trip in trips
        if not trip.is_simulated
    )


def get_extension_info(is_abroad: bool) -> ExtensionInfo:
    if is_abroad:
        return ExtensionInfo(
            automatic_extension=True,
            extension_deadline=EXTENSION_DISPLAY_JUNE,
            requires_form=False,
            form_number=None,
        )
    return ExtensionInfo(
        automatic_extension=False,
        extension_deadline=EXTENSION_DISPLAY_OCTOBER,
        requires_form=True,
        form_number=FORM_4868,
    )


def calculate_tax_reminder_status(
    trips: Iterable[Trip],
    reminder_dismissed: bool,
    current_date: date,
) -> TaxReminderStatus:
    """
    Tax reminder for the upcoming filing deadline.

    Args:
        trips: Travel history; decides the June 15 abroad extension.
        reminder_dismissed: The user dismissed this season's reminder.
        current_date: Date the status is evaluated on.

    Returns:
        TaxReminderStatus counting days to the applicable, adjusted deadline.
    """
    abroad = will_be_abroad_during_tax_season(trips, current_date)
    deadline_type = TaxDeadlineType.ABROAD_EXTENSION if abroad else TaxDeadlineType.STANDARD
    actual = get_actual_tax_deadline(current_date, deadline_type)

    status = TaxReminderStatus(
        next_deadline=get_next_tax_deadline(current_date),
        days_until_deadline=days_between(actual, current_date),
        is_abroad_during_tax_season=abroad,
        reminder_dismissed=reminder_dismissed,
        applicable_deadline=deadline_type,
        actual_deadline=actual,
    )
    logger.debug(
        f"Tax deadline {status.actual_deadline} ({deadline_type.value}), "
        f"{status.days_until_deadline} days away"
    )
    return status
