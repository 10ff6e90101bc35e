"""
Selective Service registration.

Applies to men aged 18 through 25 (18 inclusive, 26 exclusive). The
registration deadline is the 18th birthday; a Feb 29 birthday falls on
Feb 28 in non-leap years.
"""

from datetime import date
from typing import Optional, Union

from lprtrack.compliance.models import SelectiveServiceState, SelectiveServiceStatus
from lprtrack.constants import SELECTIVE_SERVICE_MAX_AGE, SELECTIVE_SERVICE_MIN_AGE
from lprtrack.core.models import Gender
from lprtrack.errors import DomainValidationError
from lprtrack.utils.dates import add_years, days_between, years_between


def resolve_gender(gender: Union[Gender, str]) -> Gender:
    """
    Raises:
        DomainValidationError: If the value is not a supported gender.
    """
    if isinstance(gender, Gender):
        return gender
    try:
        return Gender(gender)
    except ValueError:
        raise DomainValidationError(
            f"Unsupported gender value: {gender!r}",
            field="gender",
            details={"allowed": [g.value for g in Gender]},
        ) from None


def age_in_years(birth_date: date, current_date: date) -> int:
    return years_between(current_date, birth_date)


def is_selective_service_required(
    birth_date: date,
    gender: Union[Gender, str],
    current_date: date,
) -> bool:
    if resolve_gender(gender) != Gender.MALE:
        return False
    age = age_in_years(birth_date, current_date)
    return SELECTIVE_SERVICE_MIN_AGE <= age < SELECTIVE_SERVICE_MAX_AGE


def get_registration_deadline(birth_date: date, gender: Union[Gender, str]) -> Optional[date]:
    """18th birthday for men; None for everyone else."""
    if resolve_gender(gender) != Gender.MALE:
        return None
    return add_years(birth_date, SELECTIVE_SERVICE_MIN_AGE)


def days_until_registration_deadline(
    birth_date: date,
    gender: Union[Gender, str],
    current_date: date,
) -> int:
    deadline = get_registration_deadline(birth_date, gender)
    if deadline is None or current_date >= deadline:
        return 0
    return days_between(deadline, current_date)


def days_until_aged_out(birth_date: date, current_date: date) -> int:
    """Days until the 26th birthday; 0 on or after it."""
    twenty_sixth = add_years(birth_date, SELECTIVE_SERVICE_MAX_AGE)
    if current_date >= twenty_sixth:
        return 0
    return days_between(twenty_sixth, current_date)


def calculate_selective_service_status(
    birth_date: date,
    gender: Union[Gender, str],
    is_registered: bool,
    current_date: date,
) -> SelectiveServiceStatus:
    """
    Registration status for one resident.

    Args:
        birth_date: Resident's date of birth.
        gender: "male", "female" or "other".
        is_registered: Whether registration has been completed.
        current_date: Date the status is evaluated on.

    Returns:
        SelectiveServiceStatus. The deadline is omitted once aged out.

    Raises:
        DomainValidationError: If gender is not a supported value.
    """
    gender = resolve_gender(gender)
    age = age_in_years(birth_date, current_date)
    is_male = gender == Gender.MALE
    applies = is_male and SELECTIVE_SERVICE_MIN_AGE <= age < SELECTIVE_SERVICE_MAX_AGE

    if not is_male or age < SELECTIVE_SERVICE_MIN_AGE:
        status = SelectiveServiceState.NOT_APPLICABLE
    elif age >= SELECTIVE_SERVICE_MAX_AGE:
        status = SelectiveServiceState.AGED_OUT
    elif is_registered:
        status = SelectiveServiceState.REGISTERED
    else:
        status = SelectiveServiceState.MUST_REGISTER

    deadline = None
    if status != SelectiveServiceState.AGED_OUT:
        deadline = get_registration_deadline(birth_date, gender)

    return SelectiveServiceStatus(
        applies=applies,
        registration_required=applies and not is_registered,
        registration_deadline=deadline,
        is_registered=is_registered,
        current_status=status,
    )
