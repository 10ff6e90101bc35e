from datetime import date

import pytest

from lprtrack.compliance.green_card_renewal import (
    calculate_green_card_renewal_status,
    get_renewal_urgency,
    get_renewal_window_start,
    is_in_renewal_window,
    months_until_expiration,
)
from lprtrack.compliance.models import Priority, RenewalStatus

EXPIRATION = date(2030, 6, 15)


def test_window_start_six_months_before():
    assert get_renewal_window_start(EXPIRATION) == date(2029, 12, 15)


def test_window_start_clamped_to_month_end():
    assert get_renewal_window_start(date(2024, 8, 29)) == date(2024, 2, 29)
    assert get_renewal_window_start(date(2023, 8, 31)) == date(2023, 2, 28)


def test_months_until_expiration():
    assert months_until_expiration(EXPIRATION, date(2029, 1, 1)) == 17
    assert months_until_expiration(EXPIRATION, date(2030, 8, 20)) == -2


def test_window_membership():
    assert is_in_renewal_window(EXPIRATION, date(2029, 12, 15))
    assert not is_in_renewal_window(EXPIRATION, date(2029, 12, 14))


@pytest.mark.parametrize("current,status,months", [
    (date(2029, 1, 1), RenewalStatus.VALID, 17),
    (date(2030, 1, 1), RenewalStatus.RENEWAL_RECOMMENDED, 5),
    (date(2030, 4, 20), RenewalStatus.RENEWAL_URGENT, 1),
    (date(2030, 6, 15), RenewalStatus.RENEWAL_URGENT, 0),
    (date(2030, 6, 16), RenewalStatus.EXPIRED, 0),
])
def test_renewal_status(current, status, months):
    result = calculate_green_card_renewal_status(EXPIRATION, current)
    assert result.current_status == status
    assert result.months_until_expiration == months


def test_status_carries_window():
    result = calculate_green_card_renewal_status(EXPIRATION, date(2030, 1, 1))
    assert result.is_in_renewal_window
    assert result.renewal_window_start == date(2029, 12, 15)
    assert result.to_dict()["current_status"] == "renewal_recommended"


@pytest.mark.parametrize("current,priority", [
    (date(2030, 8, 20), Priority.CRITICAL),
    (date(2030, 4, 20), Priority.HIGH),
    (date(2030, 3, 1), Priority.MEDIUM),
    (date(2030, 1, 1), Priority.LOW),
    (date(2029, 1, 1), Priority.NONE),
])
def test_renewal_urgency(current, priority):
    assert get_renewal_urgency(EXPIRATION, current) == priority
