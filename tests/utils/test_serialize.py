from datetime import date

import numpy as np

from lprtrack.compliance.models import Priority
from lprtrack.core.models import Trip
from lprtrack.utils.serialize import records_to_dicts, to_plain


def test_enums_and_dates_become_strings():
    assert to_plain(Priority.HIGH) == "high"
    assert to_plain({"due": date(2025, 4, 15)}) == {"due": "2025-04-15"}


def test_sets_are_sorted():
    assert to_plain({"2024-01-03", "2024-01-01", "2024-01-02"}) == [
        "2024-01-01",
        "2024-01-02",
        "2024-01-03",
    ]


def test_numpy_scalars_and_arrays():
    assert to_plain(np.int64(7)) == 7
    assert isinstance(to_plain(np.int64(7)), int)
    assert to_plain(np.float64(1.5)) == 1.5
    assert to_plain(np.array([1, 2])) == [1, 2]


def test_dataclass_records():
    trip = Trip("t1", "u1", date(2024, 1, 1), date(2024, 1, 10), location="Canada")
    rows = records_to_dicts([trip])
    assert rows == [{
        "id": "t1",
        "user_id": "u1",
        "departure_date": "2024-01-01",
        "return_date": "2024-01-10",
        "is_simulated": False,
        "location": "Canada",
    }]
