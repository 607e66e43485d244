from datetime import datetime, time
from itertools import islice

import pytest

from ledger.domain import DateWindow, income
from ledger.window import by_window, in_window, iter_transactions, latest_timestamp, resolve_window

NOW = datetime(2025, 9, 17, 14, 30)
END = datetime.combine(NOW.date(), time.max)


def test_today_and_yesterday():
    assert resolve_window("today", NOW) == DateWindow(datetime(2025, 9, 17), END)
    yesterday = resolve_window("yesterday", NOW)
    assert yesterday.start == datetime(2025, 9, 16)
    assert yesterday.end == datetime.combine(datetime(2025, 9, 16).date(), time.max)


def test_week_and_month():
    assert resolve_window("week", NOW).start == datetime(2025, 9, 10)
    assert resolve_window("month", NOW).start == datetime(2025, 9, 1)
    assert resolve_window("this_month", NOW) == resolve_window("month", NOW)


def test_report_presets_cross_year():
    jan = datetime(2026, 1, 20, 9, 0)
    assert resolve_window("last_month", jan).start == datetime(2025, 12, 1)
    assert resolve_window("last_3_months", jan).start == datetime(2025, 10, 1)
    assert resolve_window("this_year", jan).start == datetime(2026, 1, 1)
    assert resolve_window("last_3_months", jan).end == datetime.combine(jan.date(), time.max)


def test_unknown_preset():
    with pytest.raises(ValueError):
        resolve_window("fortnight", NOW)


def test_in_window_inclusive():
    window = DateWindow(datetime(2025, 9, 1), datetime(2025, 9, 2))
    trans = (
        income("a", 1, "Cash", datetime(2025, 9, 1)),
        income("b", 1, "Cash", datetime(2025, 9, 2)),
        income("c", 1, "Cash", datetime(2025, 9, 2, 0, 0, 1)),
    )
    assert [t.id for t in in_window(trans, window)] == ["a", "b"]


def test_iter_transactions_is_lazy():
    window = DateWindow(datetime(2025, 9, 1), datetime(2025, 9, 30))
    trans = tuple(income(str(n), 1, "Cash", datetime(2025, 9, 1 + n)) for n in range(10))
    calls = {"n": 0}
    pred = by_window(window)

    def counting(t):
        calls["n"] += 1
        return pred(t)

    first_two = list(islice(iter_transactions(trans, counting), 2))
    assert len(first_two) == 2
    assert calls["n"] < len(trans)


def test_latest_timestamp():
    trans = (
        income("a", 1, "Cash", datetime(2025, 9, 3, 9, 0)),
        income("b", 1, "Cash", datetime(2025, 9, 6, 18, 0)),
        income("c", 1, "Cash", datetime(2025, 9, 1, 7, 0)),
    )
    assert latest_timestamp(trans, NOW) == datetime(2025, 9, 6, 18, 0)
    assert latest_timestamp((), NOW) == NOW
