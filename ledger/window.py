from datetime import datetime, time, timedelta
from typing import Callable, Iterable, Iterator

from ledger.domain import DateWindow, Transaction

DASHBOARD_PRESETS = ("today", "yesterday", "week", "month")
REPORT_PRESETS = ("this_month", "last_month", "last_3_months", "this_year")


def iter_transactions(
    trans: Iterable[Transaction], pred: Callable[[Transaction], bool]
) -> Iterator[Transaction]:
    for t in trans:
        if pred(t):
            yield t


def by_window(window: DateWindow) -> Callable[[Transaction], bool]:
    def _filter(t: Transaction) -> bool:
        return window.contains(t.created_at)

    return _filter


def in_window(trans: Iterable[Transaction], window: DateWindow) -> tuple:
    return tuple(iter_transactions(trans, by_window(window)))


def latest_timestamp(trans: Iterable[Transaction], default: datetime) -> datetime:
    """Newest ``created_at`` in the ledger, or ``default`` when it is empty."""
    return max((t.created_at for t in trans), default=default)


def _start_of_day(d: datetime) -> datetime:
    return datetime.combine(d.date(), time.min, tzinfo=d.tzinfo)


def _end_of_day(d: datetime) -> datetime:
    return datetime.combine(d.date(), time.max, tzinfo=d.tzinfo)


def _first_of_month(d: datetime, months_back: int = 0) -> datetime:
    month_index = d.year * 12 + (d.month - 1) - months_back
    year, month = divmod(month_index, 12)
    return _start_of_day(d).replace(year=year, month=month + 1, day=1)


def resolve_window(preset: str, now: datetime) -> DateWindow:
    """Turn a named range into a closed window ending with the current day.

    ``week`` covers the last seven days plus today. ``last_month`` and
    ``last_3_months`` still run up to the end of today.
    """
    end = _end_of_day(now)
    today = _start_of_day(now)

    if preset == "today":
        start = today
    elif preset == "yesterday":
        start = today - timedelta(days=1)
        end = end - timedelta(days=1)
    elif preset == "week":
        start = today - timedelta(days=7)
    elif preset in ("month", "this_month"):
        start = _first_of_month(now)
    elif preset == "last_month":
        start = _first_of_month(now, 1)
    elif preset == "last_3_months":
        start = _first_of_month(now, 3)
    elif preset == "this_year":
        start = today.replace(month=1, day=1)
    else:
        raise ValueError(f"Unknown date range {preset!r}")

    return DateWindow(start=start, end=end)
