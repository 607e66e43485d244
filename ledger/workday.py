from collections import defaultdict
from datetime import date, datetime, timedelta
from typing import Dict, Iterable

from ledger.domain import Transaction, WORKING_DAY_START_HOUR


def working_day(ts: datetime, start_hour: int = WORKING_DAY_START_HOUR) -> date:
    """Return the business day a timestamp belongs to.

    Activity before ``start_hour`` is attributed to the previous calendar day.
    There is no closing cutoff: late evening hours stay on the same day.
    """
    if ts.hour < start_hour:
        ts = ts - timedelta(days=1)
    return ts.date()


def group_by_working_day(
    trans: Iterable[Transaction], start_hour: int = WORKING_DAY_START_HOUR
) -> Dict[date, int]:
    visits: Dict[date, int] = defaultdict(int)
    for t in trans:
        if t.is_income:
            visits[working_day(t.created_at, start_hour)] += 1
    return dict(visits)


def visit_days_by_patient(
    trans: Iterable[Transaction], start_hour: int = WORKING_DAY_START_HOUR
) -> Dict[str, int]:
    """Count distinct working days with an income record, per patient."""
    days: Dict[str, set] = {}
    for t in trans:
        if t.is_income and t.patient_id:
            days.setdefault(t.patient_id, set()).add(working_day(t.created_at, start_hour))
    return {pid: len(ds) for pid, ds in days.items()}
