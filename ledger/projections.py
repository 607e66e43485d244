import logging
import re
from collections import defaultdict
from datetime import date
from itertools import islice
from typing import Callable, Dict, Iterable, Iterator, Mapping, Optional, Tuple

from ledger.domain import NO_DOCTOR, Patient, ProjectionRow, Transaction, TrendPoint
from ledger.functional import safe_patient

logger = logging.getLogger(__name__)

CATEGORY_PREFIX = re.compile(r"^\[([^\]]+)\]")

Rows = Tuple[ProjectionRow, ...]


def _rank(totals: Mapping[str, int]) -> Rows:
    # sorted() is stable, so equal values keep first-seen order
    return tuple(
        ProjectionRow(key, value)
        for key, value in sorted(totals.items(), key=lambda item: item[1], reverse=True)
    )


def _sum_by(trans: Iterable[Transaction], key: Callable[[Transaction], Optional[str]]) -> Rows:
    totals: Dict[str, int] = defaultdict(int)
    for t in trans:
        k = key(t)
        if k:
            totals[k] += t.amount
    return _rank(totals)


def _count_by(trans: Iterable[Transaction], key: Callable[[Transaction], Optional[str]]) -> Rows:
    totals: Dict[str, int] = defaultdict(int)
    for t in trans:
        k = key(t)
        if k:
            totals[k] += 1
    return _rank(totals)


def extract_expense_category(description: Optional[str]) -> Optional[str]:
    """Return ``Transport`` for ``"[Transport] fuel"``; None when there is no prefix."""
    if not description:
        return None
    match = CATEGORY_PREFIX.match(description)
    return match.group(1) if match else None


def revenue_by_payment_method(trans: Iterable[Transaction]) -> Rows:
    return _sum_by(trans, lambda t: t.payment_method if t.is_income else None)


def expenses_by_category(trans: Iterable[Transaction]) -> Rows:
    def _category(t: Transaction) -> Optional[str]:
        if not t.is_expense:
            return None
        category = extract_expense_category(t.description)
        if category is None:
            logger.debug("expense %s has no category prefix", t.id)
        return category

    return _sum_by(trans, _category)


def _doctor_key(no_doctor: str) -> Callable[[Transaction], Optional[str]]:
    def _doctor(t: Transaction) -> Optional[str]:
        if t.is_income and t.doctor and t.doctor != no_doctor:
            return t.doctor
        return None

    return _doctor


def revenue_by_doctor(trans: Iterable[Transaction], no_doctor: str = NO_DOCTOR) -> Rows:
    return _sum_by(trans, _doctor_key(no_doctor))


def visits_by_doctor(trans: Iterable[Transaction], no_doctor: str = NO_DOCTOR) -> Rows:
    """Visits per doctor, counted as distinct record ids."""
    key = _doctor_key(no_doctor)
    visits: Dict[str, set] = {}
    for t in trans:
        doctor = key(t)
        if doctor:
            visits.setdefault(doctor, set()).add(t.id)
    return _rank({doctor: len(ids) for doctor, ids in visits.items()})


def _referral_key(patients: Optional[Mapping[str, Patient]]) -> Callable[[Transaction], Optional[str]]:
    def _referral(t: Transaction) -> Optional[str]:
        if not t.is_income:
            return None
        return safe_patient(patients, t.patient_id).map(lambda p: p.referral_source).get_or_else(None)

    return _referral


def revenue_by_referral_source(
    trans: Iterable[Transaction], patients: Optional[Mapping[str, Patient]]
) -> Rows:
    return _sum_by(trans, _referral_key(patients))


def visits_by_referral_source(
    trans: Iterable[Transaction], patients: Optional[Mapping[str, Patient]]
) -> Rows:
    return _count_by(trans, _referral_key(patients))


def _service_key(t: Transaction) -> Optional[str]:
    return t.service_category if t.is_income else None


def revenue_by_service_category(trans: Iterable[Transaction]) -> Rows:
    return _sum_by(trans, _service_key)


def visits_by_service_category(trans: Iterable[Transaction]) -> Rows:
    return _count_by(trans, _service_key)


def daily_trend(trans: Iterable[Transaction]) -> Tuple[TrendPoint, ...]:
    """Income and expense per calendar day, oldest day first."""
    days: Dict[date, list] = {}
    for t in trans:
        totals = days.setdefault(t.created_at.date(), [0, 0])
        if t.is_income:
            totals[0] += t.amount
        elif t.is_expense:
            totals[1] += t.amount
    return tuple(TrendPoint(day, inc, exp) for day, (inc, exp) in sorted(days.items()))


def top(rows: Iterable[ProjectionRow], k: int) -> Iterator[ProjectionRow]:
    return islice(rows, max(0, k))
