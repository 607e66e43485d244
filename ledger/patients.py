"""New-vs-returning patient classification for a report window."""
import logging
from datetime import datetime
from typing import Dict, Iterable, List, Mapping, Optional

from ledger.domain import (
    MARKETING_CHANNEL,
    WORKING_DAY_START_HOUR,
    DateWindow,
    Patient,
    PatientBreakdown,
    Transaction,
)
from ledger.functional import safe_patient
from ledger.workday import visit_days_by_patient

logger = logging.getLogger(__name__)


def patients_in_window(trans: Iterable[Transaction], window: DateWindow) -> List[str]:
    """Distinct patient ids billed inside the window, in first-seen order."""
    seen: Dict[str, None] = {}
    for t in trans:
        if t.is_income and t.patient_id and window.contains(t.created_at):
            seen.setdefault(t.patient_id, None)
    return list(seen)


def visit_history(trans: Iterable[Transaction]) -> Dict[str, List[datetime]]:
    """Income timestamps per patient, sorted ascending. Expenses are ignored."""
    history: Dict[str, List[datetime]] = {}
    for t in trans:
        if t.is_income and t.patient_id:
            history.setdefault(t.patient_id, []).append(t.created_at)
    for stamps in history.values():
        stamps.sort()
    return history


def is_new_patient(patient: Patient, window_start: datetime) -> bool:
    # calendar dates only; time of day and the working-day boundary do not matter
    return patient.registered_at.date() >= window_start.date()


def classify_patients(
    trans: Iterable[Transaction],
    window: DateWindow,
    patients: Optional[Mapping[str, Patient]] = None,
    marketing_channel: str = MARKETING_CHANNEL,
    start_hour: int = WORKING_DAY_START_HOUR,
) -> PatientBreakdown:
    """Split the window's billed patients into new and returning.

    ``trans`` may hold more than the window; only income inside the window
    decides who is counted, while the full sequence feeds visit history.
    Patients that cannot be resolved through ``patients`` are counted in
    ``total`` and listed in ``unresolved_ids`` but land in neither bucket.
    """
    trans = tuple(trans)
    ids = patients_in_window(trans, window)
    history = visit_history(trans)
    days = visit_days_by_patient(trans, start_hour)

    new_ids: List[str] = []
    returning_ids: List[str] = []
    unresolved: List[str] = []
    marketing = 0

    for pid in ids:
        patient = safe_patient(patients, pid).get_or_else(None)
        if patient is None:
            logger.debug("patient %s not resolvable, skipping classification", pid)
            unresolved.append(pid)
            continue
        if is_new_patient(patient, window.start):
            new_ids.append(pid)
            if patient.referral_source == marketing_channel:
                marketing += 1
        else:
            returning_ids.append(pid)

    return PatientBreakdown(
        total=len(ids),
        new=len(new_ids),
        returning=len(returning_ids),
        marketing_referrals=marketing,
        new_ids=tuple(new_ids),
        returning_ids=tuple(returning_ids),
        unresolved_ids=tuple(unresolved),
        first_visits=tuple((pid, history[pid][0]) for pid in ids if history.get(pid)),
        visit_days=tuple((pid, days.get(pid, 0)) for pid in ids),
    )
