import logging
from typing import Callable, Dict, Iterable, Mapping, Optional, Tuple

from ledger import projections as proj
from ledger.domain import (
    MARKETING_CHANNEL,
    NO_DOCTOR,
    WORKING_DAY_START_HOUR,
    DateWindow,
    LedgerReport,
    Patient,
    ProjectionRow,
    Transaction,
)
from ledger.metrics import accumulate
from ledger.patients import classify_patients
from ledger.window import in_window

logger = logging.getLogger(__name__)

Projection = Callable[[Tuple[Transaction, ...], Optional[Mapping[str, Patient]]], Tuple[ProjectionRow, ...]]


def default_projections(no_doctor: str = NO_DOCTOR) -> Dict[str, Projection]:
    return {
        "revenue_by_payment_method": lambda trans, patients: proj.revenue_by_payment_method(trans),
        "expenses_by_category": lambda trans, patients: proj.expenses_by_category(trans),
        "revenue_by_doctor": lambda trans, patients: proj.revenue_by_doctor(trans, no_doctor),
        "visits_by_doctor": lambda trans, patients: proj.visits_by_doctor(trans, no_doctor),
        "revenue_by_referral_source": proj.revenue_by_referral_source,
        "visits_by_referral_source": proj.visits_by_referral_source,
        "revenue_by_service_category": lambda trans, patients: proj.revenue_by_service_category(trans),
        "visits_by_service_category": lambda trans, patients: proj.visits_by_service_category(trans),
    }


class LedgerReportService:
    """Facade that fans a snapshot out to the accumulator, classifier and projections.

    projections: mapping of name -> function taking (window records, patient lookup)
    and returning ranked rows. The service holds no state between calls.
    """

    def __init__(
        self,
        projections: Optional[Mapping[str, Projection]] = None,
        marketing_channel: str = MARKETING_CHANNEL,
        no_doctor: str = NO_DOCTOR,
        recent_limit: int = 5,
        start_hour: int = WORKING_DAY_START_HOUR,
    ):
        self.projections = dict(projections) if projections is not None else default_projections(no_doctor)
        self.marketing_channel = marketing_channel
        self.recent_limit = recent_limit
        self.start_hour = start_hour

    def build(
        self,
        snapshot: Iterable[Transaction],
        window: DateWindow,
        patients: Optional[Mapping[str, Patient]] = None,
    ) -> LedgerReport:
        snapshot = tuple(snapshot)
        records = in_window(snapshot, window)

        metrics = accumulate(records)
        breakdown = classify_patients(
            snapshot, window, patients, self.marketing_channel, self.start_hour
        )
        views = tuple((name, fn(records, patients)) for name, fn in self.projections.items())
        recent = sorted(records, key=lambda t: t.created_at, reverse=True)[: max(0, self.recent_limit)]

        logger.info(
            "built ledger report for %s..%s: %d of %d records, %d patients",
            window.start.isoformat(), window.end.isoformat(),
            len(records), len(snapshot), breakdown.total,
        )

        return LedgerReport(
            window=window,
            metrics=metrics,
            patients=breakdown,
            projections=views,
            daily_trend=proj.daily_trend(records),
            recent_activity=tuple(recent),
        )


def build_report(
    snapshot: Iterable[Transaction],
    window: DateWindow,
    patients: Optional[Mapping[str, Patient]] = None,
    *,
    marketing_channel: str = MARKETING_CHANNEL,
    no_doctor: str = NO_DOCTOR,
    recent_limit: int = 5,
    start_hour: int = WORKING_DAY_START_HOUR,
) -> LedgerReport:
    service = LedgerReportService(
        marketing_channel=marketing_channel,
        no_doctor=no_doctor,
        recent_limit=recent_limit,
        start_hour=start_hour,
    )
    return service.build(snapshot, window, patients)
