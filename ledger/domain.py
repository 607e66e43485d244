from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Tuple

INCOME = "Income"
EXPENSE = "Expense"
TRANSACTION_TYPES = (INCOME, EXPENSE)

CASH = "Cash"
PAYMENT_METHODS = ("Cash", "MoMo", "Airtel Money", "Bank", "Card", "Insurance", "Partner")
EXPENSE_PAYMENT_METHODS = ("Cash", "MoMo", "Airtel Money", "Bank")

SERVICE_CATEGORIES = (
    "Consultation",
    "Surgery",
    "Medication",
    "Optical",
    "Procedure",
    "Scan",
    "Laser",
    "IV",
    "Other",
)

NO_DOCTOR = "None"
DOCTORS = ("Dr. Ludo", "Dr. Mustofa", "Dr. Jessica", "Dr. Ehab", NO_DOCTOR)

MARKETING_CHANNEL = "Social Media"
REFERRAL_SOURCES = (
    MARKETING_CHANNEL,
    "Dr. Ludo",
    "Walk-in",
    "By Old Patient",
    "Other Doctor",
    "NWSC",
    "BOU",
    "UPDF",
    "Others",
)

WORKING_DAY_START_HOUR = 8


@dataclass(frozen=True)
class Transaction:
    id: str
    type: str                              # INCOME or EXPENSE
    amount: int                            # whole currency units
    payment_method: Optional[str]
    created_at: datetime
    description: Optional[str] = None
    patient_id: Optional[str] = None       # income only
    category: Optional[str] = None
    service_category: Optional[str] = None
    doctor: Optional[str] = None

    @property
    def is_income(self) -> bool:
        return self.type == INCOME

    @property
    def is_expense(self) -> bool:
        return self.type == EXPENSE

    @property
    def is_cash(self) -> bool:
        return self.payment_method == CASH


def income(
    id: str,
    amount: int,
    payment_method: Optional[str],
    created_at: datetime,
    patient_id: Optional[str] = None,
    service_category: Optional[str] = None,
    doctor: Optional[str] = None,
    category: Optional[str] = None,
    description: Optional[str] = None,
) -> Transaction:
    return Transaction(
        id=id,
        type=INCOME,
        amount=amount,
        payment_method=payment_method,
        created_at=created_at,
        description=description,
        patient_id=patient_id,
        category=category,
        service_category=service_category,
        doctor=doctor,
    )


def expense(
    id: str,
    amount: int,
    payment_method: Optional[str],
    created_at: datetime,
    description: Optional[str] = None,
) -> Transaction:
    """Build an expense; expenses never carry patient or service tags."""
    return Transaction(
        id=id,
        type=EXPENSE,
        amount=amount,
        payment_method=payment_method,
        created_at=created_at,
        description=description,
    )


@dataclass(frozen=True)
class Patient:
    id: str
    registered_at: datetime
    referral_source: Optional[str] = None
    full_name: str = ""


@dataclass(frozen=True)
class DateWindow:
    """Closed interval [start, end]; both ends are inclusive."""
    start: datetime
    end: datetime

    def contains(self, ts: datetime) -> bool:
        return self.start <= ts <= self.end


@dataclass(frozen=True)
class DashboardMetrics:
    total_revenue: int = 0
    revenue_count: int = 0
    cash_revenue: int = 0
    digital_revenue: int = 0
    total_expenses: int = 0
    expense_count: int = 0
    cash_expenses: int = 0
    digital_expenses: int = 0
    available_cash: int = 0
    available_digital: int = 0
    net_profit: int = 0


@dataclass(frozen=True)
class PatientBreakdown:
    total: int = 0
    new: int = 0
    returning: int = 0
    marketing_referrals: int = 0
    new_ids: Tuple[str, ...] = ()
    returning_ids: Tuple[str, ...] = ()
    unresolved_ids: Tuple[str, ...] = ()
    first_visits: Tuple[Tuple[str, datetime], ...] = ()   # (patient id, earliest visit)
    visit_days: Tuple[Tuple[str, int], ...] = ()          # (patient id, working days)

    def first_visit(self, patient_id: str) -> Optional[datetime]:
        return dict(self.first_visits).get(patient_id)

    def visit_days_for(self, patient_id: str) -> int:
        return dict(self.visit_days).get(patient_id, 0)


@dataclass(frozen=True)
class ProjectionRow:
    key: str
    value: int


@dataclass(frozen=True)
class TrendPoint:
    day: date
    income: int
    expense: int


@dataclass(frozen=True)
class LedgerReport:
    window: DateWindow
    metrics: DashboardMetrics
    patients: PatientBreakdown
    projections: Tuple[Tuple[str, Tuple[ProjectionRow, ...]], ...] = ()   # (name, rows) in build order
    daily_trend: Tuple[TrendPoint, ...] = ()
    recent_activity: Tuple[Transaction, ...] = ()

    def projection(self, name: str) -> Tuple[ProjectionRow, ...]:
        return dict(self.projections).get(name, ())

    def projection_names(self) -> Tuple[str, ...]:
        return tuple(name for name, _ in self.projections)
