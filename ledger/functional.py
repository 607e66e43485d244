from abc import ABC, abstractmethod
from datetime import datetime
from typing import Callable, Generic, Mapping, Optional, TypeVar

from ledger.domain import (
    DOCTORS,
    EXPENSE,
    EXPENSE_PAYMENT_METHODS,
    INCOME,
    PAYMENT_METHODS,
    REFERRAL_SOURCES,
    SERVICE_CATEGORIES,
    TRANSACTION_TYPES,
    Patient,
    Transaction,
)

T = TypeVar('T')
U = TypeVar('U')
E = TypeVar('E')


class Maybe(Generic[T], ABC):

    @abstractmethod
    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def is_some(self) -> bool:
        pass

    def is_none(self) -> bool:
        return not self.is_some()


class Some(Maybe[T]):

    def __init__(self, value: T):
        self._value = value

    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        return Some(f(self._value))

    def get_or_else(self, default: T) -> T:
        return self._value

    def is_some(self) -> bool:
        return True

    def __repr__(self) -> str:
        return f"Some({self._value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Some) and self._value == other._value


class Nothing(Maybe[T]):

    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        return Nothing()

    def get_or_else(self, default: T) -> T:
        return default

    def is_some(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "Nothing()"

    def __eq__(self, other) -> bool:
        return isinstance(other, Nothing)


class Either(Generic[E, T], ABC):

    @abstractmethod
    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def is_right(self) -> bool:
        pass

    def is_left(self) -> bool:
        return not self.is_right()

    @abstractmethod
    def get_error(self) -> E:
        pass


class Right(Either[E, T]):

    def __init__(self, value: T):
        self._value = value

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return f(self._value)

    def get_or_else(self, default: T) -> T:
        return self._value

    def is_right(self) -> bool:
        return True

    def get_error(self) -> E:
        raise ValueError("Cannot get error from Right")

    def __repr__(self) -> str:
        return f"Right({self._value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Right) and self._value == other._value


class Left(Either[E, T]):

    def __init__(self, error: E):
        self._error = error

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return Left(self._error)

    def get_or_else(self, default: T) -> T:
        return default

    def is_right(self) -> bool:
        return False

    def get_error(self) -> E:
        return self._error

    def __repr__(self) -> str:
        return f"Left({self._error!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Left) and self._error == other._error


def safe_patient(patients: Optional[Mapping[str, Patient]], patient_id: Optional[str]) -> Maybe[Patient]:
    """Resolve a patient reference; a join miss is Nothing, never an error."""
    if not patients or not patient_id:
        return Nothing()
    patient = patients.get(patient_id)
    if patient is None:
        return Nothing()
    return Some(patient)


# --- Boundary validation. The aggregation core never calls these.

def _check_type(t: Transaction) -> Either[dict, Transaction]:
    if t.type not in TRANSACTION_TYPES:
        return Left({
            "error": "unknown_type",
            "message": f"Transaction {t.id} has unknown type {t.type!r}",
            "transaction_id": t.id,
        })
    return Right(t)


def _check_amount(t: Transaction) -> Either[dict, Transaction]:
    if isinstance(t.amount, bool) or not isinstance(t.amount, int):
        return Left({
            "error": "invalid_amount",
            "message": f"Transaction {t.id} amount must be a whole number",
            "transaction_id": t.id,
            "amount": t.amount,
        })
    if t.amount < 0:
        return Left({
            "error": "negative_amount",
            "message": f"Transaction {t.id} amount cannot be negative",
            "transaction_id": t.id,
            "amount": t.amount,
        })
    return Right(t)


def _check_payment_method(t: Transaction) -> Either[dict, Transaction]:
    allowed = EXPENSE_PAYMENT_METHODS if t.type == EXPENSE else PAYMENT_METHODS
    if t.payment_method not in allowed:
        return Left({
            "error": "unknown_payment_method",
            "message": f"{t.type} {t.id} cannot be paid with {t.payment_method!r}",
            "transaction_id": t.id,
            "payment_method": t.payment_method,
        })
    return Right(t)


def _check_timestamp(t: Transaction) -> Either[dict, Transaction]:
    if not isinstance(t.created_at, datetime):
        return Left({
            "error": "missing_timestamp",
            "message": f"Transaction {t.id} has no creation timestamp",
            "transaction_id": t.id,
        })
    return Right(t)


def _check_variant(t: Transaction) -> Either[dict, Transaction]:
    if t.type == EXPENSE and (t.service_category or t.doctor):
        return Left({
            "error": "income_fields_on_expense",
            "message": f"Expense {t.id} cannot carry service or doctor tags",
            "transaction_id": t.id,
        })
    if t.type == INCOME and t.patient_id is not None and not str(t.patient_id).strip():
        return Left({
            "error": "blank_patient_reference",
            "message": f"Income {t.id} has a blank patient reference",
            "transaction_id": t.id,
        })
    return Right(t)


def _check_tags(t: Transaction) -> Either[dict, Transaction]:
    if t.service_category is not None and t.service_category not in SERVICE_CATEGORIES:
        return Left({
            "error": "unknown_service_category",
            "message": f"Income {t.id} has unknown service {t.service_category!r}",
            "transaction_id": t.id,
            "service_category": t.service_category,
        })
    if t.doctor is not None and t.doctor not in DOCTORS:
        return Left({
            "error": "unknown_doctor",
            "message": f"Income {t.id} is billed to unknown doctor {t.doctor!r}",
            "transaction_id": t.id,
            "doctor": t.doctor,
        })
    return Right(t)


def validate_transaction(t: Transaction) -> Either[dict, Transaction]:
    return (
        _check_type(t)
        .bind(_check_amount)
        .bind(_check_payment_method)
        .bind(_check_timestamp)
        .bind(_check_variant)
        .bind(_check_tags)
    )


def validate_patient(p: Patient) -> Either[dict, Patient]:
    if not p.id:
        return Left({
            "error": "missing_patient_id",
            "message": "Patient record has no id",
        })
    if not isinstance(p.registered_at, datetime):
        return Left({
            "error": "missing_registration",
            "message": f"Patient {p.id} has no registration timestamp",
            "patient_id": p.id,
        })
    if p.referral_source is not None and p.referral_source not in REFERRAL_SOURCES:
        return Left({
            "error": "unknown_referral_source",
            "message": f"Patient {p.id} has unknown referral source {p.referral_source!r}",
            "patient_id": p.id,
            "referral_source": p.referral_source,
        })
    return Right(p)
