from datetime import datetime

from ledger.domain import Patient, Transaction, expense, income
from ledger.functional import (
    Left,
    Nothing,
    Right,
    Some,
    safe_patient,
    validate_patient,
    validate_transaction,
)

TS = datetime(2025, 9, 1, 10, 0)


def test_maybe_map():
    assert Some(5).map(lambda x: x * 2).get_or_else(0) == 10
    nothing = Nothing().map(lambda x: x * 2)
    assert nothing.is_none()
    assert nothing.get_or_else(0) == 0


def test_either_bind_short_circuits():
    def half(x: int):
        return Left("odd") if x % 2 else Right(x // 2)

    assert Right(8).bind(half).bind(half).get_or_else(None) == 2
    res = Right(6).bind(half).bind(half)
    assert res.is_left()
    assert res.get_error() == "odd"
    assert Left("first").bind(half).get_error() == "first"


def test_safe_patient():
    patients = {"p1": Patient("p1", TS)}
    assert safe_patient(patients, "p1") == Some(patients["p1"])
    assert safe_patient(patients, "missing").is_none()
    assert safe_patient(patients, None).is_none()
    assert safe_patient(None, "p1").is_none()


def test_validate_transaction_success():
    res = validate_transaction(income("i1", 5000, "MoMo", TS, patient_id="p1"))
    assert res.is_right()
    assert res.get_or_else(None).id == "i1"


def test_validate_transaction_unknown_type():
    res = validate_transaction(Transaction("x", "Refund", 10, "Cash", TS))
    assert res.get_error()["error"] == "unknown_type"


def test_validate_transaction_amounts():
    assert validate_transaction(income("i1", -5, "Cash", TS)).get_error()["error"] == "negative_amount"
    assert validate_transaction(income("i1", 5.5, "Cash", TS)).get_error()["error"] == "invalid_amount"
    assert validate_transaction(income("i1", 0, "Cash", TS)).is_right()


def test_validate_transaction_payment_method():
    err = validate_transaction(expense("e1", 10, "Bitcoin", TS)).get_error()
    assert err["error"] == "unknown_payment_method"
    assert err["payment_method"] == "Bitcoin"


def test_validate_transaction_missing_timestamp():
    res = validate_transaction(Transaction("x", "Income", 10, "Cash", None))
    assert res.get_error()["error"] == "missing_timestamp"


def test_validate_transaction_expense_with_income_tags():
    odd = Transaction("e1", "Expense", 10, "Cash", TS, doctor="Dr. Ludo")
    assert validate_transaction(odd).get_error()["error"] == "income_fields_on_expense"


def test_validate_patient():
    assert validate_patient(Patient("p1", TS)).is_right()
    assert validate_patient(Patient("", TS)).get_error()["error"] == "missing_patient_id"
    assert validate_patient(Patient("p1", None)).get_error()["error"] == "missing_registration"


def test_validate_patient_referral_source():
    assert validate_patient(Patient("p1", TS, referral_source="Social Media")).is_right()
    err = validate_patient(Patient("p1", TS, referral_source="Billboard")).get_error()
    assert err["error"] == "unknown_referral_source"
    assert err["referral_source"] == "Billboard"


def test_validate_transaction_expense_payment_methods():
    for method in ("Card", "Insurance", "Partner"):
        err = validate_transaction(expense("e1", 10, method, TS)).get_error()
        assert err["error"] == "unknown_payment_method"
        assert validate_transaction(income("i1", 10, method, TS)).is_right()
    assert validate_transaction(expense("e1", 10, "Airtel Money", TS)).is_right()


def test_validate_transaction_service_and_doctor_tags():
    ok = income("i1", 10, "Cash", TS, service_category="Laser", doctor="None")
    assert validate_transaction(ok).is_right()

    err = validate_transaction(income("i1", 10, "Cash", TS, service_category="Massage")).get_error()
    assert err["error"] == "unknown_service_category"

    err = validate_transaction(income("i1", 10, "Cash", TS, doctor="Dr. Who")).get_error()
    assert err["error"] == "unknown_doctor"
    assert err["doctor"] == "Dr. Who"
