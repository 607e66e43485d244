import json
import logging
from datetime import datetime
from typing import Any, Dict, Mapping, Tuple

from ledger.domain import Patient, Transaction
from ledger.functional import Either, Left, Right, validate_patient, validate_transaction

logger = logging.getLogger(__name__)

_TRANSACTION_FIELDS = (
    "id",
    "type",
    "amount",
    "payment_method",
    "created_at",
    "description",
    "patient_id",
    "category",
    "service_category",
    "doctor",
)


def _timestamp(value: Any, owner: str) -> Either[dict, Any]:
    if not isinstance(value, str):
        return Right(value)
    try:
        return Right(datetime.fromisoformat(value))
    except ValueError:
        return Left({
            "error": "invalid_timestamp",
            "message": f"{owner} has unreadable timestamp {value!r}",
            "value": value,
        })


def _ref(value: Any) -> Any:
    # patient ids arrive as numbers from the clinic database
    return str(value) if value is not None else None


def transaction_from_dict(data: Any) -> Either[dict, Transaction]:
    if not isinstance(data, Mapping):
        return Left({"error": "malformed_record", "message": f"ledger row {data!r} is not an object"})
    if data.get("id") is None:
        return Left({"error": "missing_transaction_id", "message": "ledger row has no id"})

    fields = {k: data.get(k) for k in _TRANSACTION_FIELDS}
    fields["id"] = str(fields["id"])
    fields["patient_id"] = _ref(fields["patient_id"])

    def _build(created_at: Any) -> Either[dict, Transaction]:
        return Right(Transaction(**{**fields, "created_at": created_at}))

    return _timestamp(fields["created_at"], f"Transaction {fields['id']}").bind(_build)


def patient_from_dict(data: Any) -> Either[dict, Patient]:
    if not isinstance(data, Mapping):
        return Left({"error": "malformed_record", "message": f"patient row {data!r} is not an object"})
    if data.get("id") is None:
        return Left({"error": "missing_patient_id", "message": "Patient record has no id"})

    pid = str(data["id"])

    def _build(registered_at: Any) -> Either[dict, Patient]:
        return Right(Patient(
            id=pid,
            registered_at=registered_at,
            referral_source=data.get("referral_source"),
            full_name=data.get("full_name", ""),
        ))

    return _timestamp(data.get("registered_at"), f"Patient {pid}").bind(_build)


def load_snapshot(path: str) -> Tuple[Tuple[Patient, ...], Tuple[Transaction, ...]]:
    """Read patients and ledger records from a JSON seed.

    Rows that cannot be converted or fail boundary validation are logged and
    left out; the aggregation core only ever sees validated records.
    """
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    patients = []
    for raw in data.get("patients", []):
        checked = patient_from_dict(raw).bind(validate_patient)
        if checked.is_left():
            logger.warning("skipping patient: %s", checked.get_error()["message"])
            continue
        patients.append(checked.get_or_else(None))

    transactions = []
    for raw in data.get("transactions", []):
        checked = transaction_from_dict(raw).bind(validate_transaction)
        if checked.is_left():
            logger.warning("skipping ledger record: %s", checked.get_error()["message"])
            continue
        transactions.append(checked.get_or_else(None))

    logger.info("loaded %d patients and %d ledger records from %s", len(patients), len(transactions), path)
    return tuple(patients), tuple(transactions)


def index_patients(patients: Tuple[Patient, ...]) -> Dict[str, Patient]:
    return {p.id: p for p in patients}


def add_transaction(
    trans: Tuple[Transaction, ...], t: Transaction
) -> Tuple[Transaction, ...]:
    return trans + (t,)
