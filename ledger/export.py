from dataclasses import asdict
from datetime import date, datetime
from typing import Any, Dict, Iterable

import pandas as pd

from ledger.domain import LedgerReport, ProjectionRow, Transaction, TrendPoint


def _plain(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, dict):
        return {str(k): _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value


def report_to_dict(report: LedgerReport) -> Dict[str, Any]:
    """JSON-safe view of a report: ISO timestamps, lists instead of tuples.

    Keyed pairs (projections, first visits, visit days) become objects.
    """
    data = asdict(report)
    data["projections"] = dict(data["projections"])
    data["patients"]["first_visits"] = dict(data["patients"]["first_visits"])
    data["patients"]["visit_days"] = dict(data["patients"]["visit_days"])
    return _plain(data)


def projection_frame(rows: Iterable[ProjectionRow], key: str = "key", value: str = "value") -> pd.DataFrame:
    return pd.DataFrame(
        [{key: r.key, value: r.value} for r in rows],
        columns=[key, value],
    )


def trend_frame(points: Iterable[TrendPoint]) -> pd.DataFrame:
    df = pd.DataFrame(
        [{"date": p.day, "income": p.income, "expense": p.expense} for p in points],
        columns=["date", "income", "expense"],
    )
    df["date"] = pd.to_datetime(df["date"])
    return df


def activity_frame(records: Iterable[Transaction]) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "time": t.created_at,
                "type": t.type,
                "amount": t.amount,
                "payment_method": t.payment_method,
                "patient_id": t.patient_id,
                "description": t.description,
            }
            for t in records
        ],
        columns=["time", "type", "amount", "payment_method", "patient_id", "description"],
    )
