from datetime import datetime
from typing import Callable, Dict, List, NamedTuple

from ledger.services import build_report
from ledger.transforms import add_transaction

__all__ = ['LEDGER_CHANGED', 'Event', 'EventBus', 'refresh_report_handler', 'record_added_handler']


class Event(NamedTuple):
    name: str
    ts: str
    payload: dict


class EventBus:
    """Synchronous publish/subscribe for ledger change notifications."""

    def __init__(self):
        self._subscribers: Dict[str, List[Callable[[Event, dict], dict]]] = {}

    def subscribe(self, name: str, handler: Callable[[Event, dict], dict]) -> None:
        self._subscribers.setdefault(name, []).append(handler)

    def publish(self, name: str, payload: dict) -> List[dict]:
        handlers = self._subscribers.get(name, [])
        if not handlers:
            return []
        event = Event(name=name, ts=datetime.now().isoformat(), payload=payload)
        return [handler(event, payload) for handler in handlers]

    def unsubscribe(self, name: str, handler: Callable[[Event, dict], dict]) -> None:
        if handler in self._subscribers.get(name, []):
            self._subscribers[name].remove(handler)


LEDGER_CHANGED = "LEDGER_CHANGED"


def refresh_report_handler(event: Event, payload: dict) -> dict:
    """Re-run aggregation on the fresh snapshot carried by a change event.

    payload: {"snapshot": tuple of records, "window": DateWindow, "patients": lookup}
    """
    report = build_report(payload.get("snapshot", ()), payload["window"], payload.get("patients"))
    return {"report": report}


def record_added_handler(event: Event, payload: dict) -> dict:
    """Append a newly pushed record to the snapshot, then re-aggregate."""
    snapshot = add_transaction(tuple(payload.get("snapshot", ())), payload["record"])
    report = build_report(snapshot, payload["window"], payload.get("patients"))
    return {"snapshot": snapshot, "report": report}
