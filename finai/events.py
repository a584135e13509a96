import logging
from typing import Callable, Dict, List, NamedTuple
from datetime import datetime

__all__ = [
    'EventBus', 'Event',
    'INCOME_UPDATED', 'EXPENSE_RECORDED', 'CATEGORY_UPDATED', 'INVESTMENT_RECORDED',
    'STATE_CHANGED', 'BUDGET_ALERT', 'register_default_handlers',
]

logger = logging.getLogger(__name__)


class Event(NamedTuple):
    name: str
    ts: str
    payload: dict


class EventBus:
    def __init__(self):
        self._subscribers: Dict[str, List[Callable[[Event, dict], dict]]] = {}

    def subscribe(self, name: str, handler: Callable[[Event, dict], dict]) -> None:
        if name not in self._subscribers:
            self._subscribers[name] = []
        self._subscribers[name].append(handler)

    def publish(self, name: str, payload: dict) -> List[dict]:
        if name not in self._subscribers:
            return []

        event = Event(
            name=name,
            ts=datetime.now().isoformat(),
            payload=payload
        )

        # a failing subscriber never undoes or aborts an applied change
        results = []
        for handler in list(self._subscribers[name]):
            try:
                result = handler(event, payload)
            except Exception:
                logger.exception("Handler %s failed for %s", getattr(handler, "__name__", handler), name)
                continue
            results.append(result)
        return results

    def unsubscribe(self, name: str, handler: Callable[[Event, dict], dict]) -> None:
        if name in self._subscribers:
            if handler in self._subscribers[name]:
                self._subscribers[name].remove(handler)


INCOME_UPDATED = "INCOME_UPDATED"
EXPENSE_RECORDED = "EXPENSE_RECORDED"
CATEGORY_UPDATED = "CATEGORY_UPDATED"
INVESTMENT_RECORDED = "INVESTMENT_RECORDED"
STATE_CHANGED = "STATE_CHANGED"
BUDGET_ALERT = "BUDGET_ALERT"


def check_budget_handler(event: Event, payload: dict) -> dict:
    category = payload.get("name", "")
    spent = payload.get("amount", 0)
    limit = payload.get("limit", 0)

    if limit > 0 and spent > limit:
        alert = {
            "alert": f"Budget exceeded for category {category}: ₹{spent:,.0f} / ₹{limit:,.0f}",
            "category": category,
            "spent": spent,
            "limit": limit,
        }
        logger.warning(alert["alert"])
        return alert
    return {"spent": spent}


def register_default_handlers(bus: EventBus) -> None:
    bus.subscribe(CATEGORY_UPDATED, check_budget_handler)
