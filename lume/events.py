from datetime import datetime
from typing import Callable, Dict, List, NamedTuple

__all__ = [
    'TRANSACTION_ADDED', 'LIMIT_SET', 'CURRENCY_SET', 'STATE_RESET', 'SETTINGS_UPDATED',
    'Event', 'EventBus', 'over_budget_handler',
]

TRANSACTION_ADDED = "TRANSACTION_ADDED"
LIMIT_SET = "LIMIT_SET"
CURRENCY_SET = "CURRENCY_SET"
STATE_RESET = "STATE_RESET"
SETTINGS_UPDATED = "SETTINGS_UPDATED"


class Event(NamedTuple):
    name: str
    ts: str
    payload: dict


Handler = Callable[[Event, dict], dict]


class EventBus:
    def __init__(self):
        self._subscribers: Dict[str, List[Handler]] = {}

    def subscribe(self, name: str, handler: Handler) -> None:
        self._subscribers.setdefault(name, []).append(handler)

    def unsubscribe(self, name: str, handler: Handler) -> None:
        if handler in self._subscribers.get(name, []):
            self._subscribers[name].remove(handler)

    def publish(self, name: str, payload: dict) -> List[dict]:
        handlers = self._subscribers.get(name)
        if not handlers:
            return []
        event = Event(name=name, ts=datetime.now().isoformat(), payload=payload)
        return [handler(event, payload) for handler in handlers]


def over_budget_handler(event: Event, payload: dict) -> dict:
    """Turn an expense that pushes today over its target into an alert."""
    metrics = payload.get("metrics")
    if metrics is None or not metrics.is_over_budget:
        return {}
    symbol = payload.get("currency_symbol", "")
    return {
        "alert": f"Over today's budget by {symbol}{abs(metrics.remaining_today):,.2f}",
        "remaining_today": metrics.remaining_today,
        "daily_target": metrics.daily_target,
    }
