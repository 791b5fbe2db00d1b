"""The state store: sole owner of the app state.

Every committed mutation replaces the whole ``AppState`` in one assignment,
recomputes the derived metrics from the new snapshot, hands the snapshot to
the saver and finally announces the change on the store's event bus.
Rejected mutations change nothing and are reported as ``None`` / ``False``.
"""

import logging
from dataclasses import replace
from datetime import datetime
from typing import Callable, Optional

from lume.calculator import compute_metrics
from lume.domain import AppState, DerivedMetrics, Transaction
from lume.events import CURRENCY_SET, LIMIT_SET, SETTINGS_UPDATED, STATE_RESET, TRANSACTION_ADDED, EventBus
from lume.functional import validate_limit, validate_symbol
from lume.ledger import add_transaction, new_transaction
from lume.storage import StateStorage

logger = logging.getLogger(__name__)


def local_now() -> datetime:
    # naive local time, so each stored instant is resolved with its own DST offset
    return datetime.now()


class StateStore:

    def __init__(
        self,
        storage: Optional[StateStorage] = None,
        clock: Callable[[], datetime] = local_now,
        saver: Optional[Callable[[AppState], None]] = None,
        events: Optional[EventBus] = None,
    ):
        self.storage = storage if storage is not None else StateStorage()
        self.clock = clock
        self.saver = saver if saver is not None else self.storage.save
        self.events = events if events is not None else EventBus()
        self._state = self.storage.load()
        self._metrics = compute_metrics(self._state.transactions, self._state.config, self.clock())

    @property
    def state(self) -> AppState:
        return self._state

    @property
    def metrics(self) -> DerivedMetrics:
        return self._metrics

    def refresh(self, now: Optional[datetime] = None) -> DerivedMetrics:
        self._metrics = compute_metrics(
            self._state.transactions, self._state.config, now or self.clock()
        )
        return self._metrics

    def _commit(self, state: AppState, event: str, payload: dict) -> list:
        self._state = state
        self.refresh()
        self.saver(state)
        payload = dict(payload, metrics=self._metrics, currency_symbol=state.config.currency_symbol)
        return self.events.publish(event, payload)

    def add_transaction(
        self, amount, note: Optional[str] = None, category: Optional[str] = None
    ) -> Optional[Transaction]:
        result = new_transaction(amount, note=note, category=category, now=self.clock())
        if not result.is_right():
            logger.info("Transaction rejected: %s", result.get_error()["message"])
            return None

        t = result.get_or_else(None)
        state = replace(self._state, transactions=add_transaction(self._state.transactions, t))
        self._commit(state, TRANSACTION_ADDED, {"transaction": t})
        return t

    def set_monthly_limit(self, value) -> bool:
        result = validate_limit(value)
        if not result.is_right():
            logger.info("Monthly limit rejected: %s", result.get_error()["message"])
            return False

        limit = result.get_or_else(0.0)
        config = replace(self._state.config, monthly_limit=limit, onboarding_complete=True)
        self._commit(replace(self._state, config=config), LIMIT_SET, {"monthly_limit": limit})
        return True

    def set_currency_symbol(self, symbol) -> bool:
        result = validate_symbol(symbol)
        if not result.is_right():
            logger.info("Currency symbol rejected: %s", result.get_error()["message"])
            return False

        config = replace(self._state.config, currency_symbol=result.get_or_else(symbol))
        self._commit(replace(self._state, config=config), CURRENCY_SET, {"currency_symbol": config.currency_symbol})
        return True

    def update_settings(self, monthly_limit, currency_symbol) -> bool:
        """Apply limit and symbol together, or neither of them."""
        limit = validate_limit(monthly_limit)
        symbol = validate_symbol(currency_symbol)
        errors = [r.get_error()["message"] for r in (limit, symbol) if not r.is_right()]
        if errors:
            logger.info("Settings rejected: %s", "; ".join(errors))
            return False

        config = replace(
            self._state.config,
            monthly_limit=limit.get_or_else(0.0),
            currency_symbol=symbol.get_or_else(currency_symbol),
            onboarding_complete=True,
        )
        self._commit(
            replace(self._state, config=config),
            SETTINGS_UPDATED,
            {"monthly_limit": config.monthly_limit, "currency_symbol": config.currency_symbol},
        )
        return True

    def reset(self) -> None:
        self.storage.clear()
        state = self.storage.load()
        logger.info("State reset; %d transactions discarded", len(self._state.transactions))
        self._commit(state, STATE_RESET, {})
