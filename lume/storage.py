"""Persistence of the app state as one JSON record under a single key.

Loading never fails: missing or unreadable data yields the default state,
and damaged fields fall back to their defaults one at a time. Saving and
clearing are best-effort and only log on failure.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional

from lume.config import STORAGE_KEY
from lume.domain import AppState, BudgetConfig, DEFAULT_CURRENCY_SYMBOL, Transaction, default_state
from lume.functional import Either, Left, parse_timestamp, validate_amount, validate_limit

logger = logging.getLogger(__name__)


class MemoryBackend:
    """Key-value backend kept in a dict; nothing survives the process."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class FileBackend:
    """Key-value backend storing each key as ``<directory>/<key>.json``."""

    def __init__(self, directory: Path):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        target = self._path(key)
        # write next to the target so os.replace stays on one filesystem
        handle = tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=self.directory,
            prefix=f"{key}-",
            suffix=".tmp",
            delete=False,
        )
        try:
            with handle:
                handle.write(value)
            os.replace(handle.name, target)
        except Exception:
            Path(handle.name).unlink(missing_ok=True)
            raise

    def delete(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)


def encode_transaction(t: Transaction) -> Dict[str, Any]:
    data: Dict[str, Any] = {"id": t.id, "amount": t.amount, "date": t.date}
    if t.note is not None:
        data["note"] = t.note
    if t.category is not None:
        data["category"] = t.category
    return data


def encode_state(state: AppState) -> Dict[str, Any]:
    return {
        "transactions": [encode_transaction(t) for t in state.transactions],
        "config": {
            "monthlyLimit": state.config.monthly_limit,
            "currencySymbol": state.config.currency_symbol,
            "onboardingComplete": state.config.onboarding_complete,
        },
    }


def _optional_text(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def decode_transaction(raw: Any) -> Either[dict, Transaction]:
    if not isinstance(raw, dict):
        return Left({"error": "not_an_object", "message": f"Transaction entry is {type(raw).__name__}"})

    tx_id = raw.get("id")
    if isinstance(tx_id, bool) or not isinstance(tx_id, (str, int)) or str(tx_id) == "":
        return Left({"error": "missing_id", "message": "Transaction has no usable id"})

    date = raw.get("date")
    if not parse_timestamp(date).is_some():
        return Left({"error": "bad_date", "message": f"Unparsable date {date!r}", "id": str(tx_id)})

    return validate_amount(raw.get("amount")).map(
        lambda amount: Transaction(
            id=str(tx_id),
            amount=amount,
            date=date,
            note=_optional_text(raw.get("note")),
            category=_optional_text(raw.get("category")),
        )
    )


def decode_config(raw: Any) -> BudgetConfig:
    if not isinstance(raw, dict):
        return BudgetConfig()

    limit = raw.get("monthlyLimit")
    symbol = raw.get("currencySymbol")
    onboarded = raw.get("onboardingComplete")

    return BudgetConfig(
        monthly_limit=validate_limit(limit).get_or_else(0.0) if limit is not None else 0.0,
        currency_symbol=symbol if isinstance(symbol, str) and symbol else DEFAULT_CURRENCY_SYMBOL,
        onboarding_complete=onboarded if isinstance(onboarded, bool) else False,
    )


def decode_transactions(raw: Any) -> List[Transaction]:
    if not isinstance(raw, list):
        if raw is not None:
            logger.warning("Stored transactions are %s, not a list; starting empty", type(raw).__name__)
        return []

    seen = set()
    result: List[Transaction] = []
    for entry in raw:
        decoded = decode_transaction(entry)
        if not decoded.is_right():
            logger.warning("Dropping stored transaction: %s", decoded.get_error()["message"])
            continue
        t = decoded.get_or_else(None)
        if t.id in seen:
            logger.warning("Dropping duplicate stored transaction %s", t.id)
            continue
        seen.add(t.id)
        result.append(t)
    return result


def decode_state(data: Any) -> AppState:
    if not isinstance(data, dict):
        logger.warning("Stored state is %s, not an object; using defaults", type(data).__name__)
        return default_state()
    return AppState(
        transactions=tuple(decode_transactions(data.get("transactions"))),
        config=decode_config(data.get("config")),
    )


class StateStorage:
    """load/save/clear of the whole ``AppState`` through a key-value backend."""

    def __init__(self, backend=None, key: str = STORAGE_KEY):
        self.backend = backend if backend is not None else MemoryBackend()
        self.key = key

    def load(self) -> AppState:
        try:
            serialized = self.backend.get(self.key)
        except (OSError, ValueError) as exc:
            logger.error("Failed to read stored state under %s: %s", self.key, exc)
            return default_state()

        if not serialized:
            return default_state()

        try:
            data = json.loads(serialized)
        except ValueError as exc:
            logger.warning("Stored state under %s is not valid JSON: %s", self.key, exc)
            return default_state()
        return decode_state(data)

    def save(self, state: AppState) -> None:
        try:
            serialized = json.dumps(encode_state(state), ensure_ascii=False)
            self.backend.set(self.key, serialized)
        except (OSError, TypeError, ValueError):
            logger.exception("Failed to save state under %s", self.key)

    def clear(self) -> None:
        try:
            self.backend.delete(self.key)
        except OSError:
            logger.exception("Failed to clear stored state under %s", self.key)
