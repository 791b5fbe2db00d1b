import json
import logging

import pytest

from lume.domain import AppState, BudgetConfig, Transaction, default_state
from lume.storage import (
    FileBackend,
    MemoryBackend,
    StateStorage,
    decode_state,
    encode_state,
)

KEY = "lume_app_data_v1"

DEFAULT = AppState(
    transactions=(),
    config=BudgetConfig(monthly_limit=0, currency_symbol="$", onboarding_complete=False),
)


def sample_state():
    return AppState(
        transactions=(
            Transaction("t2", 12.5, "2025-09-15T10:00:00+00:00", "Lunch", "🍜"),
            Transaction("t1", 40.0, "2025-09-14T08:00:00+00:00"),
        ),
        config=BudgetConfig(monthly_limit=900.0, currency_symbol="€", onboarding_complete=True),
    )


def storage_with(raw):
    return StateStorage(MemoryBackend({KEY: raw}))


def test_default_state_matches_documented_defaults():
    assert default_state() == DEFAULT


def test_load_missing_key_returns_default():
    assert StateStorage(MemoryBackend()).load() == DEFAULT


def test_load_empty_or_corrupt_returns_default():
    for raw in ("", "{not json", "[1, 2]", "null", '"text"', "42"):
        assert storage_with(raw).load() == DEFAULT


def test_corrupt_data_is_logged(caplog):
    with caplog.at_level(logging.WARNING, logger="lume.storage"):
        storage_with("{oops").load()
    assert "not valid JSON" in caplog.text


def test_save_then_load_round_trip():
    storage = StateStorage(MemoryBackend())
    storage.save(sample_state())
    assert storage.load() == sample_state()


def test_save_of_load_is_idempotent():
    raw = json.dumps({
        "transactions": [{"id": "a", "amount": 5, "date": "2025-01-01T00:00:00Z"}],
        "config": {"monthlyLimit": 300},
    })
    storage = storage_with(raw)
    first = storage.load()
    storage.save(first)
    assert storage.load() == first


def test_wire_format_uses_documented_keys():
    data = encode_state(sample_state())
    assert data["config"] == {
        "monthlyLimit": 900.0,
        "currencySymbol": "€",
        "onboardingComplete": True,
    }
    assert data["transactions"][0] == {
        "id": "t2", "amount": 12.5, "date": "2025-09-15T10:00:00+00:00",
        "note": "Lunch", "category": "🍜",
    }
    # absent optional fields are omitted rather than written as null
    assert set(data["transactions"][1]) == {"id", "amount", "date"}


def test_missing_fields_fall_back_individually():
    state = decode_state({"config": {"monthlyLimit": 450, "extra": 1}, "unknown": True})
    assert state.transactions == ()
    assert state.config == BudgetConfig(monthly_limit=450, currency_symbol="$", onboarding_complete=False)


def test_wrongly_typed_config_fields_fall_back():
    state = decode_state({
        "config": {"monthlyLimit": -10, "currencySymbol": 5, "onboardingComplete": "yes"},
    })
    assert state.config == BudgetConfig()


def test_invalid_transactions_are_dropped():
    state = decode_state({
        "transactions": [
            {"id": "ok", "amount": 10, "date": "2025-09-01T10:00:00", "note": 3, "colour": "red"},
            {"id": "neg", "amount": -1, "date": "2025-09-01T10:00:00"},
            {"id": "nan", "amount": "x", "date": "2025-09-01T10:00:00"},
            {"id": "nodate", "amount": 1},
            {"amount": 1, "date": "2025-09-01T10:00:00"},
            "garbage",
            {"id": "ok", "amount": 99, "date": "2025-09-02T10:00:00"},
            {"id": 1700000000000, "amount": 2, "date": "2025-09-03T10:00:00"},
        ],
        "config": {"monthlyLimit": 100, "currencySymbol": "$", "onboardingComplete": True},
    })
    assert [t.id for t in state.transactions] == ["ok", "1700000000000"]
    assert state.transactions[0].amount == 10
    assert state.transactions[0].note is None


def test_non_list_transactions_give_empty_ledger():
    assert decode_state({"transactions": {"a": 1}}).transactions == ()


def test_clear_removes_stored_state():
    storage = StateStorage(MemoryBackend())
    storage.save(sample_state())
    storage.clear()
    assert storage.load() == DEFAULT
    storage.clear()


class BrokenBackend:
    def get(self, key):
        raise OSError("disk gone")

    def set(self, key, value):
        raise OSError("disk full")

    def delete(self, key):
        raise OSError("read-only")


def test_backend_failures_are_logged_not_raised(caplog):
    storage = StateStorage(BrokenBackend())
    with caplog.at_level(logging.ERROR, logger="lume.storage"):
        assert storage.load() == DEFAULT
        storage.save(sample_state())
        storage.clear()
    assert "Failed to save state" in caplog.text
    assert "Failed to clear" in caplog.text


def test_file_backend_round_trip(tmp_path):
    storage = StateStorage(FileBackend(tmp_path / "data"))
    assert storage.load() == DEFAULT
    storage.save(sample_state())
    assert (tmp_path / "data" / f"{KEY}.json").exists()
    assert StateStorage(FileBackend(tmp_path / "data")).load() == sample_state()
    # no temp files left behind
    assert [p.name for p in (tmp_path / "data").iterdir()] == [f"{KEY}.json"]


def test_file_backend_clear(tmp_path):
    storage = StateStorage(FileBackend(tmp_path))
    storage.save(sample_state())
    storage.clear()
    assert not (tmp_path / f"{KEY}.json").exists()
    assert storage.load() == DEFAULT


def test_file_backend_corrupt_file(tmp_path):
    (tmp_path / f"{KEY}.json").write_text("{\"transactions\": [", encoding="utf-8")
    assert StateStorage(FileBackend(tmp_path)).load() == DEFAULT


def test_custom_key_is_respected():
    backend = MemoryBackend()
    StateStorage(backend, key="other_v2").save(sample_state())
    assert backend.get(KEY) is None
    assert backend.get("other_v2") is not None


def test_file_backend_failed_write_leaves_no_temp_file(tmp_path):
    backend = FileBackend(tmp_path)
    # a lone surrogate cannot be encoded, so the write itself fails
    with pytest.raises(UnicodeEncodeError):
        backend.set(KEY, "\ud800")
    assert list(tmp_path.iterdir()) == []


def test_file_backend_failed_replace_leaves_no_temp_file(tmp_path, monkeypatch):
    def broken_replace(src, dst):
        raise OSError("rename refused")

    monkeypatch.setattr("lume.storage.os.replace", broken_replace)
    storage = StateStorage(FileBackend(tmp_path))
    storage.save(sample_state())
    assert list(tmp_path.iterdir()) == []


def test_unwritable_state_is_logged_and_old_file_kept(tmp_path, caplog):
    storage = StateStorage(FileBackend(tmp_path))
    storage.save(sample_state())
    bad = AppState(transactions=(Transaction("t9", 1.0, "2025-09-15T10:00:00", "\ud800"),))
    with caplog.at_level(logging.ERROR, logger="lume.storage"):
        storage.save(bad)
    assert "Failed to save state" in caplog.text
    assert [p.name for p in tmp_path.iterdir()] == [f"{KEY}.json"]
    assert storage.load() == sample_state()
