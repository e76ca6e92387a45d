from __future__ import annotations

import pytest

import rn_sync.ledger as ledger_mod
from rn_sync.ledger import LedgerError, SeenOrderLedger, create_ledger_engine, open_ledger


def test_has_insert_roundtrip() -> None:
    ledger = open_ledger("sqlite://")
    assert ledger.has(10) is False
    assert ledger.insert(10) is True
    assert ledger.has(10) is True
    assert ledger.has(11) is False
    assert ledger.count() == 1


def test_duplicate_insert_is_rejected_not_overwritten() -> None:
    ledger = open_ledger("sqlite://")
    assert ledger.insert(7) is True
    assert ledger.insert(7) is False
    assert ledger.count() == 1


def test_ensure_table_is_idempotent() -> None:
    ledger = open_ledger("sqlite://", table_name="seen")
    ledger.insert(1)
    ledger.ensure_table()
    assert ledger.has(1)
    assert ledger.table.name == "seen"


def test_file_backed_ledger_survives_reopen(tmp_path) -> None:
    url = f"sqlite:///{tmp_path / 'ledger.db'}"
    first = open_ledger(url)
    first.insert(99)
    first.close()

    second = open_ledger(url)
    assert second.has(99)
    assert not second.has(100)


def test_missing_table_raises_ledger_error() -> None:
    ledger = SeenOrderLedger(create_ledger_engine("sqlite://"))
    with pytest.raises(LedgerError):
        ledger.has(1)
    with pytest.raises(LedgerError):
        ledger.insert(1)


def test_pooled_engine_settings(monkeypatch) -> None:
    calls = {}

    def fake_create_engine(url, **kwargs):
        calls["url"] = url
        calls.update(kwargs)
        return object()

    monkeypatch.setattr(ledger_mod, "create_engine", fake_create_engine)
    monkeypatch.setattr(ledger_mod.settings_mod, "DB_TIMEOUT_S", 4)
    create_ledger_engine("mysql+pymysql://u:p@db:3306/robosats")

    assert calls["pool_size"] == 10
    assert calls["max_overflow"] == 0
    assert calls["pool_recycle"] == 180
    assert calls["pool_pre_ping"] is True
    assert calls["connect_args"] == {"connect_timeout": 4, "read_timeout": 4, "write_timeout": 4}
