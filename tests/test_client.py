"""
Unit tests for the Actual client wrapper
"""

import datetime as dt
from decimal import Decimal
from types import SimpleNamespace

import pytest

from actual_importer.client import BudgetClient, BudgetClientError, cents_to_units


def _ready_client(tmp_path, sync_id="SYNC-1"):
    client = BudgetClient()
    client.init(tmp_path / "cache", "http://localhost:5656", "secret")
    client.download_budget(sync_id)
    return client


def test_init_creates_cache_dir_and_logs_in(tmp_path, fake_actual):
    client = BudgetClient()
    client.init(tmp_path / "cache", "http://localhost:5656", "secret")

    handle = fake_actual.cls.instances[0]
    assert (tmp_path / "cache").is_dir()
    assert handle.base_url == "http://localhost:5656"
    assert handle.password == "secret"
    assert handle.data_dir == str(tmp_path / "cache")


def test_calls_before_init_fail():
    client = BudgetClient()
    with pytest.raises(BudgetClientError, match="not initialized"):
        client.download_budget("SYNC-1")


def test_get_accounts_requires_download(tmp_path, fake_actual):
    client = BudgetClient()
    client.init(tmp_path, "http://localhost:5656", "secret")
    with pytest.raises(BudgetClientError, match="No budget loaded"):
        client.get_accounts()


def test_download_matches_sync_id_and_skips_deleted(tmp_path, fake_actual):
    client = _ready_client(tmp_path)
    handle = fake_actual.cls.instances[0]
    assert handle.file.file_id == "file-1"
    assert handle.downloaded_with is None


def test_download_by_file_name(tmp_path, fake_actual):
    _ready_client(tmp_path, sync_id="Other")
    assert fake_actual.cls.instances[0].file.file_id == "file-2"


def test_download_unknown_sync_id(tmp_path, fake_actual):
    client = BudgetClient()
    client.init(tmp_path, "http://localhost:5656", "secret")
    with pytest.raises(BudgetClientError, match="NOPE"):
        client.download_budget("NOPE")


def test_get_accounts(tmp_path, fake_actual):
    accounts = _ready_client(tmp_path).get_accounts()
    assert [(a.id, a.name) for a in accounts] == [("acc-1", "Checking"), ("acc-2", "Savings")]


def test_import_transactions(tmp_path, fake_actual):
    client = _ready_client(tmp_path)
    txns = [
        {"date": dt.datetime(2024, 11, 5, 14, 32, tzinfo=dt.timezone.utc), "amount": -1250,
         "payee_name": "Maxi", "imported_id": "A1", "cleared": True},
        {"date": dt.date(2024, 11, 6), "amount": 500000, "payee_name": "Employer", "notes": "Salary"},
    ]
    result = client.import_transactions("acc-2", txns)

    assert result.account_name == "Savings"
    assert result.imported_ids == ["txn-1", "txn-2"]
    assert result.count == 2
    assert fake_actual.cls.instances[0].commits == 1

    first, second = fake_actual.reconciled
    assert first.date == dt.date(2024, 11, 5)
    assert first.account.id == "acc-2"
    assert first.amount == Decimal("-12.50")
    assert first.imported_id == "A1"
    assert first.imported_payee == "Maxi"
    assert first.cleared is True
    assert second.notes == "Salary"
    assert second.imported_id is None
    assert second.cleared is False
    # Both reconciled records were offered as already matched to later ones
    assert second.already_matched is first.already_matched


def test_import_into_unknown_account(tmp_path, fake_actual):
    client = _ready_client(tmp_path)
    with pytest.raises(BudgetClientError, match="Unknown account"):
        client.import_transactions("acc-9", [])


def test_shutdown_closes_session_and_is_idempotent(tmp_path, fake_actual):
    client = _ready_client(tmp_path)
    handle = fake_actual.cls.instances[0]
    client.shutdown()
    client.shutdown()
    assert handle.session.closed
    with pytest.raises(BudgetClientError):
        client.get_accounts()


def test_context_manager_shuts_down(tmp_path, fake_actual):
    with BudgetClient() as client:
        client.init(tmp_path, "http://localhost:5656", "secret")
        client.download_budget("SYNC-2")
    assert fake_actual.cls.instances[0].session.closed


class TestCentsToUnits:
    def test_conversion(self):
        assert cents_to_units(-1250) == Decimal("-12.5")
        assert cents_to_units(1) == Decimal("0.01")
        assert cents_to_units("300") == Decimal("3")

    @pytest.mark.parametrize("value", [12.5, None, True, "1.5"])
    def test_rejects_non_integers(self, value):
        with pytest.raises(ValueError):
            cents_to_units(value)


def test_handle_is_entered_for_the_session_and_exited_on_shutdown(tmp_path, fake_actual):
    client = _ready_client(tmp_path)
    handle = fake_actual.cls.instances[0]
    assert handle.entered == 1
    assert handle.exited == 0
    assert client.get_accounts()

    client.shutdown()
    assert handle.exited == 1
    assert handle.session.closed


def test_get_accounts_skips_closed_accounts(tmp_path, fake_actual):
    fake_actual.accounts.insert(0, SimpleNamespace(id="acc-0", name="Old card", closed=True))
    client = _ready_client(tmp_path)

    assert [a.id for a in client.get_accounts()] == ["acc-1", "acc-2"]
    with pytest.raises(BudgetClientError, match="acc-0"):
        client.import_transactions("acc-0", [])
