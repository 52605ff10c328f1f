"""
Pytest fixtures: in-memory stand-ins for the Actual server and the bank portal
"""

import json
from types import SimpleNamespace

import pytest

from actual_importer import client as client_module


class FakeSession:
    def __init__(self):
        self.closed = False

    def close(self):
        self.closed = True


class FakeActual:
    """Records the calls the importer makes on an ``actual.Actual`` handle."""

    instances = []

    def __init__(self, base_url=None, password=None, data_dir=None, **kwargs):
        self.base_url = base_url
        self.password = password
        self.data_dir = data_dir
        self.files = [
            SimpleNamespace(deleted=1, group_id="SYNC-1", file_id="old", name="Old budget"),
            SimpleNamespace(deleted=0, group_id="SYNC-1", file_id="file-1", name="My budget"),
            SimpleNamespace(deleted=0, group_id="SYNC-2", file_id="file-2", name="Other"),
        ]
        self.file = None
        self.downloaded_with = "not called"
        self.in_context = False
        self.entered = 0
        self.exited = 0
        self._session = None
        self.commits = 0
        FakeActual.instances.append(self)

    def __enter__(self):
        self.in_context = True
        self.entered += 1
        return self

    def __exit__(self, *exc_info):
        self.in_context = False
        self.exited += 1
        if self._session is not None:
            self._session.close()

    @property
    def session(self):
        if self._session is None:
            raise RuntimeError("No session defined. Use `with Actual() as actual:` construct to generate one.")
        return self._session

    def list_user_files(self):
        return SimpleNamespace(data=self.files)

    def set_file(self, remote):
        self.file = remote

    def download_budget(self, encryption_password=None):
        self.downloaded_with = encryption_password
        if self.in_context:
            self._session = FakeSession()

    def commit(self):
        self.commits += 1


@pytest.fixture
def fake_actual(monkeypatch):
    FakeActual.instances = []
    accounts = [
        SimpleNamespace(id="acc-1", name="Checking", closed=False),
        SimpleNamespace(id="acc-2", name="Savings", closed=False),
    ]
    reconciled = []

    def fake_get_accounts(session, name=None, include_deleted=False, closed=None):
        return [a for a in accounts if closed is None or a.closed == closed]

    def fake_reconcile(session, date, account, **kwargs):
        txn = SimpleNamespace(id=f"txn-{len(reconciled) + 1}", date=date, account=account, **kwargs)
        reconciled.append(txn)
        return txn

    monkeypatch.setattr(client_module, "Actual", FakeActual)
    monkeypatch.setattr(client_module, "get_accounts", fake_get_accounts)
    monkeypatch.setattr(client_module, "reconcile_transaction", fake_reconcile)
    return SimpleNamespace(cls=FakeActual, accounts=accounts, reconciled=reconciled)


class FakeResponse:
    def __init__(self, payload=None, status_code=200, bom=True):
        self.status_code = status_code
        body = json.dumps(payload if payload is not None else []).encode("utf-8")
        self.content = (b"\xef\xbb\xbf" + body) if bom else body
        self.closed = False

    def close(self):
        self.closed = True


class FakeHTTPSession:
    """Minimal ``requests.Session`` replacement keyed by URL suffix."""

    def __init__(self, routes=None):
        self.headers = {}
        self.routes = routes or {}
        self.requests = []

    def _respond(self, method, url, data=None):
        self.requests.append((method, url, json.loads(data) if data else None))
        for suffix, response in self.routes.items():
            if url.endswith(suffix):
                return response
        return FakeResponse([])

    def get(self, url, **kwargs):
        return self._respond("GET", url)

    def post(self, url, data=None, headers=None, **kwargs):
        return self._respond("POST", url, data)


@pytest.fixture
def fake_http():
    return FakeHTTPSession()


@pytest.fixture
def sample_transactions():
    return [
        {"date": "2024-11-05T14:32:10Z", "amount": -1250, "payee_name": "Maxi", "imported_id": "A1", "cleared": True},
        {"date": "2024-11-06", "amount": 500000, "payee_name": "Employer", "notes": "Salary"},
    ]
