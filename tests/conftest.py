import mongomock
import pytest
import requests
from fastapi.testclient import TestClient

import database
import main
from api import ApiClient
from storage import LocalStorage
from storefront import Storefront

ADMIN_EMAIL = "admin@example.com"
PASSWORD = "secret123"


@pytest.fixture
def mongo(monkeypatch):
    db = mongomock.MongoClient()["storefront_test"]
    monkeypatch.setattr(database, "db", db)
    monkeypatch.setattr(main, "db", db)
    monkeypatch.setattr(main, "BOOTSTRAP_ADMIN_EMAIL", ADMIN_EMAIL)
    return db


@pytest.fixture
def client(mongo):
    return TestClient(main.app)


@pytest.fixture
def signup(client):
    """Sign up through the API and return (user_id, auth headers)."""
    def _signup(email, password=PASSWORD, **extra):
        resp = client.post("/auth/signup", json={"email": email, "password": password, **extra})
        assert resp.status_code == 200, resp.text
        data = resp.json()
        return data["user"]["id"], {"Authorization": f"Bearer {data['access_token']}"}
    return _signup


@pytest.fixture
def admin(signup):
    return signup(ADMIN_EMAIL, first_name="Ada", last_name="Admin")


@pytest.fixture
def product(client, admin):
    _, headers = admin
    resp = client.post("/products", json={"name": "Classic Leather Watch", "price": 250.0, "old_price": 300.0, "category": "Watch"}, headers=headers)
    assert resp.status_code == 200, resp.text
    return resp.json()


@pytest.fixture
def make_api(client):
    def _make():
        return ApiClient(base_url="http://testserver", http=client)
    return _make


class ImmediateTimer:
    """Stands in for threading.Timer; fire() runs the callback unless cancelled."""

    created = []

    def __init__(self, interval, function):
        self.interval = interval
        self.function = function
        self.started = False
        self.cancelled = False
        ImmediateTimer.created.append(self)

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        if not self.cancelled:
            self.function()


@pytest.fixture
def timers():
    ImmediateTimer.created = []
    return ImmediateTimer


@pytest.fixture
def make_storefront(make_api, timers):
    from gate import RoleGate

    def _make(storage=None, load_catalog=False):
        return Storefront(api=make_api(), storage=storage or LocalStorage(),
                          gate=RoleGate(timer_factory=timers), load_catalog=load_catalog)
    return _make


class OfflineHttp:
    """An http session whose every request fails at the transport level."""

    def __init__(self):
        self.calls = 0

    def request(self, method, url, **kwargs):
        self.calls += 1
        raise requests.ConnectionError("network unreachable")


@pytest.fixture
def offline_api():
    return ApiClient(base_url="http://offline.invalid", http=OfflineHttp())
