import os
# Ensure the app factory picks the Testing config & SQLite memory DB
os.environ.setdefault("APP_ENV", "testing")
os.environ.setdefault("TEST_DATABASE_URL", "sqlite:///:memory:")

import pytest
from feedback_relay import create_app
from feedback_relay.extensions import db


@pytest.fixture(scope="session")
def app(tmp_path_factory):
    upload_dir = tmp_path_factory.mktemp("uploads")
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
        "UPLOAD_FOLDER": str(upload_dir),
        "WTF_CSRF_ENABLED": False,
        "RATELIMIT_ENABLED": False,
        "WEBHOOK_URL": "http://webhook.example.test/hook",
        "WEBHOOK_TEST_URL": "http://webhook.example.test/hook-test",
        "WEBHOOK_TIMEOUT": 1.0,
    })
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture(autouse=True)
def _db_clean(app):
    # Clean BEFORE each test
    with app.app_context():
        db.session.rollback()
        for tbl in reversed(db.metadata.sorted_tables):
            db.session.execute(tbl.delete())
        db.session.commit()
    yield
    # And AFTER each test (keeps state hermetic even if a test fails mid-request)
    with app.app_context():
        db.session.rollback()
        for tbl in reversed(db.metadata.sorted_tables):
            db.session.execute(tbl.delete())
        db.session.commit()


class FakeResponse:
    def __init__(self, status_code=200, text="ok"):
        self.status_code = status_code
        self.text = text


class FakeHTTP:
    """
    Stands in for requests.post/get. `routes` maps (method, url) -> status code
    or an exception instance; anything unmapped answers 200. ("JSON", url)
    overrides ("POST", url) for JSON bodies.
    Multipart file handles are read at call time (the relay closes them right after).
    """
    def __init__(self):
        self.routes = {}
        self.calls = []

    def _handle(self, method, url, kwargs):
        call = {"method": method, "url": url, **kwargs}
        if "files" in kwargs and kwargs["files"]:
            parts = []
            for name, (filename, value, *rest) in kwargs["files"]:
                if hasattr(value, "read"):
                    value = value.read()
                parts.append((name, filename, value, rest[0] if rest else None))
            call["parts"] = parts
        self.calls.append(call)
        outcome = self.routes.get((method, url), 200)
        if method == "POST" and "json" in kwargs:
            outcome = self.routes.get(("JSON", url), outcome)
        if isinstance(outcome, Exception):
            raise outcome
        return FakeResponse(outcome)

    def post(self, url, **kwargs):
        return self._handle("POST", url, kwargs)

    def get(self, url, **kwargs):
        return self._handle("GET", url, kwargs)

    def strategies(self):
        out = []
        for c in self.calls:
            if c["method"] == "GET":
                out.append(("get", c["url"]))
            elif "json" in c:
                out.append(("json", c["url"]))
            else:
                out.append(("multipart", c["url"]))
        return out


@pytest.fixture(autouse=True)
def fake_http(monkeypatch):
    # autouse: no test ever reaches the network
    fake = FakeHTTP()
    import requests
    monkeypatch.setattr(requests, "post", fake.post)
    monkeypatch.setattr(requests, "get", fake.get)
    return fake
