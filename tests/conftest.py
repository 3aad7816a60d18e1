import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from octopulse.app import create_app
from octopulse.database import get_session, get_sync_session, init_db
from octopulse.push import PushResult, PushSender, get_push_sender


SUBSCRIPTION = {
    "endpoint": "https://fcm.googleapis.com/fcm/send/abc123",
    "expirationTime": None,
    "keys": {"p256dh": "BNcRdreALRFXTkOOUHK1EtK2wtaz5Ry4YfYCA_0QTpQtUbVlUls0VJXg7A8u-Ts1XbjhazAkj7I99e8QcYP7DkM", "auth": "tBHItJI5svbpez7KI4CCXg"},
}


class RecordingPushSender(PushSender):
    def __init__(self, result=None):
        self.sent = []
        self.result = result or PushResult(success=True)

    def send(self, subscription, title, body):
        self.sent.append((subscription, title, body))
        return self.result


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with get_sync_session(engine) as session:
        yield session


@pytest.fixture
def push_sender():
    return RecordingPushSender()


@pytest.fixture
def app(engine, push_sender):
    app = create_app(use_lifespan=False)

    def override_session():
        with get_sync_session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = override_session
    app.dependency_overrides[get_push_sender] = lambda: push_sender
    return app


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def user_id(client):
    response = client.post(
        "/api/settings",
        json={"selectedRepo": "octocat/hello-world", "subscription": SUBSCRIPTION},
    )
    assert response.status_code == 200
    return response.json()["data"]["userId"]
