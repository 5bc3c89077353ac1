import os

os.environ["JWT_SECRET"] = "test-secret"
os.environ["USE_IN_MEMORY_BACKENDS"] = "true"
os.environ["ENVIRONMENT"] = "development"
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient

from community_admin.config import settings
from community_admin.dependencies import get_db, get_bucket
from community_admin.providers.database import InMemoryFirestore
from community_admin.providers.storage import InMemoryBucket
from community_admin.services.auth_service import create_token, hash_password
from index import create_app

COMMUNITY_NAME = "Elsipogtog First Nation"


@pytest.fixture
def db():
    store = InMemoryFirestore()
    store.seed(settings.COMMUNITIES_COLLECTION, {
        "comm-elsi": {"name": COMMUNITY_NAME, "id": "C0007", "password": hash_password("secret")},
        "comm-obrien": {"name": "O'Brien First Nation"},
    })
    return store


@pytest.fixture
def bucket():
    return InMemoryBucket()


@pytest.fixture
def app(db, bucket):
    application = create_app()
    application.dependency_overrides[get_db] = lambda: db
    application.dependency_overrides[get_bucket] = lambda: bucket
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
def token():
    return create_token("comm-elsi", COMMUNITY_NAME)


@pytest.fixture
def anonymous_client(app):
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def client(app, token):
    test_client = TestClient(app, raise_server_exceptions=False)
    test_client.headers.update({"Authorization": f"Bearer {token}"})
    return test_client
