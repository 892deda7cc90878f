import os
import sys
from pathlib import Path

import pytest

# Ensure project root is on sys.path so 'app', 'config', and 'tunevault' import correctly
_TESTS_DIR = os.path.dirname(__file__)
_ROOT_DIR = os.path.abspath(os.path.join(_TESTS_DIR, os.pardir))
if _ROOT_DIR not in sys.path:
    sys.path.insert(0, _ROOT_DIR)

from tests.support import factories as test_factories
from tests.support import stubs as test_stubs

PUBLIC_BASE = "https://pub-test.r2.dev"


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch, tmp_path_factory):
    """Ensure a clean env for tests with per-test sqlite files."""
    db_dir = tmp_path_factory.mktemp("db")
    db_path = Path(db_dir) / "test.sqlite"
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{db_path.as_posix()}")
    monkeypatch.setenv("R2_BUCKET_NAME", "test-bucket")
    monkeypatch.setenv("R2_PUBLIC_URL", PUBLIC_BASE)
    yield


@pytest.fixture
def object_store():
    """In-memory bucket shared between the app and the test body."""
    return test_stubs.InMemoryObjectStore(bucket="test-bucket")


@pytest.fixture
def app_overrides(tmp_path):
    return {
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": f"sqlite:///{(tmp_path / 'app.sqlite').as_posix()}",
        "R2_BUCKET_NAME": "test-bucket",
        "R2_PUBLIC_URL": PUBLIC_BASE,
        "PLAYLIST_STORAGE": "database",
    }


@pytest.fixture
def app(monkeypatch, object_store, app_overrides):
    # Import module, then patch the gateway builder so no boto3 client is created
    import app as app_module

    monkeypatch.setattr(app_module, "build_object_store", lambda settings: object_store, raising=True)

    application = app_module.create_app(app_overrides)
    yield application


@pytest.fixture
def app_context(app):
    with app.app_context():
        yield app


@pytest.fixture
def db_session(app_context):
    from tunevault.database.db_manager import db

    test_factories.set_session(db.session)
    try:
        yield db.session
    finally:
        db.session.rollback()
        db.session.remove()
        test_factories.reset_session()


@pytest.fixture
def factories(db_session):
    yield test_factories


@pytest.fixture
def catalog(app_context):
    return app_context.extensions["catalog"]


@pytest.fixture
def client(app):
    return app.test_client()
