import os
import sys
import pytest

# Ensure the backend root (containing the `fhevault` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from fhevault import create_app, db, socketio
from fhevault.client import StrategyApiClient
from fhevault.services.storage import MemoryStrategyStore, SqlStrategyStore


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    STRATEGY_STORE = 'memory'
    LOG_LEVEL = 'DEBUG'


@pytest.fixture()
def store():
    return MemoryStrategyStore()


@pytest.fixture()
def flask_app(store):
    application = create_app(TestConfig, store=store)
    with application.app_context():
        yield application


@pytest.fixture()
def sql_app():
    application = create_app(TestConfig, store=SqlStrategyStore(db))
    with application.app_context():
        # Ensure models are imported so tables are created
        import fhevault.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/ws'
    )
    yield test_client
    try:
        test_client.disconnect(namespace='/ws')
    except Exception:
        pass


class _FlaskResponse:
    """Gives a Flask test response the bits of requests.Response the API client reads."""

    def __init__(self, response):
        self.status_code = response.status_code
        self._body = response.get_json(silent=True)

    def json(self):
        if self._body is None:
            raise ValueError('No JSON body')
        return self._body


class FlaskSession:
    def __init__(self, test_client):
        self.test_client = test_client

    def get(self, url, **kwargs):
        return _FlaskResponse(self.test_client.get(url, **kwargs))

    def post(self, url, **kwargs):
        return _FlaskResponse(self.test_client.post(url, **kwargs))


@pytest.fixture()
def api(client):
    return StrategyApiClient(base_url='', session=FlaskSession(client))


@pytest.fixture()
def app_factory():
    def _build(store):
        return create_app(TestConfig, store=store)
    return _build
