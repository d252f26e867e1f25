# Shared fixtures
# Every test gets its own SQLite file under tmp_path, so tests never share state.
# Dependent files: app/main.py, db/models.py, db/seed.py

import pytest
from starlette.testclient import TestClient

from app.main import create_app
from db.models import get_db
from db.seed import bootstrap

TEST_TOKEN = "test-token-for-testing-only"


def make_config(db_path, token=TEST_TOKEN, seed=True, rate_limit=None) -> dict:
    return {
        "database": {"path": str(db_path), "seed": seed},
        "security": {
            "api_token": token,
            "cors_origins": ["http://localhost:3000"],
            "trusted_proxies": ["127.0.0.1"],
        },
        "rate_limit": rate_limit or {"enabled": False},
    }


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "portfolio.db"


@pytest.fixture
def conn(db_path):
    """Seeded connection for data-access tests."""
    bootstrap(db_path)
    c = get_db(db_path)
    yield c
    c.close()


@pytest.fixture
def client(db_path):
    app = create_app(make_config(db_path))
    with TestClient(app) as c:
        yield c


@pytest.fixture
def auth_header():
    return {"Authorization": f"Bearer {TEST_TOKEN}"}
