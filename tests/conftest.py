import pytest
from fastapi.testclient import TestClient

from ideaboard.config import Settings
from ideaboard.main import create_app
from ideaboard.storage import IdeaStore


@pytest.fixture
def app_settings(tmp_path):
    return Settings(
        _env_file=None,
        DB_PATH=str(tmp_path / "data" / "ideas.db"),
        UPLOAD_DIR=str(tmp_path / "uploads"),
        STATIC_DIR=str(tmp_path / "public"),
    )


@pytest.fixture
async def store(app_settings):
    s = IdeaStore(app_settings.DB_PATH)
    await s.init()
    yield s
    await s.close()


@pytest.fixture
def client(app_settings):
    app = create_app(app_settings)
    with TestClient(app) as c:
        yield c


def create_idea(client, title="Idea", description=None):
    body = {"title": title}
    if description is not None:
        body["description"] = description
    resp = client.post("/api/ideas", json=body)
    assert resp.status_code == 201
    return resp.json()
