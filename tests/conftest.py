import mongomock
import pytest
from fastapi.testclient import TestClient

from photoshare.database import ensure_indexes, get_db
from photoshare.main import app
from photoshare.utils.storage import get_images_dir

PASSWORD = "secret"


@pytest.fixture
def db():
    database = mongomock.MongoClient().photo_sharing_test
    ensure_indexes(database)
    return database


@pytest.fixture
def images_dir(tmp_path):
    path = tmp_path / "images"
    path.mkdir()
    return path


@pytest.fixture
def client(db, images_dir):
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_images_dir] = lambda: str(images_dir)
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(client):
    """Register and log in a user, returning its id and auth headers."""
    def _make(login_name, first_name="Test", last_name="User", **extra):
        payload = {
            "login_name": login_name,
            "password": PASSWORD,
            "first_name": first_name,
            "last_name": last_name,
            **extra,
        }
        rv = client.post("/user", json=payload)
        assert rv.status_code == 200, rv.text
        rv = client.post("/auth/login", json={"login_name": login_name, "password": PASSWORD})
        assert rv.status_code == 200, rv.text
        data = rv.json()
        return {
            "id": data["user"]["_id"],
            "headers": {"Authorization": f"Bearer {data['access_token']}"},
        }
    return _make


@pytest.fixture
def upload(client):
    def _upload(user, name="sample.png", content=b"\x89PNG fake image bytes"):
        rv = client.post(
            "/photo/new",
            files={"photo": (name, content, "image/png")},
            headers=user["headers"],
        )
        assert rv.status_code == 200, rv.text
        return rv.json()["photo"]
    return _upload


@pytest.fixture
def comment(client):
    def _comment(user, photo_id, text):
        rv = client.post(
            f"/photo/commentsOfPhoto/{photo_id}",
            json={"comment": text},
            headers=user["headers"],
        )
        assert rv.status_code == 200, rv.text
        return rv.json()["comment_id"]
    return _comment
