from ryo.core.config import Settings
from ryo.core.storage import R2Storage
from ryo.deps import get_blob_store
from ryo.main import app

from _helpers import API


def test_root_and_health(client):
    root = client.get("/").json()
    assert set(root) == {"message", "version", "environment", "documentation"}
    assert root["environment"] == "development"
    assert client.get("/health").json() == {"status": "ok"}


def test_unknown_route_uses_envelope(client):
    response = client.get(f"{API}/nowhere")
    assert response.status_code == 404
    assert response.json() == {"Error": "Not Found", "code": "not_found"}


def test_method_not_allowed_uses_envelope(client):
    response = client.patch(f"{API}/posts")
    assert response.status_code == 405
    assert response.json()["code"] == "http_error"


def test_malformed_json_is_a_validation_error(login, user):
    response = login(user).put(
        f"{API}/profile/username",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )
    assert response.status_code == 400
    assert response.json()["code"] == "validation_error"


def test_unconfigured_storage_is_an_upstream_error(login, user):
    storage = R2Storage(Settings(R2_ACCOUNT_ID="", R2_ENDPOINT="", R2_ACCESS_KEY_ID="", R2_SECRET_ACCESS_KEY=""))
    app.dependency_overrides[get_blob_store] = lambda: storage

    response = login(user).get(f"{API}/files/exists/uploads/a.txt")

    assert response.status_code == 502
    assert response.json() == {"Error": "object storage is not configured", "code": "upstream_error"}
