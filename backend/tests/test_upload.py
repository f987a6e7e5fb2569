import pytest

from conftest import auth, register
from motoclub.policies import media
from motoclub.utils.cloudinary_storage import MediaError


@pytest.fixture
def calls(monkeypatch):
    seen = {"upload": [], "destroy": []}

    def fake_upload(*, raw, resource_type, folder, filename=""):
        seen["upload"].append({"size": len(raw), "resource_type": resource_type, "folder": folder})
        return "https://cdn.example.com/bike.jpg", "em-motorcycle/bikes/abc123"

    def fake_destroy(*, public_id, resource_type="image"):
        seen["destroy"].append(public_id)

    monkeypatch.setattr(media, "upload_bytes", fake_upload)
    monkeypatch.setattr(media, "destroy", fake_destroy)
    return seen


def _upload(client, token, content=b"\xff\xd8jpeg", content_type="image/jpeg", **data):
    return client.post(
        "/api/upload",
        files={"image": ("bike.jpg", content, content_type)},
        data=data,
        headers=auth(token),
    )


def test_upload_returns_url_and_public_id(client, calls):
    token, _ = register(client, "up@example.com")
    res = _upload(client, token, folder="bikes")
    assert res.status_code == 200
    assert res.json() == {"url": "https://cdn.example.com/bike.jpg", "public_id": "em-motorcycle/bikes/abc123"}
    assert calls["upload"] == [{"size": 6, "resource_type": "image", "folder": "bikes"}]


def test_upload_accepts_video(client, calls):
    token, _ = register(client, "up@example.com")
    assert _upload(client, token, content=b"\x00\x00mp4", content_type="video/mp4").status_code == 200
    assert calls["upload"][0]["resource_type"] == "video"


def test_upload_rejects_other_types(client, calls):
    token, _ = register(client, "up@example.com")
    res = _upload(client, token, content=b"%PDF", content_type="application/pdf")
    assert res.status_code == 400
    assert calls["upload"] == []


def test_upload_rejects_empty_and_oversized_files(client, calls, monkeypatch):
    token, _ = register(client, "up@example.com")
    assert _upload(client, token, content=b"").status_code == 400

    monkeypatch.setattr(media, "max_upload_bytes", lambda: 4)
    assert _upload(client, token, content=b"12345").status_code == 413


def test_upload_requires_file_and_token(client, calls):
    token, _ = register(client, "up@example.com")
    assert client.post("/api/upload", headers=auth(token)).status_code == 400
    assert _upload(client, "not-a-token").status_code == 401


def test_upload_failure_is_reported(client, monkeypatch):
    token, _ = register(client, "up@example.com")

    def broken(**kwargs):
        raise MediaError("Cloudinary is not configured")

    monkeypatch.setattr(media, "upload_bytes", broken)
    res = _upload(client, token)
    assert res.status_code == 500
    assert res.json() == {"error": "Upload failed"}


def test_delete_is_limited_to_the_uploader(client, calls):
    token, _ = register(client, "up@example.com")
    other, _ = register(client, "other@example.com")
    public_id = _upload(client, token).json()["public_id"]

    assert client.delete(f"/api/upload/{public_id}", headers=auth(other)).status_code == 404
    assert calls["destroy"] == []

    res = client.delete(f"/api/upload/{public_id}", headers=auth(token))
    assert res.status_code == 200
    assert calls["destroy"] == [public_id]
    assert client.delete(f"/api/upload/{public_id}", headers=auth(token)).status_code == 404


def test_unrecorded_upload_is_removed_from_media_host(client, calls, monkeypatch):
    token, _ = register(client, "gone@example.com")
    assert client.delete("/api/auth/me", headers=auth(token)).status_code == 200

    # A claims token outlives the account, so the ownership record cannot be written.
    monkeypatch.setenv("IDENTITY_STRATEGY", "claims")
    res = _upload(client, token)
    assert res.status_code == 409
    assert calls["destroy"] == ["em-motorcycle/bikes/abc123"]


def test_duplicate_public_id_keeps_existing_asset(client, calls):
    token, _ = register(client, "up@example.com")
    other, _ = register(client, "other@example.com")
    assert _upload(client, token).status_code == 200

    res = _upload(client, other)
    assert res.status_code == 409
    assert calls["destroy"] == []
    assert client.delete("/api/upload/em-motorcycle/bikes/abc123", headers=auth(token)).status_code == 200
