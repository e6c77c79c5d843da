import base64

from shikhi import config
from shikhi.utils.rate_limit import default_limiter


async def test_upload_returns_data_uri(client, auth_headers):
    content = b"%PDF-1.4 test"
    response = await client.post(
        "/api/upload",
        files={"file": ("notes.pdf", content, "application/pdf")},
        data={"type": "document"},
        headers=auth_headers(),
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["filename"] == "notes.pdf"
    assert body["type"] == "document"
    assert body["url"] == "data:application/pdf;base64," + base64.b64encode(content).decode()


async def test_upload_rejects_wrong_type(client, auth_headers):
    response = await client.post(
        "/api/upload",
        files={"file": ("clip.mp4", b"....", "video/mp4")},
        data={"type": "image"},
        headers=auth_headers(),
    )
    assert response.status_code == 400
    assert response.json()["error"].startswith("Invalid file type")


async def test_upload_rejects_oversized_thumbnail(client, auth_headers):
    big = b"0" * (3 * 1024 * 1024 + 1)
    response = await client.post(
        "/api/upload",
        files={"file": ("cover.png", big, "image/png")},
        data={"type": "course-thumbnail"},
        headers=auth_headers(),
    )
    assert response.status_code == 400
    assert response.json()["error"] == "File size exceeds 3MB limit"


async def test_upload_is_rate_limited(client, auth_headers, monkeypatch):
    monkeypatch.setattr(default_limiter, "max_requests", 1)
    files = {"file": ("a.png", b"png", "image/png")}
    headers = auth_headers()

    first = await client.post("/api/upload", files=files, headers=headers)
    second = await client.post("/api/upload", files=files, headers=headers)

    assert first.status_code == 200
    assert second.status_code == 429
    assert second.json()["code"] == "RATE_LIMIT_ERROR"


async def test_call_token_requires_channel(client, auth_headers):
    response = await client.get("/api/call/token", headers=auth_headers())
    assert response.status_code == 400
    assert response.json()["error"] == "Channel name required"


async def test_call_token_unconfigured_is_503(client, auth_headers):
    response = await client.get("/api/call/token", params={"channel": "room-1"}, headers=auth_headers())
    assert response.status_code == 503
    body = response.json()
    assert body["error"] == "Calling service not configured"
    assert body["details"] == {"appIdSet": False, "certificateSet": False}


async def test_call_token_issued_when_configured(client, auth_headers, monkeypatch):
    monkeypatch.setattr(config, "AGORA_APP_ID", "970ca35de60c44645bbae8a215061b33")
    monkeypatch.setattr(config, "AGORA_APP_CERTIFICATE", "5cfd2fd1755d40ecb72977518be15d3b")

    response = await client.get(
        "/api/call/token", params={"channel": "room-1", "role": "subscriber"}, headers=auth_headers()
    )

    assert response.status_code == 200
    body = response.json()
    assert body["token"]
    assert body["channel"] == "room-1"
    assert body["uid"] == 0
    assert body["expiresIn"] == config.CALL_TOKEN_TTL_SECONDS
