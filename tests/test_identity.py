import asyncio
import json

import pytest

from shikhi.auth import identity as identity_module
from shikhi.auth.identity import IdentityClient, IdentityLookupError
from shikhi.crud import users as users_crud_module


class FakeResponse:
    def __init__(self, status=200, body="{}", delay=0):
        self.status = status
        self.body = body
        self.delay = delay

    async def __aenter__(self):
        if self.delay:
            raise asyncio.TimeoutError()
        return self

    async def __aexit__(self, *exc):
        return False

    async def json(self):
        return json.loads(self.body)


def fake_session_factory(response):
    class FakeSession:
        def __init__(self, *args, **kwargs):
            self.requests = []

        async def __aenter__(self):
            return self

        async def __aexit__(self, *exc):
            return False

        def get(self, url, headers=None):
            self.requests.append(url)
            return response

    return FakeSession


CLERK_USER = {
    "id": "user_42",
    "first_name": "Hana",
    "last_name": "Sato",
    "username": "hana",
    "primary_email_address_id": "e2",
    "email_addresses": [
        {"id": "e1", "email_address": "old@example.com"},
        {"id": "e2", "email_address": "hana@example.com"},
    ],
    "public_metadata": {"role": "admin"},
}


@pytest.fixture
def provider(monkeypatch):
    def _use(response):
        monkeypatch.setattr(identity_module.aiohttp, "ClientSession", fake_session_factory(response))
        return IdentityClient(base_url="https://identity.test", api_key="key", timeout=1)

    return _use


async def test_profile_uses_primary_email_and_role(provider):
    client = provider(FakeResponse(body=json.dumps(CLERK_USER)))
    profile = await client.fetch_user("user_42")
    assert profile["email"] == "hana@example.com"
    assert profile["role"] == "admin"
    assert profile["first_name"] == "Hana"


@pytest.mark.parametrize(
    "response",
    [
        FakeResponse(delay=3),
        FakeResponse(body="{not json"),
        FakeResponse(body="[]"),
        FakeResponse(status=404),
    ],
    ids=["timeout", "malformed-json", "not-an-object", "not-found"],
)
async def test_provider_failures_raise_lookup_error(provider, response):
    client = provider(response)
    with pytest.raises(IdentityLookupError):
        await client.fetch_user("user_42")


async def test_missing_api_key_is_lookup_error():
    with pytest.raises(IdentityLookupError):
        await IdentityClient(api_key="").fetch_user("user_42")


@pytest.mark.parametrize("response", [FakeResponse(delay=3), FakeResponse(body="{not json")], ids=["timeout", "malformed-json"])
async def test_unreachable_provider_gives_404_on_dashboard(client, auth_headers, provider, monkeypatch, response):
    monkeypatch.setattr(users_crud_module, "identity_client", provider(response))

    result = await client.get("/api/users/me/courses", headers=auth_headers("stranger"))

    assert result.status_code == 404
    assert result.json()["error"] == "User not found and could not be created"
