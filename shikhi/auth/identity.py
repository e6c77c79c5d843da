# shikhi/auth/identity.py
import asyncio

import aiohttp

from shikhi import config
from shikhi.utils.logger import get_logger

logger = get_logger("Identity")


class IdentityLookupError(Exception):
    pass


class IdentityClient:
    """
    Reads user profiles from the identity provider's backend API.

    Used only to auto-provision a local user record the first time a signed-in
    caller hits an endpoint that needs one.
    """

    def __init__(self, base_url: str = None, api_key: str = None, timeout: int = None):
        self.base_url = (base_url or config.IDENTITY_API_URL).rstrip("/")
        self.api_key = api_key if api_key is not None else config.IDENTITY_API_KEY
        self.timeout = timeout or config.IDENTITY_API_TIMEOUT_SECONDS

    async def fetch_user(self, user_id: str) -> dict:
        if not self.api_key:
            raise IdentityLookupError("Identity provider API key is not configured")

        url = f"{self.base_url}/users/{user_id}"
        headers = {"Authorization": f"Bearer {self.api_key}"}
        try:
            async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self.timeout)) as session:
                async with session.get(url, headers=headers) as response:
                    if response.status != 200:
                        raise IdentityLookupError(f"Identity provider returned {response.status}")
                    payload = await response.json()
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.error(f"Identity lookup failed for {user_id}: {e}")
            raise IdentityLookupError(str(e) or type(e).__name__) from e

        if not isinstance(payload, dict):
            raise IdentityLookupError("Identity provider returned an unexpected payload")

        return self.to_profile(payload)

    @staticmethod
    def to_profile(payload: dict) -> dict:
        """Flatten a provider user payload to the fields we keep locally."""
        emails = payload.get("email_addresses") or []
        primary_id = payload.get("primary_email_address_id")
        email = None
        for entry in emails:
            if primary_id is None or entry.get("id") == primary_id:
                email = entry.get("email_address")
                break
        if email is None and emails:
            email = emails[0].get("email_address")

        metadata = payload.get("public_metadata") or {}
        return {
            "user_id": payload.get("id"),
            "email": email,
            "first_name": payload.get("first_name"),
            "last_name": payload.get("last_name"),
            "username": payload.get("username"),
            "image_url": payload.get("image_url"),
            "role": metadata.get("role") or "student",
        }


identity_client = IdentityClient()
