"""
Async HTTP client for the Shikhi API.

Used by the learner-side flows in this package (quiz attempts, assignment
submission, message polling) and by scripts that talk to a running server.
"""
from typing import Any, Optional

import aiohttp

from shikhi.utils.logger import get_logger

logger = get_logger("ShikhiClient")


class ApiError(Exception):
    def __init__(self, status: int, payload: Any = None):
        self.status = status
        self.payload = payload
        message = payload.get("error") if isinstance(payload, dict) else None
        super().__init__(message or f"Request failed with status {status}")


class ShikhiClient:

    def __init__(self, base_url: str, token: Optional[str] = None, timeout: float = 30, session: aiohttp.ClientSession = None):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        await self.close()

    def _headers(self) -> dict:
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
            self._owns_session = True
        return self._session

    async def close(self):
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        session = await self._get_session()
        url = f"{self.base_url}{path}"
        async with session.request(method, url, headers=self._headers(), **kwargs) as response:
            try:
                payload = await response.json(content_type=None)
            except ValueError:
                payload = {"error": await response.text()}
            if response.status >= 400:
                logger.warning(f"{method} {path} -> {response.status}")
                raise ApiError(response.status, payload)
            return payload

    # ---------------------------
    # UPLOADS / ASSIGNMENTS
    # ---------------------------
    async def upload_file(self, content: bytes, filename: str, content_type: str, upload_type: str = "document") -> dict:
        form = aiohttp.FormData()
        form.add_field("file", content, filename=filename, content_type=content_type)
        form.add_field("type", upload_type)
        return await self._request("POST", "/api/upload", data=form)

    async def submit_assignment(self, payload: dict) -> dict:
        return await self._request("POST", "/api/assignments/submit", json=payload)

    # ---------------------------
    # QUIZ RESULTS
    # ---------------------------
    async def post_quiz_result(self, payload: dict) -> dict:
        return await self._request("POST", "/api/quiz-results", json=payload)

    async def get_quiz_results(self, course_id: str = None, quiz_id: str = None) -> list:
        params = {k: v for k, v in {"courseId": course_id, "quizId": quiz_id}.items() if v}
        payload = await self._request("GET", "/api/quiz-results", params=params)
        return payload.get("results", [])

    # ---------------------------
    # DASHBOARD / MESSAGES
    # ---------------------------
    async def get_enrolled_courses(self) -> list:
        payload = await self._request("GET", "/api/users/me/courses")
        return payload.get("data", [])

    async def get_messages(self, box: str = "inbox", thread_id: str = None) -> dict:
        params = {"type": box}
        if thread_id:
            params["threadId"] = thread_id
        return await self._request("GET", "/api/messages", params=params)

    async def mark_message_read(self, message_id: str) -> dict:
        return await self._request("PATCH", "/api/messages", json={"messageId": message_id})
