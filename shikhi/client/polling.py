import asyncio
from typing import Awaitable, Callable, Optional, Union

import aiohttp

from shikhi.client.api import ApiError, ShikhiClient
from shikhi.utils.logger import get_logger

logger = get_logger("MessagePoller")

POLL_INTERVAL_SECONDS = 5

Callback = Callable[[dict], Union[None, Awaitable[None]]]


class MessagePoller:
    """Fetch the message list on a fixed interval and hand it to ``on_messages``."""

    def __init__(
        self,
        api: ShikhiClient,
        on_messages: Callback,
        box: str = "inbox",
        thread_id: Optional[str] = None,
        interval: float = POLL_INTERVAL_SECONDS,
    ):
        self.api = api
        self.on_messages = on_messages
        self.box = box
        self.thread_id = thread_id
        self.interval = interval
        self._task: Optional[asyncio.Task] = None

    async def poll_once(self) -> bool:
        try:
            payload = await self.api.get_messages(self.box, self.thread_id)
        except (ApiError, aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning(f"Message poll failed: {e}")
            return False

        result = self.on_messages(payload)
        if asyncio.iscoroutine(result):
            await result
        return True

    async def run(self):
        while True:
            await self.poll_once()
            await asyncio.sleep(self.interval)

    def start(self) -> asyncio.Task:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self.run())
        return self._task

    async def stop(self):
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
