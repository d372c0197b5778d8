"""
Request spacing for provider APIs.

Providers throttle bursts (FAL.AI ~10 req/s, KIE.AI ~2 req/s). A
RequestSpacer makes consecutive calls through one adapter start at least
`min_interval` seconds apart, even when several steps run concurrently.
"""

import asyncio
import time


class RequestSpacer:
    def __init__(self, min_interval: float = 0.0):
        self.min_interval = min_interval
        self._lock = asyncio.Lock()
        self._last_call = float("-inf")

    async def wait(self) -> None:
        if self.min_interval <= 0:
            return
        async with self._lock:
            delay = self.min_interval - (time.monotonic() - self._last_call)
            if delay > 0:
                await asyncio.sleep(delay)
            self._last_call = time.monotonic()
