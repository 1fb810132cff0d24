from __future__ import annotations
import asyncio
import logging
from typing import Any, Awaitable, Callable

_LOGGER = logging.getLogger(__name__)


class CapabilityDebouncer:
    """Collects capability writes and fires them as one batch after a quiet period.

    Every new write restarts the deadline. A flush hands the merged buffer to
    the action exactly once.
    """

    def __init__(
        self,
        delay: float,
        action: Callable[[dict[str, Any]], Awaitable[Any]],
        name: str = "debouncer",
    ):
        self._delay = delay
        self._action = action
        self._name = name
        self._pending: dict[str, Any] = {}
        self._timer: asyncio.TimerHandle | None = None
        self._task: asyncio.Task | None = None

    def async_call(self, values: dict[str, Any]) -> None:
        self._pending.update(values)
        if self._timer is not None:
            self._timer.cancel()
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self._delay, self._on_deadline)

    def _on_deadline(self) -> None:
        self._timer = None
        self._task = asyncio.get_running_loop().create_task(self._async_fire())

    async def _async_fire(self) -> None:
        values, self._pending = self._pending, {}
        if not values:
            return
        try:
            await self._action(values)
        except Exception as e:
            _LOGGER.warning("%s: batched write %s failed: %s", self._name, values, e)

    async def async_flush(self) -> None:
        """Fire the pending batch now instead of waiting for the deadline."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        await self._async_fire()
        if self._task is not None:
            await self._task
            self._task = None

