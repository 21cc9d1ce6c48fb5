"""Transient, auto-dismissing status notices."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass
class Notice:
    channel: str
    success: bool | None = None
    message: str = ""
    visible: bool = False
    generation: int = 0


class NoticeBoard:
    """One notice per channel, hidden then cleared by two independent timers.

    The visibility timer fires first so the message survives its own fade-out;
    both timers are tagged with the notice generation so a timer left over from
    an earlier notice never dismisses a newer one.
    """

    def __init__(self, visible_seconds: float = 3.0, clear_seconds: float = 4.5):
        self.visible_seconds = visible_seconds
        self.clear_seconds = max(clear_seconds, visible_seconds)
        self._notices: dict[str, Notice] = {}
        self._timers: dict[str, list[asyncio.TimerHandle]] = {}

    def get(self, channel: str) -> Notice:
        return self._notices.setdefault(channel, Notice(channel=channel))

    def all(self) -> list[Notice]:
        return list(self._notices.values())

    def show(self, channel: str, success: bool, message: str) -> Notice:
        notice = self.get(channel)
        notice.generation += 1
        notice.success = success
        notice.message = message
        notice.visible = True
        log = logger.info if success else logger.warning
        log(f"[{channel}] {message}")
        self._schedule(notice)
        return notice

    def _schedule(self, notice: Notice) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No loop (synchronous caller): the notice stays until replaced.
            return
        generation = notice.generation
        self._timers[notice.channel] = [
            loop.call_later(self.visible_seconds, self._hide, notice.channel, generation),
            loop.call_later(self.clear_seconds, self._clear, notice.channel, generation),
        ]

    def _hide(self, channel: str, generation: int) -> None:
        notice = self._notices.get(channel)
        if notice is not None and notice.generation == generation:
            notice.visible = False

    def _clear(self, channel: str, generation: int) -> None:
        notice = self._notices.get(channel)
        if notice is not None and notice.generation == generation:
            notice.message = ""
            notice.success = None

    def cancel_all(self) -> None:
        for handles in self._timers.values():
            for handle in handles:
                handle.cancel()
        self._timers.clear()
