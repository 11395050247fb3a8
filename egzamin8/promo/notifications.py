"""
«Someone just bought…» prompts and the timers driving the promo banner.

Cosmetic only: nothing here reads or writes entitlements or view state.
"""
from __future__ import annotations

import asyncio
import logging
import random
from typing import Callable

from pydantic import BaseModel

from egzamin8.core.config import settings
from egzamin8.promo.countdown import Countdown

logger = logging.getLogger(__name__)

RANDOM_NAMES = (
    "Kasia z Warszawy", "Tomek z Krakowa", "Maja z Gdańska", "Piotr z Wrocławia",
    "Ania z Poznania", "Michał z Łodzi", "Zosia z Katowic", "Bartek z Szczecina",
    "Ola z Bydgoszczy", "Kamil z Lublina", "Julia z Białegostoku", "Dawid z Rzeszowa",
    "Natalia z Opola", "Jakub z Olsztyna", "Weronika z Torunia", "Filip z Kielc",
)

PURCHASE_TYPES = (
    "Pakiet wszystkich przedmiotów",
    "Matematyka",
    "Język Polski",
    "Język Angielski",
)


class PurchaseNotification(BaseModel):
    name: str
    product: str
    minutes_ago: int
    display_seconds: float

    model_config = {"frozen": True}


def random_notification(rng: random.Random | None = None) -> PurchaseNotification:
    rng = rng or random.Random()
    return PurchaseNotification(
        name=rng.choice(RANDOM_NAMES),
        product=rng.choice(PURCHASE_TYPES),
        minutes_ago=rng.randint(1, 10),
        display_seconds=settings.promo_notification_display_seconds,
    )


def _or_default(value: float | None, default: float) -> float:
    return value if value is not None else default


class PromoTimers:
    """
    Two independent cancelable timers on the running event loop:
    - countdown tick every promo_tick_seconds;
    - first notification after promo_first_notification_seconds, then every
      promo_notification_interval_seconds one more after a random delay.
    """

    def __init__(
        self,
        on_tick: Callable[[Countdown], None],
        on_notification: Callable[[PurchaseNotification], None],
        *,
        rng: random.Random | None = None,
        start: Countdown | None = None,
        tick_seconds: float | None = None,
        first_notification_seconds: float | None = None,
        interval_seconds: float | None = None,
        min_delay_seconds: float | None = None,
        max_delay_seconds: float | None = None,
    ) -> None:
        self.on_tick = on_tick
        self.on_notification = on_notification
        self.rng = rng or random.Random()
        self.countdown = start if start is not None else Countdown.parse(settings.promo_countdown_start)
        self.tick_seconds = _or_default(tick_seconds, settings.promo_tick_seconds)
        self.first_notification_seconds = _or_default(
            first_notification_seconds, settings.promo_first_notification_seconds
        )
        self.interval_seconds = _or_default(
            interval_seconds, settings.promo_notification_interval_seconds
        )
        self.min_delay_seconds = _or_default(
            min_delay_seconds, settings.promo_notification_min_delay_seconds
        )
        self.max_delay_seconds = _or_default(
            max_delay_seconds, settings.promo_notification_max_delay_seconds
        )
        self._handles: set[asyncio.TimerHandle] = set()
        self._loop: asyncio.AbstractEventLoop | None = None

    @property
    def running(self) -> bool:
        return self._loop is not None

    def start(self) -> None:
        if self._loop is not None:
            return
        self._loop = asyncio.get_running_loop()
        self._schedule(self.tick_seconds, self._tick)
        self._schedule(self.first_notification_seconds, self._notify)
        self._schedule(self.interval_seconds, self._interval)

    def cancel(self) -> None:
        for handle in self._handles:
            handle.cancel()
        self._handles.clear()
        self._loop = None

    def _schedule(self, delay: float, callback: Callable[[], None]) -> None:
        if self._loop is None:
            return
        handle: asyncio.TimerHandle | None = None

        def run() -> None:
            self._handles.discard(handle)
            callback()

        handle = self._loop.call_later(delay, run)
        self._handles.add(handle)

    def _tick(self) -> None:
        self.countdown = self.countdown.tick()
        self.on_tick(self.countdown)
        self._schedule(self.tick_seconds, self._tick)

    def _notify(self) -> None:
        self.on_notification(random_notification(self.rng))

    def _interval(self) -> None:
        delay = self.rng.uniform(self.min_delay_seconds, self.max_delay_seconds)
        self._schedule(delay, self._notify)
        self._schedule(self.interval_seconds, self._interval)
