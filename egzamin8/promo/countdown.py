"""Countdown shown in the promo banner. Wraps to 23:59:59 instead of stopping."""
from __future__ import annotations

from pydantic import BaseModel


class Countdown(BaseModel):
    hours: int
    minutes: int
    seconds: int

    model_config = {"frozen": True}

    @classmethod
    def parse(cls, value: str) -> "Countdown":
        hours, minutes, seconds = (int(p) for p in value.split(":"))
        return cls(hours=hours, minutes=minutes, seconds=seconds)

    def tick(self) -> "Countdown":
        hours, minutes, seconds = self.hours, self.minutes, self.seconds - 1
        if seconds < 0:
            seconds = 59
            minutes -= 1
            if minutes < 0:
                minutes = 59
                hours -= 1
                if hours < 0:
                    hours, minutes, seconds = 23, 59, 59
        return Countdown(hours=hours, minutes=minutes, seconds=seconds)

    def __str__(self) -> str:
        return f"{self.hours:02d}:{self.minutes:02d}:{self.seconds:02d}"
