# valve_brain/core/clock.py
from __future__ import annotations

import time
from typing_extensions import Protocol


class Clock(Protocol):
    def sleep(self, seconds: float) -> None: ...


class RealClock:
    def sleep(self, seconds: float) -> None:
        if seconds > 0:
            time.sleep(seconds)


class SimClock:
    """
    Zegar symulowany.

    sleep() nie blokuje – tylko zapamiętuje wywołania
    (przydatne w testach opóźnienia ustalania sygnału).
    """

    def __init__(self) -> None:
        self.sleeps: list[float] = []

    def sleep(self, seconds: float) -> None:
        if seconds < 0:
            raise ValueError("seconds must be >= 0")
        self.sleeps.append(float(seconds))
