# valve_brain/hw/mock.py
from __future__ import annotations

import logging
from typing import Dict, Mapping

from valve_brain.hw.interface import PinResult, ValveBackend


__all__ = ["VirtualBackend"]

logger = logging.getLogger(__name__)


class VirtualBackend(ValveBackend):
    """
    Symulator linii cyfrowych: lustro poziomów fizycznych w pamięci.

    - write_pin: zapisuje poziom do lustra, zawsze sukces,
    - read_pin: zwraca poziom z lustra, zawsze sukces,
    - open/close: nic nie robią, backend jest zawsze "otwarty".
    """

    def __init__(self, initial_levels: Mapping[int, bool]) -> None:
        self._levels: Dict[int, bool] = {int(v): bool(lvl) for v, lvl in initial_levels.items()}

    @property
    def is_open(self) -> bool:
        return True

    @property
    def levels(self) -> Dict[int, bool]:
        return dict(self._levels)

    def open(self) -> PinResult:
        return PinResult.success()

    def close(self) -> None:
        return None

    def write_pin(self, valve_id: int, level: bool) -> PinResult:
        self._levels[valve_id] = bool(level)
        logger.debug("virtual write valve=%d level=%s", valve_id, level)
        return PinResult.success(bool(level))

    def read_pin(self, valve_id: int) -> PinResult:
        return PinResult.success(self._levels.get(valve_id, False))
