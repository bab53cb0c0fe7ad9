# valve_brain/hw/board_hw.py
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional

from valve_brain.core.polarity import pin_name
from valve_brain.hw.interface import BoardConnection, BoardDriver, PinResult, ValveBackend

log = logging.getLogger(__name__)
log_io = logging.getLogger(__name__ + ".io")


# =========================
# Konfiguracja połączenia
# =========================

@dataclass(frozen=True)
class BoardConfig:
    """
    connection_id: np. "COM3" albo "/dev/ttyACM0"
    board: typ płytki, np. "Uno", "Mega2560", "Nano3"
    """
    connection_id: str
    board: str = "Uno"


# Nazwy płytek (Arduino IDE / MATLAB) -> klucze układów w pyfirmata2.BOARDS
BOARD_LAYOUTS: Dict[str, str] = {
    "uno": "arduino",
    "arduino": "arduino",
    "nano": "arduino_nano",
    "nano3": "arduino_nano",
    "arduino_nano": "arduino_nano",
    "mega": "arduino_mega",
    "mega2560": "arduino_mega",
    "arduino_mega": "arduino_mega",
    "due": "arduino_due",
    "arduino_due": "arduino_due",
}

_PIN_RE = re.compile(r"^D(\d+)$")


# =========================
# Sterownik płytki: Firmata
# =========================

class FirmataConnection:
    """
    BoardConnection nad pyfirmata2.Board.
    Piny pobieramy leniwie (get_pin) i trzymamy w cache.
    """

    def __init__(self, board: Any) -> None:
        self._board = board
        self._pins: Dict[int, Any] = {}

    def _pin(self, name: str) -> Any:
        m = _PIN_RE.match(name)
        if m is None:
            raise ValueError(f"Invalid digital pin name: {name!r}")
        number = int(m.group(1))
        pin = self._pins.get(number)
        if pin is None:
            pin = self._board.get_pin(f"d:{number}:o")
            self._pins[number] = pin
        return pin

    def write_digital(self, pin_name: str, level: bool) -> None:
        self._pin(pin_name).write(1 if level else 0)

    def read_digital(self, pin_name: str) -> bool:
        # dla pinu wyjściowego firmata zwraca ostatnio zapisaną wartość
        value = self._pin(pin_name).read()
        if value is None:
            raise IOError(f"No value available for pin {pin_name}")
        return bool(value)

    def close(self) -> None:
        self._pins.clear()
        self._board.exit()


class FirmataBoardDriver:
    """
    Domyślny sterownik dla trybu REAL (Arduino z wgranym StandardFirmata).
    """

    def open(self, connection_id: str, board_type: str) -> BoardConnection:
        try:
            import pyfirmata2  # type: ignore
        except Exception as e:
            raise RuntimeError("pyfirmata2 not available (pip install valve-brain[firmata])") from e

        layout_key = BOARD_LAYOUTS.get(str(board_type).strip().lower())
        if layout_key is None:
            raise ValueError(f"Unsupported board type: {board_type!r}")

        board = pyfirmata2.Board(connection_id, layout=pyfirmata2.BOARDS[layout_key], name=board_type)
        log.info("Firmata: connected to %s on %s", board_type, connection_id)
        return FirmataConnection(board)


# =========================
# Implementacja ValveBackend
# =========================

class HardwareBackend(ValveBackend):
    """
    Backend dla prawdziwej płytki.
    - każde wywołanie deleguje do BoardConnection (pin "D<id>")
    - każdy wyjątek sterownika zamieniamy na PinResult.failure
    """

    def __init__(self, cfg: BoardConfig, driver: Optional[BoardDriver] = None) -> None:
        self.cfg = cfg
        self._driver: BoardDriver = driver if driver is not None else FirmataBoardDriver()
        self._conn: Optional[BoardConnection] = None

    # ---------- Public API ----------

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    def open(self) -> PinResult:
        if self._conn is not None:
            return PinResult.success()
        try:
            self._conn = self._driver.open(self.cfg.connection_id, self.cfg.board)
        except Exception as e:
            log.error("open(%s, %s) failed: %s", self.cfg.connection_id, self.cfg.board, e)
            self._conn = None
            return PinResult.failure(f"{type(e).__name__}: {e}")

        log.info("Board connection open: %s (%s)", self.cfg.connection_id, self.cfg.board)
        return PinResult.success()

    def close(self) -> None:
        """
        Best-effort: błędy przy zamykaniu tylko logujemy na DEBUG.
        """
        conn, self._conn = self._conn, None
        if conn is None:
            return
        try:
            conn.close()
        except Exception as e:
            log.debug("Ignoring error while closing %s: %s", self.cfg.connection_id, e)
        else:
            log.info("Board connection closed: %s", self.cfg.connection_id)

    def write_pin(self, valve_id: int, level: bool) -> PinResult:
        if self._conn is None:
            return PinResult.failure("connection not open")

        name = pin_name(valve_id)
        try:
            self._conn.write_digital(name, bool(level))
        except Exception as e:
            log_io.warning("write %s=%d failed: %s", name, int(level), e)
            return PinResult.failure(f"{type(e).__name__}: {e}")

        log_io.debug("write %s=%d", name, int(level))
        return PinResult.success(bool(level))

    def read_pin(self, valve_id: int) -> PinResult:
        if self._conn is None:
            return PinResult.failure("connection not open")

        name = pin_name(valve_id)
        try:
            level = bool(self._conn.read_digital(name))
        except Exception as e:
            log_io.warning("read %s failed: %s", name, e)
            return PinResult.failure(f"{type(e).__name__}: {e}")

        return PinResult.success(level)
