# valve_brain/hw/interface.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from typing_extensions import Protocol


@dataclass(frozen=True)
class PinResult:
    """
    Wynik pojedynczej operacji na pinie.
    Backend nigdy nie rzuca wyjątków z write_pin/read_pin – zamiast tego
    zwraca ok=False i opis błędu.
    """
    ok: bool
    level: Optional[bool] = None
    error: Optional[str] = None

    @classmethod
    def success(cls, level: Optional[bool] = None) -> "PinResult":
        return cls(ok=True, level=level)

    @classmethod
    def failure(cls, error: str) -> "PinResult":
        return cls(ok=False, error=error)


class BoardConnection(Protocol):
    """
    Otwarte połączenie z płytką (dostarcza zewnętrzny sterownik).
    Nazwy pinów: "D0", "D1", ...
    """

    def write_digital(self, pin_name: str, level: bool) -> None: ...

    def read_digital(self, pin_name: str) -> bool: ...

    def close(self) -> None: ...


class BoardDriver(Protocol):
    def open(self, connection_id: str, board_type: str) -> BoardConnection:
        """
        Otwiera połączenie z płytką. Może rzucić dowolny wyjątek
        (brak portu, zła płytka, brak biblioteki...).
        """
        ...


class ValveBackend(Protocol):
    """
    Warstwa wykonawcza kontrolera.
    Implementuje ją zarówno VirtualBackend (symulacja), jak i HardwareBackend.

    IMPORTANT:
    - write_pin/read_pin operują na poziomach FIZYCZNYCH (po translacji
      polaryzacji), translacja jest wyłącznie w kontrolerze,
    - żadna z metod nie powinna rzucać wyjątków; open() zwraca PinResult,
      close() jest best-effort.
    """

    @property
    def is_open(self) -> bool:
        ...

    def open(self) -> PinResult:
        ...

    def close(self) -> None:
        ...

    def write_pin(self, valve_id: int, level: bool) -> PinResult:
        ...

    def read_pin(self, valve_id: int) -> PinResult:
        ...
