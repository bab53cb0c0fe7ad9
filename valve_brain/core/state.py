# valve_brain/core/state.py
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import List

from valve_brain.core.errors import ErrorCode


class ValveMode(Enum):
    """
    Tryb pracy kontrolera:
    - REAL: prawdziwa płytka przez sterownik (BoardDriver)
    - VIRTUAL: symulacja w pamięci, bez I/O
    """
    REAL = auto()
    VIRTUAL = auto()


class ConnectionState(Enum):
    UNOPENED = auto()
    OPEN = auto()
    CLOSED = auto()


@dataclass(frozen=True)
class OperationResult:
    """
    Wynik pojedynczej operacji kontrolera.

    error  – kod zakończenia (ten sam, który potem zwraca get_error())
    values – stany logiczne (True = zamknięty) dla get_valves;
             pusta lista przy set_valves i przy każdym błędzie.
    """
    error: ErrorCode = ErrorCode.NO_ERROR
    values: List[bool] = field(default_factory=list)
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.error == ErrorCode.NO_ERROR
