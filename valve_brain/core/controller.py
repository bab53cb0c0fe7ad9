# valve_brain/core/controller.py
from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from valve_brain.core.clock import Clock, RealClock
from valve_brain.core.errors import ErrorCode, error_info
from valve_brain.core.polarity import (
    translate_read,
    translate_write,
    validate_lengths,
    validate_membership,
    validate_valve_set,
)
from valve_brain.core.state import ConnectionState, OperationResult, ValveMode
from valve_brain.hw.board_hw import BoardConfig, HardwareBackend
from valve_brain.hw.interface import BoardDriver, ValveBackend
from valve_brain.hw.mock import VirtualBackend


logger = logging.getLogger(__name__)

DEFAULT_SETTLE_DELAY_S = 0.010
VIRTUAL_CONNECTION_ID = "Virtual"


class ValveController:
    """
    Sterownik baterii zaworów elektromagnetycznych.

    Klient operuje stanem logicznym (True = zamknięty, False = otwarty),
    a kontroler ukrywa polaryzację każdego zaworu:
    - polarity=True  -> zawór normalnie zamknięty,
    - polarity=False -> zawór normalnie otwarty.

    Jedna ścieżka walidacji i translacji dla obu trybów; różni się tylko
    backend (HardwareBackend / VirtualBackend).

    Każda operacja zwraca OperationResult, a jej kod zostaje też w polu
    "ostatni błąd" (get_error()) dla klientów, którzy sprawdzają błąd
    po fakcie.

    Nie jest thread-safe – serializacja wywołań leży po stronie klienta.
    """

    def __init__(
        self,
        connection_id: str,
        board: str,
        valve_set: Mapping[int, Any],
        mode: ValveMode = ValveMode.REAL,
        *,
        driver: Optional[BoardDriver] = None,
        settle_delay_s: float = DEFAULT_SETTLE_DELAY_S,
        clock: Optional[Clock] = None,
        translate_reads: bool = True,
    ) -> None:
        if settle_delay_s < 0:
            raise ValueError(f"settle_delay_s must be >= 0, got: {settle_delay_s}")

        self._valve_set: Mapping[int, bool] = validate_valve_set(valve_set)
        self._mode = mode
        self._connection_id = str(connection_id)
        self._board = str(board)
        self._settle_delay_s = float(settle_delay_s)
        self._clock: Clock = clock if clock is not None else RealClock()
        # surowe poziomy linii tylko dla REAL (zgodność wsteczna);
        # VIRTUAL zawsze zwraca stan logiczny
        self._raw_reads = (not translate_reads) and mode == ValveMode.REAL

        # wszystkie zawory startują jako otwarte (dla REAL – po inicjalizacji)
        self._current: Dict[int, bool] = {vid: False for vid in self._valve_set}
        self._last_result = OperationResult()
        self._conn_state = ConnectionState.UNOPENED

        if mode == ValveMode.VIRTUAL:
            self._backend: ValveBackend = VirtualBackend(
                {vid: translate_write(False, pol) for vid, pol in self._valve_set.items()}
            )
            self._conn_state = ConnectionState.OPEN
            logger.info("Virtual valve controller ready (%d valves)", len(self._valve_set))
            return

        self._backend = HardwareBackend(BoardConfig(self._connection_id, self._board), driver)
        if self._open_backend():
            # stan płytki po starcie jest nieznany – wymuszamy "wszystkie otwarte"
            ids = list(self._valve_set)
            self.set_valves(ids, [False] * len(ids))

    # ---------- Context manager ----------

    def __enter__(self) -> "ValveController":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ---------- Właściwości ----------

    @property
    def mode(self) -> ValveMode:
        return self._mode

    @property
    def connection_state(self) -> ConnectionState:
        return self._conn_state

    @property
    def current_values(self) -> Dict[int, bool]:
        return dict(self._current)

    @property
    def last_result(self) -> OperationResult:
        return self._last_result

    @property
    def settle_delay_s(self) -> float:
        return self._settle_delay_s

    # ---------- Public API ----------

    def set_valves(self, ids: Sequence[int], values: Sequence[Any]) -> OperationResult:
        """
        Ustawia zawory ids na stany values (prawda = zamknięty).

        Walidacja (długości, potem przynależność) odbywa się przed
        jakimkolwiek I/O. Pierwszy nieudany zapis przerywa paczkę; piny
        zapisane wcześniej NIE są cofane, ale tabela bieżących wartości
        zostaje nietknięta.
        """
        ids = list(ids)
        values = [bool(v) for v in values]

        if not validate_lengths(ids, values):
            return self._fail(
                ErrorCode.LENGTH_MISMATCH,
                f"got {len(ids)} valve ids and {len(values)} values",
            )
        if not validate_membership(ids, self._valve_set):
            return self._fail(ErrorCode.OUT_OF_BOUNDS, self._unknown_ids_message(ids))
        if not self._io_allowed():
            return self._fail(ErrorCode.BACKEND_FAILURE, f"connection is {self._conn_state.name}")

        for vid, closed in zip(ids, values):
            level = translate_write(closed, self._valve_set[vid])
            res = self._backend.write_pin(vid, level)
            if not res.ok:
                return self._fail(ErrorCode.BACKEND_FAILURE, f"write valve {vid}: {res.error}")

        for vid, closed in zip(ids, values):
            self._current[vid] = closed

        if self._mode == ValveMode.REAL and self._settle_delay_s > 0:
            self._clock.sleep(self._settle_delay_s)

        return self._succeed()

    def get_valves(self, ids: Sequence[int]) -> OperationResult:
        """
        Odczytuje stany logiczne zaworów ids (wynik w OperationResult.values).
        """
        ids = list(ids)

        if not validate_membership(ids, self._valve_set):
            return self._fail(ErrorCode.OUT_OF_BOUNDS, self._unknown_ids_message(ids))
        if not self._io_allowed():
            return self._fail(ErrorCode.BACKEND_FAILURE, f"connection is {self._conn_state.name}")

        logical: List[bool] = []
        values: List[bool] = []
        for vid in ids:
            res = self._backend.read_pin(vid)
            if not res.ok:
                return self._fail(ErrorCode.BACKEND_FAILURE, f"read valve {vid}: {res.error}")
            level = bool(res.level)
            closed = translate_read(level, self._valve_set[vid])
            logical.append(closed)
            values.append(level if self._raw_reads else closed)

        # tabela bieżących wartości zawsze trzyma stan logiczny
        for vid, closed in zip(ids, logical):
            self._current[vid] = closed

        return self._succeed(values)

    def get_polarity(self) -> Mapping[int, bool]:
        return self._valve_set

    def get_num_valves(self) -> int:
        return len(self._valve_set)

    def get_connection_id(self) -> str:
        if self._mode == ValveMode.VIRTUAL:
            return VIRTUAL_CONNECTION_ID
        return self._connection_id

    def get_error(self) -> Tuple[int, str]:
        """
        Zwraca (kod, opis) ostatniej operacji.
        """
        return error_info(self._last_result.error)

    def close(self) -> None:
        """
        Zamyka połączenie z płytką. Idempotentne, nigdy nie rzuca.
        """
        if self._mode == ValveMode.VIRTUAL:
            return
        if self._conn_state == ConnectionState.OPEN:
            logger.info("Closing valve controller on %s", self._connection_id)
        try:
            self._backend.close()
        except Exception as exc:  # pylint: disable=broad-except
            logger.debug("Ignoring backend close error: %s", exc)
        if self._conn_state == ConnectionState.OPEN:
            self._conn_state = ConnectionState.CLOSED

    def reset(self) -> OperationResult:
        """
        close() + ponowne otwarcie. Nie przywraca poprzednich stanów zaworów.
        """
        if self._mode == ValveMode.VIRTUAL:
            return self._succeed()

        logger.info("Resetting connection %s", self._connection_id)
        self.close()
        if self._open_backend():
            return self._succeed()
        return self._last_result

    # ---------- Helpers ----------

    def _open_backend(self) -> bool:
        res = self._backend.open()
        if not res.ok:
            self._fail(ErrorCode.BACKEND_FAILURE, f"connect {self._connection_id}: {res.error}")
            return False
        self._conn_state = ConnectionState.OPEN
        return True

    def _io_allowed(self) -> bool:
        return self._conn_state == ConnectionState.OPEN and self._backend.is_open

    def _unknown_ids_message(self, ids: Sequence[Any]) -> str:
        unknown = [vid for vid in ids if not validate_membership([vid], self._valve_set)]
        return f"unknown valve ids: {unknown}"

    def _succeed(self, values: Optional[List[bool]] = None) -> OperationResult:
        self._last_result = OperationResult(ErrorCode.NO_ERROR, list(values or []))
        return self._last_result

    def _fail(self, code: ErrorCode, message: str) -> OperationResult:
        logger.warning("Valve operation failed [%d %s]: %s", int(code), code.name, message)
        self._last_result = OperationResult(code, [], message)
        return self._last_result
