# tests/conftest.py
from __future__ import annotations

from typing import Dict, List, Optional, Tuple

import pytest

from valve_brain.core.clock import SimClock
from valve_brain.core.controller import ValveController
from valve_brain.core.state import ValveMode


class FakeConnection:
    """
    BoardConnection do testów: pamięta poziomy pinów i historię zapisów.
    fail_write_on=N -> N-te wywołanie write_digital (liczone od 1) rzuca.
    """

    def __init__(self) -> None:
        self.levels: Dict[str, bool] = {}
        self.writes: List[Tuple[str, bool]] = []
        self.write_calls = 0
        self.fail_write_on: Optional[int] = None
        self.fail_reads = False
        self.fail_close = False
        self.closed = False

    def write_digital(self, pin_name: str, level: bool) -> None:
        self.write_calls += 1
        if self.fail_write_on is not None and self.write_calls == self.fail_write_on:
            raise IOError(f"serial write failed on {pin_name}")
        self.levels[pin_name] = level
        self.writes.append((pin_name, level))

    def read_digital(self, pin_name: str) -> bool:
        if self.fail_reads:
            raise IOError(f"serial read failed on {pin_name}")
        return self.levels[pin_name]

    def close(self) -> None:
        if self.fail_close:
            raise RuntimeError("port already gone")
        self.closed = True


class FakeDriver:
    def __init__(self) -> None:
        self.connections: List[FakeConnection] = []
        self.open_calls: List[Tuple[str, str]] = []
        self.fail_open = False

    @property
    def conn(self) -> FakeConnection:
        return self.connections[-1]

    def open(self, connection_id: str, board_type: str) -> FakeConnection:
        self.open_calls.append((connection_id, board_type))
        if self.fail_open:
            raise IOError(f"could not open port {connection_id}")
        conn = FakeConnection()
        self.connections.append(conn)
        return conn


VALVES = {0: True, 1: False, 2: True}


@pytest.fixture
def valves():
    return dict(VALVES)


@pytest.fixture
def clock():
    return SimClock()


@pytest.fixture
def driver():
    return FakeDriver()


@pytest.fixture
def virtual_ctrl(valves, clock):
    return ValveController("COM3", "Uno", valves, ValveMode.VIRTUAL, clock=clock)


@pytest.fixture
def real_ctrl(valves, driver, clock):
    ctrl = ValveController("COM3", "Uno", valves, ValveMode.REAL, driver=driver, clock=clock)
    yield ctrl
    ctrl.close()
