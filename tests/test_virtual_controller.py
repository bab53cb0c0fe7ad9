import pytest

from valve_brain.core.controller import ValveController
from valve_brain.core.errors import ErrorCode
from valve_brain.core.state import ConnectionState, ValveMode


def test_starts_all_open_without_io(virtual_ctrl, clock):
    assert virtual_ctrl.mode == ValveMode.VIRTUAL
    assert virtual_ctrl.connection_state == ConnectionState.OPEN
    assert virtual_ctrl.current_values == {0: False, 1: False, 2: False}
    assert virtual_ctrl.get_error() == (0, "No error")
    assert clock.sleeps == []


def test_accessors(virtual_ctrl, valves):
    assert dict(virtual_ctrl.get_polarity()) == valves
    assert virtual_ctrl.get_num_valves() == 3
    assert virtual_ctrl.get_connection_id() == "Virtual"


def test_round_trip(virtual_ctrl):
    ids = [2, 0, 1]
    values = [True, False, True]

    res = virtual_ctrl.set_valves(ids, values)
    assert res.ok
    assert res.values == []

    res = virtual_ctrl.get_valves(ids)
    assert res.ok
    assert res.values == values
    assert virtual_ctrl.current_values == {0: False, 1: True, 2: True}


def test_round_trip_ignores_raw_read_option():
    ctrl = ValveController("COM3", "Uno", {0: True, 1: False}, ValveMode.VIRTUAL, translate_reads=False)
    assert ctrl.set_valves([0, 1], [True, True]).ok
    assert ctrl.get_valves([0, 1]).values == [True, True]
    assert ctrl.current_values == {0: True, 1: True}


def test_truthy_values_mean_closed(virtual_ctrl):
    virtual_ctrl.set_valves([0, 1], [5, 0])
    assert virtual_ctrl.get_valves([0, 1]).values == [True, False]
    # ujemna wartość też jest "prawdziwa" -> zamknięty
    virtual_ctrl.set_valves([2], [-1])
    assert virtual_ctrl.get_valves([2]).values == [True]


def test_set_is_idempotent(virtual_ctrl):
    r1 = virtual_ctrl.set_valves([1], [True])
    table1 = virtual_ctrl.current_values
    r2 = virtual_ctrl.set_valves([1], [True])

    assert r1.error == r2.error == ErrorCode.NO_ERROR
    assert virtual_ctrl.current_values == table1


def test_length_mismatch_changes_nothing(virtual_ctrl):
    virtual_ctrl.set_valves([0], [True])
    before = virtual_ctrl.current_values

    res = virtual_ctrl.set_valves([0, 1], [False])

    assert res.error == ErrorCode.LENGTH_MISMATCH
    assert virtual_ctrl.get_error()[0] == 1
    assert virtual_ctrl.current_values == before


def test_length_checked_before_membership(virtual_ctrl):
    res = virtual_ctrl.set_valves([0, 99], [True])
    assert res.error == ErrorCode.LENGTH_MISMATCH


def test_out_of_bounds_changes_nothing():
    ctrl = ValveController("COM3", "Uno", {0: False, 1: True}, ValveMode.VIRTUAL)
    before = ctrl.current_values

    res = ctrl.set_valves([5], [True])

    assert res.error == ErrorCode.OUT_OF_BOUNDS
    assert ctrl.get_error() == (2, "An element in the valves sequence is out of bounds")
    assert ctrl.current_values == before


def test_out_of_bounds_batch_is_atomic(virtual_ctrl):
    res = virtual_ctrl.set_valves([0, 1, 42], [True, True, True])
    assert res.error == ErrorCode.OUT_OF_BOUNDS
    assert virtual_ctrl.get_valves([0, 1]).values == [False, False]


def test_get_out_of_bounds_returns_no_values(virtual_ctrl):
    res = virtual_ctrl.get_valves([0, 3])
    assert res.error == ErrorCode.OUT_OF_BOUNDS
    assert res.values == []


def test_last_error_is_overwritten_by_next_operation(virtual_ctrl):
    virtual_ctrl.set_valves([7], [True])
    assert virtual_ctrl.get_error()[0] == 2
    virtual_ctrl.get_valves([0])
    assert virtual_ctrl.get_error()[0] == 0
    assert virtual_ctrl.last_result.ok


def test_close_and_reset_are_harmless(virtual_ctrl):
    virtual_ctrl.set_valves([0], [True])
    virtual_ctrl.close()
    virtual_ctrl.close()
    assert virtual_ctrl.reset().ok
    assert virtual_ctrl.get_valves([0]).values == [True]


def test_no_settling_delay_in_virtual_mode(virtual_ctrl, clock):
    virtual_ctrl.set_valves([0, 1], [True, True])
    assert clock.sleeps == []


def test_non_contiguous_ids():
    ctrl = ValveController("COM3", "Uno", {3: True, 8: False}, ValveMode.VIRTUAL)
    assert ctrl.set_valves([8, 3], [True, True]).ok
    assert ctrl.get_valves([3, 8]).values == [True, True]
    assert ctrl.set_valves([0], [True]).error == ErrorCode.OUT_OF_BOUNDS


def test_invalid_valve_set_raises():
    with pytest.raises(ValueError):
        ValveController("COM3", "Uno", {-1: True}, ValveMode.VIRTUAL)


def test_negative_settle_delay_raises():
    with pytest.raises(ValueError):
        ValveController("COM3", "Uno", {0: True}, ValveMode.VIRTUAL, settle_delay_s=-0.1)
