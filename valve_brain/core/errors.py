# valve_brain/core/errors.py
from __future__ import annotations

from enum import IntEnum
from typing import Dict, Tuple


class ErrorCode(IntEnum):
    """
    Kody błędów sterownika zaworów.
    Ostatni kod jest trzymany przez kontroler i zwracany w OperationResult.
    """
    NO_ERROR = 0
    LENGTH_MISMATCH = 1
    OUT_OF_BOUNDS = 2
    INVALID_MEMORY_OFFSET = 10        # zarezerwowane (pamięć nieulotna)
    MEMORY_RANGE_OUT_OF_BOUNDS = 11   # zarezerwowane (pamięć nieulotna)
    BACKEND_FAILURE = 999


UNKNOWN_DESCRIPTION = "unrecognized error code"

_DESCRIPTIONS: Dict[int, str] = {
    ErrorCode.NO_ERROR: "No error",
    ErrorCode.LENGTH_MISMATCH: "Lengths of valve and value sequences do not match",
    ErrorCode.OUT_OF_BOUNDS: "An element in the valves sequence is out of bounds",
    ErrorCode.INVALID_MEMORY_OFFSET: "Invalid non-volatile memory offset value",
    ErrorCode.MEMORY_RANGE_OUT_OF_BOUNDS: (
        "Sequence to write/read to/from non-volatile memory is out of bounds"
    ),
    ErrorCode.BACKEND_FAILURE: "Unknown error",
}


def report_code(code: int) -> int:
    """
    Kody ujemne raportujemy jako 32-bitowe liczby bez znaku
    (zgodność z konwencją kodów błędów sterowników DLL).
    """
    code = int(code)
    if code < 0:
        return code & 0xFFFFFFFF
    return code


def describe_error(code: int) -> str:
    return _DESCRIPTIONS.get(int(code), UNKNOWN_DESCRIPTION)


def error_info(code: int) -> Tuple[int, str]:
    return report_code(code), describe_error(code)
