# valve_brain/core/polarity.py
from __future__ import annotations

from collections.abc import Mapping as MappingABC
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Sequence

# Czysta logika: bez I/O i bez stanu kontrolera.

PIN_PREFIX = "D"


def pin_name(valve_id: int) -> str:
    """Zawór v -> pin cyfrowy "D<v>" (kontrakt ze sterownikiem płytki)."""
    return f"{PIN_PREFIX}{int(valve_id)}"


def validate_lengths(ids: Sequence[Any], values: Sequence[Any]) -> bool:
    return len(ids) == len(values)


def validate_membership(valve_ids: Iterable[int], valve_set: Mapping[int, bool]) -> bool:
    for vid in valve_ids:
        try:
            if vid not in valve_set:
                return False
        except TypeError:
            # np. lista jako id – niehashowalne, na pewno nie jest kluczem
            return False
    return True


def translate_write(logical_closed: bool, polarity: bool) -> bool:
    """
    Stan logiczny -> poziom fizyczny linii: XNOR(stan, polaryzacja).

    polarity=True  (normalnie zamknięty): zamknięty -> HIGH, otwarty -> LOW
    polarity=False (normalnie otwarty):   zamknięty -> LOW, otwarty -> HIGH
    (płytki przekaźników sterowane stanem niskim)
    """
    return not (bool(logical_closed) ^ bool(polarity))


def translate_read(physical_level: bool, polarity: bool) -> bool:
    # XNOR jest swoją własną odwrotnością
    return translate_write(physical_level, polarity)


def _coerce_polarity(valve_id: int, raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, int) and raw in (0, 1):
        return bool(raw)
    raise ValueError(f"Polarity for valve {valve_id} must be a bool (or 0/1), got: {raw!r}")


def validate_valve_set(valve_set: Mapping[Any, Any]) -> Mapping[int, bool]:
    """
    Sprawdza mapę {id zaworu: polaryzacja} i zwraca jej niemutowalną kopię.

    - id: nieujemny int (bool odrzucamy, mimo że to podklasa int)
    - polaryzacja: bool albo 0/1
    Pusta mapa też jest błędem – kontroler bez zaworów nie ma sensu.
    """
    if not isinstance(valve_set, MappingABC):
        raise ValueError(f"Valve set must be a mapping of id -> polarity, got: {type(valve_set).__name__}")
    if not valve_set:
        raise ValueError("Valve set is empty")

    normalised = {}
    for vid, pol in valve_set.items():
        if isinstance(vid, bool) or not isinstance(vid, int):
            raise ValueError(f"Valve id must be a non-negative int, got: {vid!r}")
        if vid < 0:
            raise ValueError(f"Valve id must be non-negative, got: {vid}")
        normalised[vid] = _coerce_polarity(vid, pol)

    return MappingProxyType(dict(sorted(normalised.items())))
