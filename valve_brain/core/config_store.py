from __future__ import annotations

from pathlib import Path
from typing import Any, Dict
import yaml

from valve_brain.core.polarity import validate_valve_set


class ConfigStore:
    """
    Konfiguracja tylko do odczytu: schema.yaml (pola + domyślne)
    i values.yaml (nadpisania). Nic nie zapisujemy z powrotem.
    """

    def __init__(self, base_dir: Path):
        self.base_dir = Path(base_dir)

    # ---------- Ścieżki pomocnicze ----------

    def _schema_path(self) -> Path:
        return self.base_dir / "schema.yaml"

    def _values_path(self) -> Path:
        return self.base_dir / "values.yaml"

    # ---------- API publiczne ----------

    def get_schema(self) -> Dict[str, Any]:
        path = self._schema_path()
        if not path.exists():
            raise FileNotFoundError(f"Config schema not found: {path}")
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        return data

    def get_values(self) -> Dict[str, Any]:
        """
        Zwraca scalone values: jeśli czegoś brak w values,
        bierzemy default z schema.
        """
        schema = self.get_schema()
        fields = schema.get("fields", [])

        vpath = self._values_path()
        if vpath.exists():
            with vpath.open("r", encoding="utf-8") as f:
                raw_values = yaml.safe_load(f) or {}
        else:
            raw_values = {}

        if not isinstance(raw_values, dict):
            raise ValueError(f"{vpath} must contain a mapping, got: {type(raw_values).__name__}")

        result: Dict[str, Any] = {}
        for field in fields:
            key = field["key"]
            if key in raw_values:
                value = raw_values[key]
            else:
                value = field.get("default")

            if value is None:
                raise ValueError(f"Brak wartości dla pola '{key}' i brak domyślnej.")

            result[key] = self._validate_single_value(field, value)

        return result

    # ---------- Walidacja pojedynczej wartości ----------

    def _validate_single_value(self, field: Dict[str, Any], value: Any) -> Any:
        ftype = field.get("type")

        if ftype == "number":
            if isinstance(value, bool):
                raise ValueError(
                    f"Pole '{field['key']}' oczekuje liczby, dostało: {value!r}"
                )
            try:
                num = float(value)
            except (TypeError, ValueError):
                raise ValueError(
                    f"Pole '{field['key']}' oczekuje liczby, dostało: {value!r}"
                )

            min_v = field.get("min")
            max_v = field.get("max")

            if min_v is not None and num < min_v:
                raise ValueError(
                    f"Wartość {num} dla '{field['key']}' jest mniejsza niż min={min_v}"
                )
            if max_v is not None and num > max_v:
                raise ValueError(
                    f"Wartość {num} dla '{field['key']}' jest większa niż max={max_v}"
                )

            return num

        elif ftype == "text":
            options = field.get("options") or field.get("choices")
            s = str(value)

            if options is not None:
                if not isinstance(options, list):
                    raise ValueError(
                        f"Pole '{field['key']}': options/choices muszą być listą, dostało: {type(options).__name__}"
                    )
                if s not in options:
                    raise ValueError(
                        f"Pole '{field['key']}' może przyjmować tylko: {options}, dostało: {value!r}"
                    )

            return s

        elif ftype == "bool":
            if isinstance(value, bool):
                return value

            if isinstance(value, (int, float)):
                return bool(value)

            if isinstance(value, str):
                v = value.strip().lower()
                if v in ("1", "true", "yes", "on"):
                    return True
                if v in ("0", "false", "no", "off"):
                    return False

            raise ValueError(
                f"Pole '{field['key']}' oczekuje wartości typu bool, dostało: {value!r}"
            )

        elif ftype == "valve_map":
            # YAML: {0: false, 1: true}; klucze jako int, polaryzacja bool/0/1
            if not isinstance(value, dict):
                raise ValueError(
                    f"Pole '{field['key']}' oczekuje mapy id -> polaryzacja, dostało: {value!r}"
                )
            return dict(validate_valve_set(value))

        else:
            raise ValueError(
                f"Nieobsługiwany typ pola '{ftype}' dla '{field['key']}'"
            )
