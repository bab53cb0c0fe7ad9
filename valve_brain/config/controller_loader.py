# valve_brain/config/controller_loader.py
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Mapping, Optional
import logging
import os

from valve_brain.core.config_store import ConfigStore
from valve_brain.core.state import ValveMode


logger = logging.getLogger(__name__)
CONFIG_DIR = Path(__file__).resolve().parent

ENV_VIRTUAL = "VALVE_BRAIN_VIRTUAL"
ENV_PORT = "VALVE_BRAIN_PORT"


@dataclass(frozen=True)
class ControllerConfig:
    connection_id: str
    board: str
    valves: Dict[int, bool]
    mode: ValveMode = ValveMode.REAL
    settle_delay_s: float = 0.01
    translate_reads: bool = True


def _env_truthy(value: Optional[str]) -> bool:
    if value is None:
        return False
    return value.strip().lower() in {"1", "true", "yes", "y", "on"}


def load_controller_config(
    config_dir: Optional[Path] = None,
    env: Optional[Mapping[str, str]] = None,
) -> ControllerConfig:
    """
    Czyta schema.yaml + values.yaml z config_dir (domyślnie katalog pakietu)
    i nakłada nadpisania ze zmiennych środowiskowych:
    - VALVE_BRAIN_VIRTUAL=1 -> tryb wirtualny
    - VALVE_BRAIN_PORT=...  -> inny port szeregowy
    """
    env = os.environ if env is None else env
    store = ConfigStore(config_dir or CONFIG_DIR)
    values = store.get_values()

    virtual = bool(values["virtual"])
    if ENV_VIRTUAL in env:
        virtual = _env_truthy(env.get(ENV_VIRTUAL))
        logger.info("Mode overridden by %s: virtual=%s", ENV_VIRTUAL, virtual)

    connection_id = str(values["connection_id"])
    port = env.get(ENV_PORT)
    if port:
        connection_id = port.strip()
        logger.info("Connection overridden by %s: %s", ENV_PORT, connection_id)

    return ControllerConfig(
        connection_id=connection_id,
        board=str(values["board"]),
        valves=dict(values["valves"]),
        mode=ValveMode.VIRTUAL if virtual else ValveMode.REAL,
        settle_delay_s=float(values["settle_delay_s"]),
        translate_reads=bool(values["translate_reads"]),
    )
