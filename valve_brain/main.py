# valve_brain/main.py
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from valve_brain.config.controller_loader import load_controller_config
from valve_brain.core.clock import Clock
from valve_brain.core.controller import ValveController
from valve_brain.hw.interface import BoardDriver


LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

logger = logging.getLogger(__name__)


def configure_logging(level: int = logging.INFO) -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)
    # pojedyncze zapisy pinów są gadatliwe – domyślnie tylko ostrzeżenia
    logging.getLogger("valve_brain.hw.board_hw.io").setLevel(max(level, logging.WARNING))


def create_controller(
    config_dir: Optional[Path] = None,
    *,
    driver: Optional[BoardDriver] = None,
    clock: Optional[Clock] = None,
) -> ValveController:
    """
    Składa ValveController z konfiguracji YAML (+ nadpisania z env).
    Przy błędzie otwarcia płytki kontroler i tak powstaje –
    sprawdź get_error() i ewentualnie wywołaj reset().
    """
    cfg = load_controller_config(config_dir)

    controller = ValveController(
        cfg.connection_id,
        cfg.board,
        cfg.valves,
        cfg.mode,
        driver=driver,
        settle_delay_s=cfg.settle_delay_s,
        clock=clock,
        translate_reads=cfg.translate_reads,
    )

    code, descr = controller.get_error()
    logger.info(
        "Valve controller created: mode=%s connection=%s valves=%d last_error=%d (%s)",
        cfg.mode.name,
        controller.get_connection_id(),
        controller.get_num_valves(),
        code,
        descr,
    )
    return controller
