# core/logging_config.py
import logging
from typing import Optional

from flask import Flask

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(level_name: Optional[str] = None) -> int:
    """Logowanie dla użycia bibliotecznego (bez Flaska). Zwraca ustawiony poziom."""
    from euvat.core.config import Config

    level_name = level_name or Config.LOG_LEVEL
    level = getattr(logging, str(level_name).upper(), logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT)
    # katalog stawek i adaptery logują pod "euvat.*"
    logging.getLogger("euvat").setLevel(level)
    return level


def configure_logging(app: Flask) -> None:
    log_level_name = app.config.get("LOG_LEVEL", "INFO")
    level = setup_logging(log_level_name)
    app.logger.setLevel(level)
    app.logger.info("Logging configured, level=%s", log_level_name)
