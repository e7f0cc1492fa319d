from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List, Optional

from .infra.settings import SettingsLoader

WORKER_LOGGER_NAME = "ratekeeper.worker"

_worker_logger: Optional[logging.Logger] = None


def _build_handlers(settings: SettingsLoader) -> List[logging.Handler]:
    """Файл с ротацией в logs_dir и вывод в консоль, общий формат.

    Опросы источников идут в потоках пула, поэтому формат по умолчанию
    содержит %(threadName)s: по нему видно, какой поток что записал.
    """
    logs_dir = Path(settings.get("logs_dir"))
    logs_dir.mkdir(parents=True, exist_ok=True)

    formatter = logging.Formatter(
        fmt=settings.get("log_format"),
        datefmt="%Y-%m-%dT%H:%M:%S",
    )

    file_handler = RotatingFileHandler(
        logs_dir / settings.get("log_file", "worker.log"),
        maxBytes=1_000_000,
        backupCount=5,
        encoding="utf-8",
    )
    console_handler = logging.StreamHandler()

    handlers: List[logging.Handler] = [file_handler, console_handler]
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def get_worker_logger() -> logging.Logger:
    """Логгер цикла обновления, планировщика и операций чтения кеша.

    Настраивается один раз при первом обращении; повторные вызовы
    из разных потоков возвращают тот же объект.
    """
    global _worker_logger

    if _worker_logger is None:
        settings = SettingsLoader()
        logger = logging.getLogger(WORKER_LOGGER_NAME)
        logger.setLevel(settings.get("log_level", "INFO"))
        logger.propagate = False
        if not logger.handlers:
            for handler in _build_handlers(settings):
                logger.addHandler(handler)
        _worker_logger = logger

    return _worker_logger
