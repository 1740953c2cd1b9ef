# passport_backend/logging_config.py
"""
Единая настройка логирования приложения.
"""

import logging
import sys


def setup_logging(level: int | str = logging.INFO) -> None:
    """
    Настраивает корневой логгер с выводом в stdout.

    Args:
        level: Уровень логирования (INFO, DEBUG и т.д.).
    """
    log_format = "%(asctime)s - [%(levelname)s] - %(name)s - (%(filename)s).%(funcName)s(%(lineno)d) - %(message)s"

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setFormatter(logging.Formatter(log_format))

    logging.basicConfig(level=level, handlers=[stdout_handler], force=True)

    # "Шумные" библиотеки
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
