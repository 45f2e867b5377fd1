import logging
from pathlib import Path

from core.config import AppConfig


class CustomLogger:
    def __init__(self, log_directory: str = None, level: str = None):
        self.log_directory = Path(log_directory or AppConfig.LOG_DIR)
        self.log_directory.mkdir(parents=True, exist_ok=True)
        self.level = logging.getLevelName((level or AppConfig.LOG_LEVEL).upper())
        if not isinstance(self.level, int):
            self.level = logging.INFO

    def get_logger(self, module_name: str) -> logging.Logger:
        """
        Creates or returns a logger instance for the specified module
        """
        logger = logging.getLogger(module_name)
        logger.setLevel(self.level)

        # Handlers are attached once per logger name
        if not logger.handlers:
            file_handler = logging.FileHandler(
                self.log_directory / f"{module_name}.log", encoding="utf-8"
            )
            console_handler = logging.StreamHandler()

            formatter = logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
            for handler in (file_handler, console_handler):
                handler.setLevel(self.level)
                handler.setFormatter(formatter)
                logger.addHandler(handler)

        return logger
