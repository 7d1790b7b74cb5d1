import os
import logging
from datetime import datetime
from typing import Dict, Optional

from svmdata import config

class Logger:
    """Centralized logging management class"""

    _instance = None

    def __new__(cls, *args, **kwargs):
        """Implement singleton pattern"""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._loggers = {}
        return cls._instance

    def get_logger(self,
                   name: str,
                   filename: Optional[str] = None,
                   level: str = config.LOG_LEVEL,
                   console: bool = False,
                   log_dir: str = config.LOG_DIR) -> logging.Logger:
        """
        Get logger instance

        Args:
            name: Logger name
            filename: Optional custom log filename
            level: Logging level name (e.g. 'DEBUG', 'info')
            console: Whether to also log to the console
            log_dir: Directory for the timestamped log file when no filename is given
        """
        if name in self._loggers:
            return self._loggers[name]

        logger = logging.getLogger(name)
        logger.setLevel(getattr(logging, level.upper(), logging.INFO))

        # Remove existing handlers if any
        if logger.hasHandlers():
            logger.handlers.clear()

        # Create formatter
        formatter = logging.Formatter(config.LOG_FORMAT)

        # Create file handler with custom filename if provided
        if filename is None:
            os.makedirs(log_dir, exist_ok=True)
            filename = os.path.join(
                log_dir, f'log_{name}_{datetime.now().strftime("%Y%m%d_%H%M%S")}.log'
            )
        file_handler = logging.FileHandler(filename, encoding='utf-8')
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

        if console:
            console_handler = logging.StreamHandler()
            console_handler.setFormatter(formatter)
            logger.addHandler(console_handler)

        # Prevent logging to the root logger
        logger.propagate = False

        self._loggers[name] = logger
        return logger

    def get_all_loggers(self) -> Dict[str, logging.Logger]:
        """Get dictionary of all created loggers"""
        return dict(self._loggers)

    def close_logger(self, name: str) -> None:
        """Close and forget a logger created by get_logger"""
        logger = self._loggers.pop(name, None)
        if logger is None:
            return
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)
