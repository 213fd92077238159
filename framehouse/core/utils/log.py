import logging
import logging.config
import queue
from logging.handlers import QueueHandler, QueueListener
from pathlib import Path
from typing import Any

import uvicorn

from framehouse.core.utils.config import Settings

LOG_DIRECTORY = Path("logs")


class ColoredConsoleFormatter(uvicorn.logging.DefaultFormatter):
    """
    Console formatter highlighting the level name and coloring the message depending on the level.
    ANSI codes: https://talyian.github.io/ansicolors/
    """

    BOLD = "\033[1m"
    RESET = "\033[0m"
    LEVEL_COLORS = {
        logging.DEBUG: "\033[38;5;12m",
        logging.INFO: "\033[38;5;10m",
        logging.WARNING: "\033[38;5;11m",
        logging.ERROR: "\033[38;5;9m",
        logging.CRITICAL: "\033[38;5;1m",
    }

    def __init__(self, *args, **kwargs):
        super().__init__(datefmt="%d-%b-%y %H:%M:%S")

        self.level_formatters = {
            level: logging.Formatter(
                f"%(asctime)s - %(name)s - {self.BOLD}%(levelname)s{self.RESET} - {color}%(message)s{self.RESET}",
                self.datefmt,
            )
            for level, color in self.LEVEL_COLORS.items()
        }

    def format(self, record: logging.LogRecord) -> str:
        formatter = self.level_formatters.get(
            record.levelno,
            self.level_formatters[logging.ERROR],
        )
        return formatter.format(record)


class LogConfig:
    """
    Logging setup of the server, expressed as a `logging.config.dictConfig` schema.

    `LogConfig().initialize_loggers(settings)` must be called before any log is emitted.

    Loggers:
     * `framehouse.access`: one line per request, token decoding
     * `framehouse.security`: authorization refusals, rate limiting
     * `framehouse.calendar`: slot generation and booking history
     * `framehouse.error`: startup, shutdown and everything else
    """

    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    @staticmethod
    def _rotating_file(filename: str, max_mb: int, backup_count: int) -> dict:
        return {
            "formatter": "default",
            "class": "logging.handlers.RotatingFileHandler",
            "filename": str(LOG_DIRECTORY / filename),
            "maxBytes": 1024 * 1024 * max_mb,
            "backupCount": backup_count,
            "level": "INFO",
        }

    @staticmethod
    def _logger(*handlers: str, level: str) -> dict:
        # The console handler is attached to every logger
        return {"handlers": [*handlers, "console"], "level": level}

    def get_config_dict(self, settings: Settings) -> dict[str, Any]:
        """
        See https://docs.python.org/3/library/logging.config.html#logging-config-dictschema
        """
        level = "DEBUG" if settings.LOG_DEBUG_MESSAGES else "INFO"

        return {
            "version": 1,
            # In debug mode, third party loggers (SQLAlchemy, uvicorn...) stay enabled
            "disable_existing_loggers": not settings.LOG_DEBUG_MESSAGES,
            "formatters": {
                "default": {
                    "format": self.LOG_FORMAT,
                    "datefmt": "%d-%b-%y %H:%M:%S",
                },
                "console_formatter": {
                    "()": "framehouse.core.utils.log.ColoredConsoleFormatter",
                },
            },
            "handlers": {
                "console": {
                    "formatter": "console_formatter",
                    "class": "logging.StreamHandler",
                    "level": level,
                },
                "file_errors": self._rotating_file("errors.log", 10, 20),
                "file_access": self._rotating_file("access.log", 40, 50),
                "file_security": self._rotating_file("security.log", 40, 50),
                "file_calendar": self._rotating_file("calendar.log", 10, 20),
            },
            "loggers": {
                "root": {
                    "level": "DEBUG",
                    "handlers": ["console"],
                },
                # Records of the framehouse.* loggers must not reach the root console handler twice
                "framehouse": {
                    "propagate": False,
                },
                "framehouse.access": self._logger("file_access", level=level),
                "framehouse.security": self._logger("file_security", level=level),
                "framehouse.error": self._logger("file_errors", level=level),
                "framehouse.calendar": self._logger("file_calendar", level=level),
                # framehouse.access replaces uvicorn access logs, adding the request id
                "uvicorn.access": {"handlers": []},
                "uvicorn.error": {
                    **self._logger("file_errors", level=level),
                    "propagate": False,
                },
            },
        }

    def initialize_loggers(self, settings: Settings) -> None:
        """
        Apply the configuration, then move the handlers of each logger behind a queue
        so that endpoints never wait for a file or the console.

        See https://rob-blackbourn.medium.com/how-to-use-python-logging-queuehandler-with-dictconfig-1e8b1284e27a
        """
        # File handlers can not create their directory
        LOG_DIRECTORY.mkdir(parents=True, exist_ok=True)

        config_dict = self.get_config_dict(settings=settings)
        logging.config.dictConfig(config_dict)

        for logger_name in config_dict["loggers"]:
            logger = logging.getLogger(logger_name)
            if not logger.handlers:
                continue

            log_queue: queue.Queue[Any] = queue.Queue(-1)
            listener = QueueListener(
                log_queue,
                *logger.handlers,
                respect_handler_level=True,
            )
            listener.start()

            logger.handlers = [QueueHandler(log_queue)]
