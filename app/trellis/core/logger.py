import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import Iterable, Optional

from trellis.core.config import IS_DEBUG, LOG_DIR, LOG_FILE_NAME

FORMATTER = logging.Formatter(
    "%(asctime)s | %(levelname)-7s | %(name)-15s | %(message)s",
    datefmt="%H:%M:%S"
)

# NiceGUI hält pro Browser-Tab eine Socket.IO Verbindung, deren Auf- und Abbau interessiert im Betrieb niemanden
NOISE_KEYWORDS = ("WebSocket", "socket.io", "connection open", "connection closed")

# Backend-Calls der Resource-Services laufen über requests/urllib3
THIRD_PARTY_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access", "urllib3", "nicegui")

MAX_BYTES = 10 * 1024 * 1024
BACKUP_COUNT = 5


class LogNoiseFilter(logging.Filter):
    """Lässt Socket-Rauschen nur im Debug-Modus auf die Konsole."""

    def __init__(self, debug: bool = IS_DEBUG, keywords: Iterable[str] = NOISE_KEYWORDS):
        super().__init__()
        self.debug = debug
        self.keywords = tuple(keywords)

    def filter(self, record):
        if self.debug:
            return True
        message = record.getMessage()
        return not any(keyword in message for keyword in self.keywords)


def _console_handler(debug: bool) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(FORMATTER)
    handler.setLevel(logging.DEBUG if debug else logging.INFO)
    handler.addFilter(LogNoiseFilter(debug))
    return handler


def _file_handler(log_dir: str) -> logging.Handler:
    # Datei bekommt immer DEBUG, unabhängig von TRELLIS_DEBUG
    os.makedirs(log_dir, exist_ok=True)
    handler = RotatingFileHandler(
        os.path.join(log_dir, LOG_FILE_NAME), maxBytes=MAX_BYTES, backupCount=BACKUP_COUNT, encoding="utf-8"
    )
    handler.setFormatter(FORMATTER)
    handler.setLevel(logging.DEBUG)
    return handler


def setup_logging(log_dir: Optional[str] = LOG_DIR, debug: bool = IS_DEBUG) -> logging.Logger:
    """
    Konfiguriert den Root-Logger: Konsole (Level nach TRELLIS_DEBUG, ohne Socket-Rauschen)
    und optional eine rotierende Logdatei. Mehrfacher Aufruf ersetzt die Handler.
    log_dir=None schaltet die Datei ab.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    root_logger.addHandler(_console_handler(debug))
    if log_dir:
        root_logger.addHandler(_file_handler(log_dir))

    third_party_level = logging.DEBUG if debug else logging.WARNING
    for name in THIRD_PARTY_LOGGERS:
        third_party = logging.getLogger(name)
        third_party.setLevel(third_party_level)
        third_party.handlers = list(root_logger.handlers)
        third_party.propagate = False

    root_logger.info(f"✨ Trellis Logging initialisiert (Level: {'DEBUG' if debug else 'INFO'})")
    return root_logger


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
