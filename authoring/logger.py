import os
import logging
from pathlib import Path

from config import LOGS_DIR

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


class PerLoggerFileHandler(logging.Handler):
    """
    Routes each log record to logs/<logger_name>.log
    (SubmissionOrchestrator.log, MarketplaceClient.log, ...).
    Creates file handlers lazily and keeps them cached.
    """
    def __init__(self, logs_dir: str | os.PathLike | Path = LOGS_DIR, *, encoding: str = "utf-8"):
        super().__init__()
        self.logs_dir = Path(logs_dir)
        self.logs_dir.mkdir(parents=True, exist_ok=True)
        self.encoding = encoding
        self._handlers: dict[str, logging.FileHandler] = {}

    def emit(self, record: logging.LogRecord) -> None:
        try:
            name = record.name or "root"
            safe = name.replace("/", "_").replace("\\", "_")
            handler = self._handlers.get(safe)
            if handler is None:
                path = self.logs_dir / f"{safe}.log"
                handler = logging.FileHandler(path, encoding=self.encoding)
                handler.setLevel(self.level)
                handler.setFormatter(self.formatter)
                self._handlers[safe] = handler

            handler.emit(record)
        except Exception: self.handleError(record)

    def close(self) -> None:
        for h in self._handlers.values():
            try: h.close()
            except OSError: pass
        self._handlers.clear()
        super().close()


def setup_logging(level: int = logging.INFO, logs_dir: str | os.PathLike | Path = LOGS_DIR):
    root = logging.getLogger()
    root.setLevel(level)
    fmt = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT)

    sh = logging.StreamHandler()
    sh.setLevel(level)
    sh.setFormatter(fmt)

    ph = PerLoggerFileHandler(logs_dir)
    ph.setLevel(level)
    ph.setFormatter(fmt)

    root.handlers.clear()
    root.addHandler(sh)
    root.addHandler(ph)

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("aiogram.event").setLevel(logging.WARNING)
