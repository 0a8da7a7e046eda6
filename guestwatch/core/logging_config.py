"""
Logging configuration with optional structured JSON output.

Dispatch records carry context (dispatch id, guest, station, room) through
``extra=``; the structured formatter lifts those fields into the JSON line so
a single dispatch can be followed across log aggregation.
"""

import json
import logging
import sys
import traceback
from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

CONTEXT_FIELDS = (
    "dispatch_id",
    "guest_id",
    "hotel_id",
    "station_id",
    "alert_id",
    "room",
    "event",
)

PLAIN_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass
class LogEntry:
    """Structured log entry"""
    timestamp: str
    level: str
    logger_name: str
    message: str
    context: Optional[Dict[str, Any]] = None
    exception: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization"""
        result = asdict(self)
        # Remove None values to reduce log size
        return {k: v for k, v in result.items() if v is not None}


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging"""

    def format(self, record: logging.LogRecord) -> str:
        context = {
            field: getattr(record, field)
            for field in CONTEXT_FIELDS
            if getattr(record, field, None) is not None
        }

        exception = None
        if record.exc_info:
            exception = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": traceback.format_exception(*record.exc_info),
            }

        entry = LogEntry(
            timestamp=datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            level=record.levelname,
            logger_name=record.name,
            message=record.getMessage(),
            context=context or None,
            exception=exception,
        )
        return json.dumps(entry.to_dict(), ensure_ascii=False, default=str)


class LoggingManager:
    """Centralized logging management"""

    def __init__(self):
        self.configured = False
        self.handlers: List[logging.Handler] = []

    def setup_logging(self, log_level: str = "INFO", enable_json: bool = False) -> None:
        """Configure the root logger once per process."""
        if self.configured:
            return

        root_logger = logging.getLogger()
        root_logger.setLevel(getattr(logging, log_level.upper()))
        root_logger.handlers.clear()

        console_handler = logging.StreamHandler(sys.stdout)
        if enable_json:
            console_handler.setFormatter(StructuredFormatter())
        else:
            console_handler.setFormatter(logging.Formatter(PLAIN_FORMAT))
        root_logger.addHandler(console_handler)
        self.handlers.append(console_handler)

        # Socket.IO and engine.IO are chatty at INFO
        for noisy in ("socketio", "engineio"):
            logging.getLogger(noisy).setLevel(logging.WARNING)

        self.configured = True
        logging.getLogger(__name__).info("Logging system initialized")

    def close(self) -> None:
        """Close all handlers"""
        for handler in self.handlers:
            handler.close()
        self.handlers.clear()
        self.configured = False


logging_manager = LoggingManager()


def setup_logging(log_level: Optional[str] = None, enable_json: Optional[bool] = None) -> None:
    """Setup logging from settings unless explicit values are given."""
    from .config import settings

    logging_manager.setup_logging(
        log_level=log_level or settings.log_level,
        enable_json=settings.log_json if enable_json is None else enable_json,
    )