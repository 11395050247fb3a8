import json
import logging
from logging.handlers import RotatingFileHandler
from datetime import datetime, timezone

from egzamin8.core.config import settings


class JsonFormatter(logging.Formatter):
    """JSON log formatter: one object per line, tagged with APP_ENV, plus whitelisted extra fields."""

    # Fields to extract from log record's extra dict
    EXTRA_FIELDS = (
        "product_id", "granted_id", "unlocked", "newly_granted", "section_id",
        "event", "state", "path", "method", "status_code", "error", "key",
        "checkout_url", "outcome",
    )

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "env": settings.app_env,
            "message": record.getMessage(),
        }

        for field in self.EXTRA_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                payload[field] = value

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False, default=str)


def configure_logging() -> None:
    formatter = JsonFormatter()
    handler = logging.StreamHandler()
    handler.setFormatter(formatter)
    root = logging.getLogger()
    root.setLevel(logging.INFO)
    handlers = [handler]
    if settings.log_file:
        file_handler = RotatingFileHandler(
            settings.log_file,
            maxBytes=settings.log_max_bytes,
            backupCount=settings.log_backup_count,
        )
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)
    root.handlers = handlers
