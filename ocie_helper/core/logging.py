"""JSON log lines tagged with the current request id and principal."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import IO, Mapping

from ..middlewares import principal_ctx_var, request_id_ctx_var
from .config import settings

# The request middleware writes its own access line; boto is chatty at INFO.
NOISY_LOGGERS = ("uvicorn.access", "botocore", "boto3", "urllib3", "s3transfer")


class JsonLogFormatter(logging.Formatter):
    def __init__(self, service: str | None = None) -> None:
        super().__init__()
        self.service = service

    def format(self, record: logging.LogRecord) -> str:
        stamp = datetime.fromtimestamp(record.created, tz=timezone.utc)
        payload: dict[str, object] = {
            "ts": stamp.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if self.service:
            payload["service"] = self.service
        for key, var in (("request_id", request_id_ctx_var), ("principal", principal_ctx_var)):
            value = var.get()
            if value:
                payload[key] = value
        extra = getattr(record, "extra_data", None)
        if isinstance(extra, Mapping):
            payload.update(extra)
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, separators=(",", ":"), default=str)


def setup_logging(level: str | None = None, stream: IO[str] | None = None) -> None:
    """Route the root logger through :class:`JsonLogFormatter`.

    ``level`` overrides ``LOG_LEVEL``. Calling this again replaces the handler
    instead of stacking a second one.
    """

    handler = logging.StreamHandler(stream)
    handler.setFormatter(JsonLogFormatter(service=settings.APP_NAME))
    logging.root.handlers = [handler]
    logging.root.setLevel((level or settings.LOG_LEVEL).upper())
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
