"""Log record formatters."""

import json
import logging
from datetime import datetime, timezone

DEFAULT_FORMAT = "%(asctime)s %(levelname)-5s [%(name)s] %(message)s"


class SafeFormatter(logging.Formatter):
    """Formatter that tolerates records missing optional attributes.

    Adds ``real_module``/``real_funcName``/``real_lineno`` when absent and shortens
    ``WARNING`` to ``WARN`` so columns line up.
    """

    def __init__(self, fmt: str | None = None, datefmt: str | None = None) -> None:
        super().__init__(fmt or DEFAULT_FORMAT, datefmt)

    def format(self, record: logging.LogRecord) -> str:
        if not hasattr(record, "real_module"):
            record.real_module = record.module
        if not hasattr(record, "real_funcName"):
            record.real_funcName = record.funcName
        if not hasattr(record, "real_lineno"):
            record.real_lineno = record.lineno
        if record.levelname == "WARNING":
            record.levelname = "WARN"
        return super().format(record)


class JSONFormatter(logging.Formatter):
    """One JSON object per line, for log shipping from CI runners."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(
                record.created,
                tz=timezone.utc,
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in ("run_id", "stage", "runner_label"):
            value = getattr(record, key, None)
            if value is not None:
                payload[key] = value
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, sort_keys=True)
