import json
import logging
from datetime import UTC, datetime
from typing import Any


class StructuredLogger:
    """Emits structured JSON events through the standard logging system.

    The JSON document is the log message, so events flow through whatever handlers and
    formatters ``configure_logging`` installed.
    """

    def __init__(self, name: str = "photoshelf"):
        self._logger = logging.getLogger(name)

    def log_event(self, event: str, level: int = logging.INFO, **kwargs: Any) -> None:
        """Emit a structured event, e.g.

        logger.log_event("upload_completed", request_id=..., extra={"files": 3})

        Keys of an ``extra`` dict are merged into the top level of the event.
        """
        payload: dict[str, Any] = {"timestamp": datetime.now(UTC).strftime("%Y-%m-%dT%H:%M:%S.%fZ"), "event": event}
        for k, v in kwargs.items():
            if k == "extra" and isinstance(v, dict):
                payload.update(v)
            else:
                payload[k] = v

        try:
            message = json.dumps(payload, default=str)
        except (TypeError, ValueError):
            self._logger.log(level, "%s %s", event, kwargs)
            return
        self._logger.log(level, message)

    def info(self, msg: str, *args, **kwargs):
        return self._logger.info(msg, *args, **kwargs)

    def warning(self, msg: str, *args, **kwargs):
        return self._logger.warning(msg, *args, **kwargs)

    def error(self, msg: str, *args, **kwargs):
        return self._logger.error(msg, *args, **kwargs)


logger = StructuredLogger()

__all__ = ["StructuredLogger", "logger"]
