"""Support log ring buffer for policy failures.

Keeps the last WARN+ records (unhandled errors, invalid state escaping a view)
together with the request id and path, so an incident id in a 500 problem body
can be traced without external log aggregation.
"""

from __future__ import annotations

import collections
import logging
import time

from flask import g, has_request_context, request

LOG_BUFFER: collections.deque[dict] = collections.deque(maxlen=500)


class SupportLogHandler(logging.Handler):
    def emit(self, record: logging.LogRecord) -> None:  # type: ignore[override]
        if has_request_context():
            rid = getattr(g, "request_id", "-")
            path = request.path
        else:
            rid = "-"
            path = "-"
        LOG_BUFFER.append(
            {
                "ts": time.time(),
                "level": record.levelname,
                "logger": record.name,
                "msg": self.format(record),
                "request_id": rid,
                "incident_id": getattr(record, "incident_id", None),
                "path": path,
            }
        )


def install_support_log_handler(level: int = logging.WARNING) -> SupportLogHandler:
    root = logging.getLogger()
    # Avoid duplicate attachment when several apps are created in one process
    for h in root.handlers:
        if isinstance(h, SupportLogHandler):
            return h
    h = SupportLogHandler(level=level)
    h.setFormatter(logging.Formatter("%(message)s"))
    root.addHandler(h)
    return h


__all__ = ["LOG_BUFFER", "SupportLogHandler", "install_support_log_handler"]
