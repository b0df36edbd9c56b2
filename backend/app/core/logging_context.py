"""Request correlation id for tracing a booking attempt across modules.

A middleware in ``app.main`` stores the id for the current request and the
filter below copies it onto every log record, so formatters can include
``%(request_id)s``.
"""

import logging
import uuid
from contextvars import ContextVar

_request_id: ContextVar[str] = ContextVar("request_id", default="-")

REQUEST_ID_HEADER = "X-Request-ID"


def set_request_id(request_id: str | None = None) -> str:
    """Set the correlation id for the current async context and return it."""
    value = request_id or uuid.uuid4().hex[:12]
    _request_id.set(value)
    return value


class RequestIdFilter(logging.Filter):
    """Injects request_id into every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = _request_id.get()  # type: ignore[attr-defined]
        return True


def install_request_id_filter() -> None:
    """Attach the filter to the root handlers.

    Handler-level filters also see records propagated from third-party
    loggers, which would otherwise lack the ``request_id`` attribute.
    """
    for handler in logging.getLogger().handlers:
        if not any(isinstance(f, RequestIdFilter) for f in handler.filters):
            handler.addFilter(RequestIdFilter())
