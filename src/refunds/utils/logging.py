"""Structured logging utilities with correlation ID support.

Provides:
- Correlation ID context management for request tracing
- Structured logging formatter for consistent log output
- PII redaction and the structured refund event logger

Usage:
    from refunds.utils.logging import RefundEventLogger, get_logger, set_correlation_id

    # In middleware/request handler:
    set_correlation_id(request.headers.get("X-Correlation-ID"))

    # In service code:
    events = RefundEventLogger(service="process-refund")
    events.log_event("refund_processed_successfully", {"refundId": "re_123"})
"""

import datetime as dt
import json
import logging
import uuid
from collections.abc import Callable, Mapping
from contextvars import ContextVar
from typing import Any

import httpx

from refunds.models.enums import EventSeverity

# Context variable for correlation ID - thread-safe and async-safe
_correlation_id: ContextVar[str | None] = ContextVar("correlation_id", default=None)

SEVERITY_LEVELS: dict[EventSeverity, int] = {
    EventSeverity.INFO: logging.INFO,
    EventSeverity.WARNING: logging.WARNING,
    EventSeverity.ERROR: logging.ERROR,
}

REDACTED_EMAIL_KEYS = ("customerEmail",)
REDACTED_REFERENCE_KEYS = ("paymentReferenceId", "paymentIntentId")


def generate_correlation_id() -> str:
    """Generate a new correlation ID.

    Returns:
        UUID-based correlation ID string
    """
    return str(uuid.uuid4())


def set_correlation_id(correlation_id: str | None = None) -> str:
    """Set the correlation ID for the current request context.

    Args:
        correlation_id: Optional existing correlation ID. If None, generates new one.

    Returns:
        The correlation ID that was set
    """
    cid = correlation_id or generate_correlation_id()
    _correlation_id.set(cid)
    return cid


def get_correlation_id() -> str | None:
    """Get the current correlation ID."""
    return _correlation_id.get()


def clear_correlation_id() -> None:
    """Clear the correlation ID context."""
    _correlation_id.set(None)


class CorrelationIdFilter(logging.Filter):
    """Logging filter that adds correlation_id to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = get_correlation_id() or "no-correlation-id"
        return True


class StructuredFormatter(logging.Formatter):
    """Formatter for structured log output with correlation ID."""

    def format(self, record: logging.LogRecord) -> str:
        if not hasattr(record, "correlation_id"):
            record.correlation_id = get_correlation_id() or "no-correlation-id"

        base = super().format(record)

        # Correlation ID prefix for easy grep/filtering
        return f"[{record.correlation_id}] {base}"


def get_logger(name: str) -> logging.Logger:
    """Get a logger with correlation ID support.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    if not any(isinstance(f, CorrelationIdFilter) for f in logger.filters):
        logger.addFilter(CorrelationIdFilter())

    return logger


def redact_email(email: str) -> str:
    """Mask an email address, keeping two leading characters and the domain.

    ``jane.doe@example.com`` becomes ``ja***@example.com``. Values without an
    ``@`` are fully masked after the first two characters.
    """
    at = email.rfind("@")
    if at < 0:
        return f"{email[:2]}***"
    # Short local parts keep only what precedes the "@".
    local_keep = email[:2] if at >= 2 else email[:at]
    return f"{local_keep}***{email[at:]}"


def redact_reference(reference: str) -> str:
    """Mask a payment reference down to its last four characters."""
    return f"***{reference[-4:]}"


def redact_event_data(data: Mapping[str, Any]) -> dict[str, Any]:
    """Return a copy of event data with PII masked.

    Only customer email and payment reference fields are redacted; every
    other field passes through unchanged.
    """
    redacted = dict(data)
    for key in REDACTED_EMAIL_KEYS:
        value = redacted.get(key)
        if isinstance(value, str) and value:
            redacted[key] = redact_email(value)
    for key in REDACTED_REFERENCE_KEYS:
        value = redacted.get(key)
        if isinstance(value, str) and value:
            redacted[key] = redact_reference(value)
    return redacted


def post_to_monitoring_webhook(url: str, timeout: float) -> Callable[[dict[str, Any]], None]:
    """Build a sink that forwards event records to a monitoring webhook.

    Delivery failures are logged and swallowed; monitoring must never affect
    the request being processed.
    """
    sink_logger = get_logger(f"{__name__}.monitoring")

    def _send(entry: dict[str, Any]) -> None:
        try:
            response = httpx.post(url, json=entry, timeout=timeout)
            response.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            sink_logger.warning("Monitoring webhook failed: %s", e)

    return _send


class RefundEventLogger:
    """Emits one structured, redacted record per significant refund step.

    Each record is written as a JSON line to the standard logging system at
    the level matching its severity, and optionally handed to a sink (the
    production monitoring webhook).
    """

    def __init__(
        self,
        service: str = "process-refund",
        *,
        logger: logging.Logger | None = None,
        sink: Callable[[dict[str, Any]], None] | None = None,
        clock: Callable[[], dt.datetime] | None = None,
    ) -> None:
        self.service = service
        self._logger = logger or get_logger("refunds.events")
        self._sink = sink
        self._clock = clock or (lambda: dt.datetime.now(dt.UTC))

    def build_entry(
        self,
        event_type: str,
        data: Mapping[str, Any],
        severity: EventSeverity | str = EventSeverity.INFO,
    ) -> dict[str, Any]:
        """Build the structured record for an event without emitting it."""
        severity = EventSeverity(severity)
        return {
            "timestamp": self._clock().isoformat(),
            "service": self.service,
            "eventType": event_type,
            "severity": severity.value,
            "correlationId": get_correlation_id(),
            "data": redact_event_data(data),
        }

    def log_event(
        self,
        event_type: str,
        data: Mapping[str, Any],
        severity: EventSeverity | str = EventSeverity.INFO,
    ) -> dict[str, Any]:
        """Emit a structured event.

        Args:
            event_type: Event name (e.g., "refund_processed_successfully")
            data: Event payload; customer email and payment references are redacted
            severity: info, warning or error

        Returns:
            The record as emitted
        """
        entry = self.build_entry(event_type, data, severity)
        level = SEVERITY_LEVELS[EventSeverity(entry["severity"])]
        self._logger.log(level, json.dumps(entry, default=str), extra={"event_type": event_type})

        if self._sink is not None:
            self._sink(entry)

        return entry
