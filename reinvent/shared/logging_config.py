# reinvent/shared/logging_config.py
import logging
import sys
from typing import Optional

import structlog
from opentelemetry import trace

from reinvent.shared.config import Settings, settings as default_settings


def add_open_telemetry_spans(_, __, event_dict):
    """
    Processor to inject the current TraceID and SpanID into the log entry,
    so a provider failure line can be matched to its request trace.
    """
    span = trace.get_current_span()
    if not span.is_recording():
        event_dict["trace_id"] = None
        event_dict["span_id"] = None
        return event_dict

    ctx = span.get_span_context()
    event_dict["trace_id"] = format(ctx.trace_id, "032x")
    event_dict["span_id"] = format(ctx.span_id, "016x")
    return event_dict


def configure_logging(config: Optional[Settings] = None) -> None:
    """
    Configures structlog and the standard logging library to emit
    structured JSON logs (Production) or colored text logs (Development).
    """
    config = config or default_settings

    processors = [
        structlog.contextvars.merge_contextvars,
        add_open_telemetry_spans,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if config.LOG_FORMAT == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # uvicorn / httpx / SDK loggers share stdout with structlog output
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=config.LOG_LEVEL.upper(),
    )
