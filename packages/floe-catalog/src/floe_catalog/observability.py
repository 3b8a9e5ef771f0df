"""Structured logging and OpenTelemetry spans for floe-catalog.

This module provides:
- configure_logging: structlog setup for applications embedding the catalog
- redact_secrets / add_trace_context: structlog processors used by it
- span / catalog_operation: spans with timed started/completed/failed events

Catalog instances accept their own tracer and logger; the helpers here fall
back to the module defaults when none is given.
"""

from __future__ import annotations

import logging
import sys
import time
from collections.abc import Iterator, Mapping, MutableMapping
from contextlib import contextmanager
from typing import IO, TYPE_CHECKING, Any

import structlog
from opentelemetry import trace
from opentelemetry.trace import SpanKind, Status, StatusCode

from floe_catalog.errors import FloeCatalogError

if TYPE_CHECKING:
    from opentelemetry.trace import Span, Tracer
    from structlog.stdlib import BoundLogger

_logger: BoundLogger | None = None
_tracer: Tracer | None = None
_handler: logging.Handler | None = None

TRACER_NAME = "floe.catalog"

REDACTED = "**********"
SENSITIVE_KEY_MARKERS = ("credential", "token", "secret", "password")


def get_logger() -> BoundLogger:
    """Get the module logger, creating it if necessary."""
    global _logger
    if _logger is None:
        _logger = structlog.get_logger(TRACER_NAME)
    assert _logger is not None  # Type narrowing for mypy
    return _logger


def get_tracer() -> Tracer:
    """Get the OpenTelemetry tracer for floe-catalog."""
    global _tracer
    if _tracer is None:
        _tracer = trace.get_tracer(TRACER_NAME)
    return _tracer


def _is_sensitive(key: str) -> bool:
    lowered = key.lower()
    return any(marker in lowered for marker in SENSITIVE_KEY_MARKERS)


def _redact(values: Mapping[str, Any]) -> dict[str, Any]:
    redacted: dict[str, Any] = {}
    for key, value in values.items():
        if _is_sensitive(str(key)) and value is not None:
            redacted[key] = REDACTED
        elif isinstance(value, Mapping):
            redacted[key] = _redact(value)
        else:
            redacted[key] = value
    return redacted


def redact_secrets(
    _logger: Any, _method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """Mask credential-like values in a log event.

    Keys containing credential, token, secret or password are replaced,
    including inside nested mappings such as logged catalog properties.

    Example:
        >>> redact_secrets(None, "info", {"event": "x", "token": "abc"})
        {'event': 'x', 'token': '**********'}
    """
    for key, value in list(event_dict.items()):
        if key == "event":
            continue
        if _is_sensitive(key) and value is not None:
            event_dict[key] = REDACTED
        elif isinstance(value, Mapping):
            event_dict[key] = _redact(value)
    return event_dict


def add_trace_context(
    _logger: Any, _method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """Add trace_id and span_id of the current span, when one is recording."""
    span_context = trace.get_current_span().get_span_context()
    if span_context.is_valid:
        event_dict["trace_id"] = format(span_context.trace_id, "032x")
        event_dict["span_id"] = format(span_context.span_id, "016x")
    return event_dict


def configure_logging(
    *,
    log_level: str = "INFO",
    json_format: bool = True,
    add_timestamp: bool = True,
    stream: IO[str] | None = None,
) -> None:
    """Configure structured logging for floe-catalog.

    Events go through the ``floe.catalog`` stdlib logger, which gets its own
    handler on ``stream`` (stderr by default). Calling this again replaces
    the previous handler.

    Args:
        log_level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_format: If True, output JSON format. If False, output human-readable.
        add_timestamp: If True, add ISO timestamp to log entries.
        stream: Output stream for the handler.

    Raises:
        ValueError: If log_level is not a known level name.

    Example:
        >>> configure_logging(log_level="DEBUG", json_format=False)
    """
    global _handler

    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        msg = f"Unknown log level: {log_level}"
        raise ValueError(msg)

    processors: list[Any] = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        add_trace_context,
        redact_secrets,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if add_timestamp:
        processors.insert(0, structlog.processors.TimeStamper(fmt="iso"))

    if json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    stdlib_logger = logging.getLogger(TRACER_NAME)
    if _handler is not None:
        stdlib_logger.removeHandler(_handler)
    _handler = logging.StreamHandler(stream or sys.stderr)
    _handler.setFormatter(logging.Formatter("%(message)s"))
    stdlib_logger.addHandler(_handler)
    stdlib_logger.setLevel(level)
    stdlib_logger.propagate = False


def _elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000, 3)


@contextmanager
def span(
    name: str,
    *,
    kind: SpanKind = SpanKind.INTERNAL,
    attributes: dict[str, Any] | None = None,
    log_start: bool = True,
    log_end: bool = True,
    tracer: Tracer | None = None,
    logger: BoundLogger | None = None,
) -> Iterator[Span]:
    """Create an OpenTelemetry span with structured logging.

    The completed and failed events carry ``duration_ms``. A failing
    FloeCatalogError also sets the ``catalog.error_kind`` span attribute.

    Args:
        name: Span name (e.g., "catalog.create_namespace").
        kind: Span kind (INTERNAL, CLIENT, SERVER, PRODUCER, CONSUMER).
        attributes: Optional span attributes.
        log_start: If True, log span start.
        log_end: If True, log span end.
        tracer: Tracer to use instead of the module tracer.
        logger: Logger to use instead of the module logger.

    Yields:
        OpenTelemetry Span instance.
    """
    tracer = tracer or get_tracer()
    logger = logger or get_logger()
    attrs = attributes or {}

    with tracer.start_as_current_span(name, kind=kind, attributes=attrs) as s:
        if log_start:
            logger.debug(f"{name}_started", **attrs)
        start = time.perf_counter()
        try:
            yield s
        except Exception as exc:
            s.set_status(Status(StatusCode.ERROR, str(exc)))
            s.record_exception(exc)
            error_attrs: dict[str, Any] = {}
            if isinstance(exc, FloeCatalogError):
                s.set_attribute("catalog.error_kind", exc.kind.value)
                error_attrs["error_kind"] = exc.kind.value
            logger.error(
                f"{name}_failed",
                error=str(exc),
                duration_ms=_elapsed_ms(start),
                **error_attrs,
                **attrs,
            )
            raise
        s.set_status(Status(StatusCode.OK))
        if log_end:
            logger.debug(f"{name}_completed", duration_ms=_elapsed_ms(start), **attrs)


@contextmanager
def catalog_operation(
    operation: str,
    *,
    catalog_type: str | None = None,
    catalog_name: str | None = None,
    namespace: str | None = None,
    table: str | None = None,
    tracer: Tracer | None = None,
    logger: BoundLogger | None = None,
) -> Iterator[Span]:
    """Create a CLIENT span for a catalog operation with standard attributes.

    Args:
        operation: Operation name (e.g., "list_namespaces", "load_table").
        catalog_type: Backend type (rest, hive, glue, dynamodb, sql).
        catalog_name: Catalog instance name.
        namespace: Namespace being operated on.
        table: Table being operated on.
        tracer: Tracer to use instead of the module tracer.
        logger: Logger to use instead of the module logger.

    Yields:
        OpenTelemetry Span instance.

    Example:
        >>> with catalog_operation("load_table", catalog_type="rest", table="bronze.customers"):
        ...     ...
    """
    attrs: dict[str, Any] = {"catalog.operation": operation}
    if catalog_type:
        attrs["catalog.type"] = catalog_type
    if catalog_name:
        attrs["catalog.name"] = catalog_name
    if namespace:
        attrs["catalog.namespace"] = namespace
    if table:
        attrs["catalog.table"] = table

    with span(
        f"catalog.{operation}",
        kind=SpanKind.CLIENT,
        attributes=attrs,
        tracer=tracer,
        logger=logger,
    ) as s:
        yield s
