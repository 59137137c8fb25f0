"""Structured logging for qortex_metrics: swappable formatter via config.

Architecture:
    LogFormatter   — HOW records are structured (structlog, stdlib JSON)
    LogDestination — WHERE output goes (stderr by default)

    setup_logging(config) asks the formatter for a logging.Formatter, hands
    it to the destination's handler and attaches that handler to the
    "qortex_metrics" logger. The root logger and structlog's global
    configuration are left alone: this is a library and the embedding
    application owns global logging.

Modules log through get_logger(__name__) with structlog-style kwargs:
    logger.debug("metrics.family.registered", name="jobs", kind="counter")
"""

from __future__ import annotations

import json
import logging
import sys
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from qortex_metrics.config import MetricsConfig

LIBRARY_LOGGER = "qortex_metrics"


# ---------------------------------------------------------------------------
# Protocols
# ---------------------------------------------------------------------------


@runtime_checkable
class LogFormatter(Protocol):
    """Strategy: how log records are structured.

    get_logger() must return a kwargs-style logger: library code calls
    ``logger.debug("event", key=value)``, which a bare logging.Logger
    rejects.
    """

    def setup(self, config: MetricsConfig) -> logging.Formatter: ...

    def get_logger(self, name: str, **kwargs: Any) -> Any: ...


@runtime_checkable
class LogDestination(Protocol):
    """Strategy: where formatted log output is shipped."""

    def create_handler(self, formatter: logging.Formatter) -> logging.Handler: ...

    def shutdown(self) -> None: ...


# ---------------------------------------------------------------------------
# Formatters
# ---------------------------------------------------------------------------


class StructlogFormatter:
    """structlog processor pipeline bridged onto stdlib logging.

    The pipeline is bound to each logger with structlog.wrap_logger;
    structlog's global configuration belongs to the host application and
    is never touched.
    """

    def __init__(self) -> None:
        self._processors: list[Any] = []

    def setup(self, config: MetricsConfig) -> logging.Formatter:
        import structlog

        if config.log_format == "console":
            renderer: structlog.types.Processor = structlog.dev.ConsoleRenderer()
        else:
            renderer = structlog.processors.JSONRenderer()

        timestamper = structlog.processors.TimeStamper(fmt="iso")
        self._processors = [
            structlog.stdlib.filter_by_level,
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.processors.add_log_level,
            timestamper,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ]

        return structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
            # records from plain stdlib loggers under qortex_metrics
            foreign_pre_chain=[
                structlog.stdlib.add_logger_name,
                structlog.processors.add_log_level,
                timestamper,
            ],
        )

    def get_logger(self, name: str, **kwargs: Any) -> Any:
        import structlog

        return structlog.wrap_logger(
            logging.getLogger(name),
            processors=self._processors,
            wrapper_class=structlog.stdlib.BoundLogger,
            context_class=dict,
            **kwargs,
        )


class StdlibFormatter:
    """Plain stdlib logging with JSON lines. No structlog at runtime."""

    def setup(self, config: MetricsConfig) -> logging.Formatter:
        if config.log_format == "console":
            return logging.Formatter(
                "%(asctime)s %(levelname)-8s %(name)s: %(message)s",
                datefmt="%Y-%m-%dT%H:%M:%S",
            )
        return _StdlibJsonFormatter()

    def get_logger(self, name: str, **kwargs: Any) -> Any:
        return _KwargsLogger(logging.getLogger(name), kwargs)


class _StdlibJsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        d: dict[str, Any] = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%SZ"),
            "level": record.levelname.lower(),
            "logger": record.name,
            "event": record.getMessage(),
        }
        d.update(getattr(record, "fields", {}))
        if record.exc_info and record.exc_info[1]:
            d["exception"] = self.formatException(record.exc_info)
        return json.dumps(d, default=str)


class _KwargsLogger:
    """Gives a stdlib logger the ``logger.info("event", key=value)`` API.

    Keyword fields ride on the record as ``record.fields`` so the JSON
    formatter can emit them; other formatters just see the event name.
    """

    def __init__(self, logger: logging.Logger, bound: dict[str, Any] | None = None) -> None:
        self._logger = logger
        self._bound = bound or {}

    def bind(self, **kwargs: Any) -> _KwargsLogger:
        return _KwargsLogger(self._logger, {**self._bound, **kwargs})

    def _log(self, level: int, event: str, exc_info: Any = None, **kwargs: Any) -> None:
        if not self._logger.isEnabledFor(level):
            return
        self._logger.log(
            level, event, exc_info=exc_info, extra={"fields": {**self._bound, **kwargs}}
        )

    def debug(self, event: str, **kw: Any) -> None:
        self._log(logging.DEBUG, event, **kw)

    def info(self, event: str, **kw: Any) -> None:
        self._log(logging.INFO, event, **kw)

    def warning(self, event: str, **kw: Any) -> None:
        self._log(logging.WARNING, event, **kw)

    def error(self, event: str, **kw: Any) -> None:
        self._log(logging.ERROR, event, **kw)

    def exception(self, event: str, **kw: Any) -> None:
        self._log(logging.ERROR, event, exc_info=True, **kw)


# ---------------------------------------------------------------------------
# Destinations
# ---------------------------------------------------------------------------


class StderrDestination:
    def create_handler(self, formatter: logging.Formatter) -> logging.Handler:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(formatter)
        return handler

    def shutdown(self) -> None:
        pass


# ---------------------------------------------------------------------------
# Registries
# ---------------------------------------------------------------------------

_FORMATTERS: dict[str, type] = {
    "structlog": StructlogFormatter,
    "stdlib": StdlibFormatter,
}

_DESTINATIONS: dict[str, type] = {
    "stderr": StderrDestination,
}


def register_formatter(name: str, cls: type) -> None:
    """Register a custom log formatter. Call before configure()."""
    _FORMATTERS[name] = cls


def register_destination(name: str, cls: type) -> None:
    """Register a custom log destination. Call before configure()."""
    _DESTINATIONS[name] = cls


# ---------------------------------------------------------------------------
# Module state
# ---------------------------------------------------------------------------

_active_formatter: LogFormatter | None = None
_active_destination: LogDestination | None = None
_active_handler: logging.Handler | None = None


def setup_logging(config: MetricsConfig, destination: str = "stderr") -> None:
    """Compose formatter x destination and attach to the library logger."""
    global _active_formatter, _active_destination, _active_handler

    formatter_cls = _FORMATTERS.get(config.log_formatter)
    if formatter_cls is None:
        raise ValueError(
            f"Unknown log formatter: {config.log_formatter!r}. "
            f"Available: {list(_FORMATTERS)}. "
            f"Register custom formatters with register_formatter()."
        )
    dest_cls = _DESTINATIONS.get(destination)
    if dest_cls is None:
        raise ValueError(
            f"Unknown log destination: {destination!r}. Available: {list(_DESTINATIONS)}."
        )

    formatter = formatter_cls()
    dest = dest_cls()
    handler = dest.create_handler(formatter.setup(config))

    lib_logger = logging.getLogger(LIBRARY_LOGGER)
    if _active_handler is not None:
        lib_logger.removeHandler(_active_handler)
    lib_logger.addHandler(handler)
    lib_logger.setLevel(getattr(logging, config.log_level.upper(), logging.INFO))

    _active_formatter = formatter
    _active_destination = dest
    _active_handler = handler


def get_logger(name: str = LIBRARY_LOGGER, **kwargs: Any) -> Any:
    """Get a kwargs-style logger from the active formatter.

    Before setup_logging() runs this wraps stdlib logging, so library code
    can log with structured kwargs whether or not the app configured us.
    """
    if _active_formatter is not None:
        return _active_formatter.get_logger(name, **kwargs)
    return _KwargsLogger(logging.getLogger(name), kwargs)


def shutdown_logging() -> None:
    """Detach the library handler and flush the destination."""
    global _active_formatter, _active_destination, _active_handler

    if _active_handler is not None:
        logging.getLogger(LIBRARY_LOGGER).removeHandler(_active_handler)
    if _active_destination is not None:
        _active_destination.shutdown()
    _active_formatter = None
    _active_destination = None
    _active_handler = None
