import logging
import sys
import contextvars
from typing import Optional

# Context variable carrying the name of the type currently being generated
_TYPE_NAME: contextvars.ContextVar[str] = contextvars.ContextVar("type_name", default="-")


class _TypeNameFilter(logging.Filter):
    """Logging filter that injects the type under generation from contextvars into the record."""

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        record.type_name = _TYPE_NAME.get()
        return True


def _build_formatter() -> logging.Formatter:
    return logging.Formatter(
        fmt="%(asctime)s | %(levelname)-8s | %(name)s | type=%(type_name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def configure_root_logger(level: str = "INFO") -> None:
    """
    Configure the root handler and the expectkit logger.

    The root handler stays at INFO; only the ``expectkit`` namespace follows
    the requested level.

    Args:
        level: Log level for expectkit logs (DEBUG, INFO, WARNING, ERROR).

    Safe to call multiple times; it will not duplicate handlers (idempotent).
    """
    root = logging.getLogger()

    for h in root.handlers:
        if isinstance(h, logging.StreamHandler) and any(isinstance(f, _TypeNameFilter) for f in h.filters):
            # Already configured; just update expectkit logger level
            logging.getLogger("expectkit").setLevel(getattr(logging, level.upper(), logging.INFO))
            return

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(_build_formatter())
    handler.addFilter(_TypeNameFilter())
    handler.setLevel(logging.DEBUG)
    root.addHandler(handler)
    if root.level == logging.NOTSET or root.level > logging.INFO:
        root.setLevel(logging.INFO)

    logging.getLogger("expectkit").setLevel(getattr(logging, level.upper(), logging.INFO))


def get_logger(name: str = "expectkit") -> logging.Logger:
    """
    Get a module-specific logger under the expectkit namespace.

    Handlers are not installed here: importing expectkit must not touch the
    host application's logging setup. Call ``configure_root_logger`` for that.
    """
    return logging.getLogger(name)


def push_type_name(type_name: Optional[str]) -> Optional[contextvars.Token]:
    """Set the type under generation in context and return a token for later reset."""
    if not type_name:
        return None
    return _TYPE_NAME.set(type_name)


def reset_type_name(token: Optional[contextvars.Token]) -> None:
    """Reset the type name context using the provided token (if any)."""
    if token is None:
        return
    _TYPE_NAME.reset(token)


def current_type_name() -> str:
    return _TYPE_NAME.get()
