"""Logging utilities."""

import asyncio
import logging
import sys
from functools import wraps
from typing import Any, Callable, TypeVar

import structlog

F = TypeVar("F", bound=Callable[..., Any])

_configured = False


def configure_logging(level: str | None = None, fmt: str | None = None) -> None:
    """Configure structlog rendering for the package.

    Args:
        level: Log level name (defaults to settings.log_level)
        fmt: "console" or "json" (defaults to settings.log_format)
    """
    global _configured

    from studyguide_core.settings import settings

    level_name = (level or settings.log_level).upper()
    log_level = getattr(logging, level_name, logging.INFO)
    renderer: Any
    if (fmt or settings.log_format) == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=False,
    )
    _configured = True


def get_logger(name: str, **initial_values: Any) -> Any:
    """Get a structlog logger bound to a module name.

    Args:
        name: Logger name (typically __name__)
        **initial_values: Extra context bound to every event

    Returns:
        Bound structlog logger
    """
    if not _configured:
        configure_logging()
    return structlog.get_logger(name).bind(logger=name, **initial_values)


def log_exceptions(logger: Any) -> Callable[[F], F]:
    """Decorator to log exceptions from a function.

    Args:
        logger: Logger to use for exception logging

    Returns:
        Decorated function that logs exceptions before re-raising
    """

    def decorator(func: F) -> F:
        @wraps(func)
        def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return func(*args, **kwargs)
            except Exception:
                logger.exception("unhandled_exception", function=func.__name__)
                raise

        @wraps(func)
        async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return await func(*args, **kwargs)
            except Exception:
                logger.exception("unhandled_exception", function=func.__name__)
                raise

        if asyncio.iscoroutinefunction(func):
            return async_wrapper  # type: ignore
        return sync_wrapper  # type: ignore

    return decorator
