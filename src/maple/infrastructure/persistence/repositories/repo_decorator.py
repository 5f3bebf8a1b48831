"""Repository decorator for standardizing DB operations.

This module provides a decorator for store methods that handles common
database concerns:
- Structured logging with context and timing information
- Error classification with an appropriate log level per error family
- Consistent performance monitoring and debugging support

Errors are always re-raised unchanged; the decorator only observes.
"""

import asyncio
from collections.abc import Callable
import functools
import time
from typing import Any, ParamSpec, TypeVar

from sqlalchemy.exc import (
    DatabaseError,
    IntegrityError,
    MultipleResultsFound,
    NoResultFound,
    OperationalError,
    SQLAlchemyError,
    TimeoutError,
)

from maple.config import get_logger

# Initialize logger
logger = get_logger(__name__)

P = ParamSpec("P")
T = TypeVar("T")

# Checked in order: most specific first
_ERROR_LEVELS: tuple[tuple[type[BaseException], str, str], ...] = (
    (NoResultFound, "DEBUG", "DB record not found"),
    (MultipleResultsFound, "WARNING", "Multiple results found"),
    (IntegrityError, "WARNING", "DB integrity error"),
    (TimeoutError, "ERROR", "DB timeout error"),
    (OperationalError, "ERROR", "DB operational error"),
    (DatabaseError, "ERROR", "DB error"),
    (SQLAlchemyError, "ERROR", "SQLAlchemy error"),
)


def db_operation(operation_name: str | None = None):
    """Decorate store methods with consistent logging and error handling.

    Works on both plain and ``async def`` methods.

    Args:
        operation_name: Optional name for the operation (defaults to function name)

    Returns:
        A decorator function that wraps the store method

    Example:
        @db_operation("find_by_id")
        def find_by_id(self, kind: EntityKind, record_id: int) -> Any | None:
            ...
    """

    def decorator(func: Callable[P, T]) -> Callable[P, T]:
        """Wrap a store method with logging, timing and error handling."""
        func_name = operation_name or func.__name__

        if asyncio.iscoroutinefunction(func):

            @functools.wraps(func)
            async def async_wrapper(*args: P.args, **kwargs: P.kwargs) -> Any:
                start_time = time.perf_counter()
                repo_name, context = _describe_call(args, kwargs)
                _log_start(repo_name, func_name, context)
                try:
                    result = await func(*args, **kwargs)
                except Exception as e:
                    _log_failure(e, repo_name, func_name, start_time, context)
                    raise
                _log_success(repo_name, func_name, start_time, context)
                return result

            return async_wrapper  # type: ignore[return-value]

        @functools.wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            start_time = time.perf_counter()
            repo_name, context = _describe_call(args, kwargs)
            _log_start(repo_name, func_name, context)
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                _log_failure(e, repo_name, func_name, start_time, context)
                raise
            _log_success(repo_name, func_name, start_time, context)
            return result

        return wrapper

    return decorator


def _describe_call(
    args: tuple[Any, ...], kwargs: dict[str, Any]
) -> tuple[str, dict[str, Any]]:
    # Repository name comes from the first argument (self)
    repo_name = args[0].__class__.__name__ if args else "Repository"
    context = _build_log_context(kwargs)
    # Entity kind is conventionally the first positional argument after self
    if len(args) > 1 and isinstance(args[1], str):
        context.setdefault("kind", str(args[1]))
    return repo_name, context


def _log_start(repo_name: str, func_name: str, context: dict[str, Any]) -> None:
    logger.trace(
        "DB operation starting: {repo}.{operation}",
        repo=repo_name,
        operation=func_name,
        **context,
    )


def _log_success(
    repo_name: str, func_name: str, start_time: float, context: dict[str, Any]
) -> None:
    logger.trace(
        "DB operation completed: {repo}.{operation}",
        repo=repo_name,
        operation=func_name,
        exec_time_ms=(time.perf_counter() - start_time) * 1000,
        **context,
    )


def _log_failure(
    error: Exception,
    repo_name: str,
    func_name: str,
    start_time: float,
    context: dict[str, Any],
) -> None:
    exec_time = (time.perf_counter() - start_time) * 1000
    for error_type, level, label in _ERROR_LEVELS:
        if isinstance(error, error_type):
            logger.log(
                level,
                label + ": {repo}.{operation}",
                repo=repo_name,
                operation=func_name,
                error=str(error),
                exec_time_ms=exec_time,
                **context,
            )
            return

    # Handle unexpected errors
    logger.opt(exception=error).error(
        "Unhandled exception in {repo}.{operation}",
        repo=repo_name,
        operation=func_name,
        error=str(error),
        exec_time_ms=exec_time,
        **context,
    )


def _build_log_context(kwargs: dict[str, Any]) -> dict[str, Any]:
    """Build a context dictionary for logging from function kwargs.

    Args:
        kwargs: Function keyword arguments

    Returns:
        A dictionary with loggable values extracted from kwargs
    """
    # Extract ID parameters specifically
    id_params = {
        k: v
        for k, v in kwargs.items()
        if k.endswith("_id") and isinstance(v, int | str)
    }

    # Extract other simple values for logging context
    simple_params = {
        k: v
        for k, v in kwargs.items()
        if (
            not k.startswith("_")
            and isinstance(v, int | str | float | bool)
            and k not in id_params
            and k not in ("repo", "operation", "error", "exec_time_ms", "kind")
        )
    }

    # Combine contexts with IDs taking precedence
    return {**simple_params, **id_params}
