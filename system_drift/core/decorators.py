"""
Decorators for cross-cutting error handling at the record store boundary.
"""

import functools
import inspect
from typing import Any, Awaitable, Callable, Dict, ParamSpec, TypeVar

import structlog

from system_drift.core.exceptions import ServiceException, StoreUnavailableError

logger = structlog.get_logger(__name__)

P = ParamSpec("P")
R = TypeVar("R")


def store_error_handler(
    service_name: str,
    include_context: bool = True,
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    """
    Translate store failures into ``StoreUnavailableError``.

    Service exceptions raised inside the wrapped coroutine propagate
    unchanged; anything else (driver errors, connection resets, bugs in a
    store client) is logged with structured context and re-raised as a
    ``StoreUnavailableError`` chained to the original exception. No retry
    is attempted.

    :param service_name: Name of the component (e.g., "SQLAlchemyRecordStore")
    :param include_context: Whether to include call arguments in the error context

    :example:
        @store_error_handler("SQLAlchemyRecordStore")
        async def fetch_by_player(self, player_id: str) -> list[SessionRecord]:
            ...
    """

    def decorator(func: Callable[P, Awaitable[R]]) -> Callable[P, Awaitable[R]]:
        operation_name = func.__name__
        sig = inspect.signature(func)

        @functools.wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            try:
                return await func(*args, **kwargs)
            except ServiceException:
                raise
            except Exception as e:
                context: Dict[str, Any] = {}
                if include_context:
                    bound_args = sig.bind(*args, **kwargs)
                    for name, value in bound_args.arguments.items():
                        if name not in ["self", "db", "session"]:
                            context[name] = (
                                str(value)[:200] if value is not None else None
                            )

                logger.error(
                    "store_operation_failed",
                    service=service_name,
                    operation=operation_name,
                    error_type=e.__class__.__name__,
                    error_message=str(e),
                    **context,
                )
                raise StoreUnavailableError(
                    message=str(e) or e.__class__.__name__,
                    service=service_name,
                    operation=operation_name,
                    context=context,
                    original_error=e,
                ) from e

        return wrapper

    return decorator
