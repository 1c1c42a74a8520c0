from collections.abc import Callable
from functools import wraps
from typing import Any, ParamSpec, TypeVar

from loguru import logger

from src.domain.errors import OrderQueryError

P = ParamSpec("P")
R = TypeVar("R")


def log_errors(func: Callable[P, R]) -> Callable[P, R]:
    """Log and re-raise any exception raised by the decorated method.

    Expected read failures (``OrderQueryError`` subclasses) are logged as a
    single warning line; anything else is logged with its traceback.

    Usage::

        @log_errors
        def find_summaries(self, criteria: OrderSearchCriteria) -> list[OrderSummary]: ...
    """

    @wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        try:
            return func(*args, **kwargs)
        except OrderQueryError as exc:
            logger.warning(f"[{func.__qualname__}] {type(exc).__name__}: {exc}")
            raise
        except Exception as exc:
            logger.opt(exception=exc).error(
                f"[{func.__qualname__}] {type(exc).__name__}: {exc}"
            )
            raise

    return wrapper


def store_query(description: str) -> Callable[[Callable[..., R]], Callable[..., R]]:
    """Mark a store session method as one round trip to the store.

    The session must expose ``_before_query(description)``, which is called
    before the body runs. It counts the query and fails fast when the store
    is unavailable.
    """

    def decorator(func: Callable[..., R]) -> Callable[..., R]:
        @wraps(func)
        def wrapper(self: Any, *args: Any, **kwargs: Any) -> R:
            self._before_query(description)
            return func(self, *args, **kwargs)

        return wrapper

    return decorator
