"""
Centralized error handling for the job board data layer.

Read paths follow an explicit fail-open policy: datastore errors are logged
and converted to a neutral value (empty list, None, empty page) so public
listing endpoints keep serving. The policy is a per-repository flag, so the
same code can run fail-fast in tests and tooling.

Bulk writes never raise; they collect per-item errors with ErrorCollector
and report them alongside a best-effort success count.
"""

import logging
from functools import wraps
from typing import Any, Callable, List, Optional, TypeVar

T = TypeVar("T")


class ErrorCollector:
    """
    Collects per-item error messages during a bulk operation.
    """

    def __init__(self):
        self.errors: List[str] = []

    def add(self, message: str) -> None:
        self.errors.append(message)

    def add_exception(self, context: str, exception: BaseException) -> None:
        """Record an exception with the item/operation it belongs to."""
        self.errors.append(f"{context}: {exception}")

    def __len__(self) -> int:
        return len(self.errors)

    def __bool__(self) -> bool:
        return bool(self.errors)


def read_operation(operation_name: str, fallback: Callable[[], Any]):
    """
    Decorator for repository read methods applying the fail-open policy.

    The decorated method's instance must expose a ``fail_open`` attribute.
    When it is true, any exception is logged at ERROR level and
    ``fallback()`` is returned; otherwise the exception propagates.

    Args:
        operation_name: Name used in log messages (e.g., "findAll")
        fallback: Zero-argument factory for the neutral value (e.g., ``list``)

    Usage:
        @read_operation("getCategories", fallback=list)
        def get_categories(self) -> List[str]:
            ...
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(self, *args, **kwargs) -> T:
            try:
                return func(self, *args, **kwargs)
            except Exception as e:
                if not getattr(self, "fail_open", True):
                    raise
                logger = logging.getLogger(func.__module__)
                logger.error(f"[MongoDB] {operation_name} error: {e}", exc_info=True)
                return fallback()

        return wrapper

    return decorator


def safe_execute(
    func: Callable[..., T],
    *args,
    operation_name: str = "operation",
    logger: Optional[logging.Logger] = None,
    fallback: T = None,
    critical: bool = False,
    **kwargs,
) -> T:
    """
    Execute a function safely with error handling and logging.

    Used for best-effort writes (view counters) whose failure must never
    surface to the caller, regardless of the read policy.

    Args:
        func: Function to execute
        *args: Positional arguments for func
        operation_name: Name for logging
        logger: Logger instance (uses module logger if None)
        fallback: Value to return on failure
        critical: If True, log at ERROR level with traceback
        **kwargs: Keyword arguments for func

    Returns:
        Function result or fallback value on error
    """
    if logger is None:
        logger = logging.getLogger(__name__)

    try:
        return func(*args, **kwargs)
    except Exception as e:
        log_level = logging.ERROR if critical else logging.WARNING
        logger.log(
            log_level,
            f"[{operation_name}] Failed: {e}",
            exc_info=critical,
        )
        return fallback
