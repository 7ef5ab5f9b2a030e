from typing import Callable
import functools
import logging


def log_exceptions(func: Callable) -> Callable:
    """
    Decorator that logs exceptions with full traceback and re-raises them.

    Example:
    >>> from motionio.tools import log_exceptions
    >>>
    >>> @log_exceptions
    ... def build_line(letter, *args):
    ...     ...

    What happens:
    - Exception is caught
    - Logged with traceback on the logger of the defining module
    - Re-raised unchanged
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except Exception as e:
            logger = logging.getLogger(func.__module__)
            logger.error(
                f"Exception in {func.__name__}: {e}",
                exc_info=True
            )
            raise

    return wrapper
