import functools
import logging

logger = logging.getLogger(__name__)


def error_boundary(fallback):
    """
    Decorator that turns any exception raised by the wrapped call into a
    fallback value.

    Args:
        fallback: A value, or a callable taking the exception and returning one

    Usage:
        @error_boundary(lambda exc: LookupFailed(str(exc)))
        def lookup(phone_number):
            ...
    """
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except Exception as e:
                logger.error(f"Error in {func.__name__}: {str(e)}", exc_info=True)
                return fallback(e) if callable(fallback) else fallback
        return wrapper
    return decorator
