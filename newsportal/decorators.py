import logging
import time
from functools import wraps

logger = logging.getLogger(__name__)

SLOW_CALL_SECONDS = 2.0


def timing_decorator(func):
    """Log how long `func` took, as a warning once it passes SLOW_CALL_SECONDS."""

    @wraps(func)
    def wrapper(*args, **kwargs):
        started = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed = time.perf_counter() - started
            log = logger.warning if elapsed > SLOW_CALL_SECONDS else logger.info
            log(f"{func.__module__}.{func.__name__} took {elapsed:.2f}s")

    return wrapper
