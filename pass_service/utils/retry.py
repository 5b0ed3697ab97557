"""Retry helper with a fixed delay between attempts."""
import logging
import time

logger = logging.getLogger(__name__)


def retry_call(func, max_attempts=5, delay=1.0, exceptions=(Exception,), sleep=time.sleep):
    """
    Call `func` until it succeeds or `max_attempts` calls have failed.

    Args:
        func: Zero-argument callable
        max_attempts: Total number of calls, including the first
        delay: Seconds to wait between attempts
        exceptions: Exceptions that trigger another attempt
        sleep: Injected for tests

    Returns:
        Whatever `func` returns

    Raises:
        The last exception raised by `func` once attempts are exhausted
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    for attempt in range(1, max_attempts + 1):
        try:
            return func()
        except exceptions as e:
            if attempt == max_attempts:
                raise
            logger.warning(
                "Attempt %d/%d failed (%s). Retrying in %.1fs...",
                attempt, max_attempts, e, delay
            )
            sleep(delay)
