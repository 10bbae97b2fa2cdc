# careerspage/core/retry.py

import logging

from sqlalchemy.exc import OperationalError
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

logger = logging.getLogger(__name__)

DB_READ_ATTEMPTS = 3


# Retries an idempotent database read on connection-level failures.
db_read_retry = retry(
    stop=stop_after_attempt(DB_READ_ATTEMPTS),
    wait=wait_exponential(multiplier=0.2, min=0.2, max=2),
    retry=retry_if_exception_type(OperationalError),
    before_sleep=before_sleep_log(logger, logging.WARNING),
    reraise=True,
)


def gateway_retrying(attempts: int, retry_on: tuple[type[BaseException], ...]) -> AsyncRetrying:
    """Async retry policy for calls to an external gateway."""
    return AsyncRetrying(
        stop=stop_after_attempt(max(attempts, 1)),
        wait=wait_exponential(multiplier=0.5, min=0.5, max=8),
        retry=retry_if_exception_type(retry_on),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
