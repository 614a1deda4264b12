"""
Retry and error categorization utilities for the macro indicator pipeline.

This module provides:
- Error categorization (transient vs permanent)
- Retry logic with exponential backoff for network and S3 calls
"""

import functools
import random
import time
from enum import Enum
from typing import Callable, Optional, Tuple, Type

import requests
from botocore.exceptions import ClientError

from macro_pipeline.exceptions import (
    FetchTimeoutError,
    TooManyRedirectsError,
    TransientError,
)
from macro_pipeline.logging_config import create_logger

logger = create_logger(__name__)


class ErrorCategory(str, Enum):
    """Categories of errors for handling strategy."""
    TRANSIENT = "transient"  # May succeed on retry
    PERMANENT = "permanent"  # Will not resolve with retry
    UNKNOWN = "unknown"


TRANSIENT_HTTP_STATUSES = {408, 429, 500, 502, 503, 504}

TRANSIENT_AWS_CODES = {
    "RequestTimeout",
    "ThrottlingException",
    "TooManyRequestsException",
    "ServiceUnavailable",
    "InternalError",
    "SlowDown",
    "RequestLimitExceeded",
}

PERMANENT_AWS_CODES = {
    "AccessDenied",
    "InvalidAccessKeyId",
    "SignatureDoesNotMatch",
    "NoSuchBucket",
    "NoSuchKey",
    "InvalidParameter",
}


def categorize_error(exception: Exception) -> ErrorCategory:
    """Categorize an error as transient or permanent.

    Args:
        exception: The exception to categorize

    Returns:
        ErrorCategory indicating if error is transient or permanent
    """
    # The wall-clock budget and redirect cap are hard limits
    if isinstance(exception, (FetchTimeoutError, TooManyRedirectsError)):
        return ErrorCategory.PERMANENT

    if isinstance(exception, TransientError):
        return ErrorCategory.TRANSIENT

    if isinstance(exception, requests.HTTPError):
        response = exception.response
        if response is not None and response.status_code in TRANSIENT_HTTP_STATUSES:
            return ErrorCategory.TRANSIENT
        return ErrorCategory.PERMANENT

    if isinstance(exception, (requests.ConnectionError, requests.Timeout)):
        return ErrorCategory.TRANSIENT

    if isinstance(exception, ClientError):
        error_code = exception.response.get("Error", {}).get("Code", "")
        if error_code in TRANSIENT_AWS_CODES:
            return ErrorCategory.TRANSIENT
        if error_code in PERMANENT_AWS_CODES:
            return ErrorCategory.PERMANENT

    if isinstance(exception, (FileNotFoundError, PermissionError)):
        return ErrorCategory.PERMANENT

    if isinstance(exception, (ConnectionError, TimeoutError)):
        return ErrorCategory.TRANSIENT

    return ErrorCategory.UNKNOWN


def retryable_operation(
    max_attempts: int = 3,
    initial_delay: float = 1.0,
    max_delay: float = 60.0,
    exponential_base: float = 2.0,
    jitter: bool = True,
    retry_on: Optional[Tuple[Type[Exception], ...]] = None,
) -> Callable:
    """Decorator for retrying operations with exponential backoff.

    Permanent errors (see ``categorize_error``) are raised immediately.

    Args:
        max_attempts: Maximum number of attempts
        initial_delay: Initial delay between retries in seconds
        max_delay: Maximum delay between retries in seconds
        exponential_base: Base for exponential backoff calculation
        jitter: Whether to add random jitter to delays
        retry_on: Tuple of exception types to retry on (None = all)

    Returns:
        Decorated function with retry logic

    Example:
        @retryable_operation(max_attempts=5, initial_delay=2.0)
        def fetch_page(url):
            ...
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            attempt = 0

            while True:
                attempt += 1

                try:
                    return func(*args, **kwargs)

                except Exception as e:
                    if retry_on and not isinstance(e, retry_on):
                        raise

                    error_category = categorize_error(e)

                    if error_category == ErrorCategory.PERMANENT:
                        logger.error(
                            f"Permanent error in {func.__name__}, "
                            f"not retrying: {e}"
                        )
                        raise

                    if attempt >= max_attempts:
                        logger.error(
                            f"All {max_attempts} attempts failed for "
                            f"{func.__name__}: {e}"
                        )
                        raise

                    current_delay = min(
                        initial_delay * (exponential_base ** (attempt - 1)),
                        max_delay,
                    )
                    if jitter:
                        current_delay *= 0.5 + random.random() * 0.5

                    logger.warning(
                        f"Attempt {attempt}/{max_attempts} failed for "
                        f"{func.__name__}: {e}. "
                        f"Retrying in {current_delay:.2f}s... "
                        f"(Error category: {error_category.value})"
                    )

                    time.sleep(current_delay)

        return wrapper

    return decorator
