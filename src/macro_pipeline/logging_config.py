"""
Console logging shared by the ingestion, registry and validation commands.

Every module obtains its logger through ``create_logger(__name__)`` so
output keeps the ``[LEVEL] [module] message`` layout across runs.
"""

import os
import sys
from typing import Dict, List, Optional, Union

import colorlog

from macro_pipeline.exceptions import (
    ConfigurationError,
    FetchError,
    IngestError,
    PersistenceError,
    RegistryError,
    S3OperationError,
)

DEFAULT_LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

LOG_FORMAT = (
    "%(log_color)s[%(levelname)s]%(reset)s "
    "%(blue)s[%(name)s]%(reset)s "
    "%(message)s"
)

LOG_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "red,bg_white",
}

# Most specific class first; the first isinstance match wins
TROUBLESHOOTING = [
    (FetchError, [
        "Check the dataset URL is reachable and returns a CSV",
        "Raise HTTP_TIMEOUT_SECONDS or MAX_REDIRECTS for slow mirrors",
    ]),
    (IngestError, [
        "Check the source file exists and carries the expected header row",
        "Re-run the registry setup if every row is reported as unmapped",
    ]),
    (PersistenceError, [
        "Stored rows for the source were left as they were before the run",
        "Verify the database path in DATABASE_URL is writable",
    ]),
    (RegistryError, [
        "Run `python -m macro_pipeline.registry all` to rebuild mappings",
    ]),
    (S3OperationError, [
        "Check AWS credentials, AWS_ROLE_ARN and S3_BUCKET_NAME",
    ]),
    (ConfigurationError, [
        "Check DATABASE_URL, TARGET and the S3 settings in the environment",
    ]),
]

DEFAULT_TROUBLESHOOTING = [
    "Verify the database path in DATABASE_URL",
    "Re-run with LOG_LEVEL=DEBUG for per-row detail",
]


def create_logger(
    name: Optional[str] = None,
    log_level: Union[int, str] = DEFAULT_LOG_LEVEL,
):
    """
    Create a color-coded console logger.

    :param name: Name of the logger (typically __name__)
    :param log_level: Logging level (default: LOG_LEVEL env or INFO)
    :return: Configured logger instance
    """
    logger = colorlog.getLogger(name or "macro_pipeline")
    logger.setLevel(log_level)
    logger.propagate = False

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = colorlog.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    handler.setFormatter(colorlog.ColoredFormatter(LOG_FORMAT, log_colors=LOG_COLORS))
    logger.addHandler(handler)

    return logger


def troubleshooting_hints(e: BaseException) -> List[str]:
    for error_type, hints in TROUBLESHOOTING:
        if isinstance(e, error_type):
            return hints
    return DEFAULT_TROUBLESHOOTING


def log_exception(logger, e, context: Optional[Dict] = None):
    """
    Log a fatal run error with its context and hints for the error type.

    :param logger: Logger instance
    :param e: Exception object
    :param context: Optional additional context for the error
    """
    logger.critical("🚨 RUN FAILED 🚨")
    logger.critical(f"Error Type: {type(e).__name__}")
    logger.critical(f"Error Details: {str(e)}")

    if context:
        logger.critical(f"Context: {context}")

    logger.critical("Troubleshooting:")
    for number, hint in enumerate(troubleshooting_hints(e), start=1):
        logger.critical(f"  {number}. {hint}")
