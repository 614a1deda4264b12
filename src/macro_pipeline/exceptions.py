"""
Custom exceptions for the macro_pipeline package.

This module defines a hierarchy of exceptions so callers can tell
row-level problems (never raised, only counted) apart from run-level
failures that must abort an ingestion or persistence run.
"""


class PipelineBaseError(Exception):
    """
    Base exception for all pipeline-related errors.

    All custom exceptions in the package inherit from this class.
    """

    pass


class ConfigurationError(PipelineBaseError):
    """
    Raised when there are configuration-related issues.

    This exception is used when:
    - Required configuration parameters are missing
    - Configuration values are invalid
    - Local directories cannot be created
    """

    pass


class S3OperationError(PipelineBaseError):
    """
    Raised for S3-specific operation errors.

    Covers issues such as:
    - Authentication failures
    - Report upload errors
    - Bucket or object access issues
    """

    pass


class IngestError(PipelineBaseError):
    """
    Raised during the data ingestion process.

    Covers run-level ingestion failures, including:
    - Unreadable source files
    - Missing header columns
    - Unsupported source names
    """

    pass


class FetchError(IngestError):
    """
    Raised when a remote dataset cannot be downloaded.

    Covers:
    - Connection failures
    - Non-2xx, non-redirect HTTP statuses
    - Malformed API payloads
    """

    pass


class FetchTimeoutError(FetchError):
    """Raised when a download exceeds its wall-clock budget."""

    pass


class TooManyRedirectsError(FetchError):
    """Raised when a redirect chain exceeds the configured hop count."""

    pass


class TransientError(PipelineBaseError):
    """
    Raised for transient errors that may succeed on retry.

    These are temporary errors such as:
    - Network timeouts
    - Throttling errors
    - Temporary service unavailability
    """

    pass


class TransactionError(PipelineBaseError):
    """
    Raised for transaction management errors.

    Covers issues with:
    - Begin/commit failures
    - Transaction state violations
    """

    pass


class PersistenceError(TransactionError):
    """
    Raised when a batch persistence run fails.

    The transaction has been rolled back when this is raised, so the
    observation table still holds the previous run's rows.
    """

    pass


class RollbackError(TransactionError):
    """
    Raised when transaction rollback itself fails.

    At this point the state of the observation table is unknown and
    must be inspected manually.
    """

    pass


class RegistryError(PipelineBaseError):
    """
    Raised for mapping registry errors.

    Covers:
    - Unknown source codes
    - Failed mapping upserts
    """

    pass


class ValidationEngineError(PipelineBaseError):
    """
    Raised when the validation engine cannot run at all.

    Individual findings (inconsistencies, anomalies, coverage gaps) are
    never raised; they are collected into the report.
    """

    pass
