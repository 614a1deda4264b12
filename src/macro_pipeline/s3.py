"""S3 archival of validation reports."""

import os
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from macro_pipeline import config
from macro_pipeline.error_handler import retryable_operation
from macro_pipeline.exceptions import S3OperationError
from macro_pipeline.logging_config import create_logger

logger = create_logger(__name__)


def log_aws_initialization_error(error: Exception) -> None:
    logger.critical(f"AWS S3 Initialization Failed: {error}")
    logger.critical("Troubleshooting:")
    logger.critical("1. Verify AWS credentials")
    logger.critical("2. Check that AWS_ROLE_ARN (if set) can be assumed")
    logger.critical(f"3. Ensure write access to bucket {config.S3_BUCKET_NAME}")


def s3_init() -> Any:
    """
    Create an S3 client.

    Assumes ``AWS_ROLE_ARN`` through STS when it is set, otherwise uses the
    default boto3 credential chain.

    :return: S3 client
    :raises S3OperationError: If the client cannot be created
    """
    region = os.environ.get("AWS_DEFAULT_REGION", "us-east-1")
    role_arn = os.environ.get("AWS_ROLE_ARN")

    try:
        if not role_arn:
            return boto3.client("s3", region_name=region)

        credentials = boto3.client("sts").assume_role(
            RoleArn=role_arn, RoleSessionName="MacroIndicatorValidation"
        )["Credentials"]
        session = boto3.Session(
            aws_access_key_id=credentials["AccessKeyId"],
            aws_secret_access_key=credentials["SecretAccessKey"],
            aws_session_token=credentials["SessionToken"],
            region_name=region,
        )
        logger.info("S3 client initialized with assumed role.")
        return session.client("s3")
    except (ClientError, BotoCoreError) as e:
        log_aws_initialization_error(e)
        raise S3OperationError(f"Failed to initialize S3 client: {e}") from e


@retryable_operation(max_attempts=3, initial_delay=1.0)
def _upload(s3_client, path: str, bucket: str, key: str) -> None:
    with open(path, "rb") as f:
        s3_client.put_object(
            Bucket=bucket, Key=key, Body=f.read(), ContentType="application/json"
        )


def archive_report(path: str, s3_client=None, bucket: str = None, prefix: str = None) -> str:
    """
    Upload a report file to ``s3://{bucket}/{prefix}/{filename}``.

    :return: The S3 URI of the archived report
    :raises S3OperationError: If the upload fails
    """
    bucket = bucket or config.S3_BUCKET_NAME
    prefix = prefix if prefix is not None else config.REPORTS_S3_PREFIX
    key = "/".join(part for part in (prefix.strip("/"), os.path.basename(path)) if part)
    s3_client = s3_client or s3_init()

    try:
        _upload(s3_client, path, bucket, key)
    except (ClientError, BotoCoreError) as e:
        raise S3OperationError(f"Failed to archive {path} to s3://{bucket}/{key}: {e}") from e

    uri = f"s3://{bucket}/{key}"
    logger.info(f"☁️  Report archived to {uri}")
    return uri
