"""Integration tests for S3 report archival using moto.

These tests use moto to mock AWS S3 and STS:
- Report upload under the environment prefix
- Client creation with and without an assumed role
- Permanent and transient S3 failures
"""

import json
from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import ClientError

from macro_pipeline.exceptions import S3OperationError
from macro_pipeline.s3 import archive_report, s3_init


@pytest.fixture
def report_file(temp_dir):
    path = temp_dir / "validation-report-2026-03-01.json"
    path.write_text(json.dumps({"quality_score": 91.5, "status": "EXCELLENT"}))
    return path


def client_error(code):
    return ClientError({"Error": {"Code": code, "Message": code}}, "PutObject")


# ============================================================================
# Archival Tests
# ============================================================================

@pytest.mark.integration
@pytest.mark.s3
class TestArchiveReport:
    """Upload validation reports to S3."""

    def test_upload_under_environment_prefix(self, s3_client, s3_bucket, report_file, monkeypatch):
        monkeypatch.setattr("macro_pipeline.config.REPORTS_S3_PREFIX", "prod/validation-reports")

        uri = archive_report(str(report_file), s3_client=s3_client, bucket=s3_bucket)

        key = "prod/validation-reports/validation-report-2026-03-01.json"
        assert uri == f"s3://{s3_bucket}/{key}"
        obj = s3_client.get_object(Bucket=s3_bucket, Key=key)
        assert json.loads(obj["Body"].read())["quality_score"] == 91.5
        assert obj["ContentType"] == "application/json"

    def test_empty_prefix(self, s3_client, s3_bucket, report_file):
        uri = archive_report(str(report_file), s3_client=s3_client, bucket=s3_bucket, prefix="")

        assert uri == f"s3://{s3_bucket}/validation-report-2026-03-01.json"

    def test_default_client_and_bucket(self, s3_client, s3_bucket, report_file, monkeypatch):
        monkeypatch.setattr("macro_pipeline.config.S3_BUCKET_NAME", s3_bucket)

        uri = archive_report(str(report_file), prefix="dev/validation-reports")

        assert uri.startswith(f"s3://{s3_bucket}/dev/validation-reports/")

    @patch("macro_pipeline.error_handler.time.sleep")
    def test_missing_bucket_is_not_retried(self, mock_sleep, s3_client, report_file):
        with pytest.raises(S3OperationError, match="no-such-bucket"):
            archive_report(str(report_file), s3_client=s3_client, bucket="no-such-bucket")

        mock_sleep.assert_not_called()

    @patch("macro_pipeline.error_handler.time.sleep")
    def test_transient_error_is_retried(self, mock_sleep, report_file):
        client = MagicMock()
        client.put_object.side_effect = [client_error("SlowDown"), {}]

        archive_report(str(report_file), s3_client=client, bucket="reports", prefix="qa")

        assert client.put_object.call_count == 2
        mock_sleep.assert_called_once()
        assert client.put_object.call_args.kwargs["Key"] == "qa/validation-report-2026-03-01.json"

    @patch("macro_pipeline.error_handler.time.sleep")
    def test_persistent_throttling_gives_up(self, mock_sleep, report_file):
        client = MagicMock()
        client.put_object.side_effect = client_error("SlowDown")

        with pytest.raises(S3OperationError):
            archive_report(str(report_file), s3_client=client, bucket="reports")

        assert client.put_object.call_count == 3


# ============================================================================
# Client Initialization Tests
# ============================================================================

@pytest.mark.integration
@pytest.mark.s3
class TestS3Init:

    def test_default_credentials(self, s3_mock):
        client = s3_init()

        assert client.meta.region_name == "us-east-1"

    def test_assumed_role(self, s3_mock, monkeypatch):
        monkeypatch.setenv("AWS_ROLE_ARN", "arn:aws:iam::123456789012:role/macro-validation")

        client = s3_init()
        client.create_bucket(Bucket="role-bucket")

        assert "role-bucket" in [b["Name"] for b in client.list_buckets()["Buckets"]]

    @patch("macro_pipeline.s3.boto3.client")
    def test_assume_role_denied(self, mock_client, aws_credentials, monkeypatch):
        monkeypatch.setenv("AWS_ROLE_ARN", "arn:aws:iam::123456789012:role/macro-validation")
        mock_client.return_value.assume_role.side_effect = client_error("AccessDenied")

        with pytest.raises(S3OperationError, match="initialize"):
            s3_init()
