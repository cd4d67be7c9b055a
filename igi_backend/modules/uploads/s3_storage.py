import boto3
from botocore.exceptions import BotoCoreError, ClientError
from igi_backend.config import settings
from typing import Optional
import logging

logger = logging.getLogger(__name__)


def s3_configured() -> bool:
    return all([settings.aws_access_key_id, settings.aws_secret_access_key, settings.s3_bucket_name])


class S3Storage:
    """Team uploads in the contest S3 bucket, one prefix per team"""

    def __init__(self, bucket_name: str, s3_client):
        self.bucket_name = bucket_name
        self.s3_client = s3_client

    @classmethod
    def from_settings(cls) -> Optional["S3Storage"]:
        """None when AWS credentials or S3_BUCKET_NAME are missing"""
        if not s3_configured():
            return None
        s3_client = boto3.client(
            's3',
            aws_access_key_id=settings.aws_access_key_id,
            aws_secret_access_key=settings.aws_secret_access_key,
            region_name=settings.aws_region
        )
        return cls(settings.s3_bucket_name, s3_client)

    def upload_team_file(self, team_id: str, key: str, content: bytes, content_type: str) -> str:
        """Store the file tagged with its team and return the s3:// path"""
        try:
            self.s3_client.put_object(
                Bucket=self.bucket_name,
                Key=key,
                Body=content,
                ContentType=content_type,
                Metadata={"team_id": team_id},
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"S3 upload of {key} for {team_id} failed: {e}")
            raise
        return f"s3://{self.bucket_name}/{key}"
