"""
S3Client - S3/MinIO operations for listing, downloading, and uploading objects.
"""

import logging
from typing import List, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from .errors import RemoteError
from .s3_config import S3Config


class S3Client:
    """
    Wrapper for S3/MinIO operations.

    botocore failures are re-raised as RemoteError. The underlying boto3
    client is thread-safe and shared by concurrent transfers.
    """

    def __init__(self, config: S3Config, logger: Optional[logging.Logger] = None):
        """
        Initialize S3 client.

        Args:
            config: S3 configuration
            logger: Optional logger instance
        """
        self.config = config
        self.logger = logger or logging.getLogger(__name__)

        self._client = boto3.client(
            's3',
            endpoint_url=config.endpoint,
            aws_access_key_id=config.access_key,
            aws_secret_access_key=config.secret_key,
            region_name=config.region,
            config=Config(
                signature_version='s3v4',
                s3={'addressing_style': 'path'}
            ),
            verify=config.verify_ssl
        )

    @property
    def client(self):
        """Return the underlying boto3 client."""
        return self._client

    def list_keys(self, bucket: str, prefix: str = '') -> List[str]:
        """
        List all object keys under a prefix.

        Args:
            bucket: Bucket name
            prefix: Key prefix ('' lists the whole bucket)

        Returns:
            Keys in listing order
        """
        keys = []
        try:
            paginator = self._client.get_paginator('list_objects_v2')
            for page in paginator.paginate(Bucket=bucket, Prefix=prefix):
                for obj in page.get('Contents', []):
                    keys.append(obj['Key'])
        except (ClientError, BotoCoreError) as e:
            raise RemoteError(f"Failed to list s3://{bucket}/{prefix}: {e}") from e

        self.logger.debug(f"Listed {len(keys)} objects in s3://{bucket}/{prefix}")
        return keys

    def download_object(self, bucket: str, key: str) -> bytes:
        """Download an object from S3."""
        try:
            response = self._client.get_object(Bucket=bucket, Key=key)
            return response['Body'].read()
        except (ClientError, BotoCoreError) as e:
            raise RemoteError(f"Failed to download s3://{bucket}/{key}: {e}") from e

    def upload_object(
        self,
        bucket: str,
        key: str,
        data: bytes,
        content_type: str = 'application/octet-stream'
    ) -> None:
        """Upload an object to S3."""
        try:
            self._client.put_object(
                Bucket=bucket,
                Key=key,
                Body=data,
                ContentType=content_type
            )
        except (ClientError, BotoCoreError) as e:
            raise RemoteError(f"Failed to upload s3://{bucket}/{key}: {e}") from e
