"""
S3Config - Connection settings for the S3/MinIO object store.
"""

import os
from dataclasses import dataclass
from typing import List, Optional

from .config import DEFAULT_REGION


@dataclass
class S3Config:
    """
    S3 connection configuration.

    Bucket and prefix are passed per call; this only describes how to connect.

    Attributes:
        endpoint: Endpoint URL for S3-compatible stores (None for AWS)
        region: Region name
        access_key: Access key (None uses the boto3 credential chain)
        secret_key: Secret key (None uses the boto3 credential chain)
        verify_ssl: Verify TLS certificates
    """
    endpoint: Optional[str] = None
    region: str = DEFAULT_REGION
    access_key: Optional[str] = None
    secret_key: Optional[str] = None
    verify_ssl: bool = True

    @classmethod
    def from_env(cls) -> 'S3Config':
        """Create configuration from S3_* environment variables."""
        return cls(
            endpoint=os.getenv('S3_ENDPOINT') or None,
            region=os.getenv('S3_REGION') or DEFAULT_REGION,
            access_key=os.getenv('S3_ACCESS_KEY') or None,
            secret_key=os.getenv('S3_SECRET_KEY') or None,
            verify_ssl=os.getenv('S3_VERIFY_SSL', 'true').lower() not in ('0', 'false', 'no'),
        )

    def validate(self) -> List[str]:
        """Return a list of configuration errors (empty if valid)."""
        errors = []
        if bool(self.access_key) != bool(self.secret_key):
            errors.append("S3_ACCESS_KEY and S3_SECRET_KEY must be given together")
        if self.endpoint and not self.endpoint.startswith(('http://', 'https://')):
            errors.append(f"S3_ENDPOINT must be an http(s) URL: {self.endpoint}")
        if not self.region:
            errors.append("S3_REGION is required")
        return errors
