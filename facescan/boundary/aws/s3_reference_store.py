"""
S3 reference face store.

Keeps the uploaded reference face between ticks so continuation calls
do not have to resend it.

Dependencies: boto3
System role: ReferenceStore implementation for the batch orchestrator
"""

import logging
import uuid

import boto3
from botocore.exceptions import ClientError

from facescan.core.exceptions import ReferenceStoreError

logger = logging.getLogger(__name__)


class S3ReferenceStore:
    """S3 client for reference face objects."""

    def __init__(
        self,
        bucket: str,
        prefix: str = "references/",
        region: str = "us-east-1",
        client=None,
    ) -> None:
        """
        Initialize S3 reference store.

        Args:
            bucket: S3 bucket name for reference faces
            prefix: Key prefix under which faces are written
            region: AWS region for S3 bucket
            client: Pre-built boto3 S3 client (tests)
        """
        self._bucket = bucket
        self._prefix = prefix
        self._s3_client = client or boto3.client("s3", region_name=region)

    def key_for(self, job_id: uuid.UUID) -> str:
        return f"{self._prefix}{job_id}"

    def save(self, job_id: uuid.UUID, data: bytes) -> str:
        """
        Upload the reference face for a job.

        Args:
            job_id: Job the face belongs to
            data: Face image bytes

        Returns:
            str: S3 object key

        Raises:
            ReferenceStoreError: Upload failed
        """
        key = self.key_for(job_id)
        try:
            self._s3_client.put_object(Bucket=self._bucket, Key=key, Body=data)
        except ClientError as e:
            raise ReferenceStoreError(
                f"Failed to store reference face: {e}",
                {"bucket": self._bucket, "key": key},
            ) from e
        logger.info("save - Reference stored", extra={"job_id": str(job_id), "key": key})
        return key

    def load(self, key: str) -> bytes | None:
        """
        Download a stored reference face.

        Args:
            key: S3 object key returned by save()

        Returns:
            bytes | None: Face bytes, or None if the object no longer exists

        Raises:
            ClientError: Any S3 failure other than a missing object
        """
        try:
            response = self._s3_client.get_object(Bucket=self._bucket, Key=key)
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in ("NoSuchKey", "404"):
                logger.warning("load - Reference object missing", extra={"key": key})
                return None
            raise
        return response["Body"].read()
