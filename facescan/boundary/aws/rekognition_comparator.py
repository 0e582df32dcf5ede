"""
Rekognition face comparator.

Compares the reference face against one target image with the
CompareFaces API. The best face match above the configured threshold
decides the outcome.

Dependencies: boto3
System role: Comparator implementation for the batch orchestrator
"""

import logging

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from facescan.core.batch.models import ComparisonOutcome
from facescan.core.exceptions import ComparatorError

logger = logging.getLogger(__name__)


class RekognitionComparator:
    """Comparator backed by AWS Rekognition CompareFaces."""

    def __init__(
        self,
        region: str = "us-east-1",
        similarity_threshold: float = 80.0,
        client=None,
    ) -> None:
        """
        Initialize Rekognition comparator.

        Args:
            region: AWS region for Rekognition
            similarity_threshold: Minimum similarity (0-100) for a match
            client: Pre-built boto3 Rekognition client (tests)
        """
        self._threshold = similarity_threshold
        self._client = client or boto3.client("rekognition", region_name=region)

    def compare(self, reference: bytes, target: bytes) -> ComparisonOutcome:
        """
        Compare reference face with the faces found in target.

        Args:
            reference: Reference face image bytes
            target: Candidate image bytes

        Returns:
            ComparisonOutcome: matched flag and best similarity

        Raises:
            ComparatorError: Rekognition rejected the images or the call failed
        """
        try:
            response = self._client.compare_faces(
                SourceImage={"Bytes": reference},
                TargetImage={"Bytes": target},
                SimilarityThreshold=self._threshold,
            )
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code", "Unknown")
            message = e.response.get("Error", {}).get("Message", str(e))
            raise ComparatorError(
                f"Rekognition {code}: {message}", details={"code": code}
            ) from e
        except BotoCoreError as e:
            raise ComparatorError(f"Rekognition call failed: {e}") from e

        matches = response.get("FaceMatches") or []
        if not matches:
            return ComparisonOutcome(matched=False, similarity=0.0)

        best = max(float(m.get("Similarity", 0.0)) for m in matches)
        return ComparisonOutcome(matched=best >= self._threshold, similarity=best)
