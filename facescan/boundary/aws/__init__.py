"""AWS boundary: Rekognition face comparison and S3 reference storage."""

from facescan.boundary.aws.rekognition_comparator import RekognitionComparator
from facescan.boundary.aws.s3_reference_store import S3ReferenceStore

__all__ = ["RekognitionComparator", "S3ReferenceStore"]
