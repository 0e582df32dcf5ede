"""API request/response schemas."""

from facescan.models.job import AnalyzeResponse, JobSnapshotResponse, ProcessingInfo
from facescan.models.scan import ScanRequest, ScanResponse

__all__ = [
    "AnalyzeResponse",
    "JobSnapshotResponse",
    "ProcessingInfo",
    "ScanRequest",
    "ScanResponse",
]
