"""
Router utility functions.

Contains helpers extracted from router endpoints to keep them clean.
"""

from facescan.api.routers.router_utils.error_handling import handle_scan_errors, status_for
from facescan.api.routers.router_utils.upload_utils import MAX_FACE_BYTES, validate_face_upload

__all__ = [
    "MAX_FACE_BYTES",
    "handle_scan_errors",
    "status_for",
    "validate_face_upload",
]
