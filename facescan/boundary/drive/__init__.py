"""Google Drive boundary: folder URL parsing and image listing."""

from facescan.boundary.drive.drive_lister import GoogleDriveLister
from facescan.boundary.drive.folder_url import detect_source_type, parse_folder_id

__all__ = ["GoogleDriveLister", "detect_source_type", "parse_folder_id"]
