"""
Folder URL parsing.

Dependencies: urllib.parse, re
System role: Input validation for remote folder references
"""

import re
from urllib.parse import parse_qs, urlparse

from facescan.core.exceptions import UnsupportedSourceError, ValidationError

_FOLDER_PATH = re.compile(r"/folders/([A-Za-z0-9_-]+)")
_FOLDER_ID = re.compile(r"^[A-Za-z0-9_-]+$")

DRIVE_HOSTS = ("drive.google.com",)
ONEDRIVE_HOSTS = ("onedrive.live.com", "1drv.ms")


def detect_source_type(url: str) -> str:
    """
    Identify the storage provider behind a folder URL.

    Returns:
        str: "gdrive"

    Raises:
        ValidationError: URL is not an http(s) URL
        UnsupportedSourceError: Provider is known but not supported, or unknown
    """
    parsed = urlparse(url.strip())
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValidationError("Folder URL must be an http(s) URL", field="url")

    host = parsed.netloc.lower()
    if host in DRIVE_HOSTS:
        return "gdrive"
    if host in ONEDRIVE_HOSTS or host.endswith(".sharepoint.com"):
        raise UnsupportedSourceError("OneDrive folders are not supported yet", field="url")
    raise UnsupportedSourceError(f"Unsupported storage provider: {host}", field="url")


def parse_folder_id(url: str) -> str:
    """
    Extract the Drive folder id from a share link.

    Accepts ``/drive/folders/<id>`` links (with or without ``/u/<n>/``) and
    ``open?id=<id>`` links.

    Raises:
        ValidationError: URL carries no folder id
    """
    detect_source_type(url)
    parsed = urlparse(url.strip())

    match = _FOLDER_PATH.search(parsed.path)
    if match:
        return match.group(1)

    ids = parse_qs(parsed.query).get("id")
    if ids and _FOLDER_ID.match(ids[0]):
        return ids[0]

    raise ValidationError("Invalid Google Drive folder URL", field="url")
