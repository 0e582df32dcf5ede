"""
Upload validation utilities.

Size and content-type checks for the reference face upload.

Dependencies: None
System role: Reference face request validation
"""

from facescan.core.exceptions import ValidationError

MAX_FACE_BYTES = 5 * 1024 * 1024

ALLOWED_IMAGE_TYPES = {"image/jpeg", "image/png", "image/webp", "image/gif", "image/bmp"}


def validate_face_upload(content_type: str | None, data: bytes) -> None:
    """
    Validate an uploaded reference face.

    Args:
        content_type: MIME type reported by the client
        data: Uploaded bytes

    Raises:
        ValidationError: Empty, too large, or not an image
    """
    if not data:
        raise ValidationError("Face image is empty", field="face")
    if len(data) > MAX_FACE_BYTES:
        raise ValidationError(
            "Face image exceeds the 5 MB limit",
            field="face",
            details={"size": len(data), "max_size": MAX_FACE_BYTES},
        )
    if content_type and content_type.split(";")[0].strip().lower() not in ALLOWED_IMAGE_TYPES:
        raise ValidationError(f"Unsupported face image type: {content_type}", field="face")
