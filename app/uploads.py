# app/uploads.py
"""
Image upload handling for image-based predictions.

Uploaded files are turned into base64 data URIs; the data URI is what gets
sent to the AI gateway and stored with the history record.
"""

import base64
import logging
from dataclasses import dataclass
from typing import Optional

_logger = logging.getLogger(__name__)

# Maximum file size for image uploads (5MB)
MAX_IMAGE_SIZE = 5 * 1024 * 1024

ALLOWED_IMAGE_TYPES = [
    "image/png",
    "image/jpeg",
    "image/jpg",
    "image/webp",
]

ALLOWED_EXTENSIONS = [".png", ".jpg", ".jpeg", ".webp"]


class UploadError(Exception):
    """Uploaded file cannot be used for a prediction."""

    pass


@dataclass
class ImageUpload:
    """A validated image upload."""

    filename: str
    content_type: str
    data: bytes

    def to_data_uri(self) -> str:
        """Encode as data:<type>;base64,<payload>."""
        encoded = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.content_type};base64,{encoded}"


def detect_image_type(image_bytes: bytes) -> Optional[str]:
    """Detect image MIME type from magic bytes; None for anything else."""
    if image_bytes[:8] == b"\x89PNG\r\n\x1a\n":
        return "image/png"
    elif image_bytes[:2] == b"\xff\xd8":
        return "image/jpeg"
    elif image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    return None


def validate_image_upload(filename: str, content_type: str, data: bytes) -> ImageUpload:
    """
    Check an uploaded image and return it ready for encoding.

    Raises:
        UploadError: Empty file, too large, or not an accepted image type
    """
    if not data:
        raise UploadError("Please select an image first")

    if len(data) > MAX_IMAGE_SIZE:
        raise UploadError(f"Image is too large (max {MAX_IMAGE_SIZE // (1024 * 1024)}MB)")

    filename = filename or ""
    ext = "." + filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
    content_type = (content_type or "").lower()

    if content_type not in ALLOWED_IMAGE_TYPES and ext not in ALLOWED_EXTENSIONS:
        raise UploadError(f"Unsupported image type. Allowed: {', '.join(ALLOWED_EXTENSIONS)}")

    # Trust the bytes over the browser-supplied type
    detected = detect_image_type(data)
    if detected is None:
        raise UploadError("File is not a PNG, JPEG or WebP image")

    _logger.debug(f"Accepted image upload {filename!r} ({len(data)} bytes, {detected})")
    return ImageUpload(filename=filename, content_type=detected, data=data)
