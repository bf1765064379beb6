"""Upload acceptance rules: file type, size and count."""
from __future__ import annotations

import logging
import os
from typing import Dict, Iterable, List, Tuple

from sitecms.domain.errors import UploadRejectedError
from sitecms.uploads.form_parser import UploadedFile

logger = logging.getLogger(__name__)

IMAGES = "images"
DOCUMENTS = "documents"

IMAGE_MIME_TYPES = {
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/gif",
    "image/webp",
    "image/heic",
    "image/heif",
    "image/svg+xml",
}
IMAGE_EXTENSIONS = {".jpeg", ".jpg", ".png", ".gif", ".webp", ".heic", ".heif", ".svg"}

DOCUMENT_MIME_TYPES = {
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "text/plain",
}
DOCUMENT_EXTENSIONS = {".pdf", ".doc", ".docx", ".txt"}

DEFAULT_MAX_FILES = 10


def classify(upload: UploadedFile, allow_documents: bool = True) -> str:
    """
    Decide which folder an upload belongs in.

    Both the MIME type and the file extension must be on the same allow
    list.

    Returns:
        "images" or "documents"

    Raises:
        UploadRejectedError: If the file is of a type that is not accepted
    """
    mime_type = (upload.content_type or "").lower()
    extension = os.path.splitext(upload.filename)[1].lower()

    if mime_type in IMAGE_MIME_TYPES and extension in IMAGE_EXTENSIONS:
        return IMAGES
    if allow_documents and mime_type in DOCUMENT_MIME_TYPES and extension in DOCUMENT_EXTENSIONS:
        return DOCUMENTS

    logger.info(f"Rejected upload {upload.filename}: invalid type {mime_type}")
    allowed = "Images: JPEG, PNG, GIF, WebP, HEIC, SVG"
    if allow_documents:
        allowed += "; Documents: PDF, DOC, DOCX, TXT"
    raise UploadRejectedError(
        f"Invalid file type. Allowed types: {allowed}. Received: {mime_type or 'unknown'}",
        code="INVALID_FILE_TYPE",
    )


def validate_uploads(
    files: Dict[str, List[UploadedFile]],
    accepted_keys: Iterable[str],
    max_files: int = DEFAULT_MAX_FILES,
    max_size_mb: int = 15,
    allow_documents: bool = False,
) -> List[Tuple[UploadedFile, str]]:
    """
    Check every upload of a request and pair it with its target folder.

    Args:
        files: Uploaded files grouped by form key
        accepted_keys: Form keys that may carry files for this resource
        max_files: Maximum number of files per key
        max_size_mb: Maximum size of a single file
        allow_documents: Whether non-image documents are accepted

    Returns:
        List of (upload, folder) pairs in submission order

    Raises:
        UploadRejectedError: On the first rule a file breaks
    """
    accepted = set(accepted_keys)
    max_bytes = max_size_mb * 1024 * 1024
    checked: List[Tuple[UploadedFile, str]] = []

    for key, uploads in files.items():
        if key not in accepted:
            raise UploadRejectedError(
                "Unexpected file field. Please check your form field names.",
                code="UNEXPECTED_FILE_FIELD",
            )
        if len(uploads) > max_files:
            raise UploadRejectedError(
                f"Too many files. Maximum {max_files} files allowed.",
                code="TOO_MANY_FILES",
            )
        for upload in uploads:
            if upload.size > max_bytes:
                raise UploadRejectedError(
                    f"File too large. Maximum size allowed is {max_size_mb}MB.",
                    code="FILE_TOO_LARGE",
                )
            checked.append((upload, classify(upload, allow_documents=allow_documents)))

    return checked
