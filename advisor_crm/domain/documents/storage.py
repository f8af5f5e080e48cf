"""
Document storage utilities.
Files live on local disk under UPLOADS_DIR; the database keeps only metadata.
"""

import logging
import os
import random
import time
from pathlib import Path
from typing import Optional

from ...config import MAX_UPLOAD_BYTES, UPLOADS_DIR

logger = logging.getLogger(__name__)

DANGEROUS_FILENAME_CHARS = ["..", "/", "\\", "<", ">", ":", '"', "|", "?", "*"]


def get_uploads_dir() -> Path:
    UPLOADS_DIR.mkdir(parents=True, exist_ok=True)
    return UPLOADS_DIR


def validate_filename(filename: Optional[str]) -> Optional[str]:
    """
    Validate an uploaded file name before anything is written.

    Returns:
        An error message, or None when the name is acceptable
    """
    if not filename:
        return "No file uploaded"
    if len(filename) > 255:
        return "Filename too long - maximum 255 characters"
    return None


def size_limit_error(size_bytes: int) -> Optional[str]:
    if size_bytes <= MAX_UPLOAD_BYTES:
        return None
    limit_mb = MAX_UPLOAD_BYTES / (1024 * 1024)
    return f"File size exceeds {limit_mb:.0f}MB limit. Your file is {size_bytes / (1024 * 1024):.2f}MB."


def generate_stored_name(original_name: str) -> str:
    """{timestamp}-{random}{ext}, never derived from user-controlled path parts"""
    ext = os.path.splitext(os.path.basename(original_name))[1].lower()
    if any(char in ext for char in DANGEROUS_FILENAME_CHARS):
        ext = ""
    return f"{int(time.time() * 1000)}-{random.randint(0, 10**9 - 1)}{ext}"


def resolve_stored_path(stored_name: str) -> Path:
    """Absolute path of a stored file; refuses names that escape the upload dir"""
    uploads_dir = get_uploads_dir().resolve()
    path = (uploads_dir / stored_name).resolve()
    if path.parent != uploads_dir:
        raise ValueError(f"Invalid stored file name: {stored_name}")
    return path


def save_file(contents: bytes, original_name: str) -> str:
    stored_name = generate_stored_name(original_name)
    path = resolve_stored_path(stored_name)
    path.write_bytes(contents)
    logger.info(f"💾 Stored upload '{original_name}' as {stored_name} ({len(contents)} bytes)")
    return stored_name


def remove_stored_file(stored_name: str) -> bool:
    """Delete a stored file; a file that is already gone is not an error"""
    try:
        path = resolve_stored_path(stored_name)
    except ValueError as e:
        logger.warning(f"⚠️ {e}")
        return False
    try:
        path.unlink()
    except FileNotFoundError:
        logger.debug(f"Stored file {stored_name} already removed")
        return False
    logger.info(f"🗑️ Removed stored file {stored_name}")
    return True
