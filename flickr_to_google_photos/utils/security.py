"""
Security utilities for path validation and filename sanitization.
"""
import os
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def validate_file_path(file_path: str, base_dir: Path) -> Path:
    """
    Validate file path is within base directory to prevent path traversal.

    Photo references in an export and job ids given on the command line
    are treated as untrusted input.

    Args:
        file_path: Photo reference (can be relative to base_dir)
        base_dir: Base directory that file must be within

    Returns:
        Validated absolute Path object

    Raises:
        ValueError: If path is empty or outside base directory
    """
    if not file_path:
        raise ValueError("File path cannot be empty")

    base_dir_resolved = base_dir.resolve()
    resolved = (base_dir_resolved / file_path).resolve()

    try:
        resolved.relative_to(base_dir_resolved)
    except ValueError:
        raise ValueError(
            f"File path must be within base directory. "
            f"Base: {base_dir_resolved}, Got: {resolved}"
        )

    return resolved


def sanitize_filename(filename: str) -> str:
    """
    Sanitize a filename before sending it as an upload header.

    Args:
        filename: Original filename

    Returns:
        Sanitized filename
    """
    filename = os.path.basename(filename)

    # Header-breaking and shell-ish characters
    dangerous_chars = [';', '|', '&', '$', '`', '(', ')', '<', '>', '\n', '\r']
    for char in dangerous_chars:
        filename = filename.replace(char, '_')

    if len(filename) > 255:
        name, ext = os.path.splitext(filename)
        filename = name[:250] + ext

    return filename
