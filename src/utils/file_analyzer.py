"""
File analyzer utilities for detecting upload formats from the file name.
"""
import os
from typing import Optional

from models.transaction_file import FileFormat


def detect_format_from_extension(filename: Optional[str]) -> FileFormat:
    """
    Detect file format based on file extension.

    Args:
        filename: Name of the file (only its extension is used)

    Returns:
        FileFormat enum value, FileFormat.OTHER when unrecognized
    """
    # Get the file extension
    _, extension = os.path.splitext(filename or '')
    extension = extension.lower()[1:] if extension else ""

    # Map extensions to formats
    format_map = {
        'csv': FileFormat.CSV,
        'xml': FileFormat.XML,
    }

    return format_map.get(extension, FileFormat.OTHER)
