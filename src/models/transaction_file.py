"""
Transaction file models for the transaction upload backend.
"""
import enum


class FileFormat(str, enum.Enum):
    """Enum for transaction file formats"""
    CSV = "csv"
    XML = "xml"
    OTHER = "other"
