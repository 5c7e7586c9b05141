"""
Service module for transaction file uploads.

Wraps the parser with the concerns it deliberately leaves out: size limits,
persisting accepted batches and keeping a log of rejected ones.
"""
import io
import logging
import os
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field, ConfigDict

from utils.db.transactions import save_transactions
from utils.s3_dao import put_object
from utils.transaction_parser import parse_transactions

# Configure logging
logger = logging.getLogger(__name__)

DEFAULT_MAX_UPLOAD_BYTES = 1 * 1024 * 1024
EMPTY_FILE_MESSAGE = "file is empty."
TOO_LARGE_MESSAGE = "File exceeds 1MB"


def get_max_upload_bytes() -> int:
    return int(os.environ.get('MAX_UPLOAD_BYTES', DEFAULT_MAX_UPLOAD_BYTES))


class UploadOutcome(BaseModel):
    """Response object for upload operations"""
    accepted: bool
    message: str
    count: int = 0
    errors: List[str] = Field(default_factory=list)
    error_log_key: Optional[str] = Field(default=None, alias="errorLogKey")

    model_config = ConfigDict(populate_by_name=True)


def build_error_log_key(now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    return f"logs/invalid_{now:%Y%m%d_%H%M%S}.log"


def write_error_log(errors: List[str]) -> Optional[str]:
    """
    Store one upload's errors, one per line, as a new S3 object.

    Returns:
        The S3 key written, or None if the upload failed
    """
    key = build_error_log_key()
    body = ('\n'.join(errors) + '\n').encode('utf-8')
    if not put_object(key, body, 'text/plain'):
        logger.error(f"Could not store error log for rejected upload at {key}")
        return None
    logger.warning(f"Upload contained invalid records. Log saved to {key}")
    return key


def process_upload(content: bytes, file_name: str) -> UploadOutcome:
    """
    Validate, parse and store one uploaded transaction file.

    Args:
        content: Raw uploaded bytes
        file_name: Original file name, used for format detection

    Returns:
        UploadOutcome; accepted batches are already persisted
    """
    if not content:
        return UploadOutcome(accepted=False, message=EMPTY_FILE_MESSAGE)

    max_bytes = get_max_upload_bytes()
    if len(content) > max_bytes:
        logger.info(f"Rejecting upload {file_name}: {len(content)} bytes exceeds {max_bytes}")
        return UploadOutcome(accepted=False, message=TOO_LARGE_MESSAGE)

    logger.info(f"Parsing upload {file_name} ({len(content)} bytes)")
    result = parse_transactions(io.BytesIO(content), file_name)

    if not result.is_valid:
        error_log_key = write_error_log(result.errors)
        return UploadOutcome(
            accepted=False,
            message="File contains invalid records",
            errors=result.errors,
            error_log_key=error_log_key,
        )

    count = save_transactions(result.records)
    logger.info(f"Stored {count} transactions from {file_name}")
    return UploadOutcome(accepted=True, message="File processed successfully", count=count)
