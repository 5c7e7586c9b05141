"""
S3 Data Access Object for handling S3 operations.
"""
import logging
import os
import boto3
from typing import Optional
from botocore.exceptions import ClientError

# Configure logging
logger = logging.getLogger(__name__)


def get_s3_client():
    return boto3.client('s3', region_name=os.environ.get('AWS_REGION', 'eu-west-2'))


# Get bucket name from environment
ERROR_LOG_BUCKET = os.environ.get('ERROR_LOG_BUCKET', 'transaction-upload-error-logs')


def put_object(key: str, body: bytes, content_type: str, bucket: Optional[str] = None) -> bool:
    """
    Upload an object to S3.

    Args:
        key: The S3 key for the object
        body: The object content as bytes
        content_type: The content type of the object
        bucket: Optional bucket name (defaults to ERROR_LOG_BUCKET)

    Returns:
        True if successful, False otherwise
    """
    try:
        bucket = bucket or ERROR_LOG_BUCKET
        get_s3_client().put_object(
            Bucket=bucket,
            Key=key,
            Body=body,
            ContentType=content_type
        )
        return True
    except ClientError as e:
        logger.error(f"Error uploading object to S3: {str(e)}")
        return False

