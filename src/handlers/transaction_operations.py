import base64
import binascii
import logging
import logging.config
import os
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Any, List

from models.transaction import TransactionRecord
from services.upload_service import process_upload
from utils.db.transactions import (
    list_transactions_by_currency,
    list_transactions_by_status,
    list_transactions_by_date_range,
)
from utils.handler_decorators import standard_error_handling
from utils.lambda_utils import (
    create_response,
    handle_error,
    mandatory_query_parameter,
)

# Configure logging
log_conf = os.environ.get('LOGGING_CONFIG')
if log_conf:
    logging.config.fileConfig(log_conf)
else:
    logging.basicConfig(
        level=os.environ.get('LOG_LEVEL', 'INFO'),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

logger = logging.getLogger(__name__)


def to_transaction_dto(record: TransactionRecord) -> Dict[str, Any]:
    """Shape a stored record for the filter endpoints."""
    amount = record.amount.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)
    return {
        "id": record.transaction_id,
        "payment": f"{amount} {record.currency_code}",
        "status": record.status.value,
    }


def _parse_query_datetime(value: str, name: str) -> datetime:
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError:
        raise ValueError(f"Invalid {name} date: '{value}'")
    # Stored dates carry no timezone
    return parsed.replace(tzinfo=None)


def _decode_body(event: Dict[str, Any]) -> bytes:
    body = event.get('body') or ''
    if event.get('isBase64Encoded'):
        try:
            return base64.b64decode(body, validate=True)
        except binascii.Error:
            raise ValueError("Request body is not valid base64")
    return body.encode('utf-8')


@standard_error_handling
def upload_transactions_handler(event: Dict[str, Any]) -> Dict[str, Any]:
    """Handle POST /transactions/upload?fileName=<name>."""
    file_name = mandatory_query_parameter(event, 'fileName', "fileName is required")
    outcome = process_upload(_decode_body(event), file_name)

    if not outcome.accepted:
        body: Dict[str, Any] = {"message": outcome.message}
        if outcome.errors:
            body["errors"] = outcome.errors
        return create_response(400, body)

    return {"message": outcome.message, "count": outcome.count}


@standard_error_handling
def get_by_currency_handler(event: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Handle GET /transactions/by-currency?code=<currency>."""
    code = mandatory_query_parameter(event, 'code', "Currency code required")
    return [to_transaction_dto(r) for r in list_transactions_by_currency(code)]


@standard_error_handling
def get_by_status_handler(event: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Handle GET /transactions/by-status?status=<A|R|D>."""
    status = mandatory_query_parameter(event, 'status', "Status required")
    return [to_transaction_dto(r) for r in list_transactions_by_status(status)]


@standard_error_handling
def get_by_date_range_handler(event: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Handle GET /transactions/by-date-range?start=<from>&end=<to>."""
    start = _parse_query_datetime(mandatory_query_parameter(event, 'start', "Start date required"), 'start')
    end = _parse_query_datetime(mandatory_query_parameter(event, 'end', "End date required"), 'end')
    return [to_transaction_dto(r) for r in list_transactions_by_date_range(start, end)]


def handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """Main handler for transaction operations."""
    # Get route from event
    route = event.get('routeKey')
    if not route:
        return handle_error(400, "Missing route key")

    logger.info(f"Processing {route} request")

    if route == "POST /transactions/upload":
        return upload_transactions_handler(event)
    elif route == "GET /transactions/by-currency":
        return get_by_currency_handler(event)
    elif route == "GET /transactions/by-status":
        return get_by_status_handler(event)
    elif route == "GET /transactions/by-date-range":
        return get_by_date_range_handler(event)

    logger.warning(f"Unsupported route: {route}")
    return handle_error(400, f"Unsupported route: {route}")
