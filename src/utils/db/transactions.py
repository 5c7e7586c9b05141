"""
Transaction database operations.

This module stores accepted upload batches and serves the filter queries
(by currency, by status, by date range).
"""

import decimal
import logging
import uuid
from datetime import datetime
from typing import List, Any, Union

from boto3.dynamodb.conditions import Attr
from boto3.dynamodb.types import TypeSerializer

from models.transaction import TransactionRecord, TransactionStatus
from .base import (
    tables,
    dynamodb_operation,
    retry_on_throttle,
)

logger = logging.getLogger(__name__)


def _get_transactions_table() -> Any:
    table = tables.transactions
    if not table:
        raise RuntimeError("Transaction database not available")
    return table


def _scan_records(filter_expression: Any) -> List[TransactionRecord]:
    """Scan the table with a filter, following LastEvaluatedKey pages."""
    table = _get_transactions_table()
    scan_kwargs = {'FilterExpression': filter_expression}
    records: List[TransactionRecord] = []

    while True:
        response = table.scan(**scan_kwargs)
        records.extend(TransactionRecord.from_dynamodb_item(item) for item in response.get('Items', []))
        last_evaluated_key = response.get('LastEvaluatedKey')
        if not last_evaluated_key:
            break
        scan_kwargs['ExclusiveStartKey'] = last_evaluated_key

    records.sort(key=lambda r: (r.transaction_date, r.transaction_id))
    return records


# ============================================================================
# Write Operations
# ============================================================================

@dynamodb_operation("save_transactions")
def save_transactions(records: List[TransactionRecord]) -> int:
    """
    Persist an accepted batch verbatim.

    Each item gets its own storage key (recordId), so a transactionId that
    already exists is stored again rather than overwritten. Every item is
    serialized before the first write, so an unstorable record fails the
    call with nothing written.

    Returns:
        Number of records written

    Raises:
        ValueError: If any record cannot be represented in DynamoDB
    """
    table = _get_transactions_table()
    serializer = TypeSerializer()
    items = []
    for record in records:
        item = record.to_dynamodb_item(uuid.uuid4())
        try:
            for value in item.values():
                serializer.serialize(value)
        except (decimal.DecimalException, TypeError) as e:
            raise ValueError(f"Transaction {record.transaction_id} cannot be stored: {e!r}")
        items.append(item)

    with table.batch_writer() as batch:
        for item in items:
            batch.put_item(Item=item)
    logger.info(f"Saved {len(records)} transactions")
    return len(records)


# ============================================================================
# Query Operations
# ============================================================================

@retry_on_throttle()
@dynamodb_operation("list_transactions_by_currency")
def list_transactions_by_currency(currency_code: str) -> List[TransactionRecord]:
    return _scan_records(Attr('currencyCode').eq(currency_code.strip().upper()))


@retry_on_throttle()
@dynamodb_operation("list_transactions_by_status")
def list_transactions_by_status(status: Union[str, TransactionStatus]) -> List[TransactionRecord]:
    """
    List transactions with the given status code (A, R or D).
    Unknown codes simply match nothing.
    """
    code = status.value if isinstance(status, TransactionStatus) else status.strip()
    return _scan_records(Attr('status').eq(code))


@retry_on_throttle()
@dynamodb_operation("list_transactions_by_date_range")
def list_transactions_by_date_range(start: datetime, end: datetime) -> List[TransactionRecord]:
    """
    List transactions dated between start and end, both inclusive.

    Dates are stored as ISO-8601 strings without timezone, so string
    comparison orders them chronologically.

    Raises:
        ValueError: If end is before start
    """
    if end < start:
        raise ValueError("End date must be more than start date")
    return _scan_records(Attr('transactionDate').between(start.isoformat(), end.isoformat()))
