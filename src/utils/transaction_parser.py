"""
Transaction file parsing.

Uploads are parsed as a whole batch: every record is validated, and the
batch is accepted only when no record failed. Nothing here raises on bad
input; every failure ends up as a message in ParseResult.errors.
"""
import csv
import io
import threading
import xml.etree.ElementTree as ET
from contextlib import contextmanager
from typing import BinaryIO, Iterator, List, Optional, TextIO, Union

from models.transaction import ParseResult, TransactionRecord
from models.transaction_file import FileFormat
from utils.field_utils import normalize_field
from utils.file_analyzer import detect_format_from_extension
from utils.value_validators import (
    CSV_RULES,
    XML_RULES,
    FieldValidationError,
    validate_amount,
    validate_currency,
    validate_status,
    validate_transaction_date,
    validate_transaction_id,
)

__all__ = [
    'ParseCancelledError',
    'parse_transactions',
    'parse_csv_transactions',
    'parse_xml_transactions',
    'UNKNOWN_FORMAT_MESSAGE',
    'CSV_FIELD_COUNT',
]

UNKNOWN_FORMAT_MESSAGE = "Unknown file format"
CSV_FIELD_COUNT = 5


class ParseCancelledError(Exception):
    """Raised when the caller's cancel event is set between records."""
    pass


class QuotedDialect(csv.Dialect):
    delimiter = ','
    quotechar = '"'
    doublequote = True
    skipinitialspace = True
    lineterminator = '\n'
    quoting = csv.QUOTE_MINIMAL


def _check_cancel(cancel_event: Optional[threading.Event]) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise ParseCancelledError("Parse canceled by caller")


@contextmanager
def _text_stream(stream: Union[BinaryIO, TextIO]) -> Iterator[TextIO]:
    """
    Yield a text view of the stream. Binary streams are decoded as UTF-8
    (BOM tolerated) and detached afterwards so the caller's stream stays open.
    """
    if isinstance(stream, io.TextIOBase):
        yield stream
        return
    wrapper = io.TextIOWrapper(stream, encoding='utf-8-sig', newline='')
    try:
        yield wrapper
    finally:
        wrapper.detach()


def parse_transactions(stream: Union[BinaryIO, TextIO],
                       file_name: Optional[str],
                       cancel_event: Optional[threading.Event] = None) -> ParseResult:
    """
    Parse an uploaded transaction file, choosing the parser by extension.

    Args:
        stream: The upload, positioned at offset 0. Read once, never closed.
        file_name: Original file name; only its extension is used
        cancel_event: Optional event checked between records

    Returns:
        ParseResult with either the accepted records or the rejection reasons

    Raises:
        ParseCancelledError: If cancel_event is set during the parse
    """
    file_format = detect_format_from_extension(file_name)

    if file_format == FileFormat.CSV:
        with _text_stream(stream) as reader:
            return parse_csv_transactions(reader, cancel_event)
    elif file_format == FileFormat.XML:
        try:
            content = stream.read()
        except OSError as e:
            return ParseResult.failure(f"XML parse failed: {e}")
        return parse_xml_transactions(content, cancel_event)

    return ParseResult.failure(UNKNOWN_FORMAT_MESSAGE)


# ============================================================================
# CSV
# ============================================================================

def parse_csv_transactions(reader: TextIO,
                           cancel_event: Optional[threading.Event] = None) -> ParseResult:
    """
    Parse headerless CSV rows of exactly five positional fields:
    transaction id, amount, currency code, transaction date, status.

    A malformed row only rejects that row (and therefore the batch); the
    remaining rows are still checked so the error report is complete.
    Read or decode failures of the stream itself end the parse.
    """
    records: List[TransactionRecord] = []
    errors: List[str] = []
    csv_reader = csv.reader(reader, dialect=QuotedDialect())

    while True:
        _check_cancel(cancel_event)
        try:
            row = next(csv_reader)
        except StopIteration:
            break
        except csv.Error as e:
            errors.append(f"CSV parse error: line {csv_reader.line_num}: {e}")
            continue
        except (OSError, UnicodeDecodeError) as e:
            errors.append(f"CSV parse error: {e}")
            break

        # Only a line with no content at all is skipped
        if not row:
            continue

        try:
            if len(row) != CSV_FIELD_COUNT:
                raise ValueError(
                    f"line {csv_reader.line_num} has {len(row)} fields, expected {CSV_FIELD_COUNT}"
                )
            records.append(_map_csv_row([normalize_field(field) for field in row]))
        except FieldValidationError as e:
            errors.append(str(e))
        except Exception as e:
            errors.append(f"CSV parse error: {e}")

    return ParseResult.from_batch(records, errors)


def _map_csv_row(fields: List[str]) -> TransactionRecord:
    """Validate one normalized CSV row, stopping at the first bad field."""
    id_raw, amount_raw, currency_raw, date_raw, status_raw = fields
    try:
        transaction_id = validate_transaction_id(id_raw, CSV_RULES)
        amount = validate_amount(amount_raw, CSV_RULES)
        currency_code = validate_currency(currency_raw, CSV_RULES)
        transaction_date = validate_transaction_date(date_raw, CSV_RULES)
        status = validate_status(status_raw, CSV_RULES)
    except FieldValidationError as e:
        raise FieldValidationError(f"CSV record (id='{id_raw}'): {e}") from e

    return TransactionRecord(
        transaction_id=transaction_id,
        amount=amount,
        currency_code=currency_code,
        transaction_date=transaction_date,
        status=status,
    )


# ============================================================================
# XML
# ============================================================================

def parse_xml_transactions(content: Union[bytes, str],
                           cancel_event: Optional[threading.Event] = None) -> ParseResult:
    """
    Parse every <Transaction> element of an XML document, at any depth.

    Expected shape per transaction:
        <Transaction id="...">
            <TransactionDate>yyyy-MM-ddTHH:mm:ss</TransactionDate>
            <PaymentDetails>
                <Amount>...</Amount>
                <CurrencyCode>...</CurrencyCode>
            </PaymentDetails>
            <Status>Approved|Rejected|Done</Status>
        </Transaction>

    A document that does not parse yields a single error and no records.
    """
    try:
        root = ET.fromstring(content)
    except Exception as e:
        return ParseResult.failure(f"XML parse failed: {e}")

    records: List[TransactionRecord] = []
    errors: List[str] = []

    # iter() includes the root itself, so a bare <Transaction> document works
    for i, element in enumerate(root.iter('Transaction'), 1):
        _check_cancel(cancel_event)
        try:
            records.append(_map_xml_transaction(element, i))
        except FieldValidationError as e:
            errors.append(str(e))
        except Exception as e:
            errors.append(f"XML record #{i} unexpected error: {e}")

    return ParseResult.from_batch(records, errors)


def _child_text(parent: Optional[ET.Element], tag: str) -> Optional[str]:
    """Full text content of the first direct child named tag, or None."""
    if parent is None:
        return None
    child = parent.find(tag)
    if child is None:
        return None
    return ''.join(child.itertext())


def _map_xml_transaction(element: ET.Element, index: int) -> TransactionRecord:
    """Validate one <Transaction> element, stopping at the first bad field."""
    try:
        transaction_id = validate_transaction_id(normalize_field(element.get('id')), XML_RULES)
    except FieldValidationError as e:
        raise FieldValidationError(f"XML record #{index}: {e}") from e

    try:
        transaction_date = validate_transaction_date(
            normalize_field(_child_text(element, 'TransactionDate')), XML_RULES
        )
        payment_details = element.find('PaymentDetails')
        amount = validate_amount(normalize_field(_child_text(payment_details, 'Amount')), XML_RULES)
        currency_code = validate_currency(
            normalize_field(_child_text(payment_details, 'CurrencyCode')), XML_RULES
        )
        status = validate_status(normalize_field(_child_text(element, 'Status')), XML_RULES)
    except FieldValidationError as e:
        raise FieldValidationError(f"XML record '{transaction_id}': {e}") from e

    return TransactionRecord(
        transaction_id=transaction_id,
        amount=amount,
        currency_code=currency_code,
        transaction_date=transaction_date,
        status=status,
    )
