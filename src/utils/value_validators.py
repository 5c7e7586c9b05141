"""
Value validators for uploaded transaction fields.

Every validator takes an already-normalized string plus the FormatRules of
the file being parsed, and either returns the typed value or raises
FieldValidationError with the message to report for the record.
"""
import re
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from types import MappingProxyType
from typing import Mapping

from models.transaction import TransactionStatus
from models.transaction_file import FileFormat

__all__ = [
    'FieldValidationError',
    'FormatRules',
    'CSV_RULES',
    'XML_RULES',
    'MAX_TRANSACTION_ID_LENGTH',
    'MAX_AMOUNT_DIGITS',
    'validate_transaction_id',
    'validate_amount',
    'validate_currency',
    'validate_transaction_date',
    'validate_status',
]

MAX_TRANSACTION_ID_LENGTH = 50

# Significant digits a stored number can hold
MAX_AMOUNT_DIGITS = 38

# Optional sign, integer part with optional ',' grouping, optional '.' fraction.
# ASCII digits only.
AMOUNT_PATTERN = re.compile(r'^(?P<sign>[+-])?(?P<int>[0-9][0-9,]*)?(?:\.(?P<frac>[0-9]*))?$')
CURRENCY_PATTERN = re.compile(r'^[A-Za-z]{3}$')


class FieldValidationError(ValueError):
    """Raised when a field fails validation; the message is reported as-is."""
    pass


@dataclass(frozen=True)
class FormatRules:
    """
    Format-specific validation parameters.
    One immutable instance exists per supported file format.
    """

    file_format: FileFormat

    id_label: str
    """Name used for the identifier in error messages."""

    date_format: str
    """strptime format of the transaction timestamp."""

    date_pattern: str
    """Regex the raw timestamp must match before strptime (enforces zero padding)."""

    status_labels: Mapping[str, TransactionStatus]
    """Exact, case-sensitive status label table."""


CSV_RULES = FormatRules(
    file_format=FileFormat.CSV,
    id_label="TransactionId",
    date_format="%d/%m/%Y %H:%M:%S",
    date_pattern=r'^[0-9]{2}/[0-9]{2}/[0-9]{4} [0-9]{2}:[0-9]{2}:[0-9]{2}$',
    status_labels=MappingProxyType({
        "Approved": TransactionStatus.APPROVED,
        "Failed": TransactionStatus.REJECTED,
        "Finished": TransactionStatus.DONE,
    }),
)

XML_RULES = FormatRules(
    file_format=FileFormat.XML,
    id_label="id attribute",
    date_format="%Y-%m-%dT%H:%M:%S",
    date_pattern=r'^[0-9]{4}-[0-9]{2}-[0-9]{2}T[0-9]{2}:[0-9]{2}:[0-9]{2}$',
    status_labels=MappingProxyType({
        "Approved": TransactionStatus.APPROVED,
        "Rejected": TransactionStatus.REJECTED,
        "Done": TransactionStatus.DONE,
    }),
)


def validate_transaction_id(raw: str, rules: FormatRules) -> str:
    if not raw:
        raise FieldValidationError(f"{rules.id_label} missing")
    if len(raw) > MAX_TRANSACTION_ID_LENGTH:
        raise FieldValidationError(f"{rules.id_label} length is more than {MAX_TRANSACTION_ID_LENGTH}")
    return raw


def validate_amount(raw: str, rules: FormatRules) -> Decimal:
    """
    Parse a culture-invariant decimal amount.

    Accepts an optional leading sign, digits with optional ',' grouping
    separators and a single '.' decimal point, in ASCII digits. Exponents,
    NaN and Infinity are rejected even though Decimal() would accept them, and
    so is anything longer than MAX_AMOUNT_DIGITS significant or fraction digits.
    """
    if not raw:
        raise FieldValidationError("Amount missing")
    match = AMOUNT_PATTERN.fullmatch(raw)
    if not match or not (match.group('int') or match.group('frac')):
        raise FieldValidationError(f"Amount invalid ('{raw}')")
    text = (match.group('sign') or '') + (match.group('int') or '0').replace(',', '')
    if match.group('frac'):
        text += '.' + match.group('frac')
    try:
        amount = Decimal(text)
    except InvalidOperation:
        raise FieldValidationError(f"Amount invalid ('{raw}')")
    parts = amount.as_tuple()
    if len(parts.digits) > MAX_AMOUNT_DIGITS or -parts.exponent > MAX_AMOUNT_DIGITS:
        raise FieldValidationError(f"Amount invalid ('{raw}')")
    return amount


def validate_currency(raw: str, rules: FormatRules) -> str:
    if not CURRENCY_PATTERN.fullmatch(raw):
        raise FieldValidationError(f"Currency invalid ('{raw}')")
    return raw.upper()


def validate_transaction_date(raw: str, rules: FormatRules) -> datetime:
    """Parse the timestamp against the format's single exact pattern."""
    if not raw:
        raise FieldValidationError("TransactionDate missing")
    if not re.fullmatch(rules.date_pattern, raw):
        raise FieldValidationError(f"TransactionDate invalid ('{raw}')")
    try:
        return datetime.strptime(raw, rules.date_format)
    except ValueError:
        raise FieldValidationError(f"TransactionDate invalid ('{raw}')")


def validate_status(raw: str, rules: FormatRules) -> TransactionStatus:
    status = rules.status_labels.get(raw)
    if status is None:
        raise FieldValidationError(f"Status invalid ('{raw}')")
    return status
