import uuid
from typing import Dict, Any, List, Optional
from datetime import datetime
from decimal import Decimal
from typing_extensions import Self
from enum import Enum

from pydantic import BaseModel, Field, field_validator, ConfigDict

NO_RECORDS_MESSAGE = "No transaction records found"

class TransactionStatus(str, Enum):
    """
    Stored status code of a transaction.
    Each file format maps its own status labels onto these codes.
    """
    APPROVED = "A"
    REJECTED = "R"
    DONE = "D"


class TransactionRecord(BaseModel):
    """
    A single validated transaction as produced by the parsers.
    Records are immutable once created; persistence is left to the caller.
    """
    transaction_id: str = Field(alias="transactionId", min_length=1, max_length=50)
    amount: Decimal
    currency_code: str = Field(alias="currencyCode", min_length=3, max_length=3)
    transaction_date: datetime = Field(alias="transactionDate")
    status: TransactionStatus

    model_config = ConfigDict(
        populate_by_name=True,  # Allows using field names or aliases for population
        frozen=True,
        use_enum_values=False,  # Preserve enum objects (not strings) for type safety
    )

    @field_validator('currency_code')
    @classmethod
    def check_currency_code(cls, v: str) -> str:
        if not (v.isascii() and v.isalpha()):
            raise ValueError(f"Currency code must be ASCII letters, got '{v}'")
        return v.upper()

    @field_validator('transaction_date')
    @classmethod
    def check_naive_date(cls, v: datetime) -> datetime:
        if v.tzinfo is not None:
            raise ValueError("Transaction date must not carry a timezone")
        return v

    def to_dynamodb_item(self, record_id: Optional[uuid.UUID] = None) -> Dict[str, Any]:
        """
        Convert the record to a flat dictionary suitable for DynamoDB.
        The storage key `recordId` is assigned here, never by the parser.
        """
        data = self.model_dump(by_alias=True)
        data['recordId'] = str(record_id or uuid.uuid4())
        data['transactionDate'] = self.transaction_date.isoformat()
        data['status'] = self.status.value
        return data

    @classmethod
    def from_dynamodb_item(cls, data: Dict[str, Any]) -> Self:
        """Deserializes a DynamoDB item back into a TransactionRecord."""
        converted_data = {k: v for k, v in data.items() if k != 'recordId'}
        if isinstance(converted_data.get('transactionDate'), str):
            converted_data['transactionDate'] = datetime.fromisoformat(converted_data['transactionDate'])
        return cls.model_validate(converted_data)


class ParseResult(BaseModel):
    """
    Outcome of parsing one uploaded file.

    Either `records` is non-empty and `errors` is empty, or `records` is empty
    and `errors` lists every reason the batch was rejected, in input order.
    """
    records: List[TransactionRecord] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @classmethod
    def failure(cls, message: str) -> "ParseResult":
        """A rejected batch with a single global error."""
        return cls(errors=[message])

    @classmethod
    def from_batch(cls, records: List[TransactionRecord], errors: List[str]) -> "ParseResult":
        """
        Apply the all-or-nothing gate: any error discards every record.
        A batch with neither records nor errors is rejected as empty.
        """
        if errors:
            return cls(records=[], errors=list(errors))
        if not records:
            return cls.failure(NO_RECORDS_MESSAGE)
        return cls(records=list(records), errors=[])
