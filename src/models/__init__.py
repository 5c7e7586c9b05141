"""
Models package for the transaction upload backend.
"""

from .transaction import (
    TransactionRecord,
    TransactionStatus,
    ParseResult,
)

from .transaction_file import FileFormat

__all__ = [
    'TransactionRecord',
    'TransactionStatus',
    'ParseResult',
    'FileFormat',
]
