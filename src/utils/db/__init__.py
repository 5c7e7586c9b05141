"""
Database utilities for DynamoDB operations.

This module provides a clean interface for all database operations.
"""

# ============================================================================
# Core Infrastructure
# ============================================================================

from .base import (
    # Table management
    tables,
    DynamoDBTables,

    # Decorators
    dynamodb_operation,
    retry_on_throttle,
)

# ============================================================================
# Resource Operations
# ============================================================================

from .transactions import (
    save_transactions,
    list_transactions_by_currency,
    list_transactions_by_status,
    list_transactions_by_date_range,
)

__all__ = [
    'tables',
    'DynamoDBTables',
    'dynamodb_operation',
    'retry_on_throttle',
    'save_transactions',
    'list_transactions_by_currency',
    'list_transactions_by_status',
    'list_transactions_by_date_range',
]
