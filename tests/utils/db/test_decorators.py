"""
Unit tests for database decorators.

Tests the decorator functionality including:
- Error handling (dynamodb_operation)
- Retry logic (retry_on_throttle)
"""

import unittest
from unittest.mock import patch
from botocore.exceptions import ClientError
from pydantic import BaseModel, field_validator

from utils.db.base import (
    dynamodb_operation,
    retry_on_throttle,
)


def throttle_error(code='ThrottlingException'):
    return ClientError({'Error': {'Code': code, 'Message': 'Throttled'}}, 'Scan')


class TestDynamoDBOperationDecorator(unittest.TestCase):
    """Tests for @dynamodb_operation decorator."""

    def test_successful_operation(self):
        @dynamodb_operation("test_op")
        def successful_function():
            return "success"

        self.assertEqual(successful_function(), "success")

    def test_client_error_reraised(self):
        @dynamodb_operation("test_op")
        def failing_function():
            raise ClientError(
                {'Error': {'Code': 'ResourceNotFoundException', 'Message': 'Not found'}},
                'BatchWriteItem'
            )

        with self.assertRaises(ClientError):
            failing_function()

    def test_validation_error_converted(self):
        """Test ValidationError is converted to ValueError."""
        class TestModel(BaseModel):
            value: int

            @field_validator('value')
            @classmethod
            def validate_value(cls, v):
                if v < 0:
                    raise ValueError('Must be positive')
                return v

        @dynamodb_operation("test_op")
        def validation_failing_function():
            TestModel(value=-1)

        with self.assertRaises(ValueError) as context:
            validation_failing_function()
        self.assertIn("Invalid data in test_op", str(context.exception))

    def test_other_exceptions_propagate(self):
        @dynamodb_operation()
        def generic_failing_function():
            raise RuntimeError("Transaction database not available")

        with self.assertRaises(RuntimeError):
            generic_failing_function()


@patch('utils.db.base.time.sleep')
class TestRetryOnThrottleDecorator(unittest.TestCase):
    """Tests for @retry_on_throttle decorator."""

    def test_retries_on_throttle(self, mock_sleep):
        attempt_count = [0]

        @retry_on_throttle(max_attempts=3, base_delay=0.1)
        def throttled_function():
            attempt_count[0] += 1
            if attempt_count[0] < 3:
                raise throttle_error()
            return "success"

        self.assertEqual(throttled_function(), "success")
        self.assertEqual(attempt_count[0], 3)
        # Exponential backoff between attempts
        self.assertEqual([c.args[0] for c in mock_sleep.call_args_list], [0.1, 0.2])

    def test_gives_up_after_max_attempts(self, mock_sleep):
        @retry_on_throttle(max_attempts=3, base_delay=0.01)
        def always_throttled():
            raise throttle_error('ProvisionedThroughputExceededException')

        with self.assertRaises(ClientError):
            always_throttled()
        self.assertEqual(mock_sleep.call_count, 2)

    def test_does_not_retry_non_throttle_errors(self, mock_sleep):
        attempt_count = [0]

        @retry_on_throttle(max_attempts=3, base_delay=0.01)
        def non_throttle_error():
            attempt_count[0] += 1
            raise throttle_error('ResourceNotFoundException')

        with self.assertRaises(ClientError):
            non_throttle_error()

        self.assertEqual(attempt_count[0], 1)
        mock_sleep.assert_not_called()

    def test_delay_is_capped(self, mock_sleep):
        @retry_on_throttle(max_attempts=4, base_delay=1.0, max_delay=1.5)
        def always_throttled():
            raise throttle_error()

        with self.assertRaises(ClientError):
            always_throttled()
        self.assertEqual([c.args[0] for c in mock_sleep.call_args_list], [1.0, 1.5, 1.5])
