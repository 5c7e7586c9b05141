import unittest
from datetime import datetime, timezone
from unittest.mock import patch

from services.upload_service import (
    process_upload,
    build_error_log_key,
    write_error_log,
    EMPTY_FILE_MESSAGE,
    TOO_LARGE_MESSAGE,
)

VALID_CSV = b"TXN001,100.50,USD,17/10/2025 14:30:00,Approved\nTXN002,5,EUR,18/10/2025 10:00:00,Finished\n"


class TestUploadService(unittest.TestCase):
    @patch('services.upload_service.put_object')
    @patch('services.upload_service.save_transactions')
    def test_valid_upload_is_saved(self, mock_save, mock_put):
        mock_save.return_value = 2

        outcome = process_upload(VALID_CSV, "batch.csv")

        self.assertTrue(outcome.accepted)
        self.assertEqual(outcome.count, 2)
        self.assertEqual(outcome.message, "File processed successfully")
        saved = mock_save.call_args[0][0]
        self.assertEqual([r.transaction_id for r in saved], ["TXN001", "TXN002"])
        mock_put.assert_not_called()

    @patch('services.upload_service.put_object')
    @patch('services.upload_service.save_transactions')
    def test_invalid_upload_writes_error_log(self, mock_save, mock_put):
        mock_put.return_value = True
        content = VALID_CSV + b",-5,US,bad-date,Weird\n"

        outcome = process_upload(content, "batch.csv")

        self.assertFalse(outcome.accepted)
        self.assertEqual(outcome.errors, ["CSV record (id=''): TransactionId missing"])
        mock_save.assert_not_called()
        key, body, content_type = mock_put.call_args[0]
        self.assertTrue(key.startswith("logs/invalid_"))
        self.assertEqual(outcome.error_log_key, key)
        self.assertEqual(body, b"CSV record (id=''): TransactionId missing\n")
        self.assertEqual(content_type, "text/plain")

    @patch('services.upload_service.put_object')
    @patch('services.upload_service.save_transactions')
    def test_oversized_amount_rejects_whole_batch(self, mock_save, mock_put):
        mock_put.return_value = True
        rows = [f"TXN{i:03d},10.00,USD,17/10/2025 14:30:00,Approved" for i in range(30)]
        rows.append("BIG," + "9" * 40 + ",USD,17/10/2025 14:30:00,Approved")

        outcome = process_upload("\n".join(rows).encode("utf-8"), "batch.csv")

        self.assertFalse(outcome.accepted)
        self.assertEqual(outcome.errors, ["CSV record (id='BIG'): Amount invalid ('" + "9" * 40 + "')"])
        mock_save.assert_not_called()

    @patch('services.upload_service.put_object')
    @patch('services.upload_service.save_transactions')
    def test_unknown_format(self, mock_save, mock_put):
        mock_put.return_value = True

        outcome = process_upload(b"anything", "data.txt")

        self.assertFalse(outcome.accepted)
        self.assertEqual(outcome.errors, ["Unknown file format"])
        mock_save.assert_not_called()

    @patch('services.upload_service.parse_transactions')
    def test_empty_file_rejected_before_parsing(self, mock_parse):
        outcome = process_upload(b"", "batch.csv")

        self.assertFalse(outcome.accepted)
        self.assertEqual(outcome.message, EMPTY_FILE_MESSAGE)
        mock_parse.assert_not_called()

    @patch.dict('os.environ', {'MAX_UPLOAD_BYTES': '16'})
    @patch('services.upload_service.parse_transactions')
    def test_oversized_file_rejected_before_parsing(self, mock_parse):
        outcome = process_upload(VALID_CSV, "batch.csv")

        self.assertFalse(outcome.accepted)
        self.assertEqual(outcome.message, TOO_LARGE_MESSAGE)
        mock_parse.assert_not_called()

    @patch('services.upload_service.put_object')
    def test_error_log_upload_failure(self, mock_put):
        mock_put.return_value = False
        self.assertIsNone(write_error_log(["bad"]))

    def test_build_error_log_key(self):
        key = build_error_log_key(datetime(2025, 10, 17, 2, 13, 49, tzinfo=timezone.utc))
        self.assertEqual(key, "logs/invalid_20251017_021349.log")
