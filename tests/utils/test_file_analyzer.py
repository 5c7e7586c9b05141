"""
Unit tests for file analyzer utilities.
"""
import unittest

from utils.file_analyzer import detect_format_from_extension
from models.transaction_file import FileFormat


class TestFileAnalyzer(unittest.TestCase):
    def test_detect_format_from_extension(self):
        test_cases = [
            ("transactions.csv", FileFormat.CSV),
            ("TRANSACTIONS.CSV", FileFormat.CSV),
            ("upload/2025/batch.Xml", FileFormat.XML),
            ("data.txt", FileFormat.OTHER),
            ("data.csv.bak", FileFormat.OTHER),
            ("data", FileFormat.OTHER),
            ("", FileFormat.OTHER),
            (None, FileFormat.OTHER),
        ]
        for filename, expected in test_cases:
            with self.subTest(filename=filename):
                self.assertEqual(detect_format_from_extension(filename), expected)
