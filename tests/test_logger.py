import json
import logging
import unittest
from decimal import Decimal

from utils.logger import ContextFormatter, get_logger


def make_record(msg, context=None):
    record = logging.LogRecord("db.connection", logging.INFO, __file__, 1, msg, None, None)
    if context is not None:
        record.context = context
    return record


class TestContextFormatter(unittest.TestCase):
    """Test structured context rendering"""

    def setUp(self):
        self.formatter = ContextFormatter("%(levelname)s | %(name)s | %(message)s")

    def test_plain_message_has_no_context_suffix(self):
        line = self.formatter.format(make_record("Database connection established successfully"))
        self.assertEqual(line, "INFO | db.connection | Database connection established successfully")

    def test_context_appended_as_json(self):
        line = self.formatter.format(make_record("Record inserted successfully", {"last_insert_id": 7}))
        message, _, payload = line.partition(" | Context: ")
        self.assertTrue(message.endswith("Record inserted successfully"))
        self.assertEqual(json.loads(payload), {"last_insert_id": 7})

    def test_non_json_values_are_stringified(self):
        line = self.formatter.format(make_record("Fetched", {"total": Decimal("10.50")}))
        self.assertTrue(line.endswith('| Context: {"total": "10.50"}'))

    def test_get_logger_returns_named_logger(self):
        logger = get_logger("tests.logger")
        self.assertEqual(logger.name, "tests.logger")
        formatters = [type(h.formatter) for h in logging.getLogger().handlers]
        self.assertIn(ContextFormatter, formatters)


if __name__ == '__main__':
    unittest.main()
