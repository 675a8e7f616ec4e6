import unittest
from unittest.mock import MagicMock, patch

import main
from db.errors import DatabaseConnectionError
from db.init_db import CORE_TABLES


class TestMain(unittest.TestCase):
    """Test the startup routine"""

    @patch("main.create_tables")
    @patch("main.Database")
    def test_successful_startup(self, database_cls, create_tables):
        db = database_cls.get_instance.return_value
        db.get_row_count.return_value = 3

        self.assertEqual(main.main(), 0)

        create_tables.assert_called_once_with(db)
        self.assertEqual(db.get_row_count.call_count, len(CORE_TABLES))
        db.close.assert_called_once()

    @patch("main.Database")
    def test_connection_failure_exit_code(self, database_cls):
        database_cls.get_instance.side_effect = DatabaseConnectionError("Database connection failed: refused")

        self.assertEqual(main.main(), 1)

    def test_report_table_counts(self):
        db = MagicMock()
        db.get_row_count.side_effect = range(len(CORE_TABLES))

        counts = main.report_table_counts(db)

        self.assertEqual(list(counts), list(CORE_TABLES))
        self.assertEqual(counts["users"], 0)


if __name__ == '__main__':
    unittest.main()
