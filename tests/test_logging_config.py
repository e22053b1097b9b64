import unittest
import logging
import sys
import shutil
import tempfile
from pathlib import Path

# Add project root to sys.path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from cscompat.config import AppConfig
from cscompat.core.logging_config import HANDLER_TAG, setup_logging


class TestSetupLogging(unittest.TestCase):
    def setUp(self):
        self.test_dir = Path(tempfile.mkdtemp())
        self.config = AppConfig(
            plugin_dir=self.test_dir / 'plugins',
            data_dir=self.test_dir / 'data',
            log_dir=self.test_dir / 'logs',
        )
        self.root = logging.getLogger()
        self.saved_level = self.root.level
        self.saved_handlers = list(self.root.handlers)

    def tearDown(self):
        for handler in self.own_handlers():
            self.root.removeHandler(handler)
            handler.close()
        self.root.setLevel(self.saved_level)
        shutil.rmtree(self.test_dir)

    def own_handlers(self):
        return [h for h in self.root.handlers if getattr(h, HANDLER_TAG, False)]

    def test_writes_to_log_file_in_log_dir(self):
        log_file = setup_logging(self.config)
        logging.getLogger('cscompat.test').info('compat toggled')
        for handler in self.own_handlers():
            handler.flush()

        self.assertEqual(log_file, self.test_dir / 'logs' / 'cscompat.log')
        self.assertIn('compat toggled', log_file.read_text(encoding='utf-8'))

    def test_repeated_setup_replaces_only_its_own_handlers(self):
        setup_logging(self.config)
        setup_logging(self.config)

        self.assertEqual(len(self.own_handlers()), 2)
        for handler in self.saved_handlers:
            self.assertIn(handler, self.root.handlers)

    def test_debug_config_lowers_levels(self):
        self.config.debug = True
        setup_logging(self.config)

        self.assertEqual(self.root.level, logging.DEBUG)
        self.assertEqual(logging.getLogger('werkzeug').level, logging.WARNING)


if __name__ == '__main__':
    unittest.main()
