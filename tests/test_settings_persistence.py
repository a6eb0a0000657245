"""Unit tests for settings persistence."""

import json
import os
import shutil
import tempfile
import unittest
from pathlib import Path

from librenote.settings_persistence import SettingsPersistence


class TestSettingsPersistence(unittest.TestCase):
    """Test settings persistence functionality."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.config_dir = Path(self.temp_dir) / "config"
        self.persistence = SettingsPersistence(config_dir=self.config_dir)
        self.test_doc_path = os.path.join(self.temp_dir, "test_document.txt")

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_save_and_load_settings(self):
        settings = {"word_wrap": False, "last_search": "needle"}
        self.assertTrue(self.persistence.save_settings(self.test_doc_path, settings))

        self.persistence.clear_cache()
        self.assertEqual(self.persistence.load_settings(self.test_doc_path), settings)

    def test_settings_keyed_by_absolute_path(self):
        self.persistence.save_settings(self.test_doc_path, {"word_wrap": False})
        with open(self.config_dir / "settings.json", encoding="utf-8") as f:
            data = json.load(f)
        self.assertIn(os.path.abspath(self.test_doc_path), data)

    def test_load_nonexistent_settings(self):
        self.assertEqual(self.persistence.load_settings("/nonexistent/doc.txt"), {})

    def test_none_path(self):
        self.assertEqual(self.persistence.load_settings(None), {})
        self.assertFalse(self.persistence.save_settings(None, {"word_wrap": True}))

    def test_invalid_values_are_dropped(self):
        self.persistence.save_settings(self.test_doc_path, {
            "word_wrap": "yes",
            "last_search": 42,
            "future_option": [1, 2],
        })
        self.persistence.clear_cache()
        self.assertEqual(self.persistence.load_settings(self.test_doc_path), {"future_option": [1, 2]})

    def test_corrupted_settings_file(self):
        self.config_dir.mkdir(parents=True)
        (self.config_dir / "settings.json").write_text("{ not json", encoding="utf-8")
        self.assertEqual(self.persistence.load_settings(self.test_doc_path), {})

    def test_settings_file_not_a_dict(self):
        self.config_dir.mkdir(parents=True)
        (self.config_dir / "settings.json").write_text("[1, 2, 3]", encoding="utf-8")
        self.assertEqual(self.persistence.load_settings(self.test_doc_path), {})

    def test_multiple_documents(self):
        other = os.path.join(self.temp_dir, "other.txt")
        self.persistence.save_settings(self.test_doc_path, {"word_wrap": True})
        self.persistence.save_settings(other, {"word_wrap": False})
        self.persistence.clear_cache()
        self.assertTrue(self.persistence.load_settings(self.test_doc_path)["word_wrap"])
        self.assertFalse(self.persistence.load_settings(other)["word_wrap"])

    def test_validate_setting(self):
        self.assertTrue(SettingsPersistence.validate_setting("word_wrap", True))
        self.assertFalse(SettingsPersistence.validate_setting("word_wrap", 1))
        self.assertTrue(SettingsPersistence.validate_setting("last_search", ""))
        self.assertTrue(SettingsPersistence.validate_setting("unknown", None))

    def test_unwritable_config_dir(self):
        blocker = Path(self.temp_dir) / "blocker"
        blocker.write_text("a file where a directory should be", encoding="utf-8")
        persistence = SettingsPersistence(config_dir=blocker / "config")
        self.assertFalse(persistence.save_settings(self.test_doc_path, {"word_wrap": True}))


if __name__ == '__main__':
    unittest.main()
