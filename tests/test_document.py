"""Test the Document: file state, busy handling and find sessions."""

import os
import shutil
import tempfile
import threading
import unittest
from pathlib import Path
from unittest.mock import patch

from librenote import persistence
from librenote.document import Document
from librenote.errors import DocumentBusyError, DocumentIOError
from librenote.settings_persistence import SettingsPersistence


class TestDocumentFiles(unittest.TestCase):
    """Test opening and saving through a Document."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.path = os.path.join(self.temp_dir, "notes.txt")
        with open(self.path, "w", encoding="utf-8") as f:
            f.write("first line\nsecond line")
        self.document = Document()

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_open(self):
        self.document.open(self.path)
        self.assertEqual(self.document.buffer.get_text(), "first line\nsecond line")
        self.assertEqual(self.document.filename, self.path)
        self.assertFalse(self.document.modified)
        self.assertEqual(self.document.buffer.insertion_mark, 0)

    def test_failed_open_leaves_buffer(self):
        self.document.buffer.set_text("unsaved work")
        with self.assertRaises(DocumentIOError):
            self.document.open(os.path.join(self.temp_dir, "missing.txt"))
        self.assertEqual(self.document.buffer.get_text(), "unsaved work")
        self.assertIsNone(self.document.filename)

    def test_save_to_new_path(self):
        self.document.buffer.set_text("fresh")
        self.document.modified = True
        target = os.path.join(self.temp_dir, "fresh.txt")
        self.document.save(target)
        self.assertEqual(self.document.filename, target)
        self.assertFalse(self.document.modified)
        with open(target, encoding="utf-8") as f:
            self.assertEqual(f.read(), "fresh")

    def test_save_without_filename(self):
        with self.assertRaises(ValueError):
            self.document.save()

    def test_failed_save_keeps_state(self):
        self.document.open(self.path)
        self.document.buffer.insert_at(0, "edited ")
        self.document.modified = True

        with patch("librenote.persistence.os.replace", side_effect=OSError(5, "I/O error")):
            with self.assertRaises(DocumentIOError):
                self.document.save()

        self.assertTrue(self.document.modified)
        self.assertEqual(self.document.buffer.get_text(), "edited first line\nsecond line")
        with open(self.path, encoding="utf-8") as f:
            self.assertEqual(f.read(), "first line\nsecond line")

    def test_status_text(self):
        self.document.open(self.path)
        self.document.buffer.move_cursor(14)
        self.assertEqual(self.document.status_text(), "Line: 2, Column: 4")


class TestDocumentBusy(unittest.TestCase):
    """Test background requests and the busy flag."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.path = os.path.join(self.temp_dir, "notes.txt")
        with open(self.path, "w", encoding="utf-8") as f:
            f.write("background")
        self.document = Document()

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_busy_until_dispatched(self):
        errors = []
        request = self.document.request_open(self.path, errors.append)
        self.assertTrue(self.document.busy)
        with self.assertRaises(DocumentBusyError):
            self.document.ensure_editable()
        with self.assertRaises(DocumentBusyError):
            self.document.request_save(self.path)

        request.wait(5)
        self.document.persistence.dispatch_completions()

        self.assertFalse(self.document.busy)
        self.assertEqual(errors, [None])
        self.assertEqual(self.document.buffer.get_text(), "background")

    def test_request_save(self):
        self.document.buffer.set_text("saved later")
        self.document.modified = True
        errors = []
        request = self.document.request_save(self.path, errors.append)
        request.wait(5)
        self.document.persistence.dispatch_completions()
        self.assertEqual(errors, [None])
        self.assertFalse(self.document.modified)

    def test_request_save_failure(self):
        self.document.modified = True
        errors = []
        target = os.path.join(self.temp_dir, "missing_dir", "x.txt")
        request = self.document.request_save(target, errors.append)
        request.wait(5)
        self.document.persistence.dispatch_completions()
        self.assertIsInstance(errors[0], DocumentIOError)
        self.assertTrue(self.document.modified)
        self.assertIsNone(self.document.filename)

    def test_cancel_io(self):
        errors = []
        request = self.document.request_open(self.path, errors.append)
        self.document.cancel_io()
        request.wait(5)
        self.assertFalse(self.document.busy)
        self.document.persistence.dispatch_completions()
        self.assertEqual(errors, [])
        self.assertEqual(self.document.buffer.get_text(), "")

    def test_cancelled_save_cannot_overwrite_later_save(self):
        gate = threading.Event()
        real_save = persistence.save

        def slow_save(path, content):
            if content == "old":
                gate.wait(5)
            real_save(path, content)

        self.document.buffer.set_text("old")
        with patch("librenote.persistence.save", side_effect=slow_save):
            request = self.document.request_save(self.path)
            self.document.cancel_io()
            self.document.buffer.set_text("new")

            # The abandoned worker still owns the file
            self.assertTrue(self.document.busy)
            with self.assertRaises(DocumentBusyError):
                self.document.save()

            gate.set()
            self.assertTrue(request.wait(5))

        self.assertFalse(self.document.busy)
        self.document.save()
        self.assertEqual(self.document.persistence.dispatch_completions(), 0)
        self.assertFalse(self.document.modified)
        with open(self.path, encoding="utf-8") as f:
            self.assertEqual(f.read(), "new")


class TestDocumentFindAndSettings(unittest.TestCase):
    """Test find sessions and per-document settings."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.settings = SettingsPersistence(config_dir=Path(self.temp_dir) / "config")
        self.path = os.path.join(self.temp_dir, "notes.txt")
        with open(self.path, "w", encoding="utf-8") as f:
            f.write("one two one")

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_find_session_remembers_query(self):
        document = Document()
        document.buffer.set_text("one two one")
        session = document.start_find()
        self.assertEqual(session.query, "")
        session.query = "two"
        self.assertEqual(session.find(), (4, 7))
        document.end_find(session)
        self.assertFalse(session.active)

        next_session = document.start_find()
        self.assertEqual(next_session.query, "two")
        self.assertTrue(next_session.active)
        self.assertFalse(next_session.initialized)

    def test_settings_survive_reopen(self):
        document = Document(settings=self.settings)
        document.open(self.path)
        document.word_wrap = False
        document.last_search = "one"
        document.save()

        reopened = Document(settings=SettingsPersistence(config_dir=Path(self.temp_dir) / "config"))
        reopened.open(self.path)
        self.assertFalse(reopened.word_wrap)
        self.assertEqual(reopened.last_search, "one")

    def test_no_settings_without_store(self):
        document = Document()
        document.open(self.path)
        self.assertTrue(document.word_wrap)
        self.assertEqual(document.last_search, "")
