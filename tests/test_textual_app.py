"""Tests for the Textual front end."""

import asyncio
import os
import shutil
import tempfile

import pytest
from unittest.mock import patch
from textual.widgets.text_area import Selection

from librenote.document import Document
from librenote.textual_app import LibreNoteApp


def run(coroutine):
    return asyncio.run(coroutine)


@pytest.fixture
def notes_file():
    temp_dir = tempfile.mkdtemp()
    path = os.path.join(temp_dir, "notes.txt")
    with open(path, "w", encoding="utf-8") as f:
        f.write("alpha beta alpha")
    yield path
    shutil.rmtree(temp_dir, ignore_errors=True)


def test_app_creation():
    app = LibreNoteApp()
    assert app.filename is None
    assert isinstance(app.document, Document)
    assert app.find_session is None


def test_bindings_win_over_text_area():
    # TextArea binds ctrl+f itself, so the app's keys must take priority
    priority = {binding.key for binding in LibreNoteApp.BINDINGS if binding.priority}
    assert {"ctrl+q", "ctrl+s", "ctrl+f"} <= priority


def test_location_offset_mapping():
    app = LibreNoteApp()
    app.document.buffer.set_text("ab\ncde")
    assert app._offset((1, 2)) == 5
    assert app._location(5) == (1, 2)
    assert app._location(0) == (0, 0)
    # Columns past the end of a row clamp to the row end
    assert app._offset((0, 10)) == 2


def test_typing_is_mirrored_into_document():
    async def scenario():
        app = LibreNoteApp()
        async with app.run_test() as pilot:
            await pilot.press("h", "i", "enter", "y", "o")
            await pilot.pause()
            assert app.document.buffer.get_text() == "hi\nyo"
            assert app.document.modified
            assert app.status_line == "Line: 2, Column: 3    UTF-8"

            await pilot.press("shift+left", "shift+left")
            await pilot.pause()
            buffer = app.document.buffer
            assert buffer.get_selected_text() == "yo"
            assert buffer.insertion_mark == 3
            assert app.status_line == "Line: 2, Column: 1    UTF-8"

    run(scenario())


def test_find_bar_walks_matches(notes_file):
    async def scenario():
        app = LibreNoteApp(filename=notes_file)
        async with app.run_test() as pilot:
            await pilot.press("ctrl+f")
            await pilot.press("a", "l", "p", "h", "a")
            await pilot.press("enter")
            await pilot.pause()
            assert app.find_session.query == "alpha"
            assert app.text_area.selection == Selection((0, 5), (0, 0))
            assert app.document.buffer.insertion_mark == 0
            assert app.status_line == "Line: 1, Column: 1    UTF-8"

            await pilot.press("enter")
            await pilot.pause()
            buffer = app.document.buffer
            assert app.text_area.selection == Selection((0, 16), (0, 11))
            assert (buffer.selection_start, buffer.selection_end) == (11, 16)
            assert buffer.insertion_mark == 11
            assert app.status_line == "Line: 1, Column: 12    UTF-8"

            # Off the end: nothing moves, the next search wraps
            await pilot.press("enter")
            await pilot.pause()
            assert app.text_area.selection == Selection((0, 16), (0, 11))
            await pilot.press("enter")
            await pilot.pause()
            assert app.text_area.selection == Selection((0, 5), (0, 0))

            assert not app.document.modified
            app.action_close_find()
            await pilot.pause()
            assert app.find_session is None
            assert app.document.last_search == "alpha"

    run(scenario())


def test_save_writes_file(notes_file):
    async def scenario():
        app = LibreNoteApp(filename=notes_file)
        async with app.run_test() as pilot:
            await pilot.press("z")
            await pilot.pause()
            assert app.document.modified
            await pilot.press("ctrl+s")
            await pilot.pause()
            assert not app.document.modified

    run(scenario())
    with open(notes_file, encoding="utf-8") as f:
        assert f.read() == "zalpha beta alpha"


def test_quit_asks_twice_when_modified():
    async def scenario():
        app = LibreNoteApp()
        async with app.run_test() as pilot:
            await pilot.press("x")
            await pilot.pause()
            with patch.object(app, "exit") as exit_app:
                await pilot.press("ctrl+q")
                await pilot.pause()
                exit_app.assert_not_called()
                await pilot.press("ctrl+q")
                await pilot.pause()
                exit_app.assert_called_once()

    run(scenario())
