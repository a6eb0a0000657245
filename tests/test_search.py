"""Test find sessions and wraparound."""

import unittest
from unittest.mock import Mock

from librenote.model import TextBuffer
from librenote.search import FindSession, SearchDirection, SearchState


class TestFindForward(unittest.TestCase):
    """Test forward search through a document."""

    def setUp(self):
        self.buffer = TextBuffer(text="alpha beta alpha")
        self.session = FindSession(self.buffer, "alpha")
        self.session.open()

    def test_session_states(self):
        self.assertEqual(self.session.state, SearchState.SESSION_ACTIVE)
        self.session.close()
        self.assertEqual(self.session.state, SearchState.IDLE)
        self.assertFalse(self.session.active)

    def test_finds_each_match_then_wraps(self):
        self.assertEqual(self.session.find(), (0, 5))
        self.assertEqual(self.buffer.get_selected_text(), "alpha")
        self.assertEqual(self.session.find(), (11, 16))
        self.assertEqual(self.buffer.selection_start, 11)

        # Hitting the end selects nothing and leaves the selection alone
        self.assertIsNone(self.session.find())
        self.assertEqual((self.buffer.selection_start, self.buffer.selection_end), (11, 16))

        # The next search starts over from the top
        self.assertEqual(self.session.find(), (0, 5))

    def test_no_match_at_all(self):
        self.session.query = "gamma"
        self.assertIsNone(self.session.find())
        self.assertIsNone(self.session.find())

    def test_empty_query_does_nothing(self):
        self.session.query = ""
        self.buffer.move_cursor(3)
        self.assertIsNone(self.session.find())
        self.assertEqual(self.buffer.insertion_mark, 3)
        self.assertFalse(self.session.initialized)

    def test_search_is_case_sensitive(self):
        self.buffer.set_text("Alpha alpha")
        self.assertEqual(self.session.find(), (6, 11))

    def test_changing_query_keeps_position(self):
        self.session.find()  # alpha at 0, cursor now 5
        self.session.query = "a"
        self.assertEqual(self.session.find(), (9, 10))  # The 'a' in "beta"

    def test_reopen_starts_from_top(self):
        self.session.find()
        self.session.find()
        self.session.close()
        self.session.open()
        self.assertEqual(self.session.find(), (0, 5))

    def test_open_with_new_query(self):
        self.session.open("beta")
        self.assertEqual(self.session.find(), (6, 10))

    def test_reveal_callback(self):
        reveal = Mock()
        session = FindSession(self.buffer, "beta", reveal=reveal)
        session.open()
        session.find()
        reveal.assert_called_once_with(6, 10)

    def test_cursor_clamped_after_buffer_shrinks(self):
        self.session.find()
        self.session.find()  # cursor at 16
        self.buffer.set_text("alpha")
        self.assertIsNone(self.session.find())
        self.assertEqual(self.session.find(), (0, 5))

    def test_find_outside_session_raises(self):
        session = FindSession(self.buffer, "alpha")
        with self.assertRaises(RuntimeError):
            session.find()


class TestFindBackward(unittest.TestCase):
    """Test backward search."""

    def setUp(self):
        self.buffer = TextBuffer(text="alpha beta alpha")
        self.session = FindSession(self.buffer, "alpha")
        self.session.open()

    def test_backward_starts_at_end(self):
        self.assertEqual(self.session.find(SearchDirection.BACKWARD), (11, 16))
        self.assertEqual(self.session.find_previous(), (0, 5))
        self.assertIsNone(self.session.find_previous())
        self.assertEqual(self.session.find_previous(), (11, 16))

    def test_direction_change(self):
        self.assertEqual(self.session.find_next(), (0, 5))
        self.assertEqual(self.session.find_next(), (11, 16))
        # Resuming backward from the match end finds that match again first
        self.assertEqual(self.session.find_previous(), (11, 16))
        self.assertEqual(self.session.find_previous(), (0, 5))

    def test_overlapping_matches(self):
        self.buffer.set_text("aaaa")
        self.session.open("aa")
        self.assertEqual(self.session.find_next(), (0, 2))
        self.assertEqual(self.session.find_next(), (2, 4))
        self.assertIsNone(self.session.find_next())
