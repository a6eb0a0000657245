"""LibreNote - a minimal plain-text editor."""

import logging

from .document import Document
from .errors import DocumentBusyError, DocumentIOError, OutOfRangeError, RangeError
from .model import TextBuffer, TextView
from .persistence import PersistenceAdapter, load, save
from .position import LineColumn, PositionIndex, offset_to_line_col
from .search import FindSession, SearchDirection, SearchState

# Silent unless the application configures logging
logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    'Document',
    'DocumentBusyError',
    'DocumentIOError',
    'FindSession',
    'LineColumn',
    'OutOfRangeError',
    'PersistenceAdapter',
    'PositionIndex',
    'RangeError',
    'SearchDirection',
    'SearchState',
    'TextBuffer',
    'TextView',
    'load',
    'offset_to_line_col',
    'save',
]
