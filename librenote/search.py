"""Incremental find with wraparound.

A ``FindSession`` lives from the moment the find prompt opens until it
closes. Between those points it remembers where the last search stopped,
so pressing "find next" repeatedly walks through every match.

When a search runs off the end of the document (or the start, going
backward) nothing is selected; the resume point jumps to the opposite end
and the *next* call continues from there. A single call never scans the
document twice.
"""

import logging
from enum import Enum
from typing import Callable, Optional

from .model import TextBuffer

logger = logging.getLogger(__name__)


class SearchDirection(Enum):
    FORWARD = "forward"
    BACKWARD = "backward"


class SearchState(Enum):
    IDLE = "idle"
    SESSION_ACTIVE = "session_active"


class FindSession:
    """Literal, case-sensitive search over a TextBuffer.

    Attributes:
        query: The text to look for. Empty means every find is a no-op.
            Changing it mid-session does not move the resume point.
        cursor: Offset the next search starts from (exclusive). Forward
            searches look at or after it, backward ones before it.
        initialized: Whether ``cursor`` has been set in this session.
    """

    def __init__(self, buffer: TextBuffer, query: str = "",
                 reveal: Optional[Callable[[int, int], None]] = None):
        self.buffer = buffer
        self.query = query
        self.reveal = reveal
        self.cursor = 0
        self.initialized = False
        self.state = SearchState.IDLE

    @property
    def active(self) -> bool:
        return self.state == SearchState.SESSION_ACTIVE

    def open(self, query: Optional[str] = None):
        """Start a find session, optionally with a new query."""
        if query is not None:
            self.query = query
        self.initialized = False
        self.state = SearchState.SESSION_ACTIVE

    def close(self):
        self.state = SearchState.IDLE

    def find(self, direction: SearchDirection = SearchDirection.FORWARD) -> Optional[tuple[int, int]]:
        """Look for the next match and select it.

        Returns:
            The (start, end) span selected, or None when the query is empty
            or the search hit the document boundary.
        """
        if not self.active:
            raise RuntimeError("find() called outside a find session")
        if not self.query:
            return None

        content = self.buffer.content
        forward = direction == SearchDirection.FORWARD
        if not self.initialized:
            self.cursor = 0 if forward else len(content)
            self.initialized = True
        # The buffer may have shrunk since the last search
        self.cursor = min(self.cursor, len(content))

        if forward:
            start = content.find(self.query, self.cursor)
        else:
            start = content.rfind(self.query, 0, self.cursor)

        if start == -1:
            self.cursor = 0 if forward else len(content)
            logger.debug("No match for %r, wrapped to %d", self.query, self.cursor)
            return None

        end = start + len(self.query)
        self.buffer.select_range(start, end)
        if self.reveal is not None:
            self.reveal(start, end)
        self.cursor = end if forward else start
        return start, end

    def find_next(self) -> Optional[tuple[int, int]]:
        return self.find(SearchDirection.FORWARD)

    def find_previous(self) -> Optional[tuple[int, int]]:
        return self.find(SearchDirection.BACKWARD)
