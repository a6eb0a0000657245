"""The open document: buffer plus everything that belongs to one file."""

import logging
from typing import Callable, Optional

from .constants import EditorConstants
from .errors import DocumentBusyError, DocumentIOError
from .model import TextBuffer, TextView
from .persistence import IORequest, PersistenceAdapter
from .position import LineColumn, PositionIndex, format_status
from .search import FindSession

logger = logging.getLogger(__name__)


class Document:
    """Owns a TextBuffer and the state tied to the file it came from.

    Loads and saves are exclusive: while one is in flight ``busy`` is true,
    a second request raises DocumentBusyError, and so does
    ``ensure_editable`` so front ends can refuse edits.

    Attributes:
        filename: Path the document was loaded from or last saved to.
        modified: Whether the buffer changed since the last load or save.
        last_search: Query handed to the next find session.
        word_wrap: Whether front ends wrap long lines.
    """

    encoding_label = EditorConstants.ENCODING_LABEL

    def __init__(self, view: Optional[TextView] = None, clipboard=None,
                 persistence: Optional[PersistenceAdapter] = None, settings=None):
        self.buffer = TextBuffer(view, clipboard=clipboard)
        self.persistence = persistence or PersistenceAdapter()
        self.settings = settings
        self.positions = PositionIndex()
        self.filename: Optional[str] = None
        self.modified = False
        self.last_search = ""
        self.word_wrap = True
        self._request: Optional[IORequest] = None
        # A cancelled request whose worker may still be touching the file
        self._abandoned: Optional[IORequest] = None

    @property
    def busy(self) -> bool:
        if self._abandoned is not None and self._abandoned.finished:
            self._abandoned = None
        return self._request is not None or self._abandoned is not None

    def ensure_editable(self):
        if self.busy:
            request = self._request or self._abandoned
            raise DocumentBusyError(f"{request.kind} of {request.path} in progress")

    # --- Position reporting ---

    @property
    def cursor_position(self) -> LineColumn:
        return self.positions.offset_to_line_col(self.buffer, self.buffer.insertion_mark)

    def status_text(self) -> str:
        return format_status(self.cursor_position)

    # --- Loading and saving ---

    def _loaded(self, path: str, text: str):
        self.buffer.set_text(text)
        self.filename = path
        self.modified = False
        self._restore_settings()

    def _saved(self, path: str):
        self.filename = path
        self.modified = False
        self._store_settings()

    def _target(self, path: Optional[str]) -> str:
        target = path or self.filename
        if not target:
            raise ValueError("No filename to save to")
        return target

    def open(self, path: str):
        """Load a file into the buffer. On failure the buffer is untouched."""
        self.ensure_editable()
        text = self.persistence.load(path)
        self._loaded(path, text)

    def save(self, path: Optional[str] = None):
        """Save to ``path`` or to the current filename.

        Raises:
            ValueError: if there is no path to save to.
            DocumentIOError: if writing fails; the buffer is left as it was.
        """
        self.ensure_editable()
        target = self._target(path)
        self.persistence.save(target, self.buffer.get_text())
        self._saved(target)

    def request_open(self, path: str,
                     on_done: Optional[Callable[[Optional[DocumentIOError]], None]] = None) -> IORequest:
        """Start loading in the background; ``on_done(error)`` runs on dispatch."""
        self.ensure_editable()

        def finished(text, error):
            self._request = None
            if error is None:
                self._loaded(path, text)
            if on_done is not None:
                on_done(error)

        self._request = self.persistence.request_load(path, finished)
        return self._request

    def request_save(self, path: Optional[str] = None,
                     on_done: Optional[Callable[[Optional[DocumentIOError]], None]] = None) -> IORequest:
        """Start saving in the background; ``on_done(error)`` runs on dispatch."""
        self.ensure_editable()
        target = self._target(path)

        def finished(_, error):
            self._request = None
            if error is None:
                self._saved(target)
            if on_done is not None:
                on_done(error)

        self._request = self.persistence.request_save(target, self.buffer.get_text(), finished)
        return self._request

    def cancel_io(self):
        """Abandon an in-flight load or save; its result is discarded.

        The document stays busy until the worker has finished, so a later
        save can never be overwritten by the abandoned one.
        """
        if self._request is not None:
            logger.info("Abandoning %s of %s", self._request.kind, self._request.path)
            self._request.cancel()
            self._abandoned = self._request
            self._request = None

    # --- Find sessions ---

    def start_find(self, reveal: Optional[Callable[[int, int], None]] = None) -> FindSession:
        """Open a find session seeded with the last search term."""
        session = FindSession(self.buffer, self.last_search, reveal=reveal)
        session.open()
        return session

    def end_find(self, session: FindSession):
        session.close()
        self.last_search = session.query

    # --- Settings ---

    def _restore_settings(self):
        if self.settings is None:
            return
        stored = self.settings.load_settings(self.filename)
        self.word_wrap = stored.get("word_wrap", self.word_wrap)
        self.last_search = stored.get("last_search", self.last_search)

    def _store_settings(self):
        if self.settings is None:
            return
        self.settings.save_settings(self.filename, {
            "word_wrap": self.word_wrap,
            "last_search": self.last_search,
        })
