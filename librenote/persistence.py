"""Loading and saving documents.

This is the only module that touches the filesystem for document content.
Files are plain UTF-8 with no header; bytes are neither added nor
translated, so a document that is loaded and saved unchanged is written
back byte for byte.

Saves are atomic: the content goes to a temporary file in the target's
directory which then replaces the target, so readers see either the old
file or the complete new one.
"""

import errno
import logging
import os
import queue
import stat
import tempfile
import threading
from typing import Callable, Optional

from .constants import EditorConstants
from .errors import DocumentIOError

logger = logging.getLogger(__name__)


def _describe_error(verb: str, path: str, error: OSError) -> str:
    if isinstance(error, PermissionError):
        return f"Permission denied: cannot {verb} {path}"
    if isinstance(error, FileNotFoundError):
        return f"No such file: {path}"
    if isinstance(error, IsADirectoryError):
        return f"{path} is a directory"
    if error.errno == errno.ENOSPC:
        return "No space left on device"
    return f"Cannot {verb} {path}: {error.strerror or error}"


def load(path: str) -> str:
    """Read a whole file and decode it.

    Raises:
        DocumentIOError: if the file can't be read or isn't valid UTF-8.
    """
    try:
        with open(path, 'rb') as f:
            data = f.read()
    except OSError as e:
        logger.warning("Loading %s failed: %s", path, e)
        raise DocumentIOError(_describe_error("read", path, e), path) from e
    try:
        text = data.decode(EditorConstants.ENCODING)
    except UnicodeDecodeError as e:
        logger.warning("Loading %s failed: %s", path, e)
        raise DocumentIOError(f"{path} is not valid {EditorConstants.ENCODING_LABEL}", path) from e
    logger.debug("Loaded %d bytes from %s", len(data), path)
    return text


def _new_file_mode() -> int:
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def save(path: str, content: str) -> None:
    """Write content to path atomically.

    An existing target keeps its permission bits. On failure the target is
    left untouched and the temporary file is removed.

    Raises:
        DocumentIOError: if the content can't be encoded or written.
    """
    try:
        data = content.encode(EditorConstants.ENCODING)
    except UnicodeEncodeError as e:
        raise DocumentIOError(f"Cannot encode document as {EditorConstants.ENCODING_LABEL}", path) from e

    # Temp file in the same directory so the rename stays on one filesystem
    dir_name = os.path.dirname(path) or '.'
    prefix = EditorConstants.ATOMIC_SAVE_PREFIX + os.path.basename(path) + '.'
    temp_filename = None
    try:
        with tempfile.NamedTemporaryFile(mode='wb', dir=dir_name, prefix=prefix,
                                         suffix=EditorConstants.ATOMIC_SAVE_SUFFIX,
                                         delete=False) as temp_file:
            temp_filename = temp_file.name
            temp_file.write(data)
            temp_file.flush()
            os.fsync(temp_file.fileno())

        try:
            mode = stat.S_IMODE(os.stat(path).st_mode)
        except FileNotFoundError:
            mode = _new_file_mode()
        os.chmod(temp_filename, mode)

        os.replace(temp_filename, path)
    except OSError as e:
        logger.warning("Saving %s failed: %s", path, e)
        if temp_filename is not None and os.path.exists(temp_filename):
            try:
                os.remove(temp_filename)
            except OSError as cleanup_error:
                logger.warning("Could not remove %s: %s", temp_filename, cleanup_error)
        raise DocumentIOError(_describe_error("save to", path, e), path) from e
    logger.debug("Saved %d bytes to %s", len(data), path)


class IORequest:
    """Handle for a load or save running in the background."""

    def __init__(self, kind: str, path: str, on_done: Callable):
        self.kind = kind
        self.path = path
        self.on_done = on_done
        self.cancelled = False
        self._finished = threading.Event()

    def cancel(self):
        """Abandon the request; its callback will never run."""
        self.cancelled = True

    @property
    def finished(self) -> bool:
        return self._finished.is_set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the worker has finished; returns False on timeout."""
        return self._finished.wait(timeout)


class PersistenceAdapter:
    """Synchronous and background access to ``load`` and ``save``.

    Background requests run on a worker thread. Their results are queued and
    only handed to callbacks by ``dispatch_completions``, which the UI
    thread calls, so callbacks never run concurrently with editing.

    Args:
        wakeup: Called from the worker thread after a result is queued, so
            an event loop blocked in select() can notice it.
    """

    def __init__(self, wakeup: Optional[Callable[[], None]] = None):
        self.wakeup = wakeup
        self._completions: "queue.Queue[tuple[IORequest, object, Optional[DocumentIOError]]]" = queue.Queue()

    def load(self, path: str) -> str:
        return load(path)

    def save(self, path: str, content: str) -> None:
        save(path, content)

    def request_load(self, path: str, on_done: Callable[[Optional[str], Optional[DocumentIOError]], None]) -> IORequest:
        """Load in the background; ``on_done(text, error)`` runs on dispatch."""
        return self._submit(IORequest("load", path, on_done), load, path)

    def request_save(self, path: str, content: str,
                     on_done: Callable[[None, Optional[DocumentIOError]], None]) -> IORequest:
        """Save in the background; ``on_done(None, error)`` runs on dispatch."""
        return self._submit(IORequest("save", path, on_done), save, path, content)

    def _submit(self, request: IORequest, func, *args) -> IORequest:
        def worker():
            result, error = None, None
            try:
                result = func(*args)
            except DocumentIOError as e:
                error = e
            self._completions.put((request, result, error))
            request._finished.set()
            if self.wakeup is not None:
                self.wakeup()

        logger.debug("Starting background %s of %s", request.kind, request.path)
        thread = threading.Thread(target=worker, name=f"librenote-{request.kind}", daemon=True)
        thread.start()
        return request

    def dispatch_completions(self) -> int:
        """Run callbacks for finished requests; returns how many ran."""
        count = 0
        while True:
            try:
                request, result, error = self._completions.get_nowait()
            except queue.Empty:
                break
            if request.cancelled:
                logger.debug("Discarding result of cancelled %s of %s", request.kind, request.path)
                continue
            request.on_done(result, error)
            count += 1
        return count
