"""Main editor controller for the terminal front end."""

import logging
import os
import sys
import select
import signal
import termios
from typing import Optional

from .clipboard import SystemClipboard
from .commands import CommandRegistry
from .constants import EditorConstants
from .document import Document
from .errors import DocumentBusyError, DocumentIOError
from .keyboard import KeyboardHandler, KeyEvent, KeyType
from .persistence import PersistenceAdapter
from .search import FindSession, SearchDirection
from .terminal import TerminalInterface
from .view import TerminalTextView

logger = logging.getLogger(__name__)

FIND_HINT = "Enter/Down next  Up previous  Esc close"


class Editor:
    """Terminal text editor application controller."""

    def __init__(self, terminal: Optional[TerminalInterface] = None, clipboard=None, settings=None):
        self.terminal = terminal or TerminalInterface()
        self.keyboard = KeyboardHandler(self.terminal)
        self.view = TerminalTextView(num_rows=self.terminal.height, num_columns=self.terminal.width)
        # Wakes the select() loop on resize, Ctrl-C and finished file I/O
        self._wakeup_r, self._wakeup_w = os.pipe()
        self.document = Document(
            self.view,
            clipboard=clipboard if clipboard is not None else SystemClipboard(),
            persistence=PersistenceAdapter(wakeup=self._wake_for_io),
            settings=settings,
        )
        self.command_registry = CommandRegistry()
        self.running = False
        self.status_message: Optional[str] = None
        # None, 'find', 'open_filename', 'save_filename', 'save_filename_quit' or 'quit_confirm'
        self.prompt_mode: Optional[str] = None
        self.prompt_input = ""
        self.help_visible = False
        self.find_session: Optional[FindSession] = None
        self._quit_after_save = False
        self._ctrl_c_pressed = False

    @property
    def buffer(self):
        return self.document.buffer

    # --- Event loop ---

    def _wake(self, marker: bytes):
        try:
            os.write(self._wakeup_w, marker)
        except OSError as e:
            logger.debug("Wakeup pipe unavailable: %s", e)

    def _wake_for_io(self):
        self._wake(EditorConstants.IO_PIPE_MARKER)

    def _handle_resize(self, signum, frame):
        del signum, frame  # Unused
        self._wake(EditorConstants.RESIZE_PIPE_MARKER)

    def _handle_sigint(self, signum, frame):
        """Treat Ctrl-C as the copy command."""
        del signum, frame  # Unused
        self._ctrl_c_pressed = True
        self._wake(b'C')

    def _disable_flow_control(self):
        """Let Ctrl-S, Ctrl-Q and Ctrl-V reach the editor; returns the old tty settings."""
        try:
            old_settings = termios.tcgetattr(sys.stdin)
        except (termios.error, OSError):
            return None
        new_settings = list(old_settings)
        new_settings[0] &= ~(termios.IXON | termios.IXOFF)
        new_settings[3] &= ~getattr(termios, 'IEXTEN', 0)
        termios.tcsetattr(sys.stdin, termios.TCSANOW, new_settings)
        return old_settings

    def run(self):
        """Run the main editor loop."""
        self.terminal.setup()
        self.running = True
        original_winch_handler = signal.signal(signal.SIGWINCH, self._handle_resize)
        original_int_handler = signal.signal(signal.SIGINT, self._handle_sigint)
        old_settings = self._disable_flow_control()
        try:
            need_draw = True
            while self.running:
                if need_draw:
                    self._draw()
                    need_draw = False

                try:
                    ready, _, _ = select.select([sys.stdin, self._wakeup_r], [], [])
                except InterruptedError:
                    continue

                if self._wakeup_r in ready:
                    data = os.read(self._wakeup_r, 1024)
                    if EditorConstants.IO_PIPE_MARKER in data:
                        self.document.persistence.dispatch_completions()
                    if EditorConstants.RESIZE_PIPE_MARKER in data:
                        self.terminal.invalidate_frame()
                    if self._ctrl_c_pressed:
                        self._ctrl_c_pressed = False
                        self._handle_key_event(KeyEvent(KeyType.CTRL, 'c', '\x03', is_ctrl=True))
                    need_draw = True
                elif sys.stdin in ready:
                    key_event = self.keyboard.get_key_event(timeout=0)
                    if key_event:
                        self._handle_key_event(key_event)
                        need_draw = True
        finally:
            if old_settings is not None:
                termios.tcsetattr(sys.stdin, termios.TCSANOW, old_settings)
            signal.signal(signal.SIGWINCH, original_winch_handler)
            signal.signal(signal.SIGINT, original_int_handler)
            self.terminal.cleanup()
            self.close()

    def close(self):
        """Release the wakeup pipe."""
        for fd in (self._wakeup_r, self._wakeup_w):
            try:
                os.close(fd)
            except OSError:
                pass

    # --- Drawing ---

    def _status_line(self) -> tuple[str, Optional[int]]:
        """Return the status bar text and, in prompt modes, the prompt cursor column."""
        term = self.terminal
        if self.prompt_mode == 'find':
            left = f" Find: {self.prompt_input}"
            return term.compose_status(left, self.status_message or FIND_HINT), len(left)
        if self.prompt_mode == 'open_filename':
            left = f" Open file: {self.prompt_input}"
            return term.compose_status(left), len(left)
        if self.prompt_mode in ('save_filename', 'save_filename_quit'):
            left = f" Save as: {self.prompt_input}"
            return term.compose_status(left), len(left)
        if self.prompt_mode == 'quit_confirm':
            left = " Save changes before quitting? (y, n) "
            return term.compose_status(left), len(left)

        if self.status_message:
            left = f" {self.status_message}"
        else:
            left = f" {self.document.status_text()}"
        name = os.path.basename(self.document.filename) if self.document.filename else "[No Name]"
        modified = "*" if self.document.modified else ""
        right = f"{name}{modified}  {self.document.encoding_label}"
        return term.compose_status(left, right), None

    def _draw(self):
        if self.help_visible:
            self.terminal.draw_help("LIBRENOTE HELP", EditorConstants.HELP_LINES,
                                    " Press any key to continue")
            return
        self.view.num_rows = self.terminal.height
        self.view.num_columns = self.terminal.width
        self.view.render()
        status, prompt_cursor = self._status_line()
        self.terminal.update_frame(
            self.view.lines,
            self.view.visual_cursor_y,
            self.view.visual_cursor_x,
            status,
            selection_ranges=self.view.get_selection_ranges(),
            prompt_cursor=prompt_cursor,
        )

    def show_help(self):
        self.help_visible = True

    def hide_help(self):
        self.help_visible = False
        self.terminal.invalidate_frame()

    def report_error(self, message: str, error: Exception):
        logger.warning("%s: %s", message, error)
        self.status_message = message

    # --- Key handling ---

    def _handle_key_event(self, key_event: KeyEvent):
        if self.help_visible:
            self.hide_help()
            return

        # Messages last until the next key press (prompts keep theirs)
        if self.status_message and not self.prompt_mode:
            self.status_message = None

        if self.prompt_mode is not None:
            self._handle_prompt_mode(key_event)
            return

        if key_event.key_type == KeyType.SPECIAL and key_event.value == 'escape':
            if self.document.busy:
                self.document.cancel_io()
                self.status_message = "Cancelled"
            return

        if self.command_registry.execute(self, key_event):
            self.document.modified = True

    def start_prompt(self, mode: str, initial: str = ""):
        self.prompt_mode = mode
        self.prompt_input = initial
        self.status_message = None

    def _end_prompt(self):
        self.prompt_mode = None
        self.prompt_input = ""

    @staticmethod
    def _is_cancel(key_event: KeyEvent) -> bool:
        return ((key_event.key_type == KeyType.SPECIAL and key_event.value == 'escape')
                or (key_event.key_type == KeyType.CTRL and key_event.value == 'g'))

    def _edit_prompt_input(self, key_event: KeyEvent) -> bool:
        """Apply backspace or a typed character to the prompt; True if handled."""
        if key_event.key_type == KeyType.SPECIAL and key_event.value == 'backspace':
            self.prompt_input = self.prompt_input[:-1]
            return True
        if key_event.key_type == KeyType.REGULAR and key_event.value and ord(key_event.value[0]) >= 32:
            self.prompt_input += key_event.value
            return True
        return False

    def _handle_prompt_mode(self, key_event: KeyEvent):
        if self.prompt_mode == 'find':
            self._handle_find_prompt(key_event)
        elif self.prompt_mode == 'quit_confirm':
            self._handle_quit_confirm(key_event)
        else:
            self._handle_filename_prompt(key_event)

    def _handle_filename_prompt(self, key_event: KeyEvent):
        if self._is_cancel(key_event):
            self._quit_after_save = False
            self._end_prompt()
            return
        if key_event.key_type == KeyType.SPECIAL and key_event.value == 'enter':
            mode, path = self.prompt_mode, self.prompt_input
            if not path:
                return
            self._end_prompt()
            if mode == 'open_filename':
                self.open_file(path)
            else:
                self._quit_after_save = mode == 'save_filename_quit'
                self.save_file(path)
            return
        self._edit_prompt_input(key_event)

    def _handle_quit_confirm(self, key_event: KeyEvent):
        if key_event.key_type != KeyType.REGULAR:
            return
        answer = key_event.value.lower()
        self._end_prompt()
        if answer == 'y':
            if self.document.filename:
                self._quit_after_save = True
                self.save_file(self.document.filename)
            else:
                self.start_prompt('save_filename_quit')
        elif answer == 'n':
            self.running = False

    # --- Find ---

    def start_find(self):
        """Open the find prompt, starting a new find session."""
        if self.find_session is None:
            self.find_session = self.document.start_find()
        self.start_prompt('find', self.find_session.query)

    def close_find(self):
        if self.find_session is not None:
            self.document.end_find(self.find_session)
            self.find_session = None
        self._end_prompt()
        self.status_message = None
        self.view.update_desired_x()

    def find(self, direction: SearchDirection):
        session = self.find_session
        if session is None or not session.query:
            return
        if session.find(direction) is None:
            edge = "end" if direction == SearchDirection.FORWARD else "start"
            self.status_message = f"Reached {edge} of document; search again to wrap"
        else:
            self.status_message = None

    def _handle_find_prompt(self, key_event: KeyEvent):
        if self._is_cancel(key_event):
            self.close_find()
            return
        forward_keys = {(KeyType.SPECIAL, 'enter'), (KeyType.SPECIAL, 'down'), (KeyType.CTRL, 'n')}
        backward_keys = {(KeyType.SPECIAL, 'up'), (KeyType.CTRL, 'p')}
        key = (key_event.key_type, key_event.value)
        if key in forward_keys:
            self.find(SearchDirection.FORWARD)
        elif key in backward_keys:
            self.find(SearchDirection.BACKWARD)
        elif self._edit_prompt_input(key_event):
            # A new query continues from where the last search stopped
            self.find_session.query = self.prompt_input
            self.status_message = None

    # --- Files ---

    def load_file(self, filename: str):
        """Load a file at startup; a missing file starts a new document with that name."""
        try:
            self.document.open(filename)
        except DocumentIOError as e:
            if not isinstance(e.__cause__, FileNotFoundError):
                raise
            self.document.filename = filename
            self.status_message = f"New file: {filename}"
        self.view.set_word_wrap(self.document.word_wrap)

    def open_file(self, filename: str):
        """Open a file in the background, replacing the document when it arrives."""
        def finished(error):
            if error is not None:
                self.report_error(str(error), error)
                return
            self.view.set_word_wrap(self.document.word_wrap)
            self.status_message = f"Opened {filename}"

        try:
            self.document.request_open(filename, finished)
        except DocumentBusyError as e:
            self.report_error("Busy: wait for the file operation to finish", e)
            return
        self.status_message = f"Opening {filename}..."

    def save_file(self, filename: str):
        """Save in the background; quits afterwards if a quit is pending."""
        def finished(error):
            if error is not None:
                self._quit_after_save = False
                self.report_error(str(error), error)
                return
            self.status_message = f"Saved to {filename}"
            if self._quit_after_save:
                self.running = False

        try:
            self.document.request_save(filename, finished)
        except DocumentBusyError as e:
            self._quit_after_save = False
            self.report_error("Busy: wait for the file operation to finish", e)
            return
        self.status_message = f"Saving {filename}..."

    def handle_save(self):
        """Save to the current file, asking for a name if there is none."""
        if self.document.filename:
            self.save_file(self.document.filename)
        else:
            self.start_prompt('save_filename')

    def toggle_word_wrap(self):
        self.document.word_wrap = not self.document.word_wrap
        self.view.set_word_wrap(self.document.word_wrap)
        self.status_message = f"Word wrap {'on' if self.document.word_wrap else 'off'}"
