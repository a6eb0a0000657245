"""Textual front end driving the same Document and FindSession."""

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal
from textual.widgets import Button, Footer, Header, Input, Static, TextArea
from textual.widgets.text_area import Selection

from .document import Document
from .errors import DocumentIOError
from .search import SearchDirection


class LibreNoteApp(App):
    """Textual app: a TextArea mirrored into a Document, with a find bar."""

    CSS = """
    TextArea {
        border: none;
        height: 1fr;
    }
    #find-bar {
        height: auto;
    }
    #find-input {
        width: 1fr;
    }
    #status {
        height: 1;
        background: $panel;
    }
    """

    BINDINGS = [
        Binding("ctrl+q", "quit", "Quit", priority=True),
        Binding("ctrl+s", "save", "Save", priority=True),
        Binding("ctrl+f", "find", "Find", priority=True),
        Binding("f2", "toggle_wrap", "Word wrap"),
        Binding("escape", "close_find", "Close find", show=False),
    ]

    def __init__(self, filename=None, settings=None):
        super().__init__()
        self.filename = filename
        self.document = Document(settings=settings)
        self.find_session = None
        self._confirm_quit = False
        self.status_line = ""

    def compose(self) -> ComposeResult:
        yield Header()
        yield TextArea(id="editor", soft_wrap=True)
        with Horizontal(id="find-bar"):
            yield Input(placeholder="Find", id="find-input")
            yield Button("↓", id="find-next")
            yield Button("↑", id="find-prev")
        yield Static(id="status")
        yield Footer()

    @property
    def text_area(self) -> TextArea:
        return self.query_one("#editor", TextArea)

    def on_mount(self) -> None:
        self.query_one("#find-bar").display = False
        if self.filename:
            self._open(self.filename)
        self._update_status()
        self.text_area.focus()

    def _open(self, path: str) -> None:
        try:
            self.document.open(path)
        except DocumentIOError as e:
            if not isinstance(e.__cause__, FileNotFoundError):
                self.notify(str(e), severity="error")
                return
            self.document.filename = path
        self.text_area.load_text(self.document.buffer.get_text())
        self.text_area.soft_wrap = self.document.word_wrap
        self.sub_title = f"Editing: {path}"

    # --- Keeping the buffer in step with the widget ---

    def _offset(self, location: tuple[int, int]) -> int:
        row, col = location
        return self.document.positions.line_col_to_offset(self.document.buffer, row + 1, col + 1)

    def _location(self, offset: int) -> tuple[int, int]:
        line, column = self.document.positions.offset_to_line_col(self.document.buffer, offset)
        return (line - 1, column - 1)

    def on_text_area_changed(self, event: TextArea.Changed) -> None:
        text = event.text_area.text
        if text != self.document.buffer.content:
            self.document.buffer.set_text(text)
            self.document.modified = True
        self._mirror_selection(event.text_area.selection)

    def on_text_area_selection_changed(self, event: TextArea.SelectionChanged) -> None:
        self._mirror_selection(event.selection)

    def _mirror_selection(self, selection: Selection) -> None:
        # The selection's end is where the cursor is
        self.document.buffer.select_range(self._offset(selection.end), self._offset(selection.start))
        self._update_status()

    def _update_status(self) -> None:
        self.status_line = f"{self.document.status_text()}    {self.document.encoding_label}"
        self.query_one("#status", Static).update(self.status_line)

    # --- Find bar ---

    def action_find(self) -> None:
        if self.find_session is None:
            self.find_session = self.document.start_find()
        find_input = self.query_one("#find-input", Input)
        find_input.value = self.find_session.query
        self.query_one("#find-bar").display = True
        find_input.focus()

    def action_close_find(self) -> None:
        if self.find_session is None:
            return
        self.document.end_find(self.find_session)
        self.find_session = None
        self.query_one("#find-bar").display = False
        self.text_area.focus()

    def on_input_changed(self, event: Input.Changed) -> None:
        if event.input.id == "find-input" and self.find_session is not None:
            self.find_session.query = event.value

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id == "find-input":
            self._find(SearchDirection.FORWARD)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "find-next":
            self._find(SearchDirection.FORWARD)
        elif event.button.id == "find-prev":
            self._find(SearchDirection.BACKWARD)

    def _find(self, direction: SearchDirection) -> None:
        if self.find_session is None or not self.find_session.query:
            return
        span = self.find_session.find(direction)
        if span is None:
            edge = "end" if direction == SearchDirection.FORWARD else "start"
            self.notify(f"Reached {edge} of document; search again to wrap")
            return
        start, end = span
        # A Selection's end is the cursor, which stays at the match start
        self.text_area.selection = Selection(self._location(end), self._location(start))
        self.text_area.scroll_cursor_visible()

    # --- File and view actions ---

    def action_save(self) -> None:
        if not self.document.filename:
            self.notify("No filename set", severity="warning")
            return
        try:
            self.document.save()
        except DocumentIOError as e:
            self.notify(f"Error saving: {e}", severity="error")
            return
        self._confirm_quit = False
        self.notify(f"Saved to {self.document.filename}")

    def action_toggle_wrap(self) -> None:
        self.document.word_wrap = not self.document.word_wrap
        self.text_area.soft_wrap = self.document.word_wrap

    def action_quit(self) -> None:
        if self.document.modified and not self._confirm_quit:
            self._confirm_quit = True
            self.notify("Unsaved changes: press Ctrl+Q again to quit", severity="warning")
            return
        self.exit()


def main(filename=None, settings=None):
    """Run the Textual app."""
    LibreNoteApp(filename=filename, settings=settings).run()
