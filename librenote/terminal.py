"""Terminal interface using Blessed for display and Curtsies for input."""

import blessed
from typing import Optional
import sys
import select


class TerminalInterface:
    """Handles terminal I/O using Blessed."""

    def __init__(self, terminal: Optional[blessed.Terminal] = None):
        self.term = terminal or blessed.Terminal()
        self.is_fullscreen = False
        self._curtsies_input: Optional[object] = None
        # Last frame drawn, for minimal updates
        self._last_lines: list[str] | None = None
        self._last_status: str | None = None

    def setup(self):
        """Enter fullscreen mode and start reading keys."""
        print(self.term.enter_fullscreen, end='')
        print(self.term.clear, end='', flush=True)
        self.is_fullscreen = True
        if self._curtsies_input is None:
            from curtsies import Input
            self._curtsies_input = Input(keynames='curtsies')
            self._curtsies_input.__enter__()

    def cleanup(self):
        """Exit fullscreen mode and restore terminal."""
        if self._curtsies_input is not None:
            try:
                self._curtsies_input.__exit__(None, None, None)
            finally:
                self._curtsies_input = None
        if self.is_fullscreen:
            print(self.term.exit_fullscreen, end='')
            print(self.term.normal_cursor, end='', flush=True)
            self.is_fullscreen = False

    def invalidate_frame(self) -> None:
        """Force a full repaint on the next update_frame()."""
        self._last_lines = None
        self._last_status = None

    def _compose_display_line(self, line: str, width: int,
                              selection: Optional[tuple[int, int]]) -> str:
        text = line[:width].ljust(width)
        if not selection:
            return text
        start, end = selection
        return text[:start] + self.term.reverse + text[start:end] + self.term.normal + text[end:]

    def compose_status(self, left: str, right: str = "") -> str:
        """Lay out a status bar with ``left`` flush left and ``right`` flush right."""
        width = self.term.width
        if not right or len(left) + len(right) + 2 > width:
            return left[:width].ljust(width)
        return left + ' ' * (width - len(left) - len(right) - 1) + right + ' '

    def update_frame(
        self,
        lines: list[str],
        cursor_y: int,
        cursor_x: int,
        status: str,
        selection_ranges: Optional[list] = None,
        prompt_cursor: Optional[int] = None,
    ) -> None:
        """Draw the text rows and status bar, writing only rows that changed.

        Args:
            lines: Visible rows, already clipped horizontally.
            cursor_y, cursor_x: Cursor position within the text area.
            status: Full-width status bar text.
            selection_ranges: Per row (start_col, end_col) to highlight.
            prompt_cursor: If set, the cursor is placed on the status bar at
                this column instead of in the text.
        """
        width = self.term.width
        rows = self.height
        if self._last_lines is None or len(self._last_lines) != rows:
            print(self.term.home + self.term.clear, end='')
            self._last_lines = [None] * rows
            self._last_status = None

        for y in range(rows):
            line = lines[y] if y < len(lines) else ''
            sel = selection_ranges[y] if selection_ranges and y < len(selection_ranges) else None
            display = self._compose_display_line(line, width, sel)
            if display != self._last_lines[y]:
                print(self.term.move(y, 0) + display, end='')
                self._last_lines[y] = display

        if status != self._last_status:
            print(self.term.move(self.term.height - 1, 0) + self.term.reverse
                  + status[:width].ljust(width) + self.term.normal, end='')
            self._last_status = status

        if prompt_cursor is not None:
            print(self.term.move(self.term.height - 1, min(prompt_cursor, width - 1))
                  + self.term.normal_cursor, end='', flush=True)
        else:
            print(self.term.move(cursor_y, cursor_x) + self.term.normal_cursor, end='', flush=True)

    def draw_help(self, title: str, help_lines: list[str], footer: str) -> None:
        """Draw a centered help screen; the next update_frame repaints fully."""
        term = self.term
        print(term.home + term.clear, end='')
        print(term.move(1, max(0, (term.width - len(title)) // 2)) + term.bold + title + term.normal, end='')
        top = max(3, (term.height - len(help_lines)) // 2)
        left = max(0, (term.width - max(len(line) for line in help_lines)) // 2)
        for i, line in enumerate(help_lines):
            print(term.move(top + i, left) + line, end='')
        print(term.move(term.height - 1, 0) + footer, end='')
        print(term.hide_cursor, end='', flush=True)
        self.invalidate_frame()

    def get_key(self, timeout=None):
        """Get a single keypress as a curtsies key name.

        Args:
            timeout: Seconds to wait (None blocks, 0 polls).

        Returns:
            The key name, or None on timeout or before setup().
        """
        if self._curtsies_input is None:
            return None
        if timeout is not None:
            ready, _, _ = select.select([sys.stdin], [], [], float(timeout))
            if not ready:
                return None
        return str(next(self._curtsies_input))

    @property
    def width(self):
        return self.term.width

    @property
    def height(self):
        """Rows available for text (excludes the status line)."""
        return self.term.height - 1
