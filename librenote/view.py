from bisect import bisect_right
from typing import NamedTuple, Optional

from .constants import EditorConstants
from .model import TextView


class VisualRow(NamedTuple):
    """A screen row: buffer span [start, end) with no line terminator.

    ``last_in_line`` is False for all but the final row of a wrapped line;
    the offset ``end`` of such a row belongs to the row that follows.
    """
    start: int
    end: int
    last_in_line: bool


def wrap_line(line: str, width: int) -> list[tuple[int, int]]:
    """Split a line into (start, end) spans of at most ``width`` characters.

    Breaks after the last space that fits, or mid-word when a single word is
    wider than the view. Spans are contiguous and cover the whole line.
    """
    if width <= 0 or len(line) <= width:
        return [(0, len(line))]
    spans = []
    start = 0
    while len(line) - start > width:
        limit = start + width
        space = line.rfind(' ', start, limit)
        end = space + 1 if space >= start else limit
        spans.append((start, end))
        start = end
    spans.append((start, len(line)))
    return spans


def expand_tabs(text: str, tab_width: int = EditorConstants.TAB_WIDTH) -> tuple[str, list[int]]:
    """Expand tabs; return the display text and each character's column.

    The column list has one extra entry: the column just past the text.
    """
    out = []
    columns = []
    col = 0
    for ch in text:
        columns.append(col)
        if ch == '\t':
            pad = tab_width - (col % tab_width)
            out.append(' ' * pad)
            col += pad
        else:
            out.append(ch)
            col += 1
    columns.append(col)
    return ''.join(out), columns


class TerminalTextView(TextView):
    num_rows: int = 24
    num_columns: int = 80
    word_wrap: bool = True
    top_row: int = 0
    left_column: int = 0
    lines: list[str]
    visual_cursor_y: int = 0
    visual_cursor_x: int = 0
    desired_x: int = 0  # Display column kept across up/down moves

    def __init__(self, num_rows: int = 24, num_columns: int = 80, word_wrap: bool = True):
        self.num_rows = num_rows
        self.num_columns = num_columns
        self.word_wrap = word_wrap
        self.lines = []
        self._rows: list[VisualRow] = []
        self._row_starts: list[int] = []
        self._layout_key = None

    def set_word_wrap(self, enabled: bool) -> None:
        self.word_wrap = bool(enabled)
        self.left_column = 0
        self.render()

    # --- Layout ---

    def _layout(self) -> list[VisualRow]:
        buffer = self.buffer
        key = (buffer.revision, id(buffer.content), self.num_columns, self.word_wrap)
        if key == self._layout_key:
            return self._rows
        rows = []
        offset = 0
        for line in buffer.content.split(EditorConstants.LINE_TERMINATOR):
            spans = wrap_line(line, self.num_columns) if self.word_wrap else [(0, len(line))]
            for i, (start, end) in enumerate(spans):
                rows.append(VisualRow(offset + start, offset + end, i == len(spans) - 1))
            offset += len(line) + 1
        self._rows = rows
        self._row_starts = [row.start for row in rows]
        self._layout_key = key
        return rows

    def _row_index_for(self, offset: int) -> int:
        self._layout()
        return max(0, bisect_right(self._row_starts, offset) - 1)

    def _row_text(self, row: VisualRow) -> str:
        return self.buffer.content[row.start:row.end]

    def _row_limit(self, row: VisualRow) -> int:
        """Last offset the cursor may take on this row."""
        return row.end if row.last_in_line else row.end - 1

    def _offset_for_column(self, row: VisualRow, display_col: int) -> int:
        _, columns = expand_tabs(self._row_text(row))
        index = 0
        while index < len(columns) - 1 and columns[index + 1] <= display_col:
            index += 1
        return min(row.start + index, self._row_limit(row))

    # --- Rendering ---

    def render(self):
        """Lay out the buffer and scroll so the insertion mark is visible."""
        rows = self._layout()
        mark = self.buffer.insertion_mark
        cursor_row = self._row_index_for(mark)
        if cursor_row < self.top_row:
            self.top_row = cursor_row
        elif cursor_row >= self.top_row + self.num_rows:
            self.top_row = cursor_row - self.num_rows + 1
        self.top_row = max(0, min(self.top_row, len(rows) - 1))

        row = rows[cursor_row]
        _, columns = expand_tabs(self._row_text(row))
        cursor_x = columns[mark - row.start]
        if self.word_wrap:
            self.left_column = 0
        elif cursor_x < self.left_column:
            self.left_column = cursor_x
        elif cursor_x >= self.left_column + self.num_columns:
            self.left_column = cursor_x - self.num_columns + 1

        visible = rows[self.top_row:self.top_row + self.num_rows]
        self.lines = [
            expand_tabs(self._row_text(r))[0][self.left_column:self.left_column + self.num_columns]
            for r in visible
        ]
        self.visual_cursor_y = cursor_row - self.top_row
        self.visual_cursor_x = cursor_x - self.left_column

    def get_selection_ranges(self) -> list[Optional[tuple[int, int]]]:
        """Return per visible row the (start_col, end_col) to highlight, or None."""
        buffer = self.buffer
        rows = self._layout()
        ranges: list[Optional[tuple[int, int]]] = []
        for row in rows[self.top_row:self.top_row + self.num_rows]:
            start = max(buffer.selection_start, row.start)
            end = min(buffer.selection_end, row.end)
            if not buffer.has_selection or start >= end:
                ranges.append(None)
                continue
            _, columns = expand_tabs(self._row_text(row))
            start_col = max(0, columns[start - row.start] - self.left_column)
            end_col = min(self.num_columns, columns[end - row.start] - self.left_column)
            ranges.append((start_col, end_col) if start_col < end_col else None)
        return ranges

    # --- Cursor movement ---

    def update_desired_x(self):
        """Remember the current column for subsequent vertical moves."""
        self.render()
        self.desired_x = self.visual_cursor_x + self.left_column

    def _move_to_row(self, row_index: int, extend: bool):
        rows = self._layout()
        row_index = max(0, min(row_index, len(rows) - 1))
        offset = self._offset_for_column(rows[row_index], self.desired_x)
        self.buffer.move_cursor(offset, extend=extend)

    def move_cursor_up(self, extend: bool = False):
        row_index = self._row_index_for(self.buffer.insertion_mark)
        if row_index == 0:
            self.buffer.move_cursor(0, extend=extend)
            return
        self._move_to_row(row_index - 1, extend)

    def move_cursor_down(self, extend: bool = False):
        row_index = self._row_index_for(self.buffer.insertion_mark)
        if row_index >= len(self._layout()) - 1:
            self.buffer.move_cursor(len(self.buffer), extend=extend)
            return
        self._move_to_row(row_index + 1, extend)

    def scroll_page_down(self, extend: bool = False):
        row_index = self._row_index_for(self.buffer.insertion_mark)
        self.top_row += self.num_rows
        self._move_to_row(row_index + self.num_rows, extend)

    def scroll_page_up(self, extend: bool = False):
        row_index = self._row_index_for(self.buffer.insertion_mark)
        self.top_row = max(0, self.top_row - self.num_rows)
        self._move_to_row(row_index - self.num_rows, extend)

    def move_beginning_of_line(self, extend: bool = False):
        row = self._layout()[self._row_index_for(self.buffer.insertion_mark)]
        self.buffer.move_cursor(row.start, extend=extend)

    def move_end_of_line(self, extend: bool = False):
        row = self._layout()[self._row_index_for(self.buffer.insertion_mark)]
        self.buffer.move_cursor(self._row_limit(row), extend=extend)
