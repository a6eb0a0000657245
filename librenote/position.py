"""Translation between buffer offsets and (line, column) positions.

Lines and columns are reported 1-based, the way editor status bars show
them: the empty document at offset 0 is line 1, column 1. A line's column
counts characters from the character after the preceding ``\\n``.
"""

from bisect import bisect_right
from typing import NamedTuple

from .constants import EditorConstants
from .errors import OutOfRangeError


class LineColumn(NamedTuple):
    line: int
    column: int


class PositionIndex:
    """Offset/line lookups backed by a table of line start offsets.

    The table is rebuilt whenever the buffer's content is not the exact
    string it was built from, so a query after an edit always sees the edit.
    """

    def __init__(self):
        self._content = None
        self._line_starts: list[int] = [0]

    def _starts(self, buffer) -> list[int]:
        content = buffer.content
        if content is not self._content:
            starts = [0]
            pos = content.find(EditorConstants.LINE_TERMINATOR)
            while pos != -1:
                starts.append(pos + 1)
                pos = content.find(EditorConstants.LINE_TERMINATOR, pos + 1)
            self._line_starts = starts
            self._content = content
        return self._line_starts

    def line_count(self, buffer) -> int:
        return len(self._starts(buffer))

    def offset_to_line_col(self, buffer, offset: int) -> LineColumn:
        """Return the 1-based (line, column) of an offset.

        Raises:
            OutOfRangeError: if the offset is negative or past the end.
        """
        if offset < 0 or offset > len(buffer.content):
            raise OutOfRangeError(
                f"offset {offset} outside document of length {len(buffer.content)}"
            )
        starts = self._starts(buffer)
        line_index = bisect_right(starts, offset) - 1
        return LineColumn(line_index + 1, offset - starts[line_index] + 1)

    def line_bounds(self, buffer, line: int) -> tuple[int, int]:
        """Return (start, end) offsets of a 1-based line, excluding its terminator."""
        starts = self._starts(buffer)
        line = max(1, min(line, len(starts)))
        start = starts[line - 1]
        if line < len(starts):
            end = starts[line] - 1
        else:
            end = len(buffer.content)
        return start, end

    def line_col_to_offset(self, buffer, line: int, column: int) -> int:
        """Return the offset of a 1-based (line, column).

        The line is clamped into the document and the column to the line's
        length, which is what vertical cursor movement wants.
        """
        start, end = self.line_bounds(buffer, line)
        return start + max(0, min(column - 1, end - start))


_default_index = PositionIndex()


def offset_to_line_col(buffer, offset: int) -> LineColumn:
    return _default_index.offset_to_line_col(buffer, offset)


def format_status(position: LineColumn) -> str:
    return EditorConstants.STATUS_POSITION_FORMAT.format(position.line, position.column)
