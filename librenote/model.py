from abc import ABC, abstractmethod
from typing import Optional

from .clipboard import LocalClipboard
from .errors import RangeError


class TextView(ABC):
    _buffer: "Optional[TextBuffer]" = None

    @property
    def buffer(self) -> "TextBuffer":
        assert self._buffer is not None
        return self._buffer

    @abstractmethod
    def render(self):
        """Recompute whatever the view displays from the buffer.

        Called after every change to the content or to a mark. The view
        must keep the insertion mark visible.

        """


class TextBuffer:
    """The editable text and the marks anchored to it.

    ``content`` is a plain string and every mark is an offset into it, always
    within ``[0, len(content)]``. The insertion mark is always one of the two
    selection bounds; the other bound is the selection anchor.
    """

    content: str
    insertion_mark: int
    selection_start: int
    selection_end: int

    def __init__(self, view: Optional[TextView] = None, text: str = "", clipboard=None):
        self.view = view
        if view is not None:
            view._buffer = self
        # Anything with copy_text(text) and paste_text() -> str
        self.clipboard = clipboard if clipboard is not None else LocalClipboard()
        self.revision = 0
        self.content = text
        self.insertion_mark = 0
        self.selection_start = 0
        self.selection_end = 0

    def __len__(self) -> int:
        return len(self.content)

    def _render(self):
        if self.view is not None:
            self.view.render()

    def _clamp(self, offset: int) -> int:
        return max(0, min(offset, len(self.content)))

    def _check_span(self, start: int, end: int):
        length = len(self.content)
        if start < 0 or end < 0 or start > end or end > length:
            raise RangeError(f"span [{start}, {end}) outside buffer of length {length}")

    # --- Whole-document access ---

    def set_text(self, text: str):
        """Replace the content; the insertion mark goes to 0, selection is cleared."""
        self.content = text
        self.revision += 1
        self.insertion_mark = 0
        self.selection_start = 0
        self.selection_end = 0
        self._render()

    def get_text(self) -> str:
        return self.content

    def get_text_range(self, start: int, end: int) -> str:
        """Return content[start:end]; the end offset is exclusive."""
        self._check_span(start, end)
        return self.content[start:end]

    # --- Selection ---

    @property
    def has_selection(self) -> bool:
        return self.selection_start != self.selection_end

    @property
    def anchor(self) -> int:
        """The selection bound opposite the insertion mark."""
        if self.insertion_mark == self.selection_start:
            return self.selection_end
        return self.selection_start

    def select_range(self, start: int, end: int):
        """Select the span between two offsets.

        Out-of-range offsets are clamped rather than rejected, and the
        bounds are stored in ascending order. The insertion mark follows
        ``start``, so ``end`` becomes the anchor.
        """
        start = self._clamp(start)
        end = self._clamp(end)
        self.insertion_mark = start
        self.selection_start = min(start, end)
        self.selection_end = max(start, end)
        self._render()

    def select_all(self):
        self.select_range(0, len(self.content))

    def clear_selection(self):
        """Collapse the selection onto the insertion mark."""
        self.selection_start = self.insertion_mark
        self.selection_end = self.insertion_mark
        self._render()

    def get_selected_text(self) -> str:
        return self.content[self.selection_start:self.selection_end]

    def move_cursor(self, offset: int, extend: bool = False):
        """Move the insertion mark, clamping to the document.

        With ``extend`` the anchor stays put and the selection grows or
        shrinks to the new position; otherwise the selection collapses.
        """
        offset = self._clamp(offset)
        if extend:
            self.select_range(offset, self.anchor)
            return
        self.insertion_mark = offset
        self.selection_start = offset
        self.selection_end = offset
        self._render()

    # --- Mutation ---

    def _marks(self) -> tuple[int, int, int]:
        return (self.insertion_mark, self.selection_start, self.selection_end)

    def _set_marks(self, marks):
        self.insertion_mark, self.selection_start, self.selection_end = marks

    def insert_at(self, offset: int, text: str):
        """Insert text at an offset.

        Marks at or after the offset move right by ``len(text)``; marks
        before it stay where they are.
        """
        if offset < 0 or offset > len(self.content):
            raise RangeError(f"offset {offset} outside buffer of length {len(self.content)}")
        if not text:
            return
        self.content = self.content[:offset] + text + self.content[offset:]
        self.revision += 1
        delta = len(text)
        self._set_marks(m + delta if m >= offset else m for m in self._marks())
        self._render()

    def delete_range(self, start: int, end: int):
        """Delete content[start:end].

        Marks after the span move left by its length, marks inside it
        collapse to ``start``. An empty span is a no-op.
        """
        self._check_span(start, end)
        if start == end:
            return
        self.content = self.content[:start] + self.content[end:]
        self.revision += 1
        removed = end - start

        def shift(mark):
            if mark >= end:
                return mark - removed
            if mark > start:
                return start
            return mark

        self._set_marks(shift(m) for m in self._marks())
        self._render()

    def delete_selection(self) -> bool:
        if not self.has_selection:
            return False
        self.delete_range(self.selection_start, self.selection_end)
        return True

    def insert_text(self, text: str):
        """Type text at the insertion mark, replacing any selection."""
        self.delete_selection()
        self.insert_at(self.insertion_mark, text)

    def delete_backward(self) -> bool:
        """Backspace: delete the selection or the character before the cursor."""
        if self.delete_selection():
            return True
        if self.insertion_mark == 0:
            return False
        self.delete_range(self.insertion_mark - 1, self.insertion_mark)
        return True

    def delete_forward(self) -> bool:
        """Delete the selection or the character after the cursor."""
        if self.delete_selection():
            return True
        if self.insertion_mark >= len(self.content):
            return False
        self.delete_range(self.insertion_mark, self.insertion_mark + 1)
        return True

    # --- Clipboard ---

    def copy_selection(self) -> bool:
        """Copy selected text to the clipboard."""
        if not self.has_selection:
            return False
        self.clipboard.copy_text(self.get_selected_text())
        return True

    def cut_selection(self) -> bool:
        """Cut selected text to the clipboard."""
        if self.copy_selection():
            self.delete_selection()
            return True
        return False

    def paste_at_cursor(self) -> bool:
        """Paste clipboard text at the cursor, replacing any selection."""
        text = self.clipboard.paste_text()
        if not text:
            return False
        self.insert_text(text)
        return True
