"""Clipboard collaborators for cut, copy and paste."""

import logging

import pyperclip

logger = logging.getLogger(__name__)


class LocalClipboard:
    """In-process clipboard used when no system clipboard is wired in."""

    def __init__(self, text: str = ""):
        self.text = text

    def copy_text(self, text: str) -> None:
        self.text = text

    def paste_text(self) -> str:
        return self.text


class SystemClipboard:
    """System clipboard via pyperclip (plain text only).

    pyperclip raises ``pyperclip.PyperclipException`` when no clipboard
    mechanism is available (e.g. no xclip/xsel on Linux); callers decide
    how to report it.
    """

    def copy_text(self, text: str) -> None:
        logger.debug("Copying %d characters to system clipboard", len(text))
        pyperclip.copy(text)

    def paste_text(self) -> str:
        content = pyperclip.paste()
        return content or ""
