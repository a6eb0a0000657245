"""Keyboard input: curtsies key names mapped to KeyEvents."""

from typing import Optional
from dataclasses import dataclass
from enum import Enum


class KeyType(Enum):
    """Types of key events."""
    REGULAR = "regular"
    ALT = "alt"
    CTRL = "ctrl"
    SPECIAL = "special"
    SHIFT_SPECIAL = "shift_special"  # Shift + arrow keys, etc.


@dataclass
class KeyEvent:
    """A parsed keyboard event."""
    key_type: KeyType
    value: str  # The base key (e.g., 'a', 'left', 'backspace')
    raw: str
    is_alt: bool = False
    is_ctrl: bool = False
    is_shift: bool = False


SPECIAL_KEYS = {
    'left', 'right', 'up', 'down', 'home', 'end', 'enter', 'backspace', 'delete',
    'page_up', 'page_down', 'insert', 'f1',
}

# Alternate spellings curtsies and terminals use for the same key
KEY_ALIASES = {
    'pageup': 'page_up',
    'pagedown': 'page_down',
    'pgup': 'page_up',
    'pgdn': 'page_down',
    'return': 'enter',
    'del': 'delete',
    'esc': 'escape',
    'space': ' ',
    'spacebar': ' ',
    'tab': '\t',
}


class KeyboardHandler:
    """Turns keys read from the terminal into KeyEvents."""

    def __init__(self, terminal_interface):
        self.terminal = terminal_interface

    def get_key_event(self, timeout: Optional[float] = None) -> Optional[KeyEvent]:
        key = self.terminal.get_key(timeout)
        if not key:
            return None
        return self.parse_key(key)

    def parse_key(self, key) -> KeyEvent:
        """Parse a key name such as ``'<Ctrl-f>'``, ``'<Shift-LEFT>'`` or ``'a'``."""
        key_str = str(key)
        if len(key_str) > 2 and key_str.startswith('<') and key_str.endswith('>'):
            return self._parse_token(key_str)
        return self._parse_char(key_str)

    def _parse_token(self, key_str: str) -> KeyEvent:
        parts = key_str[1:-1].lower().replace('+', '-').split('-')
        base = KEY_ALIASES.get(parts[-1], parts[-1])
        mods = set(parts[:-1])
        if mods & {'meta', 'esc'}:
            mods.add('alt')

        if not mods and base in (' ', '\t'):
            return KeyEvent(KeyType.REGULAR, base, base)
        if base == 'escape' and not mods:
            return KeyEvent(KeyType.SPECIAL, 'escape', '\x1b')
        if 'ctrl' in mods and len(base) == 1:
            if base in ('j', 'm'):
                return KeyEvent(KeyType.SPECIAL, 'enter', key_str)
            return KeyEvent(KeyType.CTRL, base, key_str, is_ctrl=True)
        if 'alt' in mods and (base in SPECIAL_KEYS or len(base) == 1):
            return KeyEvent(KeyType.ALT, base, key_str, is_alt=True)
        if 'shift' in mods and base in SPECIAL_KEYS:
            return KeyEvent(KeyType.SHIFT_SPECIAL, base, key_str, is_shift=True)
        # Unknown names are passed through as specials
        return KeyEvent(KeyType.SPECIAL, base, key_str)

    def _parse_char(self, key_str: str) -> KeyEvent:
        if len(key_str) == 1:
            code = ord(key_str)
            if code == 9:
                return KeyEvent(KeyType.REGULAR, '\t', key_str)
            if code in (10, 13):
                return KeyEvent(KeyType.SPECIAL, 'enter', key_str)
            if 1 <= code <= 26:  # Ctrl-A .. Ctrl-Z
                return KeyEvent(KeyType.CTRL, chr(ord('a') + code - 1), key_str, is_ctrl=True)
            if code == 27:
                return KeyEvent(KeyType.SPECIAL, 'escape', key_str)
            if code == 127:
                return KeyEvent(KeyType.SPECIAL, 'backspace', key_str)
        # Two-character ESC prefix is how terminals send Alt-<key>
        if len(key_str) == 2 and key_str[0] == '\x1b':
            return KeyEvent(KeyType.ALT, key_str[1].lower(), key_str, is_alt=True)
        return KeyEvent(KeyType.REGULAR, key_str, key_str)
