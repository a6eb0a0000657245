#!/usr/bin/env python3
"""LibreNote - a minimal plain-text editor.

Usage:
    python main.py [--textual] [--log-file PATH] [filename]

Controls:
    Arrow keys: Move the cursor (Shift extends the selection)
    Ctrl-F: Find (Enter/Down next, Up previous, Esc closes)
    Ctrl-O / Ctrl-S / Alt-S: Open, save, save as
    Ctrl-X / Ctrl-C / Ctrl-V: Cut, copy, paste
    Ctrl-Q: Quit (asks first if there are unsaved changes)
    F1: Help
"""

import sys

from librenote.__main__ import main


if __name__ == "__main__":
    sys.exit(main())
