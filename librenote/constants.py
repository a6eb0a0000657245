"""Constants and configuration for the librenote editor."""

class EditorConstants:
    """Central configuration constants for the editor."""

    APP_NAME = "librenote"
    APP_AUTHOR = "libresuite"

    # Documents are always read and written in this encoding
    ENCODING = "utf-8"
    ENCODING_LABEL = "UTF-8"
    LINE_TERMINATOR = "\n"

    # File operations
    ATOMIC_SAVE_PREFIX = "."  # Prefix for temporary save files
    ATOMIC_SAVE_SUFFIX = ".tmp"  # Suffix for temporary save files

    # Bytes written to the wakeup pipe of the event loop
    RESIZE_PIPE_MARKER = b'R'
    IO_PIPE_MARKER = b'I'

    # Tab stops used when drawing
    TAB_WIDTH = 4

    # Logging
    LOG_ENV_VAR = "LIBRENOTE_LOG"
    LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

    # Status bar
    STATUS_POSITION_FORMAT = "Line: {}, Column: {}"

    HELP_LINES = [
        "",
        "FILE                         EDIT",
        "  Ctrl-O    Open              Ctrl-F     Find",
        "  Ctrl-S    Save              Ctrl-X     Cut",
        "  Alt-S     Save as           Ctrl-C     Copy",
        "  Ctrl-Q    Quit              Ctrl-V     Paste",
        "  F1        Help              Ctrl-A     Select all",
        "",
        "VIEW                         FIND PROMPT",
        "  Alt-W     Word wrap         Enter/Down Find next",
        "  Shift-arrows Select         Up         Find previous",
        "                              Esc        Close",
    ]
