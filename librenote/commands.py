"""Command pattern implementation for editor actions."""

from abc import ABC, abstractmethod
from typing import Dict, Tuple, Optional, TYPE_CHECKING

import pyperclip

from .keyboard import KeyType

if TYPE_CHECKING:
    from .editor import Editor
    from .keyboard import KeyEvent


class EditorCommand(ABC):
    """Base class for editor commands."""

    @abstractmethod
    def execute(self, editor: 'Editor', key_event: 'KeyEvent') -> bool:
        """Execute the command.

        Returns:
            True if the command modified the document
        """


class MovementCommand(EditorCommand):
    """Cursor movement. Subclasses registered for Shift-keys extend the selection."""

    def __init__(self, extend: bool = False):
        self.extend = extend

    def execute(self, editor: 'Editor', key_event: 'KeyEvent') -> bool:
        self._move(editor, self.extend)
        return False

    @abstractmethod
    def _move(self, editor: 'Editor', extend: bool):
        """Perform the movement."""


class HorizontalMovementCommand(MovementCommand):
    def execute(self, editor: 'Editor', key_event: 'KeyEvent') -> bool:
        super().execute(editor, key_event)
        editor.view.update_desired_x()
        return False


class LeftCharCommand(HorizontalMovementCommand):
    def _move(self, editor, extend):
        buffer = editor.buffer
        if buffer.has_selection and not extend:
            buffer.move_cursor(buffer.selection_start)
        else:
            buffer.move_cursor(buffer.insertion_mark - 1, extend=extend)


class RightCharCommand(HorizontalMovementCommand):
    def _move(self, editor, extend):
        buffer = editor.buffer
        if buffer.has_selection and not extend:
            buffer.move_cursor(buffer.selection_end)
        else:
            buffer.move_cursor(buffer.insertion_mark + 1, extend=extend)


class BeginningOfLineCommand(HorizontalMovementCommand):
    def _move(self, editor, extend):
        editor.view.move_beginning_of_line(extend=extend)


class EndOfLineCommand(HorizontalMovementCommand):
    def _move(self, editor, extend):
        editor.view.move_end_of_line(extend=extend)


# Vertical moves keep the desired column, so they don't update it
class UpLineCommand(MovementCommand):
    def _move(self, editor, extend):
        editor.view.move_cursor_up(extend=extend)


class DownLineCommand(MovementCommand):
    def _move(self, editor, extend):
        editor.view.move_cursor_down(extend=extend)


class PageUpCommand(MovementCommand):
    def _move(self, editor, extend):
        editor.view.scroll_page_up(extend=extend)


class PageDownCommand(MovementCommand):
    def _move(self, editor, extend):
        editor.view.scroll_page_down(extend=extend)


class EditCommand(EditorCommand):
    """Base class for editing commands."""

    def execute(self, editor: 'Editor', key_event: 'KeyEvent') -> bool:
        if editor.document.busy:
            editor.status_message = "Busy: wait for the file operation to finish"
            return False
        changed = self._edit(editor, key_event)
        editor.view.update_desired_x()
        return changed

    @abstractmethod
    def _edit(self, editor: 'Editor', key_event: 'KeyEvent') -> bool:
        """Perform the edit; return True if the text changed."""


class BackspaceCommand(EditCommand):
    def _edit(self, editor, key_event):
        return editor.buffer.delete_backward()


class DeleteCharCommand(EditCommand):
    def _edit(self, editor, key_event):
        return editor.buffer.delete_forward()


class InsertNewlineCommand(EditCommand):
    def _edit(self, editor, key_event):
        editor.buffer.insert_text('\n')
        return True


class InsertTextCommand(EditCommand):
    def _edit(self, editor, key_event):
        char = key_event.value
        # Filter out control characters
        if not char or (ord(char[0]) < 32 and char != '\t'):
            return False
        editor.buffer.insert_text(char)
        return True


class CutCommand(EditCommand):
    def _edit(self, editor, key_event):
        try:
            cut = editor.buffer.cut_selection()
        except pyperclip.PyperclipException as e:
            editor.report_error("Clipboard unavailable", e)
            return False
        editor.status_message = "Selection cut" if cut else "No selection"
        return cut


class PasteCommand(EditCommand):
    def _edit(self, editor, key_event):
        try:
            return editor.buffer.paste_at_cursor()
        except pyperclip.PyperclipException as e:
            editor.report_error("Clipboard unavailable", e)
            return False


class SystemCommand(EditorCommand):
    """Base class for commands that don't change the text."""

    def execute(self, editor: 'Editor', key_event: 'KeyEvent') -> bool:
        self._execute_system(editor, key_event)
        return False

    @abstractmethod
    def _execute_system(self, editor: 'Editor', key_event: 'KeyEvent'):
        """Perform the system action."""


class CopyCommand(SystemCommand):
    def _execute_system(self, editor, key_event):
        try:
            copied = editor.buffer.copy_selection()
        except pyperclip.PyperclipException as e:
            editor.report_error("Clipboard unavailable", e)
            return
        editor.status_message = "Selection copied" if copied else "No selection"


class SelectAllCommand(SystemCommand):
    def _execute_system(self, editor, key_event):
        editor.buffer.select_all()


class FindCommand(SystemCommand):
    def _execute_system(self, editor, key_event):
        editor.start_find()


class OpenCommand(SystemCommand):
    def _execute_system(self, editor, key_event):
        editor.start_prompt('open_filename')


class SaveCommand(SystemCommand):
    def _execute_system(self, editor, key_event):
        editor.handle_save()


class SaveAsCommand(SystemCommand):
    def _execute_system(self, editor, key_event):
        editor.start_prompt('save_filename', editor.document.filename or "")


class QuitCommand(SystemCommand):
    def _execute_system(self, editor, key_event):
        if editor.document.modified:
            editor.start_prompt('quit_confirm')
        else:
            editor.running = False


class HelpCommand(SystemCommand):
    def _execute_system(self, editor, key_event):
        editor.show_help()


class ToggleWordWrapCommand(SystemCommand):
    def _execute_system(self, editor, key_event):
        editor.toggle_word_wrap()


class CommandRegistry:
    """Registry for mapping key combinations to commands."""

    def __init__(self):
        self._commands: Dict[Tuple[KeyType, str], EditorCommand] = {}
        self._setup_default_commands()

    def _setup_default_commands(self):
        movements = {
            'left': LeftCharCommand,
            'right': RightCharCommand,
            'up': UpLineCommand,
            'down': DownLineCommand,
            'home': BeginningOfLineCommand,
            'end': EndOfLineCommand,
            'page_up': PageUpCommand,
            'page_down': PageDownCommand,
        }
        for key, command_class in movements.items():
            self.register((KeyType.SPECIAL, key), command_class())
            self.register((KeyType.SHIFT_SPECIAL, key), command_class(extend=True))

        # Editing
        self.register((KeyType.SPECIAL, 'backspace'), BackspaceCommand())
        self.register((KeyType.SPECIAL, 'delete'), DeleteCharCommand())
        self.register((KeyType.SPECIAL, 'enter'), InsertNewlineCommand())
        self.register((KeyType.CTRL, 'x'), CutCommand())
        self.register((KeyType.CTRL, 'c'), CopyCommand())
        self.register((KeyType.CTRL, 'v'), PasteCommand())
        self.register((KeyType.CTRL, 'a'), SelectAllCommand())
        self.register((KeyType.CTRL, 'f'), FindCommand())

        # File and view
        self.register((KeyType.CTRL, 'o'), OpenCommand())
        self.register((KeyType.CTRL, 's'), SaveCommand())
        self.register((KeyType.ALT, 's'), SaveAsCommand())
        self.register((KeyType.CTRL, 'q'), QuitCommand())
        self.register((KeyType.ALT, 'w'), ToggleWordWrapCommand())
        self.register((KeyType.SPECIAL, 'f1'), HelpCommand())

    def register(self, key: Tuple[KeyType, str], command: EditorCommand):
        self._commands[key] = command

    def get_command(self, key_type: KeyType, value: str) -> Optional[EditorCommand]:
        return self._commands.get((key_type, value))

    def execute(self, editor: 'Editor', key_event: 'KeyEvent') -> bool:
        """Execute the command for the given key event.

        Returns:
            True if the document was modified
        """
        command = self.get_command(key_event.key_type, key_event.value)
        if command:
            return command.execute(editor, key_event)
        if key_event.key_type == KeyType.REGULAR:
            return InsertTextCommand().execute(editor, key_event)
        return False
