"""Command pattern implementation for formatting toolbar actions."""

from abc import ABC, abstractmethod
from typing import Dict, Optional, TYPE_CHECKING

from .spans import StyleFlags

if TYPE_CHECKING:
    from .editor import SpanTextEditor


class EditorCommand(ABC):
    """Base class for editor commands."""

    @abstractmethod
    def execute(self, editor: 'SpanTextEditor', selection_start: int, selection_end: int) -> bool:
        """Execute the command.

        Args:
            editor: Editor instance
            selection_start: Start of the host's selection (the caret if empty)
            selection_end: End of the host's selection

        Returns:
            True if the command modified the document
        """
        pass


class ToggleStyleCommand(EditorCommand):
    """Toggle a style on the selection, or the pending style at the caret."""

    def __init__(self, flag: int):
        self.flag = flag

    def execute(self, editor, selection_start, selection_end):
        editor.toggle_style(self.flag, selection_start, selection_end)
        # An empty selection only changes the pending style
        return selection_start != selection_end


class LinePrefixCommand(EditorCommand):
    """Base class for commands that edit the prefix of the caret's line."""

    def execute(self, editor, selection_start, selection_end):
        return self._apply(editor, selection_start)

    @abstractmethod
    def _apply(self, editor: 'SpanTextEditor', caret: int) -> bool:
        """Perform the line edit."""
        pass


class BulletCommand(LinePrefixCommand):
    def _apply(self, editor, caret):
        return editor.insert_bullet_point(caret)


class NumberedItemCommand(LinePrefixCommand):
    def _apply(self, editor, caret):
        return editor.insert_numbered_item(caret)


class CheckboxCommand(LinePrefixCommand):
    def _apply(self, editor, caret):
        return editor.insert_checkbox(caret)


class IncreaseIndentCommand(LinePrefixCommand):
    def _apply(self, editor, caret):
        return editor.increase_indent(caret)


class DecreaseIndentCommand(LinePrefixCommand):
    def _apply(self, editor, caret):
        return editor.decrease_indent(caret)


class ClearFormattingCommand(EditorCommand):
    def execute(self, editor, selection_start, selection_end):
        editor.clear_formatting_state()
        return False


class CommandRegistry:
    """Registry mapping toolbar actions and key bindings to commands."""

    def __init__(self):
        self._commands: Dict[str, EditorCommand] = {}
        self._keys: Dict[str, str] = {}
        self._setup_default_commands()

    def _setup_default_commands(self):
        """Set up the default actions and key bindings."""
        # Style toggles
        self.register('bold', ToggleStyleCommand(StyleFlags.BOLD), key='ctrl+b')
        self.register('italic', ToggleStyleCommand(StyleFlags.ITALIC), key='alt+i')
        self.register('underline', ToggleStyleCommand(StyleFlags.UNDERLINE), key='alt+u')
        self.register('strikethrough', ToggleStyleCommand(StyleFlags.STRIKETHROUGH), key='alt+s')
        # Line prefixes
        self.register('bullet', BulletCommand(), key='alt+b')
        self.register('numbered', NumberedItemCommand(), key='alt+n')
        self.register('checkbox', CheckboxCommand(), key='alt+c')
        self.register('indent', IncreaseIndentCommand(), key='alt+full_stop')
        self.register('outdent', DecreaseIndentCommand(), key='alt+comma')
        self.register('clear_formatting', ClearFormattingCommand(), key='alt+x')

    def register(self, action: str, command: EditorCommand, key: Optional[str] = None):
        """Register a command for an action name, optionally bound to a key."""
        self._commands[action] = command
        if key is not None:
            self._keys[key] = action

    def get_command(self, action: str) -> Optional[EditorCommand]:
        return self._commands.get(action)

    def action_for_key(self, key: str) -> Optional[str]:
        return self._keys.get(key)

    def key_bindings(self) -> Dict[str, str]:
        """Key to action mapping, in registration order."""
        return dict(self._keys)

    def execute(self, action: str, editor: 'SpanTextEditor', selection_start: int, selection_end: int) -> bool:
        """Execute the command registered for ``action``.

        Returns:
            True if the document was modified
        """
        command = self.get_command(action)
        if command is None:
            return False
        return command.execute(editor, selection_start, selection_end)
