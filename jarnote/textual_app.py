"""Textual host for the span editor.

The TextArea owns the characters the user sees; every change it reports is
turned into a single edit and handed to the ``SpanTextEditor``, which keeps
the formatting. A rich preview pane shows the styled result.
"""

import logging
from pathlib import Path

from rich.style import Style
from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Footer, Header, Static, TextArea

from .clipboard import ClipboardManager
from .commands import CommandRegistry
from .constants import EditorConstants
from .editor import SpanTextEditor
from .model import edit_between
from .note_content import load_note_content, read_note_file, write_note_file
from .settings_persistence import get_persistence
from .spans import StyleFlags

logger = logging.getLogger(__name__)


def location_to_offset(text: str, location: tuple[int, int]) -> int:
    """Convert a (row, column) location to an offset into ``text``."""
    row, column = location
    lines = text.split('\n')
    row = max(0, min(row, len(lines) - 1))
    offset = sum(len(line) + 1 for line in lines[:row])
    return offset + max(0, min(column, len(lines[row])))


def offset_to_location(text: str, offset: int) -> tuple[int, int]:
    """Convert an offset into ``text`` to a (row, column) location."""
    offset = max(0, min(offset, len(text)))
    row = text.count('\n', 0, offset)
    return row, offset - (text.rfind('\n', 0, offset) + 1)


def rich_style_for(flags: int) -> Style:
    return Style(
        bold=bool(flags & StyleFlags.BOLD),
        italic=bool(flags & StyleFlags.ITALIC),
        underline=bool(flags & StyleFlags.UNDERLINE),
        strike=bool(flags & StyleFlags.STRIKETHROUGH),
    )


def styled_text(editor: SpanTextEditor) -> Text:
    """Build a rich Text with the editor's formatting."""
    text = Text(editor.plain_text)
    for start, end, flags in editor.style_runs():
        if flags:
            text.stylize(rich_style_for(flags), start, end)
    return text


def pending_style_label(editor: SpanTextEditor) -> str:
    active = [name for name, on in (
        ("bold", editor.is_bold_active),
        ("italic", editor.is_italic_active),
        ("underline", editor.is_underline_active),
        ("strikethrough", editor.is_strikethrough_active),
    ) if on]
    return "Typing: " + (", ".join(active) if active else "plain")


_REGISTRY = CommandRegistry()


class JarnoteApp(App):
    """Edit one note file with inline formatting."""

    CSS = """
    TextArea {
        height: 2fr;
        border: none;
    }
    #preview {
        height: 1fr;
        border-top: solid $accent;
        padding: 0 1;
    }
    #status {
        height: 1;
        background: $boost;
    }
    """

    BINDINGS = [
        Binding("ctrl+q", "quit", "Quit"),
        Binding("ctrl+s", "save", "Save"),
        Binding("alt+y", "copy_note", "Copy"),
    ] + [
        Binding(key, f"format('{action}')", action.replace('_', ' ').title(), priority=True)
        for key, action in _REGISTRY.key_bindings().items()
    ]

    def __init__(self, filename=None):
        super().__init__()
        self.filename = filename
        self.editor = SpanTextEditor()
        self.registry = _REGISTRY
        self.text_area = None
        self.preview = None
        self.status = None

    @property
    def note_title(self) -> str:
        return Path(self.filename).stem if self.filename else ""

    def compose(self) -> ComposeResult:
        yield Header()
        self.text_area = TextArea()
        self.text_area.show_line_numbers = False
        yield self.text_area
        self.preview = Static(id="preview")
        yield self.preview
        self.status = Static(id="status")
        yield self.status
        yield Footer()

    def on_mount(self) -> None:
        if self.filename:
            self._load()
        self.text_area.focus()
        self._refresh()

    def _load(self) -> None:
        try:
            stored = read_note_file(self.filename)
        except FileNotFoundError:
            stored = ""
        except OSError as e:
            self.notify(f"Error loading file: {e}", severity="error")
            return
        load_note_content(self.editor, stored)
        settings = get_persistence().load_settings(self.filename)
        for flag, key in ((StyleFlags.BOLD, 'bold'), (StyleFlags.ITALIC, 'italic'),
                          (StyleFlags.UNDERLINE, 'underline'),
                          (StyleFlags.STRIKETHROUGH, 'strikethrough')):
            if settings.get(key):
                self.editor.pending.toggle(flag)
        self._sync_text_area(settings.get('caret_offset', 0))
        self.sub_title = f"Editing: {self.filename}"

    def _caret_offset(self) -> int:
        return location_to_offset(self.text_area.text, self.text_area.cursor_location)

    def _selection_offsets(self) -> tuple[int, int]:
        text = self.text_area.text
        selection = self.text_area.selection
        return location_to_offset(text, selection.start), location_to_offset(text, selection.end)

    def _sync_text_area(self, caret: int) -> None:
        """Show the editor's text, which changed outside the TextArea."""
        text = self.editor.plain_text
        if self.text_area.text != text:
            self.text_area.load_text(text)
        self.text_area.cursor_location = offset_to_location(text, caret)

    def _refresh(self) -> None:
        self.preview.update(styled_text(self.editor))
        self.status.update(pending_style_label(self.editor))

    def on_text_area_changed(self, event: TextArea.Changed) -> None:
        edit = edit_between(self.editor.plain_text, event.text_area.text, self._caret_offset())
        if edit is None:
            return
        self.editor.apply_edit(edit.offset, edit.deleted_length, edit.inserted_text)
        if self.editor.plain_text != event.text_area.text:
            logger.warning("Editor text out of sync with TextArea, reloading")
            self.editor.load_plain_text(event.text_area.text)
        self._refresh()

    def action_format(self, action: str) -> None:
        start, end = self._selection_offsets()
        caret = self._caret_offset()
        before = len(self.editor.plain_text)
        changed = self.registry.execute(action, self.editor, start, end)
        if changed and self.editor.plain_text != self.text_area.text:
            # Line prefix edits move the caret with the text they insert
            self._sync_text_area(caret + len(self.editor.plain_text) - before)
        self._refresh()

    def action_copy_note(self) -> None:
        if ClipboardManager.copy_note(self.note_title, self.editor.get_plain_text()):
            self.notify(EditorConstants.COPIED_MESSAGE)
        else:
            self.notify(EditorConstants.NOTHING_TO_COPY_MESSAGE, severity="warning")

    def _save_settings(self) -> None:
        get_persistence().save_settings(self.filename, {
            'caret_offset': self._caret_offset(),
            'bold': self.editor.is_bold_active,
            'italic': self.editor.is_italic_active,
            'underline': self.editor.is_underline_active,
            'strikethrough': self.editor.is_strikethrough_active,
        })

    def action_save(self) -> None:
        if not self.filename:
            self.notify("No filename set", severity="warning")
            return
        try:
            write_note_file(self.filename, self.editor)
        except OSError as e:
            self.notify(f"Error saving: {e}", severity="error")
            return
        self._save_settings()
        self.notify(f"Saved to {self.filename}")

    async def action_quit(self) -> None:
        if self.filename:
            self._save_settings()
        self.exit()


def run(filename=None) -> None:
    JarnoteApp(filename=filename).run()
