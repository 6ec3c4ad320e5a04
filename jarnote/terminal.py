"""Styled terminal output of notes using Blessed."""

from typing import Optional

import blessed

from .editor import SpanTextEditor
from .spans import StyleFlags

# No terminfo capability for it; understood by all common emulators
STRIKETHROUGH_SEQUENCE = "\x1b[9m"


class NoteRenderer:
    """Renders an editor's text with its styles as terminal sequences."""

    def __init__(self, terminal: Optional[blessed.Terminal] = None):
        self.term = terminal or blessed.Terminal()

    def _attributes(self, flags: int) -> str:
        out = []
        if flags & StyleFlags.BOLD:
            out.append(self.term.bold)
        if flags & StyleFlags.ITALIC:
            out.append(self.term.italic)
        if flags & StyleFlags.UNDERLINE:
            out.append(self.term.underline)
        if flags & StyleFlags.STRIKETHROUGH and self.term.does_styling:
            out.append(STRIKETHROUGH_SEQUENCE)
        return ''.join(out)

    def render_lines(self, editor: SpanTextEditor) -> list[str]:
        """Compose one display string per line of the editor's text.

        Attributes are reset at every style change and at the end of each
        styled line, so lines can be printed independently.
        """
        text = editor.plain_text
        lines = []
        current = []
        styled = False
        for start, end, flags in editor.style_runs():
            segment_flags = flags
            for index, part in enumerate(text[start:end].split('\n')):
                if index > 0:
                    if styled:
                        current.append(self.term.normal)
                    lines.append(''.join(current))
                    current = []
                    styled = False
                if not part:
                    continue
                if segment_flags:
                    current.append(self.term.normal + self._attributes(segment_flags))
                    styled = True
                elif styled:
                    current.append(self.term.normal)
                    styled = False
                current.append(part)
        if styled:
            current.append(self.term.normal)
        lines.append(''.join(current))
        return lines

    def render(self, editor: SpanTextEditor) -> str:
        if not editor.plain_text:
            return ''
        return '\n'.join(self.render_lines(editor))

    def print_note(self, editor: SpanTextEditor, title: Optional[str] = None) -> None:
        """Print a note to the terminal, with a bold title line if given."""
        if title:
            print(self.term.bold + title + self.term.normal)
            print()
        rendered = self.render(editor)
        if rendered:
            print(rendered)
