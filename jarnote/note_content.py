"""Helpers for moving note content between storage and the editor.

Stored note content is a single string that is either plain text or markup.
There is no format tag: ``looks_like_markup`` decides on load.
"""

import os
import re
import tempfile
from dataclasses import dataclass
from typing import Optional

from .editor import SpanTextEditor
from .markup import looks_like_markup

_WHITESPACE_RUN = re.compile(r"\s+")
_WHITESPACE = re.compile(r"\s")
_LINE_BREAK = re.compile(r"\r\n|\r|\n")


def load_note_content(editor: SpanTextEditor, stored: str) -> None:
    """Load stored content into the editor, as markup if it looks like markup."""
    if looks_like_markup(stored):
        editor.from_markup(stored)
    else:
        editor.load_plain_text(stored)


def content_to_save(editor: SpanTextEditor) -> str:
    """Content to store for the editor's note.

    Markup when any span is present, otherwise the trimmed plain text.
    """
    if editor.has_formatting():
        return editor.to_markup()
    return editor.get_plain_text().strip()


def is_empty_note(title: str, editor: SpanTextEditor) -> bool:
    return not title.strip() and not editor.get_plain_text().strip()


@dataclass(frozen=True)
class NoteStats:
    words: int
    characters: int
    characters_no_spaces: int
    lines: int

    def format(self) -> str:
        return (
            f"Words: {self.words}\n"
            f"Characters: {self.characters}\n"
            f"Characters (no spaces): {self.characters_no_spaces}\n"
            f"Lines: {self.lines}"
        )


def compute_stats(title: str, content: str) -> NoteStats:
    """Count words, characters and lines of a note.

    Words and characters are counted over the title and content together;
    lines over the content only.
    """
    full_text = f"{title} {content}".strip()
    words = len(_WHITESPACE_RUN.split(full_text)) if full_text else 0
    # A trailing newline starts one more (empty) line
    lines = len(_LINE_BREAK.split(content)) if content else 0
    return NoteStats(
        words=words,
        characters=len(full_text),
        characters_no_spaces=len(_WHITESPACE.sub("", full_text)),
        lines=lines,
    )


def compose_share_text(title: str, content: str) -> Optional[str]:
    """Title and content separated by a blank line, for sharing or copying.

    Returns:
        The combined text, or None if both parts are empty
    """
    title = title.strip()
    content = content.strip()
    if not title and not content:
        return None
    return "\n\n".join(part for part in (title, content) if part)


def read_note_file(path: str) -> str:
    with open(path, 'r', encoding='utf-8') as f:
        return f.read()


def write_note_file(path: str, editor: SpanTextEditor) -> None:
    """Write the editor's note to ``path`` atomically.

    The content goes to a temporary file in the same directory first, which
    then replaces ``path``. Raises OSError on failure, leaving ``path``
    untouched.
    """
    content = content_to_save(editor)
    dir_name = os.path.dirname(path) or '.'
    with tempfile.NamedTemporaryFile(mode='w', encoding='utf-8', dir=dir_name,
                                     suffix='.tmp', delete=False) as temp_file:
        temp_filename = temp_file.name
        try:
            temp_file.write(content)
            temp_file.flush()
            os.fsync(temp_file.fileno())
        except OSError:
            temp_file.close()
            os.remove(temp_filename)
            raise
    try:
        os.replace(temp_filename, path)
    except OSError:
        os.remove(temp_filename)
        raise
