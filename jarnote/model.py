from dataclasses import dataclass
from typing import Iterable, Optional

from .spans import FormatSpan, SpanSet


@dataclass(frozen=True)
class TextEdit:
    """A single replacement: ``deleted_length`` characters at ``offset`` become ``inserted_text``."""
    offset: int
    deleted_length: int
    inserted_text: str


class TextBuffer:
    """Characters plus formatting spans for one editing session.

    Every mutation goes through ``replace`` so that spans are shifted and
    clipped the same way regardless of who edits the text.
    """

    def __init__(self, text: str = "", spans: Optional[Iterable[FormatSpan]] = None):
        self._text = text
        self.spans = SpanSet(s for s in (spans or []) if 0 <= s.start < s.end <= len(text))

    @property
    def text(self) -> str:
        return self._text

    def __len__(self) -> int:
        return len(self._text)

    def clamp(self, offset: int) -> int:
        return max(0, min(offset, len(self._text)))

    def in_range(self, offset: int) -> bool:
        return 0 <= offset <= len(self._text)

    def replace(self, offset: int, deleted_length: int, inserted_text: str) -> bool:
        """Replace ``deleted_length`` characters at ``offset`` with ``inserted_text``.

        Out-of-range offsets are ignored; the deleted length is clipped to the
        end of the buffer.

        Returns:
            True if the buffer changed
        """
        if not self.in_range(offset):
            return False
        deleted_length = max(0, min(deleted_length, len(self._text) - offset))
        if deleted_length == 0 and not inserted_text:
            return False
        self.spans.adjust_for_edit(offset, deleted_length, len(inserted_text))
        self._text = self._text[:offset] + inserted_text + self._text[offset + deleted_length:]
        return True

    def insert(self, offset: int, text: str) -> bool:
        return self.replace(offset, 0, text)

    def delete(self, start: int, end: int) -> bool:
        return self.replace(start, end - start, "")

    def set_content(self, text: str, spans: Iterable[FormatSpan] = ()) -> None:
        """Replace the whole buffer, then install ``spans`` over the new text."""
        self.replace(0, len(self._text), text)
        self.spans.clear()
        for span in spans:
            if 0 <= span.start < span.end <= len(self._text):
                self.spans.add(span.kind, span.start, span.end)

    # --- Line helpers ---

    def line_start(self, offset: int) -> int:
        """Offset of the first character of the line containing ``offset``."""
        return self._text.rfind("\n", 0, offset) + 1

    def line_end(self, offset: int) -> int:
        """Offset of the newline ending the line at ``offset``, or the buffer length."""
        end = self._text.find("\n", offset)
        return len(self._text) if end == -1 else end

    def line_at(self, offset: int) -> tuple[int, str]:
        """Return (line_start, line_text) for the line containing ``offset``."""
        start = self.line_start(offset)
        return start, self._text[start:self.line_end(start)]


def edit_between(old: str, new: str, caret: Optional[int] = None) -> Optional[TextEdit]:
    """Infer the single edit that turns ``old`` into ``new``.

    The shared prefix and suffix are kept; the middle is the edit. When the
    caret position after the edit is known it disambiguates repeated
    characters, e.g. typing "a" inside "aa".

    Returns:
        The edit, or None if the strings are equal
    """
    if old == new:
        return None
    limit = min(len(old), len(new))
    prefix = 0
    while prefix < limit and old[prefix] == new[prefix]:
        prefix += 1
    if caret is not None:
        growth = max(0, len(new) - len(old))
        prefix = max(0, min(prefix, caret - growth))
    suffix = 0
    while (suffix < limit - prefix
           and old[len(old) - 1 - suffix] == new[len(new) - 1 - suffix]):
        suffix += 1
    return TextEdit(
        offset=prefix,
        deleted_length=len(old) - prefix - suffix,
        inserted_text=new[prefix:len(new) - suffix],
    )
