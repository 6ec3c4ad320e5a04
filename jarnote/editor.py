"""Rich text span editor for note content."""

import logging
import re
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from .constants import EditorConstants
from .markup import parse_markup, to_markup
from .model import TextBuffer
from .spans import FormatSpan, SpanKind, StyleFlags

logger = logging.getLogger(__name__)

_NUMBERED_PREFIX = re.compile(EditorConstants.NUMBERED_PREFIX_PATTERN, re.ASCII)


class EditMode(Enum):
    IDLE = "idle"
    APPLYING_PROGRAMMATIC_EDIT = "applying_programmatic_edit"


@dataclass
class PendingStyle:
    """Styles applied to the next text typed at an empty selection."""
    bold: bool = False
    italic: bool = False
    underline: bool = False
    strikethrough: bool = False

    def any(self) -> bool:
        return self.bold or self.italic or self.underline or self.strikethrough

    def clear(self) -> None:
        self.bold = self.italic = self.underline = self.strikethrough = False

    def toggle(self, flag: int) -> None:
        if flag == StyleFlags.BOLD:
            self.bold = not self.bold
        elif flag == StyleFlags.ITALIC:
            self.italic = not self.italic
        elif flag == StyleFlags.UNDERLINE:
            self.underline = not self.underline
        elif flag == StyleFlags.STRIKETHROUGH:
            self.strikethrough = not self.strikethrough

    def typeface_kind(self) -> Optional[SpanKind]:
        """The single typeface span kind for the active bold/italic combination."""
        if self.bold and self.italic:
            return SpanKind.BOLD_ITALIC
        if self.bold:
            return SpanKind.BOLD
        if self.italic:
            return SpanKind.ITALIC
        return None


class SpanTextEditor:
    """In-place rich text editor over a single text buffer.

    Hosts report every text change through ``apply_edit`` (or the three-phase
    ``before_text_changed``/``on_text_changed``/``after_text_changed`` calls)
    and read back ``plain_text``, ``spans`` and the ``is_*_active`` flags.
    """

    def __init__(self, text: str = "", spans: Optional[Iterable[FormatSpan]] = None):
        self.buffer = TextBuffer(text, spans)
        self.pending = PendingStyle()
        self.mode = EditMode.IDLE
        # Net inserted range reconstructed from three-phase notifications
        self._pending_format_start = -1
        self._pending_format_end = -1

    @contextmanager
    def _programmatic_edit(self):
        """Mark mutations made by the editor itself so they are not styled as typing."""
        previous = self.mode
        self.mode = EditMode.APPLYING_PROGRAMMATIC_EDIT
        try:
            yield
        finally:
            self.mode = previous

    # --- Read-only state ---

    @property
    def is_bold_active(self) -> bool:
        return self.pending.bold

    @property
    def is_italic_active(self) -> bool:
        return self.pending.italic

    @property
    def is_underline_active(self) -> bool:
        return self.pending.underline

    @property
    def is_strikethrough_active(self) -> bool:
        return self.pending.strikethrough

    @property
    def is_applying_format(self) -> bool:
        return self.mode is EditMode.APPLYING_PROGRAMMATIC_EDIT

    @property
    def plain_text(self) -> str:
        return self.buffer.text

    @property
    def spans(self) -> list[FormatSpan]:
        return self.buffer.spans.snapshot()

    def has_formatting(self) -> bool:
        return bool(self.buffer.spans)

    def styles_at(self, offset: int) -> int:
        """Style flags of the character at ``offset``."""
        return self.buffer.spans.flags_at(offset)

    def style_runs(self) -> list[tuple[int, int, int]]:
        return self.buffer.spans.runs(len(self.buffer))

    # --- Style toggles ---

    def toggle_bold(self, selection_start: int, selection_end: int) -> None:
        self.toggle_style(StyleFlags.BOLD, selection_start, selection_end)

    def toggle_italic(self, selection_start: int, selection_end: int) -> None:
        self.toggle_style(StyleFlags.ITALIC, selection_start, selection_end)

    def toggle_underline(self, selection_start: int, selection_end: int) -> None:
        self.toggle_style(StyleFlags.UNDERLINE, selection_start, selection_end)

    def toggle_strikethrough(self, selection_start: int, selection_end: int) -> None:
        self.toggle_style(StyleFlags.STRIKETHROUGH, selection_start, selection_end)

    def toggle_style(self, flag: int, selection_start: int, selection_end: int) -> None:
        """Toggle a style on a selection, or the pending style at a caret."""
        if selection_start > selection_end:
            selection_start, selection_end = selection_end, selection_start
        if selection_start == selection_end:
            self.pending.toggle(flag)
            return
        start = self.buffer.clamp(selection_start)
        end = self.buffer.clamp(selection_end)
        if start >= end:
            logger.debug(f"Selection [{selection_start}, {selection_end}) outside buffer, ignoring")
            return
        with self._programmatic_edit():
            self._toggle_span(flag, start, end)

    def _toggle_span(self, flag: int, start: int, end: int) -> None:
        spans = self.buffer.spans
        if not spans.is_covered(flag, start, end):
            # Partial overlaps are not merged or extended
            spans.add(SpanKind.for_flag(flag), start, end)
            return
        # Re-add the pieces only once every intersecting span is removed
        pieces = []
        for span in spans.intersecting(flag, start, end):
            spans.remove(span)
            if span.start < start:
                pieces.append((span.kind, span.start, start))
            if span.end > end:
                pieces.append((span.kind, end, span.end))
            remaining = span.kind.without(flag)
            if remaining is not None:
                pieces.append((remaining, max(span.start, start), min(span.end, end)))
        for kind, piece_start, piece_end in dict.fromkeys(pieces):
            spans.add(kind, piece_start, piece_end)

    def clear_formatting_state(self) -> None:
        self.pending.clear()

    # --- Text changes ---

    def apply_edit(self, offset: int, deleted_length: int, inserted_text: str) -> bool:
        """Apply one host edit and style the inserted text with the pending style.

        Returns:
            True if the buffer changed
        """
        if not self.buffer.in_range(offset):
            logger.debug(f"Edit at {offset} outside buffer of length {len(self.buffer)}, ignoring")
            return False
        if not self.buffer.replace(offset, deleted_length, inserted_text):
            return False
        if self.mode is EditMode.IDLE and inserted_text:
            self._apply_pending_style(offset, offset + len(inserted_text))
        return True

    def _apply_pending_style(self, start: int, end: int) -> None:
        if not self.pending.any():
            return
        kinds = []
        kind = self.pending.typeface_kind()
        if kind is not None:
            kinds.append(kind)
        if self.pending.underline:
            kinds.append(SpanKind.UNDERLINE)
        if self.pending.strikethrough:
            kinds.append(SpanKind.STRIKETHROUGH)
        spans = self.buffer.spans
        with self._programmatic_edit():
            for kind in kinds:
                # Text typed inside a span already grew it
                if all(spans.is_covered(flag, start, end)
                       for flag in StyleFlags.ALL if kind.carries(flag)):
                    continue
                spans.add(kind, start, end)

    def before_text_changed(self, start: int, count: int, after: int) -> None:
        """First of three change notifications: ``count`` chars at ``start`` become ``after`` chars."""
        if self.mode is EditMode.IDLE and after > 0:
            self._pending_format_start = start

    def on_text_changed(self, start: int, before: int, count: int) -> None:
        """Second notification: ``count`` chars now sit at ``start``, replacing ``before`` chars."""
        if self.mode is EditMode.IDLE and count > 0:
            self._pending_format_end = start + count

    def after_text_changed(self) -> None:
        """Last notification: style the reconstructed inserted range."""
        if self.mode is not EditMode.IDLE:
            return
        start = self._pending_format_start
        end = min(self._pending_format_end, len(self.buffer))
        self._pending_format_start = -1
        self._pending_format_end = -1
        if start < 0 or end <= start:
            return
        self._apply_pending_style(start, end)

    def _replace_programmatically(self, offset: int, deleted_length: int, text: str) -> bool:
        with self._programmatic_edit():
            return self.buffer.replace(offset, deleted_length, text)

    # --- Line prefix markup ---

    def _current_line(self, caret: int) -> Optional[tuple[int, str]]:
        if not self.buffer.in_range(caret):
            logger.debug(f"Caret {caret} outside buffer of length {len(self.buffer)}, ignoring")
            return None
        return self.buffer.line_at(caret)

    def insert_bullet_point(self, caret: int) -> bool:
        """Toggle a bullet at the start of the caret's line."""
        current = self._current_line(caret)
        if current is None:
            return False
        line_start, line = current
        if (line.startswith(EditorConstants.BULLET_PREFIX)
                or line.startswith(EditorConstants.ALT_BULLET_PREFIX)):
            return self._replace_programmatically(line_start, 2, "")
        return self._replace_programmatically(line_start, 0, EditorConstants.BULLET_PREFIX)

    def insert_numbered_item(self, caret: int) -> bool:
        """Toggle a numbered item prefix, continuing the numbering of the lines above."""
        current = self._current_line(caret)
        if current is None:
            return False
        line_start, line = current
        match = _NUMBERED_PREFIX.match(line)
        if match:
            return self._replace_programmatically(line_start, len(match.group(0)), "")
        number = self._next_item_number(line_start)
        return self._replace_programmatically(line_start, 0, f"{number}. ")

    def _next_item_number(self, line_start: int) -> int:
        """Number following the closest numbered line above, skipping blank lines."""
        text = self.buffer.text
        check_pos = line_start - 1
        while check_pos > 0:
            prev_start = text.rfind("\n", 0, check_pos) + 1
            # Includes the newline that ends the previous line
            prev_line = text[prev_start:check_pos + 1]
            match = _NUMBERED_PREFIX.match(prev_line)
            if match:
                return int(match.group(1)) + 1
            if prev_line.strip():
                return 1
            check_pos = prev_start - 1
        return 1

    def insert_checkbox(self, caret: int) -> bool:
        """Cycle the caret's line through unchecked, checked and no checkbox."""
        current = self._current_line(caret)
        if current is None:
            return False
        line_start, line = current
        width = len(EditorConstants.CHECKBOX_UNCHECKED)
        if line.startswith(EditorConstants.CHECKBOX_UNCHECKED):
            return self._replace_programmatically(line_start, width, EditorConstants.CHECKBOX_CHECKED)
        if (line.startswith(EditorConstants.CHECKBOX_CHECKED)
                or line.startswith(EditorConstants.CHECKBOX_CHECKED_UPPER)):
            return self._replace_programmatically(line_start, width, "")
        return self._replace_programmatically(line_start, 0, EditorConstants.CHECKBOX_UNCHECKED)

    def increase_indent(self, caret: int) -> bool:
        current = self._current_line(caret)
        if current is None:
            return False
        return self._replace_programmatically(current[0], 0, EditorConstants.INDENT_TEXT)

    def decrease_indent(self, caret: int) -> bool:
        """Remove one leading tab, or up to four leading spaces."""
        current = self._current_line(caret)
        if current is None:
            return False
        line_start, line = current
        if line.startswith("\t"):
            remove_count = 1
        else:
            remove_count = len(line[:EditorConstants.INDENT_WIDTH]) - len(
                line[:EditorConstants.INDENT_WIDTH].lstrip(" "))
        if remove_count == 0:
            return False
        return self._replace_programmatically(line_start, remove_count, "")

    # --- Conversion ---

    def to_markup(self) -> str:
        return to_markup(self.buffer.text, self.buffer.spans)

    def from_markup(self, markup: str) -> None:
        """Replace the buffer with parsed markup. Blank markup empties the buffer."""
        text, spans = parse_markup(markup)
        with self._programmatic_edit():
            self.buffer.set_content(text, spans)

    def load_plain_text(self, text: str) -> None:
        with self._programmatic_edit():
            self.buffer.set_content(text)

    def get_plain_text(self) -> str:
        return self.buffer.text
