"""Markup interchange for styled note content.

Notes with formatting are stored as a small HTML dialect: one ``<p>`` per
line, ``<br>`` for a blank line, and ``<b>``/``<i>``/``<u>``/line-through
``<span>`` for the inline styles.
"""

import html
import logging
import re
from html.parser import HTMLParser
from typing import Iterable, Optional

from .constants import EditorConstants
from .spans import FormatSpan, SpanKind, SpanSet, StyleFlags

logger = logging.getLogger(__name__)

# Maximum markup size to parse (10MB)
MAX_MARKUP_SIZE = EditorConstants.MAX_MARKUP_SIZE

# Outermost first
_INLINE_TAGS = (
    (StyleFlags.BOLD, "<b>", "</b>"),
    (StyleFlags.ITALIC, "<i>", "</i>"),
    (StyleFlags.UNDERLINE, "<u>", "</u>"),
    (StyleFlags.STRIKETHROUGH, EditorConstants.STRIKETHROUGH_OPEN, "</span>"),
)

_ESCAPES = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    "\t": "&#9;",
    "\r": "&#13;",
    "\f": "&#12;",
    "\xa0": "&#160;",
}


def to_markup(text: str, spans: Iterable[FormatSpan]) -> str:
    """Serialize text and spans to markup.

    Args:
        text: Buffer contents, lines separated by newlines
        spans: Formatting spans over ``text``

    Returns:
        Markup string, or "" for empty text
    """
    if not text:
        return ""
    span_set = spans if isinstance(spans, SpanSet) else SpanSet(spans)
    runs = span_set.runs(len(text))

    blocks = []
    line_start = 0
    for line in text.split("\n"):
        line_end = line_start + len(line)
        if line:
            body = _write_line(text, runs, line_start, line_end)
            blocks.append(EditorConstants.PARAGRAPH_OPEN + body + EditorConstants.PARAGRAPH_CLOSE)
        else:
            blocks.append(EditorConstants.LINE_BREAK)
        line_start = line_end + 1
    return "\n".join(blocks)


def _write_line(text: str, runs: list[tuple[int, int, int]], line_start: int, line_end: int) -> str:
    out = []
    prev_char: Optional[str] = None
    for run_start, run_end, flags in runs:
        start = max(run_start, line_start)
        end = min(run_end, line_end)
        if start >= end:
            continue
        segment = text[start:end]
        escaped = _escape_segment(segment, prev_char)
        prev_char = segment[-1]
        opening = "".join(tag for flag, tag, _ in _INLINE_TAGS if flags & flag)
        closing = "".join(tag for flag, _, tag in reversed(_INLINE_TAGS) if flags & flag)
        out.append(opening + escaped + closing)
    return "".join(out)


def _escape_segment(segment: str, prev_char: Optional[str]) -> str:
    """Escape markup characters and protect whitespace that HTML would collapse."""
    out = []
    for ch in segment:
        if ch == " ":
            # A space is only kept by the parser when it follows a non-space
            out.append("&nbsp;" if prev_char is None or prev_char == " " else " ")
        else:
            out.append(_ESCAPES.get(ch, ch))
        prev_char = ch
    return "".join(out)


class _MarkupParser(HTMLParser):
    """Collects plain text and style ranges from markup."""

    BLOCK_TAGS = {
        "p", "div", "li", "ul", "ol", "blockquote", "pre",
        "h1", "h2", "h3", "h4", "h5", "h6", "section", "article",
    }
    SKIP_TAGS = {"script", "style", "head", "title"}
    VOID_TAGS = {"br", "img", "hr", "meta", "link", "input", "wbr"}
    TAG_FLAGS = {
        "b": StyleFlags.BOLD,
        "strong": StyleFlags.BOLD,
        "i": StyleFlags.ITALIC,
        "em": StyleFlags.ITALIC,
        "cite": StyleFlags.ITALIC,
        "dfn": StyleFlags.ITALIC,
        "u": StyleFlags.UNDERLINE,
        "ins": StyleFlags.UNDERLINE,
        "s": StyleFlags.STRIKETHROUGH,
        "strike": StyleFlags.STRIKETHROUGH,
        "del": StyleFlags.STRIKETHROUGH,
    }
    _COLLAPSIBLE = re.compile(r"[ \t\n\r\f]+")

    def __init__(self):
        # Entities are handled by hand so &nbsp; and &#9; survive whitespace collapsing
        super().__init__(convert_charrefs=False)
        self._out: list[str] = []
        self._pos = 0
        self._last_char = ""
        self._pending_breaks = 0
        self._last_collapsed_space = False
        self._skip_depth = 0
        self._stack: list[tuple[str, int, int]] = []  # (tag, flags, start)
        self.spans = SpanSet()

    # --- Output helpers ---

    def _at_line_start(self) -> bool:
        return self._pos == 0 or self._last_char == "\n" or self._pending_breaks > 0

    def _flush_breaks(self) -> None:
        if self._pending_breaks:
            self._append("\n" * self._pending_breaks)
            self._pending_breaks = 0

    def _append(self, text: str) -> None:
        self._out.append(text)
        self._pos += len(text)
        self._last_char = text[-1]

    def _emit_literal(self, text: str) -> None:
        if self._skip_depth or not text:
            return
        self._flush_breaks()
        self._append(text)
        self._last_collapsed_space = False

    def _break_line(self) -> None:
        if self._pos > 0 and self._last_char != "\n" and self._pending_breaks == 0:
            self._pending_breaks = 1

    # --- HTMLParser callbacks ---

    def handle_starttag(self, tag, attrs):
        if tag in self.SKIP_TAGS:
            self._skip_depth += 1
            return
        if tag == "br":
            self._pending_breaks += 1
            return
        if tag in self.BLOCK_TAGS:
            self._break_line()
        if tag in self.VOID_TAGS:
            return
        flags = self.TAG_FLAGS.get(tag, 0) | _style_attribute_flags(attrs)
        self._stack.append((tag, flags, self._pos))

    def handle_startendtag(self, tag, attrs):
        if tag == "br":
            self._pending_breaks += 1
        elif tag in self.BLOCK_TAGS:
            self._break_line()

    def handle_endtag(self, tag):
        if tag in self.SKIP_TAGS:
            self._skip_depth = max(0, self._skip_depth - 1)
            return
        if tag in self.BLOCK_TAGS:
            self._break_line()
        for index in range(len(self._stack) - 1, -1, -1):
            if self._stack[index][0] == tag:
                for _, flags, start in self._stack[index:]:
                    self._close_range(flags, start)
                del self._stack[index:]
                return
        logger.debug(f"Ignoring unmatched closing tag </{tag}>")

    def handle_data(self, data):
        if self._skip_depth:
            return
        text = self._COLLAPSIBLE.sub(" ", data)
        if text.startswith(" ") and (self._at_line_start() or self._last_collapsed_space):
            text = text[1:]
        if not text:
            return
        self._flush_breaks()
        self._append(text)
        self._last_collapsed_space = text.endswith(" ")

    def handle_entityref(self, name):
        if name == "nbsp":
            self._emit_literal(" ")
        else:
            # Unknown names come back unchanged and are kept as literal text
            self._emit_literal(html.unescape(f"&{name};"))

    def handle_charref(self, name):
        self._emit_literal(html.unescape(f"&#{name};"))

    # --- Ranges ---

    def _close_range(self, flags: int, start: int) -> None:
        if not flags:
            return
        text = "".join(self._out)
        end = self._pos
        while start < end and text[start] == "\n":
            start += 1
        while end > start and text[end - 1] == "\n":
            end -= 1
        if start >= end:
            return
        for flag in StyleFlags.ALL:
            if flags & flag:
                self.spans.add(SpanKind.for_flag(flag), start, end)

    def finish(self) -> tuple[str, list[FormatSpan]]:
        self.close()
        # A trailing block or <br> already ends the last line
        self._pending_breaks = max(0, self._pending_breaks - 1)
        self._flush_breaks()
        for _, flags, start in reversed(self._stack):
            self._close_range(flags, start)
        self._stack.clear()
        self.spans.coalesce()
        return "".join(self._out), self.spans.snapshot()


def _style_attribute_flags(attrs) -> int:
    """Style flags implied by an inline CSS ``style`` attribute."""
    style = ""
    for key, value in attrs:
        if key == "style" and value:
            style = value.lower()
    if not style:
        return 0
    flags = 0
    decoration = re.search(r"text-decoration(?:-line)?\s*:\s*([^;]+)", style)
    if decoration:
        if "line-through" in decoration.group(1):
            flags |= StyleFlags.STRIKETHROUGH
        if "underline" in decoration.group(1):
            flags |= StyleFlags.UNDERLINE
    weight = re.search(r"font-weight\s*:\s*([^;]+)", style)
    if weight and re.search(r"\b(bold|bolder|[6-9]00)\b", weight.group(1)):
        flags |= StyleFlags.BOLD
    font_style = re.search(r"font-style\s*:\s*([^;]+)", style)
    if font_style and re.search(r"\b(italic|oblique)\b", font_style.group(1)):
        flags |= StyleFlags.ITALIC
    return flags


def parse_markup(markup: str) -> tuple[str, list[FormatSpan]]:
    """Parse markup into plain text and formatting spans.

    Malformed input never raises: unknown tags are ignored, unmatched closing
    tags are dropped and unclosed tags end at the end of the input.

    Args:
        markup: Markup produced by ``to_markup`` or similar HTML

    Returns:
        Tuple of (text, spans). Returns ("", []) for blank or oversized input.
    """
    if not markup or not markup.strip():
        return "", []
    if len(markup) > MAX_MARKUP_SIZE:
        logger.warning(f"Markup of {len(markup)} characters exceeds limit, ignoring")
        return "", []
    parser = _MarkupParser()
    parser.feed(markup)
    return parser.finish()


def looks_like_markup(stored: str) -> bool:
    """Heuristic used when loading stored note content.

    Content is treated as markup when it contains both '<' and '>' anywhere.
    Plain text that happens to contain both is misread as markup.
    """
    return (EditorConstants.MARKUP_OPEN_CHAR in stored
            and EditorConstants.MARKUP_CLOSE_CHAR in stored)
