"""Formatting spans over a text buffer.

A span is a half-open ``[start, end)`` range of buffer offsets tagged with a
``SpanKind``. Spans behave like exclusive-exclusive spans in a rich text
widget: text inserted at either edge of a span is not absorbed by it, text
inserted strictly inside a span grows it.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, Optional


class StyleFlags:
    """Bit flags for the style traits a character can carry."""
    BOLD = 1
    ITALIC = 2
    UNDERLINE = 4
    STRIKETHROUGH = 8

    ALL = (BOLD, ITALIC, UNDERLINE, STRIKETHROUGH)


class SpanKind(Enum):
    """Kind of a formatting span.

    Bold and italic share one typeface mechanism with the combined value
    BOLD_ITALIC; the enum value is the set of style flags the kind carries.
    """
    BOLD = StyleFlags.BOLD
    ITALIC = StyleFlags.ITALIC
    BOLD_ITALIC = StyleFlags.BOLD | StyleFlags.ITALIC
    UNDERLINE = StyleFlags.UNDERLINE
    STRIKETHROUGH = StyleFlags.STRIKETHROUGH

    @property
    def flags(self) -> int:
        return self.value

    def carries(self, flag: int) -> bool:
        return bool(self.value & flag)

    def without(self, flag: int) -> Optional["SpanKind"]:
        """Return the kind left after removing ``flag``, or None if nothing is left."""
        remaining = self.value & ~flag
        if not remaining:
            return None
        return SpanKind(remaining)

    @classmethod
    def for_flag(cls, flag: int) -> "SpanKind":
        return cls(flag)


@dataclass(frozen=True)
class FormatSpan:
    kind: SpanKind
    start: int
    end: int

    def __len__(self) -> int:
        return max(0, self.end - self.start)

    def intersects(self, start: int, end: int) -> bool:
        """True if the span shares at least one character with ``[start, end)``."""
        return self.start < end and self.end > start

    def covers(self, start: int, end: int) -> bool:
        return self.start <= start and self.end >= end


def _map_after_delete(offset: int, start: int, length: int) -> int:
    """Map an offset across the deletion of ``[start, start + length)``."""
    if offset <= start:
        return offset
    return max(start, offset - length)


class SpanSet:
    """Unordered collection of formatting spans.

    Spans of the same kind that exactly touch are merged when added. Spans
    that partially overlap are kept as they are.
    """

    def __init__(self, spans: Optional[Iterable[FormatSpan]] = None):
        self._spans: list[FormatSpan] = []
        for span in spans or []:
            self.add(span.kind, span.start, span.end)

    def __iter__(self) -> Iterator[FormatSpan]:
        return iter(list(self._spans))

    def __len__(self) -> int:
        return len(self._spans)

    def __bool__(self) -> bool:
        return bool(self._spans)

    def snapshot(self) -> list[FormatSpan]:
        """Return the spans sorted by position, then kind."""
        return sorted(self._spans, key=lambda s: (s.start, s.end, s.kind.value))

    def clear(self) -> None:
        self._spans.clear()

    def add(self, kind: SpanKind, start: int, end: int) -> Optional[FormatSpan]:
        """Add a span, merging it with same-kind spans it exactly touches.

        Returns:
            The stored span, or None if the range was empty.
        """
        if start >= end:
            return None
        for other in list(self._spans):
            if other.kind is not kind:
                continue
            if other.end == start:
                self._spans.remove(other)
                start = other.start
            elif other.start == end:
                self._spans.remove(other)
                end = other.end
        span = FormatSpan(kind, start, end)
        self._spans.append(span)
        return span

    def remove(self, span: FormatSpan) -> bool:
        try:
            self._spans.remove(span)
        except ValueError:
            return False
        return True

    def carrying(self, flag: int) -> list[FormatSpan]:
        return [s for s in self._spans if s.kind.carries(flag)]

    def intersecting(self, flag: int, start: int, end: int) -> list[FormatSpan]:
        return [s for s in self._spans if s.kind.carries(flag) and s.intersects(start, end)]

    def is_covered(self, flag: int, start: int, end: int) -> bool:
        """True if a single span carrying ``flag`` covers all of ``[start, end)``."""
        return any(s.kind.carries(flag) and s.covers(start, end) for s in self._spans)

    def flags_at(self, offset: int) -> int:
        flags = 0
        for span in self._spans:
            if span.start <= offset < span.end:
                flags |= span.kind.flags
        return flags

    def runs(self, length: int) -> list[tuple[int, int, int]]:
        """Split ``[0, length)`` into maximal runs of identical style flags.

        Returns:
            List of (start, end, flags) tuples covering the whole range.
        """
        if length <= 0:
            return []
        bounds = {0, length}
        for span in self._spans:
            if 0 < span.start < length:
                bounds.add(span.start)
            if 0 < span.end < length:
                bounds.add(span.end)
        points = sorted(bounds)
        result: list[tuple[int, int, int]] = []
        for start, end in zip(points, points[1:]):
            flags = 0
            for span in self._spans:
                if span.start <= start and span.end >= end:
                    flags |= span.kind.flags
            if result and result[-1][2] == flags:
                result[-1] = (result[-1][0], end, flags)
            else:
                result.append((start, end, flags))
        return result

    def coalesce(self) -> None:
        """Merge overlapping or touching spans of the same kind."""
        merged: list[FormatSpan] = []
        for kind in SpanKind:
            same = sorted((s for s in self._spans if s.kind is kind), key=lambda s: s.start)
            current: Optional[FormatSpan] = None
            for span in same:
                if current is not None and span.start <= current.end:
                    current = FormatSpan(kind, current.start, max(current.end, span.end))
                else:
                    if current is not None:
                        merged.append(current)
                    current = span
            if current is not None:
                merged.append(current)
        self._spans = merged

    # --- Host-style adjustment on buffer mutation ---

    def adjust_for_delete(self, start: int, length: int) -> None:
        """Shrink, drop and shift spans for the deletion of ``[start, start + length)``."""
        if length <= 0:
            return
        adjusted = []
        for span in self._spans:
            new_start = _map_after_delete(span.start, start, length)
            new_end = _map_after_delete(span.end, start, length)
            if new_start < new_end:
                adjusted.append(FormatSpan(span.kind, new_start, new_end))
        self._spans = []
        # Re-adding merges spans the deletion brought together
        for span in adjusted:
            self.add(span.kind, span.start, span.end)

    def adjust_for_insert(self, offset: int, length: int) -> None:
        """Shift or grow spans for ``length`` characters inserted at ``offset``.

        Spans starting at or after the offset move right. Spans containing the
        offset strictly inside grow. Spans ending at or before it are untouched.
        """
        if length <= 0:
            return
        adjusted = []
        for span in self._spans:
            new_start = span.start + length if span.start >= offset else span.start
            new_end = span.end + length if span.end > offset else span.end
            adjusted.append(FormatSpan(span.kind, new_start, new_end))
        self._spans = adjusted

    def adjust_for_edit(self, offset: int, deleted_length: int, inserted_length: int) -> None:
        self.adjust_for_delete(offset, deleted_length)
        self.adjust_for_insert(offset, inserted_length)
