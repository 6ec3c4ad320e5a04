"""Jarnote - rich text span editing for plain-text notes."""

from .editor import EditMode, SpanTextEditor
from .markup import looks_like_markup, parse_markup, to_markup
from .model import TextBuffer, TextEdit, edit_between
from .spans import FormatSpan, SpanKind, SpanSet, StyleFlags

__all__ = [
    'EditMode',
    'SpanTextEditor',
    'looks_like_markup',
    'parse_markup',
    'to_markup',
    'TextBuffer',
    'TextEdit',
    'edit_between',
    'FormatSpan',
    'SpanKind',
    'SpanSet',
    'StyleFlags',
]
