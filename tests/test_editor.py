"""Test style toggles and typed-text formatting in the span editor."""

import pytest
from jarnote.editor import EditMode, SpanTextEditor
from jarnote.spans import FormatSpan, SpanKind, StyleFlags


def span(kind, start, end):
    return FormatSpan(kind, start, end)


def test_toggle_bold_on_selection():
    editor = SpanTextEditor("hello world")
    editor.toggle_bold(0, 5)
    assert editor.spans == [span(SpanKind.BOLD, 0, 5)]
    assert editor.styles_at(4) == StyleFlags.BOLD
    assert editor.styles_at(5) == 0


def test_toggle_twice_removes_style():
    editor = SpanTextEditor("hello world")
    editor.toggle_italic(0, 5)
    editor.toggle_italic(0, 5)
    assert editor.spans == []
    assert editor.plain_text == "hello world"


def test_toggle_inside_span_splits_it():
    editor = SpanTextEditor("abcdefghij")
    editor.toggle_bold(0, 10)
    editor.toggle_bold(3, 7)
    assert editor.spans == [span(SpanKind.BOLD, 0, 3), span(SpanKind.BOLD, 7, 10)]


def test_toggle_partially_covered_selection_adds_overlapping_span():
    editor = SpanTextEditor("abcdefghij")
    editor.toggle_bold(0, 5)
    editor.toggle_bold(3, 8)
    assert editor.spans == [span(SpanKind.BOLD, 0, 5), span(SpanKind.BOLD, 3, 8)]


def test_toggle_adjacent_selection_merges():
    editor = SpanTextEditor("abcdefghij")
    editor.toggle_underline(0, 4)
    editor.toggle_underline(4, 8)
    assert editor.spans == [span(SpanKind.UNDERLINE, 0, 8)]


def test_reversed_selection_is_normalized():
    editor = SpanTextEditor("hello")
    editor.toggle_strikethrough(5, 0)
    assert editor.spans == [span(SpanKind.STRIKETHROUGH, 0, 5)]


def test_selection_is_clamped_to_buffer():
    editor = SpanTextEditor("hello")
    editor.toggle_bold(3, 100)
    assert editor.spans == [span(SpanKind.BOLD, 3, 5)]


def test_selection_outside_buffer_is_ignored():
    editor = SpanTextEditor("hello")
    editor.toggle_bold(10, 20)
    assert editor.spans == []
    assert not editor.is_bold_active


def test_empty_selection_toggles_pending_style():
    editor = SpanTextEditor("hello")
    editor.toggle_bold(2, 2)
    assert editor.is_bold_active
    assert editor.spans == []
    editor.toggle_bold(2, 2)
    assert not editor.is_bold_active


def test_removing_bold_from_bold_italic_keeps_italic():
    editor = SpanTextEditor()
    editor.toggle_bold(0, 0)
    editor.toggle_italic(0, 0)
    editor.apply_edit(0, 0, "abc")
    assert editor.spans == [span(SpanKind.BOLD_ITALIC, 0, 3)]

    editor.toggle_bold(0, 3)
    assert editor.spans == [span(SpanKind.ITALIC, 0, 3)]
    assert editor.styles_at(1) == StyleFlags.ITALIC


def test_removing_bold_from_part_of_bold_italic():
    editor = SpanTextEditor("abcdef", [span(SpanKind.BOLD_ITALIC, 0, 6)])
    editor.toggle_bold(2, 4)
    assert editor.styles_at(0) == StyleFlags.BOLD | StyleFlags.ITALIC
    assert editor.styles_at(2) == StyleFlags.ITALIC
    assert editor.styles_at(5) == StyleFlags.BOLD | StyleFlags.ITALIC


def test_removal_over_overlapping_spans():
    editor = SpanTextEditor("abcdefgh")
    editor.toggle_bold(2, 6)
    editor.toggle_bold(0, 4)
    editor.toggle_bold(3, 4)
    assert not editor.styles_at(3) & StyleFlags.BOLD
    assert editor.styles_at(2) & StyleFlags.BOLD
    assert editor.styles_at(4) & StyleFlags.BOLD
    assert editor.styles_at(0) & StyleFlags.BOLD


def test_removal_after_deletion_joins_spans():
    editor = SpanTextEditor("abcdefgh", [span(SpanKind.BOLD, 0, 2), span(SpanKind.BOLD, 4, 6)])
    editor.apply_edit(2, 2, "")
    assert editor.spans == [span(SpanKind.BOLD, 0, 4)]

    editor.toggle_bold(1, 3)
    assert editor.styles_at(1) == 0
    assert editor.styles_at(2) == 0
    assert editor.spans == [span(SpanKind.BOLD, 0, 1), span(SpanKind.BOLD, 3, 4)]

    editor.toggle_bold(1, 3)
    assert editor.spans == [span(SpanKind.BOLD, 0, 4)]


def test_mode_is_idle_after_toggle():
    editor = SpanTextEditor("hello")
    editor.toggle_bold(0, 5)
    assert editor.mode is EditMode.IDLE
    assert not editor.is_applying_format


class TestTypedText:
    """Text typed with pending styles gets spans over exactly the inserted range."""

    def test_typing_with_pending_bold(self):
        editor = SpanTextEditor("ab")
        editor.toggle_bold(2, 2)
        assert editor.apply_edit(2, 0, "cd")
        assert editor.plain_text == "abcd"
        assert editor.spans == [span(SpanKind.BOLD, 2, 4)]

    def test_consecutive_keystrokes_merge(self):
        editor = SpanTextEditor()
        editor.toggle_bold(0, 0)
        editor.apply_edit(0, 0, "a")
        editor.apply_edit(1, 0, "b")
        editor.apply_edit(2, 0, "c")
        assert editor.spans == [span(SpanKind.BOLD, 0, 3)]

    def test_all_pending_styles(self):
        editor = SpanTextEditor()
        for flag in StyleFlags.ALL:
            editor.toggle_style(flag, 0, 0)
        editor.apply_edit(0, 0, "x")
        assert editor.spans == [
            span(SpanKind.BOLD_ITALIC, 0, 1),
            span(SpanKind.UNDERLINE, 0, 1),
            span(SpanKind.STRIKETHROUGH, 0, 1),
        ]

    def test_typing_without_pending_style_adds_no_span(self):
        editor = SpanTextEditor("ab")
        editor.apply_edit(1, 0, "x")
        assert editor.plain_text == "axb"
        assert editor.spans == []

    def test_typing_inside_span_grows_it(self):
        editor = SpanTextEditor("hello", [span(SpanKind.BOLD, 0, 5)])
        editor.apply_edit(2, 0, "XY")
        assert editor.spans == [span(SpanKind.BOLD, 0, 7)]

    def test_typing_pending_style_inside_span_adds_no_duplicate(self):
        editor = SpanTextEditor("hello", [span(SpanKind.BOLD, 0, 5)])
        editor.toggle_bold(2, 2)
        editor.apply_edit(2, 0, "XY")
        assert editor.spans == [span(SpanKind.BOLD, 0, 7)]

    def test_typing_at_span_end_is_plain(self):
        editor = SpanTextEditor("hello", [span(SpanKind.BOLD, 0, 5)])
        editor.apply_edit(5, 0, "!")
        assert editor.spans == [span(SpanKind.BOLD, 0, 5)]
        assert editor.styles_at(5) == 0

    def test_deleting_styled_text_drops_span(self):
        editor = SpanTextEditor("hello", [span(SpanKind.BOLD, 1, 3)])
        assert editor.apply_edit(1, 2, "")
        assert editor.plain_text == "hlo"
        assert editor.spans == []

    def test_replacement_styles_inserted_text(self):
        editor = SpanTextEditor("cat")
        editor.toggle_underline(0, 0)
        editor.apply_edit(1, 1, "u")
        assert editor.plain_text == "cut"
        assert editor.spans == [span(SpanKind.UNDERLINE, 1, 2)]

    def test_edit_outside_buffer_is_ignored(self):
        editor = SpanTextEditor("abc")
        assert not editor.apply_edit(4, 0, "x")
        assert not editor.apply_edit(-1, 0, "x")
        assert editor.plain_text == "abc"

    def test_empty_edit_is_a_no_op(self):
        editor = SpanTextEditor("abc")
        assert not editor.apply_edit(1, 0, "")

    def test_clear_formatting_state(self):
        editor = SpanTextEditor()
        editor.toggle_bold(0, 0)
        editor.toggle_strikethrough(0, 0)
        editor.clear_formatting_state()
        editor.apply_edit(0, 0, "plain")
        assert not editor.is_bold_active
        assert not editor.is_strikethrough_active
        assert editor.spans == []


class TestThreePhaseNotifications:
    """The host mutates the buffer between the notifications."""

    def _host_insert(self, editor, offset, text):
        editor.before_text_changed(offset, 0, len(text))
        editor.buffer.replace(offset, 0, text)
        editor.on_text_changed(offset, 0, len(text))
        editor.after_text_changed()

    def test_inserted_range_gets_pending_style(self):
        editor = SpanTextEditor("ab")
        editor.toggle_italic(1, 1)
        self._host_insert(editor, 1, "xyz")
        assert editor.plain_text == "axyzb"
        assert editor.spans == [span(SpanKind.ITALIC, 1, 4)]

    def test_deletion_adds_no_span(self):
        editor = SpanTextEditor("abc")
        editor.toggle_bold(0, 0)
        editor.before_text_changed(1, 1, 0)
        editor.buffer.replace(1, 1, "")
        editor.on_text_changed(1, 1, 0)
        editor.after_text_changed()
        assert editor.spans == []

    def test_notifications_ignored_during_programmatic_edit(self):
        editor = SpanTextEditor("ab")
        editor.toggle_bold(0, 0)
        with editor._programmatic_edit():
            assert editor.is_applying_format
            self._host_insert(editor, 0, "xx")
        assert editor.spans == []
        assert not editor.is_applying_format


@pytest.mark.parametrize("stored", ["", "plain", "two\nlines"])
def test_load_plain_text_clears_spans(stored):
    editor = SpanTextEditor("old", [span(SpanKind.BOLD, 0, 3)])
    editor.load_plain_text(stored)
    assert editor.get_plain_text() == stored
    assert not editor.has_formatting()
