"""Test bullets, numbered items, checkboxes and indentation."""

import unittest

from jarnote.editor import SpanTextEditor
from jarnote.spans import FormatSpan, SpanKind


class TestBullets(unittest.TestCase):

    def test_insert_bullet(self):
        editor = SpanTextEditor("item")
        self.assertTrue(editor.insert_bullet_point(2))
        self.assertEqual(editor.plain_text, "• item")

    def test_bullet_toggles_off(self):
        editor = SpanTextEditor("item")
        editor.insert_bullet_point(0)
        editor.insert_bullet_point(3)
        self.assertEqual(editor.plain_text, "item")

    def test_dash_bullet_is_removed(self):
        editor = SpanTextEditor("- item")
        editor.insert_bullet_point(0)
        self.assertEqual(editor.plain_text, "item")

    def test_bullet_on_second_line(self):
        editor = SpanTextEditor("first\nsecond")
        editor.insert_bullet_point(len("first\nsec"))
        self.assertEqual(editor.plain_text, "first\n• second")

    def test_bullet_on_empty_line_at_end(self):
        editor = SpanTextEditor("first\n")
        editor.insert_bullet_point(6)
        self.assertEqual(editor.plain_text, "first\n• ")

    def test_caret_outside_buffer(self):
        editor = SpanTextEditor("item")
        self.assertFalse(editor.insert_bullet_point(10))
        self.assertEqual(editor.plain_text, "item")

    def test_bullet_shifts_spans(self):
        editor = SpanTextEditor("item", [FormatSpan(SpanKind.BOLD, 0, 4)])
        editor.insert_bullet_point(0)
        self.assertEqual(editor.spans, [FormatSpan(SpanKind.BOLD, 2, 6)])

    def test_prefix_is_not_styled_with_pending_style(self):
        editor = SpanTextEditor("item")
        editor.toggle_bold(0, 0)
        editor.insert_bullet_point(0)
        self.assertEqual(editor.spans, [])
        self.assertTrue(editor.is_bold_active)

    def test_plain_text_keeps_prefix(self):
        editor = SpanTextEditor("item")
        editor.insert_bullet_point(0)
        self.assertEqual(editor.get_plain_text(), "• item")


class TestNumberedItems(unittest.TestCase):

    def test_first_item_is_one(self):
        editor = SpanTextEditor("a")
        editor.insert_numbered_item(0)
        self.assertEqual(editor.plain_text, "1. a")

    def test_numbering_continues(self):
        editor = SpanTextEditor("1. a\nb")
        editor.insert_numbered_item(5)
        self.assertEqual(editor.plain_text, "1. a\n2. b")

    def test_numbering_skips_blank_lines(self):
        editor = SpanTextEditor("1. a\n\nb")
        editor.insert_numbered_item(6)
        self.assertEqual(editor.plain_text, "1. a\n\n2. b")

    def test_numbering_restarts_after_text(self):
        editor = SpanTextEditor("3. a\nplain\nb")
        editor.insert_numbered_item(len("3. a\nplain\n"))
        self.assertEqual(editor.plain_text, "3. a\nplain\n1. b")

    def test_numbered_prefix_toggles_off(self):
        editor = SpanTextEditor("12. item")
        editor.insert_numbered_item(5)
        self.assertEqual(editor.plain_text, "item")

    def test_numbering_shifts_spans_on_later_lines(self):
        editor = SpanTextEditor("a\nbold", [FormatSpan(SpanKind.BOLD, 2, 6)])
        editor.insert_numbered_item(0)
        self.assertEqual(editor.plain_text, "1. a\nbold")
        self.assertEqual(editor.spans, [FormatSpan(SpanKind.BOLD, 5, 9)])


class TestCheckboxes(unittest.TestCase):

    def test_checkbox_cycle(self):
        editor = SpanTextEditor("task")
        editor.insert_checkbox(0)
        self.assertEqual(editor.plain_text, "[ ] task")
        editor.insert_checkbox(5)
        self.assertEqual(editor.plain_text, "[x] task")
        editor.insert_checkbox(5)
        self.assertEqual(editor.plain_text, "task")

    def test_uppercase_checked_box_is_removed(self):
        editor = SpanTextEditor("[X] done")
        editor.insert_checkbox(0)
        self.assertEqual(editor.plain_text, "done")

    def test_checking_keeps_spans_after_box(self):
        editor = SpanTextEditor("[ ] task", [FormatSpan(SpanKind.ITALIC, 4, 8)])
        editor.insert_checkbox(0)
        self.assertEqual(editor.plain_text, "[x] task")
        self.assertEqual(editor.spans, [FormatSpan(SpanKind.ITALIC, 4, 8)])


class TestIndentation(unittest.TestCase):

    def test_increase_indent(self):
        editor = SpanTextEditor("a\nb")
        self.assertTrue(editor.increase_indent(2))
        self.assertEqual(editor.plain_text, "a\n    b")

    def test_decrease_indent_spaces(self):
        editor = SpanTextEditor("      x")
        editor.decrease_indent(0)
        self.assertEqual(editor.plain_text, "  x")

    def test_decrease_indent_partial_spaces(self):
        editor = SpanTextEditor("  x")
        editor.decrease_indent(3)
        self.assertEqual(editor.plain_text, "x")

    def test_decrease_indent_tab(self):
        editor = SpanTextEditor("\t\tx")
        editor.decrease_indent(0)
        self.assertEqual(editor.plain_text, "\tx")

    def test_decrease_indent_without_indent(self):
        editor = SpanTextEditor("x")
        self.assertFalse(editor.decrease_indent(0))
        self.assertEqual(editor.plain_text, "x")


if __name__ == '__main__':
    unittest.main()
