"""Constants and configuration for the jarnote editor core."""

class EditorConstants:
    """Central configuration constants for the editor."""
    
    # Line prefix markup (literal characters, never spans)
    BULLET_PREFIX = "• "
    ALT_BULLET_PREFIX = "- "  # Accepted on removal only
    CHECKBOX_UNCHECKED = "[ ] "
    CHECKBOX_CHECKED = "[x] "
    CHECKBOX_CHECKED_UPPER = "[X] "
    NUMBERED_PREFIX_PATTERN = r"^(\d+)\.\s"
    
    # Indentation
    INDENT_WIDTH = 4  # Spaces inserted by increase_indent
    INDENT_TEXT = " " * INDENT_WIDTH
    
    # Markup interchange
    MAX_MARKUP_SIZE = 10 * 1024 * 1024  # 10MB, larger input parses to nothing
    PARAGRAPH_OPEN = '<p dir="ltr">'
    PARAGRAPH_CLOSE = "</p>"
    LINE_BREAK = "<br>"
    STRIKETHROUGH_OPEN = '<span style="text-decoration:line-through;">'
    
    # Note content heuristic: stored content holding both brackets is markup
    MARKUP_OPEN_CHAR = "<"
    MARKUP_CLOSE_CHAR = ">"
    
    # Status messages
    NOTHING_TO_COPY_MESSAGE = "Nothing to copy"
    COPIED_MESSAGE = "Copied to clipboard"
    NOTHING_TO_SHARE_MESSAGE = "Nothing to share"
