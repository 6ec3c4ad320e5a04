"""System clipboard integration for note text."""

import logging

import pyperclip

from .note_content import compose_share_text

logger = logging.getLogger(__name__)


class ClipboardManager:
    """Copies notes to the system clipboard as plain text.

    Formatting is never copied: the text is the editor's plain text with
    line prefixes such as bullets and checkboxes kept verbatim.
    """

    @staticmethod
    def copy_text(text: str) -> bool:
        """Copy text to the system clipboard.

        Returns:
            True if the clipboard accepted the text
        """
        try:
            pyperclip.copy(text)
        except pyperclip.PyperclipException as e:
            logger.warning(f"Could not copy to clipboard: {e}")
            return False
        return True

    @staticmethod
    def copy_note(title: str, content: str) -> bool:
        """Copy a note's title and content, separated by a blank line.

        Returns:
            False if there is nothing to copy or the clipboard is unavailable
        """
        text = compose_share_text(title, content)
        if text is None:
            return False
        return ClipboardManager.copy_text(text)
