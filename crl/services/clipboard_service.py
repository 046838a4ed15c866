#!/usr/bin/env python3
"""
Clipboard Service - Plain-text access to the OS clipboard
"""
import logging

import pyperclip

from crl.errors import ClipboardUnavailable

logger = logging.getLogger(__name__)


class ClipboardService:
    """Reads and writes the system clipboard through pyperclip"""

    def read(self) -> str:
        """
        Read the current clipboard text

        Returns:
            The clipboard text; empty when the clipboard holds no text

        Raises:
            ClipboardUnavailable: if no clipboard mechanism works
        """
        try:
            text = pyperclip.paste()
        except pyperclip.PyperclipException as e:
            raise ClipboardUnavailable(f"cannot read clipboard: {e}") from e
        return text if text is not None else ""

    def write(self, text: str) -> None:
        """Put text on the clipboard"""
        try:
            pyperclip.copy(text)
        except pyperclip.PyperclipException as e:
            raise ClipboardUnavailable(f"cannot write clipboard: {e}") from e
        logger.info(f"Wrote {len(text)} chars to clipboard")
