"""
Plain text converter for Bulletin.

Used by the plain textarea editor and as the degraded form of markup the HTML
converter cannot make sense of. Each line is one paragraph.
"""

import html
import re
from typing import Optional

from ..models import BlockType, Document, InlineRun
from .base import BaseConverter


class PlainTextConverter(BaseConverter):
    """Converts between plain text and paragraph-only Documents."""

    def parse(self, markup: Optional[str]) -> Document:
        text = self._check_input(markup)
        if not text:
            return Document.empty()

        lines = text.replace("\r\n", "\n").split("\n")
        return Document.from_blocks(
            (BlockType.PARAGRAPH, None, None, [InlineRun(text=line)] if line else [])
            for line in lines
        )

    def parse_tag_soup(self, markup: str) -> Document:
        """Strip every tag from markup and parse what is left as text."""
        text = re.sub(r'<\s*br\s*/?\s*>', '\n', markup, flags=re.IGNORECASE)
        text = re.sub(r'</\s*(p|div|li|h[1-6]|blockquote|pre)\s*>', '\n', text, flags=re.IGNORECASE)
        text = re.sub(r'<[^>]*>?', '', text)
        text = html.unescape(text)
        text = re.sub(r'\n{2,}', '\n', text).strip('\n')
        return self.parse(text)

    def serialize(self, document: Document) -> str:
        if not isinstance(document, Document):
            raise TypeError(f"Expected a Document, got {type(document).__name__}")
        return "\n".join(block.text for block in document.blocks)
