"""
HTML converter for Bulletin.

Post and page bodies are stored as HTML fragments written by the authoring
editor. This module parses such fragments into Documents with Python's
built-in html.parser and writes Documents back out in one canonical shape:
one block element per line, lists wrapped in <ul>/<ol>, inline styles nested
in a fixed order.

Parsing is forgiving. Unknown tags are dropped but their text is kept, text
outside any block is wrapped in a paragraph, and unclosed tags are closed by
the next block or by the end of input. Markup the parser cannot handle at all
degrades to plain-text paragraphs.
"""

import html
import logging
from html.parser import HTMLParser
from typing import Any, Dict, List, Optional, Tuple

from ..models import BlockType, Document, InlineRun, RunKind, STYLE_ORDER
from ..models.document import ALIGNMENTS, normalize_runs
from .base import BaseConverter
from .plain_text import PlainTextConverter

HEADING_TAGS = {f"h{level}": level for level in range(1, 7)}
GENERIC_BLOCK_TAGS = {"p", "div", "section", "article", "figure", "tr"}
BLOCK_TAGS = GENERIC_BLOCK_TAGS | set(HEADING_TAGS) | {"li", "blockquote", "pre"}
LIST_TAGS = {"ul", "ol"}
SKIPPED_TAGS = {"script", "style", "head", "title"}

STYLE_TAGS = {
    "strong": "bold",
    "b": "bold",
    "em": "italic",
    "i": "italic",
    "ins": "underline",
    "u": "underline",
    "del": "strikethrough",
    "s": "strikethrough",
    "strike": "strikethrough",
    "code": "code",
    "sup": "superscript",
    "sub": "subscript",
}

# Tag written for each style
STYLE_OUTPUT_TAGS = {
    "bold": "strong",
    "italic": "em",
    "underline": "ins",
    "strikethrough": "del",
    "code": "code",
    "superscript": "sup",
    "subscript": "sub",
}

LIST_OUTPUT_TAGS = {
    BlockType.UNORDERED_LIST_ITEM: "ul",
    BlockType.ORDERED_LIST_ITEM: "ol",
}


def _parse_style_attr(value: Optional[str]) -> Dict[str, str]:
    """Split an inline CSS declaration list into a name -> value mapping."""
    declarations = {}
    for item in (value or "").split(";"):
        name, sep, val = item.partition(":")
        if sep and name.strip() and val.strip():
            declarations[name.strip().lower()] = val.strip()
    return declarations


def _alignment(attrs: Dict[str, Any]) -> Optional[str]:
    align = _parse_style_attr(attrs.get("style")).get("text-align") or attrs.get("align")
    if align and align.lower() in ALIGNMENTS:
        return align.lower()
    return None


class _MarkupParser(HTMLParser):
    """Event-driven builder of ``(block_type, level, align, runs)`` tuples."""

    def __init__(self):
        super().__init__(convert_charrefs=True)
        self.blocks: List[Tuple[BlockType, Optional[int], Optional[str], List[InlineRun]]] = []
        self._current: Optional[Dict[str, Any]] = None
        self._inline: List[Tuple[str, Dict[str, Any]]] = []
        self._lists: List[str] = []
        self._skip_depth = 0

    # HTMLParser callbacks

    def handle_starttag(self, tag, attrs):
        attrs = dict(attrs)
        if tag in SKIPPED_TAGS:
            self._skip_depth += 1
            return
        if self._skip_depth:
            return

        if tag in LIST_TAGS:
            self._flush()
            self._lists.append(tag)
        elif tag in BLOCK_TAGS:
            self._open_block(tag, attrs)
        elif tag == "br":
            self._append_text("\n", raw=True)
        elif tag == "img":
            self._append_image(attrs)
        else:
            effects = self._inline_effects(tag, attrs)
            if effects is not None:
                self._inline.append((tag, effects))

    def handle_endtag(self, tag):
        if tag in SKIPPED_TAGS:
            self._skip_depth = max(0, self._skip_depth - 1)
            return
        if self._skip_depth:
            return

        if tag in BLOCK_TAGS:
            self._flush(keep_empty=True)
            self._inline.clear()
        elif tag in LIST_TAGS:
            self._flush()
            if tag in self._lists:
                del self._lists[len(self._lists) - 1 - self._lists[::-1].index(tag)]
        else:
            for index in range(len(self._inline) - 1, -1, -1):
                if self._inline[index][0] == tag:
                    del self._inline[index]
                    break

    def handle_data(self, data):
        self._append_text(data)

    def close(self):
        super().close()
        self._flush()

    # Block handling

    def _block_kind(self, tag: str) -> Tuple[BlockType, Optional[int]]:
        if tag in HEADING_TAGS:
            return BlockType.HEADING, HEADING_TAGS[tag]
        if tag == "li":
            if self._lists and self._lists[-1] == "ol":
                return BlockType.ORDERED_LIST_ITEM, None
            return BlockType.UNORDERED_LIST_ITEM, None
        if tag == "blockquote":
            return BlockType.BLOCKQUOTE, None
        if tag == "pre":
            return BlockType.CODE, None
        return BlockType.PARAGRAPH, None

    def _open_block(self, tag: str, attrs: Dict[str, Any]) -> None:
        block_type, level = self._block_kind(tag)
        align = _alignment(attrs)
        current = self._current

        if current is not None and not current["runs"]:
            # Nested block with nothing before it, e.g. <li><p>
            if tag in GENERIC_BLOCK_TAGS and current["type"] != BlockType.PARAGRAPH:
                current["align"] = current["align"] or align
            else:
                current.update(type=block_type, level=level, align=align or current["align"])
            return

        self._flush()
        self._current = {"type": block_type, "level": level, "align": align, "runs": []}

    def _ensure_block(self) -> Dict[str, Any]:
        if self._current is None:
            self._current = {"type": BlockType.PARAGRAPH, "level": None, "align": None, "runs": []}
        return self._current

    def _flush(self, keep_empty: bool = False) -> None:
        current = self._current
        self._current = None
        if current is None or (not current["runs"] and not keep_empty):
            return
        self.blocks.append((current["type"], current["level"], current["align"],
                            list(normalize_runs(current["runs"]))))

    # Inline handling

    def _inline_effects(self, tag: str, attrs: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        effects: Dict[str, Any] = {}
        if tag in STYLE_TAGS:
            effects["styles"] = {STYLE_TAGS[tag]}
        elif tag == "a":
            if attrs.get("href"):
                effects["href"] = attrs["href"]
        elif tag == "font":
            if attrs.get("color"):
                effects["color"] = attrs["color"]
        elif tag != "span":
            return None

        declarations = _parse_style_attr(attrs.get("style"))
        styles = set(effects.get("styles", ()))
        if "color" in declarations:
            effects["color"] = declarations["color"]
        if "font-size" in declarations:
            effects["font_size"] = declarations["font-size"]
        weight = declarations.get("font-weight", "")
        if weight in ("bold", "bolder") or (weight.isdigit() and int(weight) >= 600):
            styles.add("bold")
        if declarations.get("font-style") == "italic":
            styles.add("italic")
        decoration = declarations.get("text-decoration", "")
        if "underline" in decoration:
            styles.add("underline")
        if "line-through" in decoration:
            styles.add("strikethrough")
        if styles:
            effects["styles"] = styles
        return effects

    def _formatting(self) -> Dict[str, Any]:
        styles = set()
        formatting: Dict[str, Any] = {"color": None, "font_size": None, "href": None}
        for _, effects in self._inline:
            styles |= effects.get("styles", set())
            for key in formatting:
                if key in effects:
                    formatting[key] = effects[key]
        if self._current is not None and self._current["type"] == BlockType.CODE:
            styles.discard("code")
        formatting["styles"] = styles
        return formatting

    def _append_text(self, data: str, raw: bool = False) -> None:
        if self._skip_depth or not data:
            return
        if not raw:
            if not data.strip():
                # Formatting whitespace between tags
                if self._current is None:
                    return
                if not self._current["runs"] and ("\n" in data or "\r" in data):
                    return
            in_code = self._current is not None and self._current["type"] == BlockType.CODE
            if not in_code:
                data = data.replace("\r\n", " ").replace("\n", " ").replace("\r", " ")

        block = self._ensure_block()
        formatting = self._formatting()
        kind = RunKind.LINK if formatting["href"] else RunKind.TEXT
        block["runs"].append(InlineRun(kind=kind, text=data, **formatting))

    def _append_image(self, attrs: Dict[str, Any]) -> None:
        src = attrs.get("src")
        if not src:
            return
        block = self._ensure_block()
        block["runs"].append(InlineRun(
            kind=RunKind.IMAGE,
            src=src,
            alt=attrs.get("alt"),
            resource_id=attrs.get("data-resource-id")
        ))


def _attr(value: str) -> str:
    return html.escape(value, quote=True)


def _escape_text(text: str) -> str:
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    return html.escape(text, quote=False).replace("\n", "<br>")


class HtmlConverter(BaseConverter):
    """
    Converts between stored HTML fragments and Documents.
    """

    def __init__(self):
        self._fallback = PlainTextConverter()

    def parse(self, markup: Optional[str]) -> Document:
        text = self._check_input(markup)
        if not text.strip():
            return Document.empty()

        parser = _MarkupParser()
        try:
            parser.feed(text)
            parser.close()
            return Document.from_blocks(parser.blocks)
        except (AssertionError, ValueError) as e:
            logging.warning(f"Could not parse markup, degrading to plain text: {e}")
            return self._fallback.parse_tag_soup(text)

    def serialize(self, document: Document) -> str:
        if not isinstance(document, Document):
            raise TypeError(f"Expected a Document, got {type(document).__name__}")

        parts: List[str] = []
        open_list = None
        for block in document.blocks:
            list_tag = LIST_OUTPUT_TAGS.get(block.block_type)
            if list_tag != open_list:
                if open_list:
                    parts.append(f"</{open_list}>\n")
                if list_tag:
                    parts.append(f"<{list_tag}>\n")
                open_list = list_tag
            parts.append(self._serialize_block(block) + "\n")
        if open_list:
            parts.append(f"</{open_list}>\n")
        return "".join(parts)

    def _serialize_block(self, block) -> str:
        if block.block_type == BlockType.HEADING:
            tag = f"h{block.level}"
        elif block.block_type in LIST_OUTPUT_TAGS:
            tag = "li"
        elif block.block_type == BlockType.BLOCKQUOTE:
            tag = "blockquote"
        elif block.block_type == BlockType.CODE:
            tag = "pre"
        else:
            tag = "p"

        style = f' style="text-align:{block.align};"' if block.align else ""
        in_code = block.block_type == BlockType.CODE
        runs = block.runs
        if in_code:
            # A code block implies the code style, so runs differing only by it are merged
            runs = [run.model_copy(update={"styles": tuple(s for s in run.styles if s != "code")})
                    for run in runs]
        inner = "".join(self._serialize_run(run, in_code) for run in normalize_runs(runs))
        return f"<{tag}{style}>{inner}</{tag}>"

    def _serialize_run(self, run: InlineRun, in_code: bool) -> str:
        if run.kind == RunKind.IMAGE:
            attrs = [f'src="{_attr(run.src)}"']
            if run.alt is not None:
                attrs.append(f'alt="{_attr(run.alt)}"')
            if run.resource_id:
                attrs.append(f'data-resource-id="{_attr(run.resource_id)}"')
            return f"<img {' '.join(attrs)}/>"

        content = _escape_text(run.text)
        for style in reversed(STYLE_ORDER):
            if style in run.styles and not (in_code and style == "code"):
                tag = STYLE_OUTPUT_TAGS[style]
                content = f"<{tag}>{content}</{tag}>"

        declarations = ""
        if run.color:
            declarations += f"color: {run.color};"
        if run.font_size:
            declarations += f"font-size: {run.font_size};"
        if declarations:
            content = f'<span style="{_attr(declarations)}">{content}</span>'

        if run.kind == RunKind.LINK:
            content = f'<a href="{_attr(run.href)}" target="_blank">{content}</a>'
        return content


_converter = HtmlConverter()


def parse_markup(markup: Optional[str]) -> Document:
    """Parse a stored markup string into a Document."""
    return _converter.parse(markup)


def serialize_document(document: Document) -> str:
    """Serialize a Document into its canonical markup string."""
    return _converter.serialize(document)
