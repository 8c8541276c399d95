"""Markup converters between stored strings and Documents."""

from .base import BaseConverter
from .html import HtmlConverter, parse_markup, serialize_document
from .plain_text import PlainTextConverter

__all__ = ["BaseConverter", "HtmlConverter", "PlainTextConverter", "parse_markup", "serialize_document"]
