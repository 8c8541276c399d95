"""
Base converter interface for Bulletin.

This module defines the abstract interface every markup converter implements.
"""

from abc import ABC, abstractmethod
from typing import Optional

from ..models import Document


class BaseConverter(ABC):
    """
    Abstract base class for document converters.

    A converter turns a stored markup string into a Document and back. The
    pair must be stable: for any Document the converter produced,
    ``serialize(parse(serialize(doc))) == serialize(doc)``.
    """

    @abstractmethod
    def parse(self, markup: Optional[str]) -> Document:
        """
        Convert stored markup into a Document.

        Args:
            markup: The stored string; None or "" yields an empty Document

        Returns:
            The parsed Document

        Raises:
            TypeError: If markup is neither a string nor None
        """
        pass

    @abstractmethod
    def serialize(self, document: Document) -> str:
        """
        Convert a Document into its storage string.

        Args:
            document: The Document to serialize

        Returns:
            The markup string; identical Documents always give identical strings
        """
        pass

    def normalize(self, markup: Optional[str]) -> str:
        """Re-emit stored markup in this converter's canonical form."""
        return self.serialize(self.parse(markup))

    @staticmethod
    def _check_input(markup) -> str:
        if markup is None:
            return ""
        if not isinstance(markup, str):
            raise TypeError(f"Markup must be a string, got {type(markup).__name__}")
        return markup
