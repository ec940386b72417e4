"""
Naming utilities for safe code generation.

Turns wire field names and human-readable model names into identifiers.
Every transform here is total and pure: any input string yields a valid
identifier and the same input always yields the same output. Deduplication
is deliberately not done here; colliding identifiers are reported by the
binding synthesizer.
"""

import re
from enum import Enum
from typing import List, Optional, Set


class NamingCase(Enum):
    """Different naming case styles."""

    SNAKE_CASE = "snake"  # user_name
    PASCAL_CASE = "pascal"  # UserName


def split_words(name: str) -> List[str]:
    """Split a name on camel humps and runs of non-alphanumeric characters."""
    name = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1 \2", name)
    name = re.sub(r"([a-z0-9])([A-Z])", r"\1 \2", name)
    return [word for word in re.split(r"[^A-Za-z0-9]+", name) if word]


class NameSanitizer:
    """Handles name sanitization and case conversion."""

    def __init__(
        self,
        reserved_words: Optional[Set[str]] = None,
        fallback_name: str = "unnamed",
    ):
        """
        Initialize name sanitizer.

        Args:
            reserved_words: Words that get a ``_`` suffix when produced.
            fallback_name: Used when a name has no alphanumeric content.
        """
        self.reserved_words = reserved_words or set()
        self.fallback_name = fallback_name

    def sanitize_name(self, name: str, target_case: NamingCase) -> str:
        """
        Sanitize a name for use as an identifier.

        Args:
            name: Original name, any string.
            target_case: Desired case style.

        Returns:
            A valid identifier.
        """
        words = split_words(name) or split_words(self.fallback_name)
        converted = self._join(words, target_case)

        if converted[0].isdigit():
            # Type names must differ from the snake_case field they belong to
            prefix = "T" if target_case == NamingCase.PASCAL_CASE else "_"
            converted = f"{prefix}{converted}"

        if converted in self.reserved_words:
            converted = f"{converted}_"

        return converted

    def field_identifier(self, name: str) -> str:
        """Identifier for a field (snake_case)."""
        return self.sanitize_name(name, NamingCase.SNAKE_CASE)

    def type_identifier(self, name: str) -> str:
        """Identifier for a nested type (PascalCase)."""
        return self.sanitize_name(name, NamingCase.PASCAL_CASE)

    @staticmethod
    def _join(words: List[str], target_case: NamingCase) -> str:
        if target_case == NamingCase.SNAKE_CASE:
            return "_".join(word.lower() for word in words)
        return "".join(word.capitalize() for word in words)


def derive_binding_name(model_name: str) -> str:
    """
    Derive a class name from a human-readable model name.

    Non-alphanumeric characters are stripped and the remaining words are
    title-cased and concatenated: ``text-to-pokemon`` -> ``TextToPokemon``.
    """
    words = [word for word in re.split(r"[^A-Za-z0-9]+", model_name) if word]
    name = "".join(word.capitalize() for word in words)
    if not name:
        return "Model"
    if name[0].isdigit():
        return f"Model{name}"
    return name
