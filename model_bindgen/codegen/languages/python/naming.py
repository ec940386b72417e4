"""Python naming rules for generated bindings."""

import keyword

from ...core.naming import NameSanitizer

# Hard keywords, plus names the generated class bodies call at runtime
PYTHON_RESERVED_WORDS = frozenset(keyword.kwlist) | {"dataclass", "field"}


def create_python_sanitizer() -> NameSanitizer:
    """Create a name sanitizer configured for Python."""
    return NameSanitizer(reserved_words=set(PYTHON_RESERVED_WORDS))
