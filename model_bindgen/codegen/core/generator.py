"""
Base emitter interface for all code generation targets.

Defines the contract language emitters implement, the shared formatting
pass, and the result container handed back to callers.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from ...config import BindgenConfig
from .binding import BindingDeclaration
from .templates import TemplateEngine, create_template_engine

TOP_LEVEL_PREFIXES = ("class ", "def ", "async def ", "@")


def _opens_block(line: str) -> bool:
    return line.endswith(":") and not line.lstrip().startswith("#")


def _is_top_level_definition(line: str) -> bool:
    return not line[0].isspace() and line.startswith(TOP_LEVEL_PREFIXES)


def format_code(code: str) -> str:
    """
    Normalize whitespace in generated source.

    Trailing whitespace is stripped, blank lines directly after a block
    opener are removed, top-level definitions get exactly two blank lines
    before them and any other run of blank lines collapses to one. The
    result ends with a single newline.

    The output depends only on the non-blank lines and on whether a gap
    existed between them, so formatting formatted code changes nothing.
    """
    formatted: List[str] = []
    previous: Optional[str] = None
    pending_blank = False

    for raw_line in code.split("\n"):
        line = raw_line.rstrip()
        if not line:
            pending_blank = previous is not None
            continue

        if previous is not None:
            if _opens_block(previous):
                blanks = 0
            elif _is_top_level_definition(line) and not previous.startswith("@"):
                blanks = 2
            else:
                blanks = 1 if pending_blank else 0
            formatted.extend([""] * blanks)

        formatted.append(line)
        previous = line
        pending_blank = False

    return "\n".join(formatted) + "\n" if formatted else ""


class SourceEmitter(ABC):
    """Abstract base class for binding emitters."""

    def __init__(self, config: Optional[BindgenConfig] = None):
        """Initialize emitter with optional configuration."""
        self.config = config or BindgenConfig()
        self._template_engine: Optional[TemplateEngine] = None

    @property
    @abstractmethod
    def language_name(self) -> str:
        """Return the name of the target language (e.g., 'python')."""
        pass

    @property
    @abstractmethod
    def file_extension(self) -> str:
        """Return the file extension for generated files (e.g., '.py')."""
        pass

    @property
    def template_engine(self) -> TemplateEngine:
        """Get the template engine for this emitter."""
        if self._template_engine is None:
            self._template_engine = create_template_engine()
            self.register_templates(self._template_engine)
        return self._template_engine

    def register_templates(self, engine: TemplateEngine) -> None:
        """Add in-memory templates to the engine. Override as needed."""
        pass

    @abstractmethod
    def render(self, declaration: BindingDeclaration) -> str:
        """
        Render a declaration to unformatted source.

        Args:
            declaration: Binding to render

        Returns:
            Source text before formatting
        """
        pass

    def emit(self, declaration: BindingDeclaration) -> str:
        """Render and format a declaration. Pure: same input, same bytes."""
        return self.format_code(self.render(declaration))

    def format_code(self, code: str) -> str:
        """Apply language-specific formatting to generated code."""
        return format_code(code)

    def render_template(self, template_name: str, context: Dict[str, Any]) -> str:
        return self.template_engine.render_template(template_name, context)


class GenerationResult:
    """Container for generation results and metadata."""

    def __init__(
        self,
        code: str,
        warnings: Optional[List[str]] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize generation result.

        Args:
            code: Generated code
            warnings: Diagnostics from generation
            metadata: Additional metadata about generation
        """
        self.code = code
        self.warnings = warnings or []
        self.metadata = metadata or {}
        self.success = True
        self.error_message: Optional[str] = None
        self.exception: Optional[BaseException] = None

    @classmethod
    def error(cls, message: str, exception: Optional[BaseException] = None) -> "GenerationResult":
        """Create a failed generation result."""
        result = cls(code="")
        result.success = False
        result.error_message = message
        result.exception = exception
        return result
