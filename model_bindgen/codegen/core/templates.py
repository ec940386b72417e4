"""
Template engine wrapper for code generation.

Provides a simple interface for Jinja2 template rendering
with common utilities for code generation.
"""

import json
from typing import Any, Dict

from jinja2 import DictLoader, Environment, StrictUndefined


class TemplateError(Exception):
    """Exception raised for template-related errors."""

    pass


class TemplateEngine:
    """Wrapper for Jinja2 template engine with code generation utilities."""

    def __init__(self):
        self._loader = DictLoader({})
        self._env = self._setup_environment()

    def _setup_environment(self) -> Environment:
        """Setup Jinja2 environment with code generation utilities."""
        env = Environment(
            loader=self._loader,
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
        )

        # Add custom filters for code generation
        env.filters["indent"] = self._indent_filter
        env.filters["comment"] = self._comment_filter
        env.filters["py_str"] = self._py_str_filter
        return env

    def render_template(self, template_name: str, context: Dict[str, Any]) -> str:
        """
        Render a template with the given context.

        Args:
            template_name: Name of a registered template
            context: Variables to pass to template

        Returns:
            Rendered template content
        """
        try:
            template = self._env.get_template(template_name)
            return template.render(**context)
        except Exception as e:
            raise TemplateError(f"Failed to render template {template_name}: {e}") from e

    def add_template(self, name: str, content: str) -> None:
        """
        Add an in-memory template.

        Args:
            name: Template name
            content: Template content
        """
        self._loader.mapping[name] = content

    # Template filters for code generation

    def _indent_filter(self, value: str, spaces: int = 4) -> str:
        """Indent all non-blank lines in a string."""
        indent = " " * spaces
        lines = str(value).split("\n")
        return "\n".join(indent + line if line.strip() else "" for line in lines)

    def _comment_filter(self, value: str, style: str = "#") -> str:
        """Prefix each line with a comment marker."""
        lines = str(value).split("\n")
        return "\n".join(f"{style} {line}".rstrip() for line in lines)

    def _py_str_filter(self, value: str) -> str:
        """Render a double-quoted Python string literal."""
        return json.dumps(str(value))


def create_template_engine() -> TemplateEngine:
    """Create a template engine with no templates registered."""
    return TemplateEngine()
