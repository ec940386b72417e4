"""
Python binding emitter.
"""

from .generator import PythonBindingEmitter, create_python_emitter, render_literal
from .naming import create_python_sanitizer

__all__ = [
    "PythonBindingEmitter",
    "create_python_emitter",
    "create_python_sanitizer",
    "render_literal",
]
