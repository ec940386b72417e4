"""
Language-specific binding emitters.
"""

from .python import PythonBindingEmitter, create_python_emitter

__all__ = ["PythonBindingEmitter", "create_python_emitter"]
