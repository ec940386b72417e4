"""
model-bindgen: typed Python bindings for hosted machine learning models.

Generated bindings subclass ``Predictable`` and import it from this package.
"""

__version__ = "0.1.0"

from .api import ApiError, Client, DecodeError, TransportError
from .codegen import GenerationResult, generate_binding, generate_from_version, generate_many
from .config import BindgenConfig, load_config
from .predictable import Predictable

__all__ = [
    "__version__",
    "ApiError",
    "BindgenConfig",
    "Client",
    "DecodeError",
    "GenerationResult",
    "Predictable",
    "TransportError",
    "generate_binding",
    "generate_from_version",
    "generate_many",
    "load_config",
]
