"""
Core code generation components.

Provides the schema model, type mapping, binding synthesis and the base
emitter shared by language emitters.
"""

from .binding import BindingDeclaration, BindingSynthesizer, binding_name_for, find_collisions
from .errors import (
    GenerationCancelled,
    GeneratorError,
    NameCollision,
    SchemaNotFound,
    UnresolvedReference,
    VersionNotFound,
)
from .generator import GenerationResult, SourceEmitter, format_code
from .naming import NameSanitizer, NamingCase, derive_binding_name
from .schema import SchemaDocument, SchemaNode, SchemaParser, parse_schema_document
from .templates import TemplateEngine, TemplateError, create_template_engine
from .types import (
    FieldDescriptor,
    OptionalType,
    PlaceholderType,
    PrimitiveKind,
    PrimitiveType,
    RecordType,
    SequenceType,
    TypeDescriptor,
    TypeMapper,
)

__all__ = [
    # Schema parsing
    "SchemaDocument",
    "SchemaNode",
    "SchemaParser",
    "parse_schema_document",
    # Type system
    "FieldDescriptor",
    "OptionalType",
    "PlaceholderType",
    "PrimitiveKind",
    "PrimitiveType",
    "RecordType",
    "SequenceType",
    "TypeDescriptor",
    "TypeMapper",
    # Synthesis
    "BindingDeclaration",
    "BindingSynthesizer",
    "binding_name_for",
    "find_collisions",
    # Naming utilities
    "NameSanitizer",
    "NamingCase",
    "derive_binding_name",
    # Emission
    "GenerationResult",
    "SourceEmitter",
    "format_code",
    "TemplateEngine",
    "TemplateError",
    "create_template_engine",
    # Errors
    "GenerationCancelled",
    "GeneratorError",
    "NameCollision",
    "SchemaNotFound",
    "UnresolvedReference",
    "VersionNotFound",
]
