"""
Target type system for code generation.

Maps schema nodes to immutable type descriptors and fields. Mapping is
total: anything the mapper cannot express precisely becomes a
``PlaceholderType`` carrying the reason, so one odd property never aborts a
whole run.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Set, Tuple

from ...logging_config import get_logger
from .naming import NameSanitizer
from .schema import (
    NO_DEFAULT,
    AnyOfNode,
    ArrayNode,
    BooleanNode,
    IntegerNode,
    NullNode,
    NumberNode,
    ObjectNode,
    SchemaNode,
    StringNode,
    UnknownNode,
)

logger = get_logger(__name__)


class PrimitiveKind(Enum):
    """Primitive kinds shared by every target language."""

    BOOL = "bool"
    FLOAT64 = "float64"
    INT64 = "int64"
    STRING = "string"


@dataclass(frozen=True)
class TypeDescriptor:
    """Base class of all type descriptors."""


@dataclass(frozen=True)
class PrimitiveType(TypeDescriptor):
    kind: PrimitiveKind


@dataclass(frozen=True)
class SequenceType(TypeDescriptor):
    element: TypeDescriptor


@dataclass(frozen=True)
class OptionalType(TypeDescriptor):
    wrapped: TypeDescriptor


@dataclass(frozen=True)
class RecordType(TypeDescriptor):
    name: str
    fields: Tuple["FieldDescriptor", ...] = ()


@dataclass(frozen=True)
class PlaceholderType(TypeDescriptor):
    reason: str = "unsupported schema construct"


@dataclass(frozen=True)
class FieldDescriptor:
    """A mapped property, ready to be rendered."""

    source_name: str  # wire name, used as the coding key
    target_identifier: str
    type_descriptor: TypeDescriptor
    optional: bool
    default_literal: Any = NO_DEFAULT
    doc_comment: Optional[str] = None

    @property
    def has_default(self) -> bool:
        return self.default_literal is not NO_DEFAULT


_PRIMITIVES = {
    BooleanNode: PrimitiveKind.BOOL,
    NumberNode: PrimitiveKind.FLOAT64,
    IntegerNode: PrimitiveKind.INT64,
    StringNode: PrimitiveKind.STRING,
}


def _fits_float(value: int) -> bool:
    try:
        float(value)
    except OverflowError:
        return False
    return True


class TypeMapper:
    """
    Maps schema nodes to type descriptors.

    The mapper holds only its naming rules, so it can be shared freely.
    """

    def __init__(self, sanitizer: Optional[NameSanitizer] = None):
        self.sanitizer = sanitizer or NameSanitizer()

    def map(
        self,
        node: SchemaNode,
        name_hint: str = "Record",
        used_names: Optional[Set[str]] = None,
    ) -> TypeDescriptor:
        """
        Map a node to a type descriptor. Never raises.

        Args:
            node: Parsed schema node.
            name_hint: Name given to a record type if ``node`` is an object.
            used_names: Record names already taken in the enclosing scope;
                records created here are numbered to avoid them and added.
        """
        if type(node) in _PRIMITIVES:
            return PrimitiveType(_PRIMITIVES[type(node)])

        if isinstance(node, ArrayNode):
            return SequenceType(self.map(node.items, f"{name_hint}Item", used_names))

        if isinstance(node, ObjectNode):
            name = name_hint
            if used_names is not None:
                name = self._claim_name(name_hint, used_names)
            return RecordType(name=name, fields=self.map_fields(node))

        if isinstance(node, AnyOfNode):
            return self._map_any_of(node, name_hint, used_names)

        if isinstance(node, UnknownNode):
            return PlaceholderType(node.reason)

        if isinstance(node, NullNode):
            return PlaceholderType("null type outside of anyOf")

        return PlaceholderType(f"unsupported schema node {type(node).__name__}")

    def _map_any_of(
        self, node: AnyOfNode, name_hint: str, used_names: Optional[Set[str]]
    ) -> TypeDescriptor:
        non_null = [v for v in node.variants if not isinstance(v, NullNode)]
        if len(non_null) == len(node.variants):
            return PlaceholderType("anyOf without a null variant")
        if len(non_null) != 1:
            return PlaceholderType("anyOf with several non-null variants")

        wrapped = self.map(non_null[0], name_hint, used_names)
        if isinstance(wrapped, OptionalType):
            return wrapped
        return OptionalType(wrapped)

    def map_fields(self, node: ObjectNode) -> Tuple[FieldDescriptor, ...]:
        """Map every property of an object, in declaration order."""
        used_type_names: Set[str] = set()
        fields = []
        for name, child in node.properties.items():
            fields.append(
                self.map_field(name, child, name in node.required, used_type_names)
            )
        return tuple(fields)

    def map_field(
        self,
        source_name: str,
        node: SchemaNode,
        required: bool,
        used_type_names: Optional[Set[str]] = None,
    ) -> FieldDescriptor:
        """
        Map one property to a field.

        A field is non-optional only when it is required and its type is not
        already optional. Records named for the field, including array item
        records, take names not yet in ``used_type_names``.
        """
        identifier = self.sanitizer.field_identifier(source_name)
        type_name = self.sanitizer.type_identifier(identifier)
        type_descriptor = self.map(node, type_name, used_type_names)

        return FieldDescriptor(
            source_name=source_name,
            target_identifier=identifier,
            type_descriptor=type_descriptor,
            optional=not (required and not isinstance(type_descriptor, OptionalType)),
            default_literal=self.extract_default(node, type_descriptor),
            doc_comment=self.documentation(node),
        )

    @staticmethod
    def _claim_name(base: str, used: Set[str]) -> str:
        name, counter = base, 2
        while name in used:
            name = f"{base}{counter}"
            counter += 1
        used.add(name)
        return name

    def extract_default(self, node: SchemaNode, type_descriptor: TypeDescriptor) -> Any:
        """
        Return the node's default if its kind matches the mapped type.

        A mismatched default is dropped entirely, so the field behaves as if
        it had no default.
        """
        if not node.has_default:
            return NO_DEFAULT
        if not self.default_matches(node.default, type_descriptor):
            logger.debug(
                "Dropping default %r that does not match %s", node.default, type_descriptor
            )
            return NO_DEFAULT
        return self._coerce(node.default, type_descriptor)

    def default_matches(self, value: Any, type_descriptor: TypeDescriptor) -> bool:
        if isinstance(type_descriptor, PrimitiveType):
            kind = type_descriptor.kind
            if kind == PrimitiveKind.BOOL:
                return isinstance(value, bool)
            if isinstance(value, bool):
                return False
            if kind == PrimitiveKind.INT64:
                return isinstance(value, int)
            if kind == PrimitiveKind.FLOAT64:
                if isinstance(value, int):
                    return _fits_float(value)
                return isinstance(value, float)
            return isinstance(value, str)

        if isinstance(type_descriptor, SequenceType):
            return isinstance(value, list) and all(
                self.default_matches(item, type_descriptor.element) for item in value
            )

        if isinstance(type_descriptor, OptionalType):
            return value is None or self.default_matches(value, type_descriptor.wrapped)

        if isinstance(type_descriptor, PlaceholderType):
            return True

        return False

    def _coerce(self, value: Any, type_descriptor: TypeDescriptor) -> Any:
        if value is None:
            return None
        if isinstance(type_descriptor, PrimitiveType):
            if type_descriptor.kind == PrimitiveKind.FLOAT64:
                return float(value)
            return value
        if isinstance(type_descriptor, SequenceType):
            return [self._coerce(item, type_descriptor.element) for item in value]
        if isinstance(type_descriptor, OptionalType):
            return self._coerce(value, type_descriptor.wrapped)
        return value

    @staticmethod
    def documentation(node: SchemaNode) -> Optional[str]:
        """Title and description joined by a newline, or None if neither."""
        parts = []
        for text in (node.title, node.description):
            if text and text.strip() and text.strip() not in parts:
                parts.append(text.strip())
        return "\n".join(parts) if parts else None
