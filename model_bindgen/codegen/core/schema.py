"""
Schema node tree for code generation.

Parses the OpenAPI/JSON-Schema document embedded in a model version into a
closed family of node types. Local ``$ref`` pointers are resolved during
parsing, so the mapper never sees a reference. Shapes the parser does not
understand become ``UnknownNode`` instead of failing the run.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import unquote

from ...logging_config import get_logger
from .errors import SchemaNotFound, UnresolvedReference

logger = get_logger(__name__)


class _NoDefault:
    """Marker for a schema without a ``default`` (``null`` is a valid default)."""

    def __repr__(self) -> str:
        return "NO_DEFAULT"


NO_DEFAULT = _NoDefault()

INPUT_SCHEMA = "Input"
OUTPUT_SCHEMA = "Output"


@dataclass(frozen=True, kw_only=True)
class SchemaNode:
    """Annotations shared by every node."""

    description: Optional[str] = None
    title: Optional[str] = None
    default: Any = NO_DEFAULT
    enum_values: Optional[Tuple[Any, ...]] = None

    @property
    def has_default(self) -> bool:
        return self.default is not NO_DEFAULT


@dataclass(frozen=True, kw_only=True)
class BooleanNode(SchemaNode):
    pass


@dataclass(frozen=True, kw_only=True)
class NumberNode(SchemaNode):
    pass


@dataclass(frozen=True, kw_only=True)
class IntegerNode(SchemaNode):
    pass


@dataclass(frozen=True, kw_only=True)
class StringNode(SchemaNode):
    pass


@dataclass(frozen=True, kw_only=True)
class NullNode(SchemaNode):
    pass


@dataclass(frozen=True, kw_only=True)
class ArrayNode(SchemaNode):
    items: SchemaNode


@dataclass(frozen=True, kw_only=True)
class ObjectNode(SchemaNode):
    # Declaration order of the source document is preserved
    properties: Dict[str, SchemaNode] = field(default_factory=dict)
    required: frozenset = frozenset()


@dataclass(frozen=True, kw_only=True)
class AnyOfNode(SchemaNode):
    variants: Tuple[SchemaNode, ...] = ()


@dataclass(frozen=True, kw_only=True)
class UnknownNode(SchemaNode):
    """A construct the parser could not interpret; ``raw`` keeps the source."""

    raw: Any = None
    reason: str = "unrecognized schema"


@dataclass(frozen=True)
class SchemaDocument:
    """Parsed named schemas plus the generation roots."""

    nodes: Dict[str, SchemaNode]
    input: ObjectNode
    output: Optional[SchemaNode] = None


_PRIMITIVE_NODES = {
    "boolean": BooleanNode,
    "number": NumberNode,
    "integer": IntegerNode,
    "string": StringNode,
    "null": NullNode,
}


class SchemaParser:
    """Parses one schema document. Instances are single-use."""

    def __init__(self, document: Any):
        self.document = document
        self._resolving: List[str] = []

    def parse(self) -> SchemaDocument:
        """
        Parse every named schema and locate the ``Input``/``Output`` roots.

        Returns:
            SchemaDocument with all named nodes.

        Raises:
            SchemaNotFound: If there is no object ``Input`` schema.
            UnresolvedReference: If a local reference cannot be resolved.
        """
        named = self._named_schemas()
        if INPUT_SCHEMA not in named:
            raise SchemaNotFound(f"No '{INPUT_SCHEMA}' schema found in document")

        nodes = {name: self.parse_node(raw) for name, raw in named.items()}

        input_node = nodes[INPUT_SCHEMA]
        if not isinstance(input_node, ObjectNode):
            raise SchemaNotFound(f"'{INPUT_SCHEMA}' schema is not an object schema")

        logger.debug("Parsed %d named schemas", len(nodes))
        return SchemaDocument(
            nodes=nodes, input=input_node, output=nodes.get(OUTPUT_SCHEMA)
        )

    def _named_schemas(self) -> Dict[str, Any]:
        document = self.document
        if not isinstance(document, dict):
            raise SchemaNotFound("Schema document must be a JSON object")

        named: Dict[str, Any] = {}
        components = document.get("components")
        if isinstance(components, dict) and isinstance(components.get("schemas"), dict):
            named.update(components["schemas"])
        else:
            for key in ("$defs", "definitions"):
                if isinstance(document.get(key), dict):
                    named.update(document[key])

        # A bare object schema is itself the input
        if INPUT_SCHEMA not in named and (
            "properties" in document or document.get("type") == "object"
        ):
            named = {INPUT_SCHEMA: document, **named}

        return named

    def parse_node(self, raw: Any) -> SchemaNode:
        """Parse a single raw schema into a node."""
        if not isinstance(raw, dict):
            return UnknownNode(raw=raw, reason=f"schema is not an object: {raw!r}")

        annotations = self._annotations(raw)

        if "$ref" in raw:
            return self._parse_reference(raw, annotations)

        for key in ("anyOf", "oneOf"):
            if key in raw:
                variants = raw[key]
                if not isinstance(variants, list) or not variants:
                    return UnknownNode(raw=raw, reason=f"empty or malformed {key}", **annotations)
                return AnyOfNode(
                    variants=tuple(self.parse_node(v) for v in variants), **annotations
                )

        if "allOf" in raw:
            members = raw["allOf"]
            if isinstance(members, list) and len(members) == 1:
                return self._with_annotations(self.parse_node(members[0]), annotations)
            return UnknownNode(raw=raw, reason="allOf with several members", **annotations)

        schema_type = raw.get("type")
        if isinstance(schema_type, list):
            if not schema_type:
                return UnknownNode(raw=raw, reason="empty type list", **annotations)
            return AnyOfNode(
                variants=tuple(self._parse_typed(t, raw, {}) for t in schema_type),
                **annotations,
            )

        return self._parse_typed(schema_type, raw, annotations)

    def _parse_typed(
        self, schema_type: Any, raw: Dict[str, Any], annotations: Dict[str, Any]
    ) -> SchemaNode:
        if schema_type is None:
            enum_values = raw.get("enum")
            if "properties" in raw:
                schema_type = "object"
            elif isinstance(enum_values, list) and enum_values and all(
                isinstance(v, str) for v in enum_values
            ):
                schema_type = "string"
            else:
                return UnknownNode(raw=raw, reason="schema has no type", **annotations)

        if not isinstance(schema_type, str):
            return UnknownNode(raw=raw, reason=f"invalid type {schema_type!r}", **annotations)

        if schema_type in _PRIMITIVE_NODES:
            return _PRIMITIVE_NODES[schema_type](**annotations)

        if schema_type == "array":
            items = raw.get("items")
            if items is None:
                item_node: SchemaNode = UnknownNode(raw=None, reason="array without items")
            else:
                item_node = self.parse_node(items)
            return ArrayNode(items=item_node, **annotations)

        if schema_type == "object":
            return self._parse_object(raw, annotations)

        return UnknownNode(raw=raw, reason=f"unsupported type {schema_type!r}", **annotations)

    def _parse_object(self, raw: Dict[str, Any], annotations: Dict[str, Any]) -> SchemaNode:
        properties = raw.get("properties")
        if properties is None and raw.get("additionalProperties") not in (None, False):
            return UnknownNode(raw=raw, reason="free-form object", **annotations)
        if properties is None:
            properties = {}
        if not isinstance(properties, dict):
            return UnknownNode(raw=raw, reason="malformed properties", **annotations)

        required = raw.get("required", [])
        if not isinstance(required, list):
            required = []

        return ObjectNode(
            properties={name: self.parse_node(schema) for name, schema in properties.items()},
            required=frozenset(name for name in required if isinstance(name, str)),
            **annotations,
        )

    def _parse_reference(self, raw: Dict[str, Any], annotations: Dict[str, Any]) -> SchemaNode:
        pointer = raw["$ref"]
        if not isinstance(pointer, str):
            raise UnresolvedReference(repr(pointer))

        if pointer in self._resolving:
            return UnknownNode(raw=raw, reason=f"recursive reference {pointer}", **annotations)

        target = self._resolve_pointer(pointer)
        self._resolving.append(pointer)
        try:
            node = self.parse_node(target)
        finally:
            self._resolving.pop()

        return self._with_annotations(node, annotations)

    def _resolve_pointer(self, pointer: str) -> Any:
        """Resolve a local JSON pointer such as ``#/components/schemas/Foo``."""
        if not pointer.startswith("#"):
            raise UnresolvedReference(pointer)

        path = unquote(pointer[1:])
        if path == "":
            return self.document
        if not path.startswith("/"):
            raise UnresolvedReference(pointer)

        current = self.document
        for token in path[1:].split("/"):
            token = token.replace("~1", "/").replace("~0", "~")
            if isinstance(current, dict) and token in current:
                current = current[token]
            elif isinstance(current, list) and token.isdigit() and int(token) < len(current):
                current = current[int(token)]
            else:
                raise UnresolvedReference(pointer)
        return current

    @staticmethod
    def _annotations(raw: Dict[str, Any]) -> Dict[str, Any]:
        annotations: Dict[str, Any] = {}
        if isinstance(raw.get("description"), str):
            annotations["description"] = raw["description"]
        if isinstance(raw.get("title"), str):
            annotations["title"] = raw["title"]
        if "default" in raw:
            annotations["default"] = raw["default"]
        if isinstance(raw.get("enum"), list):
            annotations["enum_values"] = tuple(raw["enum"])
        return annotations

    @staticmethod
    def _with_annotations(node: SchemaNode, annotations: Dict[str, Any]) -> SchemaNode:
        """Annotations on a referencing schema override the target's."""
        if not annotations:
            return node
        return replace(node, **annotations)


def parse_schema_document(document: Any) -> SchemaDocument:
    """
    Parse a schema document.

    Args:
        document: The version's embedded OpenAPI document, or a bare object
            schema that describes the input directly.

    Returns:
        SchemaDocument with resolved nodes.
    """
    return SchemaParser(document).parse()
