"""
Binding synthesis.

Assembles mapped fields into an immutable ``BindingDeclaration`` and
enforces that identifiers are unique within every record.
"""

import keyword
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from ...logging_config import get_logger
from .errors import GeneratorError, NameCollision
from .naming import derive_binding_name
from .schema import ObjectNode, SchemaNode
from .types import (
    FieldDescriptor,
    OptionalType,
    PlaceholderType,
    RecordType,
    SequenceType,
    TypeDescriptor,
    TypeMapper,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class BindingDeclaration:
    """Everything needed to render one model binding."""

    name: str
    model_id: str
    version_id: str
    input_fields: Tuple[FieldDescriptor, ...]
    output_type: Optional[TypeDescriptor] = None
    doc_comment: Optional[str] = None
    diagnostics: Tuple[str, ...] = ()


def find_collisions(fields: Tuple[FieldDescriptor, ...]) -> Dict[str, List[str]]:
    """Map every identifier produced by more than one field to all source names."""
    by_identifier: Dict[str, List[str]] = {}
    for field in fields:
        by_identifier.setdefault(field.target_identifier, []).append(field.source_name)
    return {
        identifier: names for identifier, names in by_identifier.items() if len(names) > 1
    }


def _nested_records(type_descriptor: TypeDescriptor) -> List[RecordType]:
    if isinstance(type_descriptor, RecordType):
        return [type_descriptor]
    if isinstance(type_descriptor, SequenceType):
        return _nested_records(type_descriptor.element)
    if isinstance(type_descriptor, OptionalType):
        return _nested_records(type_descriptor.wrapped)
    return []


def _placeholder_reasons(type_descriptor: TypeDescriptor) -> List[str]:
    if isinstance(type_descriptor, PlaceholderType):
        return [type_descriptor.reason]
    if isinstance(type_descriptor, SequenceType):
        return _placeholder_reasons(type_descriptor.element)
    if isinstance(type_descriptor, OptionalType):
        return _placeholder_reasons(type_descriptor.wrapped)
    return []


class BindingSynthesizer:
    """Builds binding declarations from parsed schema roots."""

    def __init__(self, mapper: Optional[TypeMapper] = None):
        self.mapper = mapper or TypeMapper()

    def synthesize(
        self,
        binding_name: str,
        input_root: ObjectNode,
        output_root: Optional[SchemaNode] = None,
        *,
        model_id: str,
        version_id: str,
        doc_comment: Optional[str] = None,
    ) -> BindingDeclaration:
        """
        Synthesize a binding declaration.

        Args:
            binding_name: Python class name of the binding.
            input_root: Parsed ``Input`` schema.
            output_root: Parsed ``Output`` schema, if the document has one.
            model_id: ``owner/name`` of the model.
            version_id: Version the binding is pinned to.
            doc_comment: Docstring for the binding class.

        Returns:
            The immutable declaration.

        Raises:
            GeneratorError: If ``binding_name`` is not a valid identifier.
            NameCollision: If two properties map to the same identifier.
        """
        if not binding_name.isidentifier() or keyword.iskeyword(binding_name):
            raise GeneratorError(f"Invalid binding name: {binding_name!r}")

        input_fields = self.mapper.map_fields(input_root)
        self._check_unique(input_fields, "Input")

        output_type = None
        if output_root is not None:
            output_type = self.mapper.map(output_root, "Output")
            for record in _nested_records(output_type):
                self._check_record(record, "Output")

        diagnostics = tuple(self._diagnostics(input_fields, "Input"))
        if output_type is not None:
            diagnostics += tuple(
                f"Output: {reason}" for reason in _placeholder_reasons(output_type)
            )
            for record in _nested_records(output_type):
                diagnostics += tuple(self._diagnostics(record.fields, "Output"))

        for message in diagnostics:
            logger.warning("Unsupported schema construct, using Any: %s", message)

        return BindingDeclaration(
            name=binding_name,
            model_id=model_id,
            version_id=version_id,
            input_fields=input_fields,
            output_type=output_type,
            doc_comment=doc_comment,
            diagnostics=diagnostics,
        )

    def _check_unique(self, fields: Tuple[FieldDescriptor, ...], scope: str) -> None:
        collisions = find_collisions(fields)
        if collisions:
            raise NameCollision(collisions, scope=scope)
        for field in fields:
            for record in _nested_records(field.type_descriptor):
                self._check_record(record, f"{scope}.{field.target_identifier}")

    def _check_record(self, record: RecordType, scope: str) -> None:
        self._check_unique(record.fields, scope)

    def _diagnostics(self, fields: Tuple[FieldDescriptor, ...], scope: str) -> List[str]:
        messages = []
        for field in fields:
            path = f"{scope}.{field.source_name}"
            for reason in _placeholder_reasons(field.type_descriptor):
                messages.append(f"{path}: {reason}")
            for record in _nested_records(field.type_descriptor):
                messages.extend(self._diagnostics(record.fields, path))
        return messages


def binding_name_for(model_name: str, explicit_name: Optional[str] = None) -> str:
    """Use the explicit name if given, else derive one from the model name."""
    if explicit_name:
        return explicit_name
    return derive_binding_name(model_name)
