"""
Python binding emitter.

Renders a ``BindingDeclaration`` as a ``Predictable`` subclass holding a
nested ``Input`` dataclass and an ``Output`` type.
"""

import json
import math
from typing import Any, Dict, List, Optional, Set

from ...core.binding import BindingDeclaration
from ...core.generator import SourceEmitter
from ...core.templates import TemplateEngine
from ...core.types import (
    FieldDescriptor,
    OptionalType,
    PrimitiveKind,
    PrimitiveType,
    RecordType,
    SequenceType,
    TypeDescriptor,
)

PYTHON_PRIMITIVES = {
    PrimitiveKind.BOOL: "bool",
    PrimitiveKind.FLOAT64: "float",
    PrimitiveKind.INT64: "int",
    PrimitiveKind.STRING: "str",
}

BINDING_TEMPLATE = '''\
# Code generated by model-bindgen. DO NOT EDIT.
# Model: {{ model_id }}
# Version: {{ version_id }}

from __future__ import annotations

{% for line in imports %}
{{ line }}
{% endfor %}

from {{ runtime_module }} import Predictable


class {{ name }}(Predictable):
{% if docstring %}
{{ docstring | indent }}

{% endif %}
    model_id = {{ model_id | py_str }}
    version_id = {{ version_id | py_str }}

{{ input_class | indent }}

{% if output_class %}
{{ output_class | indent }}
{% else %}
{% for record in output_records %}
{{ record | indent }}

{% endfor %}
    Output = {{ output_annotation }}
{% endif %}
'''

RECORD_TEMPLATE = '''\
@dataclass(kw_only=True)
class {{ class_name }}:
{% for record in records %}
{{ record | indent }}

{% endfor %}
{% for field in fields %}
{% if field.doc %}
{{ field.doc | comment("#:") | indent }}
{% endif %}
    {{ field.name }}: {{ field.annotation }}{{ field.default }}

{% endfor %}
{% if fields %}
    CODING_KEYS = {
{% for field in fields %}
        {{ field.name | py_str }}: {{ field.wire_name | py_str }},
{% endfor %}
    }
{% else %}
    CODING_KEYS = {}
{% endif %}
'''


def render_literal(value: Any) -> str:
    """Render a JSON value as a Python literal."""
    if value is None:
        return "None"
    if isinstance(value, bool):
        return "True" if value else "False"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            return f'float("{value}")'
        return repr(value)
    if isinstance(value, str):
        return json.dumps(value)
    if isinstance(value, list):
        return "[" + ", ".join(render_literal(item) for item in value) + "]"
    if isinstance(value, dict):
        items = (f"{json.dumps(str(k))}: {render_literal(v)}" for k, v in value.items())
        return "{" + ", ".join(items) + "}"
    return json.dumps(str(value))


def render_docstring(text: str) -> str:
    """Render a docstring, escaping anything that would end it early."""
    text = text.replace("\\", "\\\\").replace('"""', '\\"\\"\\"')
    if text.endswith('"'):
        text = text[:-1] + '\\"'
    lines = text.split("\n")
    if len(lines) == 1:
        return f'"""{text}"""'
    return '"""' + "\n".join(lines) + '\n"""'


def _clean_doc(text: Optional[str]) -> Optional[str]:
    if not text:
        return None
    lines = [line.strip() for line in text.splitlines() if line.strip()]
    return "\n".join(lines) or None


class _RenderState:
    """Imports needed by one render call."""

    def __init__(self) -> None:
        self.typing_names: Set[str] = set()
        self.needs_field = False

    def import_lines(self) -> List[str]:
        lines = ["from dataclasses import dataclass, field" if self.needs_field
                 else "from dataclasses import dataclass"]
        if self.typing_names:
            lines.append(f"from typing import {', '.join(sorted(self.typing_names))}")
        return lines


class PythonBindingEmitter(SourceEmitter):
    """Emitter for Python dataclass bindings."""

    @property
    def language_name(self) -> str:
        return "python"

    @property
    def file_extension(self) -> str:
        return ".py"

    def register_templates(self, engine: TemplateEngine) -> None:
        engine.add_template("binding.py.j2", BINDING_TEMPLATE)
        engine.add_template("record.py.j2", RECORD_TEMPLATE)

    def render(self, declaration: BindingDeclaration) -> str:
        """Render the full module for a binding."""
        state = _RenderState()

        input_record = RecordType(name="Input", fields=declaration.input_fields)
        input_class = self._render_record(input_record, state)

        output_class = None
        output_annotation = None
        output_records = []
        if isinstance(declaration.output_type, RecordType):
            output_record = RecordType(name="Output", fields=declaration.output_type.fields)
            output_class = self._render_record(output_record, state)
        elif declaration.output_type is not None:
            output_records = [
                self._render_record(record, state)
                for record in self._records_in(declaration.output_type)
            ]
            output_annotation = self.annotation(declaration.output_type, state)
        else:
            state.typing_names.add("Any")
            output_annotation = "Any"

        doc = _clean_doc(declaration.doc_comment) if self.config.add_comments else None

        context = {
            "name": declaration.name,
            "model_id": declaration.model_id,
            "version_id": declaration.version_id,
            "docstring": render_docstring(doc) if doc else None,
            "imports": state.import_lines(),
            "runtime_module": self.config.runtime_module,
            "input_class": input_class,
            "output_class": output_class,
            "output_records": output_records,
            "output_annotation": output_annotation,
        }
        return self.render_template("binding.py.j2", context)

    def _render_record(self, record: RecordType, state: _RenderState) -> str:
        nested = []
        for field in record.fields:
            for child in self._records_in(field.type_descriptor):
                nested.append(self._render_record(child, state))

        fields = [self._field_data(field, state) for field in record.fields]
        return self.render_template(
            "record.py.j2",
            {"class_name": record.name, "records": nested, "fields": fields},
        )

    def _records_in(self, type_descriptor: TypeDescriptor) -> List[RecordType]:
        if isinstance(type_descriptor, RecordType):
            return [type_descriptor]
        if isinstance(type_descriptor, SequenceType):
            return self._records_in(type_descriptor.element)
        if isinstance(type_descriptor, OptionalType):
            return self._records_in(type_descriptor.wrapped)
        return []

    def _field_data(self, field: FieldDescriptor, state: _RenderState) -> Dict[str, Any]:
        annotation = self.annotation(field.type_descriptor, state)
        if field.optional and not isinstance(field.type_descriptor, OptionalType):
            state.typing_names.add("Optional")
            annotation = f"Optional[{annotation}]"

        if field.has_default:
            literal = render_literal(field.default_literal)
            if isinstance(field.default_literal, (list, dict)):
                state.needs_field = True
                default = f" = field(default_factory=lambda: {literal})"
            else:
                default = f" = {literal}"
        elif field.optional:
            default = " = None"
        else:
            default = ""

        return {
            "name": field.target_identifier,
            "wire_name": field.source_name,
            "annotation": annotation,
            "default": default,
            "doc": _clean_doc(field.doc_comment) if self.config.add_comments else None,
        }

    def annotation(self, type_descriptor: TypeDescriptor, state: _RenderState) -> str:
        """Python annotation for a type descriptor."""
        if isinstance(type_descriptor, PrimitiveType):
            return PYTHON_PRIMITIVES[type_descriptor.kind]
        if isinstance(type_descriptor, SequenceType):
            return f"list[{self.annotation(type_descriptor.element, state)}]"
        if isinstance(type_descriptor, OptionalType):
            state.typing_names.add("Optional")
            return f"Optional[{self.annotation(type_descriptor.wrapped, state)}]"
        if isinstance(type_descriptor, RecordType):
            return type_descriptor.name
        state.typing_names.add("Any")
        return "Any"


def create_python_emitter(config=None) -> PythonBindingEmitter:
    """Create a Python binding emitter."""
    return PythonBindingEmitter(config)
