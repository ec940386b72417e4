"""Tests for Python source emission."""

import inspect
import math

import pytest

from conftest import openapi_document
from model_bindgen.codegen.core.binding import BindingSynthesizer
from model_bindgen.codegen.core.generator import format_code
from model_bindgen.codegen.core.schema import parse_schema_document
from model_bindgen.codegen.core.types import TypeMapper
from model_bindgen.codegen.languages.python import (
    PythonBindingEmitter,
    create_python_sanitizer,
    render_literal,
)
from model_bindgen.config import BindgenConfig

DESCRIPTION = "Generate Pokémon from a text description"

EXPECTED = '''\
# Code generated by model-bindgen. DO NOT EDIT.
# Model: acme/text-to-pokemon
# Version: v1

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from model_bindgen import Predictable


class TextToPokemon(Predictable):
    """Generate Pokémon from a text description"""

    model_id = "acme/text-to-pokemon"
    version_id = "v1"

    @dataclass(kw_only=True)
    class Input:
        #: Prompt
        #: Text prompt
        prompt: str

        #: Num Outputs
        num_outputs: Optional[int] = 1

        CODING_KEYS = {
            "prompt": "prompt",
            "num_outputs": "num_outputs",
        }

    Output = list[str]
'''

RICH_SCHEMA = {
    "properties": {
        "size": {
            "type": "object",
            "properties": {
                "width": {"type": "integer", "description": "Width in pixels"},
                "height": {"type": "integer"},
            },
            "required": ["width"],
        },
        "tags": {"type": "array", "items": {"type": "string"}, "default": ["a", "b"]},
        "guidanceScale": {"type": "number", "default": 7},
        "mask": {"anyOf": [{"type": "string"}, {"type": "integer"}]},
        "seed": {"type": ["integer", "null"]},
        "class": {"type": "boolean", "default": False},
    },
    "required": ["size"],
}


def declaration_for(document, description=DESCRIPTION, name="TextToPokemon"):
    parsed = parse_schema_document(document)
    synthesizer = BindingSynthesizer(TypeMapper(create_python_sanitizer()))
    return synthesizer.synthesize(
        name,
        parsed.input,
        parsed.output,
        model_id="acme/text-to-pokemon",
        version_id="v1",
        doc_comment=description,
    )


def load(code, name="TextToPokemon"):
    namespace = {}
    exec(compile(code, "<binding>", "exec"), namespace)
    return namespace[name]


@pytest.fixture
def emitter():
    return PythonBindingEmitter()


class TestEmit:
    """Tests for the rendered module."""

    def test_golden_output(self, emitter):
        document = openapi_document(output={"type": "array", "items": {"type": "string"}})
        assert emitter.emit(declaration_for(document)) == EXPECTED

    def test_deterministic(self, emitter):
        declaration = declaration_for(openapi_document())
        first = emitter.emit(declaration)
        assert all(emitter.emit(declaration) == first for _ in range(5))
        assert PythonBindingEmitter().emit(declaration_for(openapi_document())) == first

    def test_formatting_is_idempotent(self, emitter):
        for document in (openapi_document(), RICH_SCHEMA):
            code = emitter.emit(declaration_for(document))
            assert format_code(code) == code
            assert code.endswith("\n") and not code.endswith("\n\n")

    def test_generated_code_runs(self, emitter):
        binding = load(emitter.emit(declaration_for(RICH_SCHEMA)))

        value = binding.Input(size=binding.Input.Size(width=512))

        assert value.tags == ["a", "b"]
        assert value.guidance_scale == 7.0
        assert value.class_ is False
        assert value.mask is None
        assert binding.model_id == "acme/text-to-pokemon"
        assert binding.version_id == "v1"

    def test_encode_input_uses_coding_keys(self, emitter):
        binding = load(emitter.emit(declaration_for(RICH_SCHEMA)))

        value = binding.Input(
            size=binding.Input.Size(width=512, height=256),
            guidance_scale=9.5,
            seed=42,
        )

        assert binding.encode_input(value) == {
            "size": {"width": 512, "height": 256},
            "tags": ["a", "b"],
            "guidanceScale": 9.5,
            "seed": 42,
            "class": False,
        }

    def test_list_defaults_are_not_shared(self, emitter):
        binding = load(emitter.emit(declaration_for(RICH_SCHEMA)))
        first = binding.Input(size=binding.Input.Size(width=1))
        first.tags.append("c")
        assert binding.Input(size=binding.Input.Size(width=1)).tags == ["a", "b"]

    def test_required_field_has_no_default(self, emitter):
        binding = load(emitter.emit(declaration_for(RICH_SCHEMA)))
        with pytest.raises(TypeError):
            binding.Input()

    def test_field_order_follows_schema(self, emitter):
        code = emitter.emit(declaration_for(RICH_SCHEMA))
        positions = [
            code.index(f"    {name}: ")
            for name in ("size", "tags", "guidance_scale", "mask", "seed", "class_")
        ]
        assert positions == sorted(positions)

    def test_placeholder_renders_as_any(self, emitter):
        code = emitter.emit(declaration_for(RICH_SCHEMA))
        assert "mask: Optional[Any] = None" in code
        assert "from typing import Any, Optional" in code
        assert "from dataclasses import dataclass, field" in code

    def test_missing_output_is_any(self, emitter):
        code = emitter.emit(declaration_for(openapi_document()))
        assert "    Output = Any\n" in code
        load(code)

    def test_object_output_is_dataclass(self, emitter):
        document = openapi_document(
            output={"type": "object", "properties": {"imageUrl": {"type": "string"}}}
        )
        binding = load(emitter.emit(declaration_for(document)))
        assert binding.Output.CODING_KEYS == {"image_url": "imageUrl"}

    def test_output_alias_renders_item_records(self, emitter):
        document = openapi_document(
            output={
                "type": "array",
                "items": {"type": "object", "properties": {"file": {"type": "string"}}},
            }
        )
        binding = load(emitter.emit(declaration_for(document)))
        assert binding.OutputItem.CODING_KEYS == {"file": "file"}

    def test_item_records_keep_their_own_class(self, emitter):
        document = {
            "properties": {
                "items": {
                    "type": "array",
                    "items": {"type": "object", "properties": {"a": {"type": "integer"}}},
                },
                "items_item": {"type": "object", "properties": {"b": {"type": "string"}}},
            }
        }
        code = emitter.emit(declaration_for(document))
        binding = load(code)

        assert code.count("class ItemsItem:") == 1
        assert "items: Optional[list[ItemsItem]] = None" in code
        assert binding.Input.ItemsItem.CODING_KEYS == {"a": "a"}
        assert binding.Input.ItemsItem2.CODING_KEYS == {"b": "b"}

    def test_leading_digit_field_stays_required(self, emitter):
        document = {
            "properties": {"1abc": {"type": "object", "properties": {}}},
            "required": ["1abc"],
        }
        binding = load(emitter.emit(declaration_for(document)))

        with pytest.raises(TypeError):
            binding.Input()
        value = binding.Input(_1abc=binding.Input.T1abc())
        assert binding.encode_input(value) == {"1abc": {}}

    def test_oversized_number_default_is_dropped(self, emitter):
        document = {"properties": {"scale": {"type": "number", "default": 10**400}}}
        code = emitter.emit(declaration_for(document))
        assert "scale: Optional[float] = None" in code

    def test_empty_input(self, emitter):
        binding = load(emitter.emit(declaration_for({"type": "object", "properties": {}})))
        assert binding.Input.CODING_KEYS == {}
        assert binding.encode_input(binding.Input()) == {}

    def test_docstring_escaping(self, emitter):
        description = 'Uses \\ and """ and ends with "quotes"'
        binding = load(emitter.emit(declaration_for(openapi_document(), description)))
        assert binding.__doc__ == description

    def test_multiline_docstring(self, emitter):
        binding = load(emitter.emit(declaration_for(openapi_document(), "First\n\n  Second  ")))
        assert inspect.getdoc(binding) == "First\nSecond"

    def test_no_docstring_without_description(self, emitter):
        code = emitter.emit(declaration_for(openapi_document(), description=None))
        assert '"""' not in code

    def test_comments_can_be_disabled(self):
        emitter = PythonBindingEmitter(BindgenConfig(add_comments=False))
        code = emitter.emit(declaration_for(openapi_document()))
        assert "#:" not in code
        assert '"""' not in code

    def test_runtime_module_is_configurable(self):
        emitter = PythonBindingEmitter(BindgenConfig(runtime_module="acme.runtime"))
        code = emitter.emit(declaration_for(openapi_document()))
        assert "from acme.runtime import Predictable\n" in code

    def test_language_metadata(self, emitter):
        assert emitter.language_name == "python"
        assert emitter.file_extension == ".py"


class TestRenderLiteral:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (None, "None"),
            (True, "True"),
            (False, "False"),
            (3, "3"),
            (0.1, "0.1"),
            (7.0, "7.0"),
            ("a \"cat\"\n", '"a \\"cat\\"\\n"'),
            ([1, "x", None], '[1, "x", None]'),
            ({"k": [True]}, '{"k": [True]}'),
        ],
    )
    def test_literals(self, value, expected):
        assert render_literal(value) == expected

    def test_non_finite_floats(self):
        assert eval(render_literal(math.inf)) == math.inf
        assert math.isnan(eval(render_literal(math.nan)))


class TestFormatCode:
    """Tests for the whitespace normalizer."""

    def test_normalizes_blank_lines(self):
        code = (
            "\n\nimport os\n\n\n\nx = 1   \nclass A:\n\n"
            "    y = 2\n\n\n\n    z = 3\ndef f():\n    pass"
        )
        assert format_code(code) == (
            "import os\n\nx = 1\n\n\nclass A:\n    y = 2\n\n    z = 3\n\n\ndef f():\n    pass\n"
        )

    def test_decorator_stays_attached(self):
        code = "x = 1\n@dataclass\nclass A:\n    pass\n"
        assert format_code(code) == "x = 1\n\n\n@dataclass\nclass A:\n    pass\n"

    def test_comment_ending_with_colon_is_not_a_block(self):
        code = "class A:\n    #: Note:\n\n    x = 1\n"
        assert format_code(code) == code

    def test_idempotent(self):
        code = "a = 1\n\n\n\nclass B:\n\n\n    c = 2\n\n\n"
        once = format_code(code)
        assert format_code(once) == once

    def test_empty(self):
        assert format_code("\n\n") == ""
