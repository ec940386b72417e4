"""
Binding generation.

Generates Python bindings for a model's prediction interface from the schema
embedded in one of its versions. The pipeline runs fetch, parse, synthesize
and emit in that order; only the fetch touches the network.
"""

import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Iterable, Optional, Tuple

from ..api.client import Client
from ..api.models import Model, ModelVersion
from ..config import BindgenConfig
from ..logging_config import get_logger
from .core.binding import BindingDeclaration, BindingSynthesizer, binding_name_for
from .core.errors import (
    GenerationCancelled,
    GeneratorError,
    NameCollision,
    SchemaNotFound,
    UnresolvedReference,
    VersionNotFound,
)
from .core.generator import GenerationResult
from .core.schema import parse_schema_document
from .core.types import TypeMapper
from .fetcher import SchemaFetcher
from .languages.python.generator import PythonBindingEmitter, create_python_emitter
from .languages.python.naming import create_python_sanitizer

logger = get_logger(__name__)


def _check_cancelled(cancel_event: Optional[threading.Event], stage: str) -> None:
    if cancel_event is not None and cancel_event.is_set():
        logger.info("Generation cancelled before %s", stage)
        raise GenerationCancelled(f"Generation cancelled before {stage}")


def generate_from_version(
    model: Model,
    version: ModelVersion,
    *,
    name: Optional[str] = None,
    config: Optional[BindgenConfig] = None,
    cancel_event: Optional[threading.Event] = None,
) -> GenerationResult:
    """
    Generate a binding from an already fetched model version.

    Args:
        model: Model the version belongs to; supplies the id, the default
            binding name and the docstring.
        version: Version holding the schema document.
        name: Explicit binding class name.
        config: Generator configuration.
        cancel_event: Checked between stages.

    Returns:
        GenerationResult with the formatted source.

    Raises:
        GeneratorError: If any stage fails; no partial output is returned.
    """
    config = config or BindgenConfig()

    _check_cancelled(cancel_event, "parse")
    document = parse_schema_document(version.openapi_schema)

    _check_cancelled(cancel_event, "synthesis")
    synthesizer = BindingSynthesizer(TypeMapper(create_python_sanitizer()))
    declaration = synthesizer.synthesize(
        binding_name_for(model.name, name),
        document.input,
        document.output,
        model_id=model.id,
        version_id=version.id,
        doc_comment=model.description,
    )

    _check_cancelled(cancel_event, "emission")
    emitter = create_python_emitter(config)
    code = emitter.emit(declaration)

    logger.info("Generated %s for %s (version %s)", declaration.name, model.id, version.id)
    metadata = {
        "language": emitter.language_name,
        "file_extension": emitter.file_extension,
        "binding_name": declaration.name,
        "model_id": model.id,
        "version_id": version.id,
        "field_count": len(declaration.input_fields),
        "named_schemas": list(document.nodes),
        "has_output": document.output is not None,
        "has_placeholders": bool(declaration.diagnostics),
    }
    return GenerationResult(code, warnings=list(declaration.diagnostics), metadata=metadata)


def generate_binding(
    client: Client,
    model_id: str,
    version_id: Optional[str] = None,
    *,
    name: Optional[str] = None,
    config: Optional[BindgenConfig] = None,
    cancel_event: Optional[threading.Event] = None,
) -> GenerationResult:
    """
    Fetch a model version and generate its binding.

    Args:
        client: API client used for the fetch.
        model_id: ``owner/name`` of the model.
        version_id: Version to pin; the latest version when omitted.
        name: Explicit binding class name.
        config: Generator configuration.
        cancel_event: Checked between stages.

    Raises:
        ValueError: If ``model_id`` is malformed.
        ApiError: If the API request fails.
        GeneratorError: If any generation stage fails.
    """
    _check_cancelled(cancel_event, "fetch")
    model, version = SchemaFetcher(client).resolve_model(model_id, version_id)
    return generate_from_version(
        model, version, name=name, config=config, cancel_event=cancel_event
    )


def _split_reference(reference: str) -> Tuple[str, Optional[str]]:
    model_id, _, version_id = reference.partition(":")
    return model_id, version_id or None


def generate_many(
    client: Client,
    model_ids: Iterable[str],
    max_workers: Optional[int] = None,
    *,
    config: Optional[BindgenConfig] = None,
    cancel_event: Optional[threading.Event] = None,
) -> Dict[str, GenerationResult]:
    """
    Generate bindings for several models concurrently.

    Each entry is ``owner/name`` or ``owner/name:version``. Invocations are
    independent: a failure is reported in that model's result and does not
    affect the others.

    Returns:
        Results keyed by the given entries, in input order.
    """
    config = config or BindgenConfig()
    references = list(dict.fromkeys(model_ids))
    workers = max_workers or config.max_workers

    def run(reference: str) -> GenerationResult:
        model_id, version_id = _split_reference(reference)
        try:
            return generate_binding(
                client, model_id, version_id, config=config, cancel_event=cancel_event
            )
        except Exception as e:
            logger.warning("Generation failed for %s: %s", reference, e)
            return GenerationResult.error(str(e), e)

    with ThreadPoolExecutor(max_workers=workers) as executor:
        results = list(executor.map(run, references))

    return dict(zip(references, results))


__all__ = [
    "BindingDeclaration",
    "GenerationResult",
    "PythonBindingEmitter",
    "SchemaFetcher",
    "generate_binding",
    "generate_from_version",
    "generate_many",
    # Errors
    "GenerationCancelled",
    "GeneratorError",
    "NameCollision",
    "SchemaNotFound",
    "UnresolvedReference",
    "VersionNotFound",
]
