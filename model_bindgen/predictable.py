"""
Runtime base class for generated bindings.

A generated binding subclasses ``Predictable`` and sets ``model_id``,
``version_id``, a nested ``Input`` dataclass and ``Output``. Every generated
dataclass carries ``CODING_KEYS``, mapping field names to wire names.
"""

import dataclasses
from typing import Any, ClassVar, Optional

from .api.client import Client
from .api.models import Prediction
from .logging_config import get_logger

logger = get_logger(__name__)


def encode_value(value: Any) -> Any:
    """
    Convert a binding value to its JSON wire form.

    Dataclass fields are renamed through the class's ``CODING_KEYS``; fields
    set to ``None`` are omitted so the model's own defaults apply.
    """
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        coding_keys = getattr(type(value), "CODING_KEYS", {})
        encoded = {}
        for field in dataclasses.fields(value):
            item = getattr(value, field.name)
            if item is None:
                continue
            encoded[coding_keys.get(field.name, field.name)] = encode_value(item)
        return encoded
    if isinstance(value, (list, tuple)):
        return [encode_value(item) for item in value]
    if isinstance(value, dict):
        return {key: encode_value(item) for key, item in value.items()}
    return value


class Predictable:
    """Base class of generated model bindings."""

    model_id: ClassVar[str]
    version_id: ClassVar[str]

    @classmethod
    def encode_input(cls, input: Any) -> dict:
        """Encode an ``Input`` instance (or a wire-keyed dict) for the API."""
        encoded = encode_value(input)
        if not isinstance(encoded, dict):
            raise TypeError(
                f"{cls.__name__} input must encode to an object, "
                f"got {type(input).__name__}"
            )
        return encoded

    @classmethod
    def predict(
        cls,
        client: Client,
        input: Any,
        wait: bool = False,
        webhook: Optional[str] = None,
        poll_interval: float = 0.5,
    ) -> Prediction:
        """
        Create a prediction with this binding's pinned version.

        Args:
            client: API client to send the request with.
            input: ``Input`` instance.
            wait: Poll until the prediction reaches a terminal status.
            webhook: URL called when the prediction completes.
            poll_interval: Seconds between polls when waiting.

        Returns:
            The created (or, when waiting, finished) prediction.
        """
        logger.debug("Creating prediction for %s (version %s)", cls.model_id, cls.version_id)
        prediction = client.create_prediction(
            cls.version_id, cls.encode_input(input), webhook=webhook
        )
        if wait:
            prediction = client.wait_for_prediction(prediction, poll_interval)
        return prediction
