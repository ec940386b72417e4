"""
Client for the hosted model prediction API.
"""

from .client import DEFAULT_BASE_URL, Client, split_model_id
from .errors import ApiError, DecodeError, TransportError
from .models import Collection, Cursor, Model, ModelVersion, Page, Prediction

__all__ = [
    "Client",
    "DEFAULT_BASE_URL",
    "split_model_id",
    # Errors
    "ApiError",
    "DecodeError",
    "TransportError",
    # Resources
    "Collection",
    "Cursor",
    "Model",
    "ModelVersion",
    "Page",
    "Prediction",
]
