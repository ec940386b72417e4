"""
Model version resolution.

Fetches the model version whose embedded schema a binding is generated from.
"""

from typing import Optional, Tuple

from ..api.client import Client, split_model_id
from ..api.errors import ApiError
from ..api.models import Model, ModelVersion
from ..logging_config import get_logger
from .core.errors import VersionNotFound

logger = get_logger(__name__)


class SchemaFetcher:
    """Resolves model versions through an API client."""

    def __init__(self, client: Client):
        self.client = client

    def resolve(self, model_id: str, version_id: Optional[str] = None) -> ModelVersion:
        """
        Resolve a model version.

        With a version id, that exact version is fetched. Otherwise the
        model's latest version is used; a model without one fails before
        any version request is made.

        Raises:
            ValueError: If ``model_id`` is not ``owner/name``.
            VersionNotFound: If the version does not exist.
            ApiError: For any other API failure.
        """
        if version_id is not None:
            return self._fetch_version(model_id, version_id)
        _, version = self.resolve_model(model_id)
        return version

    def resolve_model(
        self, model_id: str, version_id: Optional[str] = None
    ) -> Tuple[Model, ModelVersion]:
        """Resolve the model together with the version to generate from."""
        split_model_id(model_id)

        logger.debug("Fetching model %s", model_id)
        model = self.client.get_model(model_id)

        if version_id is not None:
            return model, self._fetch_version(model_id, version_id)

        if model.latest_version is None:
            raise VersionNotFound(f"Model {model_id} has no published version")

        logger.debug("Using latest version %s of %s", model.latest_version.id, model_id)
        return model, model.latest_version

    def _fetch_version(self, model_id: str, version_id: str) -> ModelVersion:
        logger.debug("Fetching version %s of %s", version_id, model_id)
        try:
            return self.client.get_model_version(model_id, version_id)
        except ApiError as e:
            if e.status_code == 404:
                raise VersionNotFound(
                    f"Version {version_id} of model {model_id} not found"
                ) from e
            raise
