"""Component Factory for strategy instantiation.

The Factory Pattern allows the application to instantiate
different strategy implementations at runtime based on
configuration or environment variables.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from draftgen.core.config import Settings, get_settings
from draftgen.interfaces.blob_store import BaseBlobStore
from draftgen.interfaces.identity import BaseIdentityProvider
from draftgen.interfaces.template import BaseDocumentRenderer
from draftgen.services.draft_access import DraftAccessRefresher
from draftgen.services.draft_orchestrator import DraftOrchestrator
from draftgen.strategies.identity import JWTIdentityProvider
from draftgen.strategies.storage import LocalBlobStore, S3BlobStore
from draftgen.strategies.stores import (
    SQLDraftStore,
    SQLQuotaStore,
    SQLTemplateStore,
    SQLUnitOfWork,
)
from draftgen.strategies.template_engine.renderer import DocxTemplateRenderer

logger = logging.getLogger(__name__)


class ComponentFactory:
    """Factory for creating component instances based on configuration.

    Stateless strategies (blob store, renderer, identity provider) are
    cached; session-bound stores and services are built per call.

    Example:
        ```python
        settings = get_settings()
        factory = ComponentFactory(settings)

        blob_store = factory.get_blob_store()
        orchestrator = factory.get_draft_orchestrator(session)
        ```
    """

    def __init__(self, settings: Settings | None = None) -> None:
        """Initialize the factory with optional settings.

        Args:
            settings: Application settings. If None, uses global settings.
        """
        self._settings = settings or get_settings()
        self._blob_store_cache: BaseBlobStore | None = None
        self._renderer_cache: BaseDocumentRenderer | None = None
        self._identity_provider_cache: BaseIdentityProvider | None = None

    @property
    def settings(self) -> Settings:
        return self._settings

    def get_blob_store(self, blob_store_type: str | None = None) -> BaseBlobStore:
        """Get a blob store instance based on the specified type.

        Args:
            blob_store_type: The blob store type to instantiate. If None, uses settings.

        Returns:
            A BaseBlobStore implementation instance.

        Raises:
            ValueError: If the blob store type is unknown or misconfigured.
        """
        if self._blob_store_cache is None or blob_store_type is not None:
            blob_store_type = blob_store_type or self._settings.blob_store_type

            logger.info(f"Instantiating blob store: {blob_store_type}")

            match blob_store_type:
                case "local":
                    self._blob_store_cache = LocalBlobStore(
                        root=self._settings.storage_dir,
                        public_base_url=self._settings.public_base_url,
                        signing_secret=self._settings.url_signing_secret,
                    )
                case "s3":
                    self._blob_store_cache = S3BlobStore(
                        bucket=self._settings.s3_bucket,
                        endpoint_url=self._settings.s3_endpoint_url,
                        region=self._settings.s3_region,
                        access_key_id=self._settings.s3_access_key_id,
                        secret_access_key=self._settings.s3_secret_access_key,
                    )
                case _:
                    raise ValueError(
                        f"Unknown blob store type: {blob_store_type}. "
                        f"Valid options: 'local', 's3'"
                    )

        return self._blob_store_cache

    def get_renderer(self) -> BaseDocumentRenderer:
        """Get the document renderer instance."""
        if self._renderer_cache is None:
            logger.info("Instantiating document renderer")
            self._renderer_cache = DocxTemplateRenderer()

        return self._renderer_cache

    def get_identity_provider(self) -> BaseIdentityProvider:
        """Get the bearer-token identity provider instance."""
        if self._identity_provider_cache is None:
            logger.info(f"Instantiating identity provider: jwt/{self._settings.auth_jwt_algorithm}")
            self._identity_provider_cache = JWTIdentityProvider(
                secret=self._settings.auth_jwt_secret,
                algorithm=self._settings.auth_jwt_algorithm,
            )

        return self._identity_provider_cache

    def get_draft_orchestrator(self, session: AsyncSession) -> DraftOrchestrator:
        """Assemble a draft orchestrator whose stores share ``session``."""
        blob_store = self.get_blob_store()
        return DraftOrchestrator(
            template_store=SQLTemplateStore(session, blob_store),
            blob_store=blob_store,
            quota_store=SQLQuotaStore(session),
            draft_store=SQLDraftStore(session),
            unit_of_work=SQLUnitOfWork(session),
            renderer=self.get_renderer(),
            settings=self._settings,
        )

    def get_access_refresher(self, session: AsyncSession) -> DraftAccessRefresher:
        """Assemble a draft access refresher bound to ``session``."""
        return DraftAccessRefresher(
            blob_store=self.get_blob_store(),
            draft_store=SQLDraftStore(session),
            unit_of_work=SQLUnitOfWork(session),
            ttl_minutes=self._settings.draft_url_ttl_minutes,
        )
