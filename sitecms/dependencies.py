from __future__ import annotations

import logging
from typing import Callable, Optional

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from sitecms.config import settings
from sitecms.db.database import get_db
from sitecms.db.models import MODELS
from sitecms.db.repositories.entities import EntityRepository
from sitecms.domain.errors import AuthenticationError
from sitecms.domain.resources import get_resource
from sitecms.storage.factory import get_storage
from sitecms.storage.interface import AssetStorage
from sitecms.application.entity_service import EntityService
from sitecms.application.content_service import ContentService
from sitecms.application.contact_service import ContactService
from sitecms.application.customization_service import CustomizationService

logger = logging.getLogger(__name__)


def get_asset_storage() -> AssetStorage:
    return get_storage(settings)


def get_repository(resource: str, db: Session) -> EntityRepository:
    return EntityRepository(db, MODELS[resource], get_resource(resource))


def entity_service(resource: str, service_class: type = EntityService) -> Callable[..., EntityService]:
    """Build a dependency that yields the service for one resource."""

    def provider(
        db: Session = Depends(get_db),
        storage: AssetStorage = Depends(get_asset_storage),
    ) -> EntityService:
        return service_class(
            repository=get_repository(resource, db),
            storage=storage,
            max_upload_size_mb=settings.MAX_UPLOAD_SIZE_MB,
        )

    return provider


get_content_service = entity_service("content", ContentService)
get_contact_service = entity_service("contact", ContactService)


def get_customization_service(
    db: Session = Depends(get_db),
    storage: AssetStorage = Depends(get_asset_storage),
) -> CustomizationService:
    return CustomizationService(
        repository=get_repository("customizations", db),
        storage=storage,
        max_upload_size_mb=settings.MAX_UPLOAD_SIZE_MB,
    )


def require_admin(authorization: Optional[str] = Header(None)) -> str:
    """
    Accept requests carrying ``Authorization: Bearer <token>`` with a known admin token.

    Returns:
        The accepted token
    """
    if not authorization:
        raise AuthenticationError("Not authorized, no token")

    scheme, _, token = authorization.partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        raise AuthenticationError("Not authorized, malformed token")
    if token not in settings.ADMIN_TOKENS:
        logger.warning("Rejected request with an unknown admin token")
        raise AuthenticationError("Not authorized, token failed")
    return token
