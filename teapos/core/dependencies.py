"""FastAPI dependencies."""
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from teapos.core.config import settings
from teapos.db.database import get_db
from teapos.services.catalog.defaults import load_default_catalog
from teapos.services.catalog.repository import CatalogRepository
from teapos.services.catalog.sql_catalog import SqlCatalogProvider
from teapos.services.persistence.orders import OrderPersistenceService
from teapos.services.session.manager import SessionRegistry


def get_catalog_repository(db: AsyncSession = Depends(get_db)) -> CatalogRepository:
    """Get catalog repository instance."""
    return CatalogRepository(
        provider=SqlCatalogProvider(db),
        defaults=load_default_catalog(settings.catalog_defaults_file),
    )


def get_order_service(db: AsyncSession = Depends(get_db)) -> OrderPersistenceService:
    """Get order persistence service instance."""
    return OrderPersistenceService(db)


def get_session_registry(request: Request) -> SessionRegistry:
    """Session registry created in the application lifespan."""
    return request.app.state.sessions
