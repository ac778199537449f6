"""Catalog API endpoints."""
import logging
from typing import List, Optional, Union

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from teapos.api.auth import require_auth
from teapos.core.dependencies import get_catalog_repository
from teapos.services.catalog.base import (
    Category,
    MenuItem,
    ModifierLevels,
    SizeOption,
    ToppingOption,
)
from teapos.services.catalog.repository import CatalogRepository

router = APIRouter(prefix="/api/catalog")
logger = logging.getLogger(__name__)


class CategoryRequest(BaseModel):
    """Create/update category request."""
    name: str


class MenuItemRequest(BaseModel):
    """Create/update menu item request. Prices may arrive as form text."""
    name: str
    price: Union[float, str]
    category_id: str
    image_url: Optional[str] = None


class ModifierRequest(BaseModel):
    """Create/update size or topping request."""
    label: str
    price: Union[float, str]


# Reads: never fail, fall back to built-in defaults


@router.get("/categories", response_model=List[Category])
async def list_categories(repository: CatalogRepository = Depends(get_catalog_repository)):
    """Get all categories."""
    categories = await repository.load_categories()
    logger.debug(f"[CATALOG] Returning {len(categories)} categories")
    return categories


@router.get("/categories/{category_id}/items", response_model=List[MenuItem])
async def list_menu_items(
    category_id: str, repository: CatalogRepository = Depends(get_catalog_repository)
):
    """Get the menu items of one category."""
    return await repository.load_menu_items(category_id)


@router.get("/sizes", response_model=List[SizeOption])
async def list_sizes(repository: CatalogRepository = Depends(get_catalog_repository)):
    return await repository.load_sizes()


@router.get("/toppings", response_model=List[ToppingOption])
async def list_toppings(repository: CatalogRepository = Depends(get_catalog_repository)):
    return await repository.load_toppings()


@router.get("/levels", response_model=ModifierLevels)
async def get_levels(repository: CatalogRepository = Depends(get_catalog_repository)):
    """Sugar and ice levels with their defaults."""
    return await repository.load_modifier_levels()


# Admin writes


@router.post("/categories", response_model=Category, dependencies=[Depends(require_auth)])
async def create_category(
    request: CategoryRequest, repository: CatalogRepository = Depends(get_catalog_repository)
):
    return await repository.add_category(request.name)


@router.put(
    "/categories/{category_id}", response_model=Category, dependencies=[Depends(require_auth)]
)
async def update_category(
    category_id: str,
    request: CategoryRequest,
    repository: CatalogRepository = Depends(get_catalog_repository),
):
    return await repository.update_category(category_id, request.name)


@router.delete("/categories/{category_id}", dependencies=[Depends(require_auth)])
async def delete_category(
    category_id: str, repository: CatalogRepository = Depends(get_catalog_repository)
):
    """Delete a category and every menu item in it."""
    await repository.delete_category(category_id)
    return {"success": True}


@router.post("/items", response_model=MenuItem, dependencies=[Depends(require_auth)])
async def create_menu_item(
    request: MenuItemRequest, repository: CatalogRepository = Depends(get_catalog_repository)
):
    return await repository.add_menu_item(
        request.name, request.price, request.category_id, request.image_url
    )


@router.put("/items/{item_id}", response_model=MenuItem, dependencies=[Depends(require_auth)])
async def update_menu_item(
    item_id: str,
    request: MenuItemRequest,
    repository: CatalogRepository = Depends(get_catalog_repository),
):
    return await repository.update_menu_item(
        item_id, request.name, request.price, request.category_id, request.image_url
    )


@router.delete("/items/{item_id}", dependencies=[Depends(require_auth)])
async def delete_menu_item(
    item_id: str, repository: CatalogRepository = Depends(get_catalog_repository)
):
    await repository.delete_menu_item(item_id)
    return {"success": True}


@router.post("/sizes", response_model=SizeOption, dependencies=[Depends(require_auth)])
async def create_size(
    request: ModifierRequest, repository: CatalogRepository = Depends(get_catalog_repository)
):
    return await repository.add_size_option(request.label, request.price)


@router.put("/sizes/{size_id}", response_model=SizeOption, dependencies=[Depends(require_auth)])
async def update_size(
    size_id: str,
    request: ModifierRequest,
    repository: CatalogRepository = Depends(get_catalog_repository),
):
    return await repository.update_size_option(size_id, request.label, request.price)


@router.delete("/sizes/{size_id}", dependencies=[Depends(require_auth)])
async def delete_size(size_id: str, repository: CatalogRepository = Depends(get_catalog_repository)):
    await repository.delete_size_option(size_id)
    return {"success": True}


@router.post("/toppings", response_model=ToppingOption, dependencies=[Depends(require_auth)])
async def create_topping(
    request: ModifierRequest, repository: CatalogRepository = Depends(get_catalog_repository)
):
    return await repository.add_topping_option(request.label, request.price)


@router.put(
    "/toppings/{topping_id}", response_model=ToppingOption, dependencies=[Depends(require_auth)]
)
async def update_topping(
    topping_id: str,
    request: ModifierRequest,
    repository: CatalogRepository = Depends(get_catalog_repository),
):
    return await repository.update_topping_option(topping_id, request.label, request.price)


@router.delete("/toppings/{topping_id}", dependencies=[Depends(require_auth)])
async def delete_topping(
    topping_id: str, repository: CatalogRepository = Depends(get_catalog_repository)
):
    await repository.delete_topping_option(topping_id)
    return {"success": True}
