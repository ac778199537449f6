"""Catalog repository."""
import logging
from typing import Awaitable, Callable, List, Optional, TypeVar

from teapos.core.errors import NotFoundError, ValidationError
from teapos.services.catalog.base import (
    CatalogProvider,
    Category,
    MenuItem,
    ModifierLevels,
    SizeOption,
    ToppingOption,
)
from teapos.services.catalog.defaults import DefaultCatalog
from teapos.services.ordering.pricing import MoneyLike, parse_price

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _require_text(value: Optional[str], field: str) -> str:
    text = (value or "").strip()
    if not text:
        raise ValidationError(f"{field} is required")
    return text


class CatalogRepository:
    """Repository for catalog operations.

    Reads never fail: a provider error or an empty answer degrades to the
    built-in defaults so item browsing keeps working offline. Writes always
    surface their errors to the caller.
    """

    def __init__(self, provider: CatalogProvider, defaults: DefaultCatalog):
        self.provider = provider
        self.defaults = defaults

    async def _load(
        self, fetch: Callable[[], Awaitable[List[T]]], fallback: List[T], what: str
    ) -> List[T]:
        try:
            items = await fetch()
        except Exception as e:
            logger.warning(
                f"[CATALOG] Failed to fetch {what} ({type(e).__name__}: {e}); using default {what}"
            )
            return list(fallback)
        if not items:
            logger.info(f"[CATALOG] No {what} found, using default {what}")
            return list(fallback)
        return items

    async def load_categories(self) -> List[Category]:
        return await self._load(self.provider.fetch_categories, self.defaults.categories, "categories")

    async def load_menu_items(self, category_id: str) -> List[MenuItem]:
        return await self._load(
            lambda: self.provider.fetch_menu_items(category_id),
            self.defaults.menu_items_for(category_id),
            "menu items",
        )

    async def load_sizes(self) -> List[SizeOption]:
        return await self._load(self.provider.fetch_size_options, self.defaults.sizes, "sizes")

    async def load_toppings(self) -> List[ToppingOption]:
        return await self._load(
            self.provider.fetch_topping_options, self.defaults.toppings, "toppings"
        )

    async def load_modifier_levels(self) -> ModifierLevels:
        """Sugar and ice levels are not stored remotely."""
        return self.defaults.levels

    async def get_menu_item(self, item_id: str) -> MenuItem:
        """Find a menu item across all categories."""
        for category in await self.load_categories():
            for item in await self.load_menu_items(category.id):
                if item.id == item_id:
                    return item
        raise NotFoundError(f"Menu item {item_id} not found")

    async def get_size(self, size_id: str) -> SizeOption:
        for size in await self.load_sizes():
            if size.id == size_id:
                return size
        raise NotFoundError(f"Size option {size_id} not found")

    async def get_topping(self, topping_id: str) -> ToppingOption:
        return (await self.get_toppings([topping_id]))[0]

    async def get_toppings(self, topping_ids: List[str]) -> List[ToppingOption]:
        """Resolve topping ids in the given order. Unknown ids are an error."""
        available = {topping.id: topping for topping in await self.load_toppings()}
        toppings = []
        for topping_id in topping_ids:
            if topping_id not in available:
                raise NotFoundError(f"Topping option {topping_id} not found")
            toppings.append(available[topping_id])
        return toppings

    # Admin writes

    async def add_category(self, name: str) -> Category:
        category = await self.provider.add_category(_require_text(name, "Category name"))
        logger.info(f"[CATALOG] Added category {category.name!r}")
        return category

    async def update_category(self, category_id: str, name: str) -> Category:
        return await self.provider.update_category(
            category_id, _require_text(name, "Category name")
        )

    async def delete_category(self, category_id: str) -> None:
        await self.provider.delete_category(category_id)
        logger.info(f"[CATALOG] Deleted category {category_id}")

    async def add_menu_item(
        self,
        name: str,
        price: MoneyLike,
        category_id: str,
        image_url: Optional[str] = None,
    ) -> MenuItem:
        item = await self.provider.add_menu_item(
            _require_text(name, "Item name"),
            parse_price(price),
            _require_text(category_id, "Category"),
            image_url,
        )
        logger.info(f"[CATALOG] Added menu item {item.name!r} at {item.price}")
        return item

    async def update_menu_item(
        self,
        item_id: str,
        name: str,
        price: MoneyLike,
        category_id: str,
        image_url: Optional[str] = None,
    ) -> MenuItem:
        return await self.provider.update_menu_item(
            item_id,
            _require_text(name, "Item name"),
            parse_price(price),
            _require_text(category_id, "Category"),
            image_url,
        )

    async def delete_menu_item(self, item_id: str) -> None:
        await self.provider.delete_menu_item(item_id)
        logger.info(f"[CATALOG] Deleted menu item {item_id}")

    async def add_size_option(self, label: str, price: MoneyLike) -> SizeOption:
        return await self.provider.add_size_option(
            _require_text(label, "Size label"), parse_price(price)
        )

    async def update_size_option(self, size_id: str, label: str, price: MoneyLike) -> SizeOption:
        return await self.provider.update_size_option(
            size_id, _require_text(label, "Size label"), parse_price(price)
        )

    async def delete_size_option(self, size_id: str) -> None:
        await self.provider.delete_size_option(size_id)

    async def add_topping_option(self, label: str, price: MoneyLike) -> ToppingOption:
        return await self.provider.add_topping_option(
            _require_text(label, "Topping label"), parse_price(price)
        )

    async def update_topping_option(
        self, topping_id: str, label: str, price: MoneyLike
    ) -> ToppingOption:
        return await self.provider.update_topping_option(
            topping_id, _require_text(label, "Topping label"), parse_price(price)
        )

    async def delete_topping_option(self, topping_id: str) -> None:
        await self.provider.delete_topping_option(topping_id)
