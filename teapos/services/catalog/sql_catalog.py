"""SQL-backed catalog provider."""
import logging
from decimal import Decimal
from typing import List, Optional, Type, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from teapos.core.errors import NetworkError, NotFoundError
from teapos.db.models import Category as CategoryRecord
from teapos.db.models import MenuItem as MenuItemRecord
from teapos.db.models import SizeOption as SizeOptionRecord
from teapos.db.models import ToppingOption as ToppingOptionRecord
from teapos.services.catalog.base import (
    CatalogProvider,
    Category,
    MenuItem,
    SizeOption,
    ToppingOption,
)

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT")


class SqlCatalogProvider(CatalogProvider):
    """Catalog provider that reads and writes the catalog tables.

    Fetches raise ``NetworkError`` on store failure and let the repository
    decide whether to fall back. Writes raise ``NetworkError`` on store
    failure and ``NotFoundError`` for unknown ids.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _fetch(self, statement, what: str) -> list:
        try:
            result = await self.db.execute(statement)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error(f"[CATALOG] Failed to fetch {what}: {type(e).__name__}: {e}")
            raise NetworkError(f"Failed to fetch {what}") from e

    async def _get(self, model: Type[RecordT], record_id: str, what: str) -> RecordT:
        try:
            record = await self.db.get(model, record_id)
        except SQLAlchemyError as e:
            raise NetworkError(f"Failed to load {what}") from e
        if record is None:
            raise NotFoundError(f"{what.capitalize()} {record_id} not found")
        return record

    async def _commit(self, what: str) -> None:
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"[CATALOG] Failed to {what}: {type(e).__name__}: {e}")
            raise NetworkError(f"Failed to {what}") from e

    # Reads

    async def fetch_categories(self) -> List[Category]:
        records = await self._fetch(
            select(CategoryRecord).order_by(CategoryRecord.created_at, CategoryRecord.name),
            "categories",
        )
        return [Category.model_validate(r) for r in records]

    async def fetch_menu_items(self, category_id: str) -> List[MenuItem]:
        records = await self._fetch(
            select(MenuItemRecord)
            .where(MenuItemRecord.category_id == category_id)
            .order_by(MenuItemRecord.created_at, MenuItemRecord.name),
            "menu items",
        )
        return [MenuItem.model_validate(r) for r in records]

    async def fetch_size_options(self) -> List[SizeOption]:
        records = await self._fetch(
            select(SizeOptionRecord).order_by(SizeOptionRecord.price, SizeOptionRecord.label),
            "size options",
        )
        return [SizeOption.model_validate(r) for r in records]

    async def fetch_topping_options(self) -> List[ToppingOption]:
        records = await self._fetch(
            select(ToppingOptionRecord).order_by(
                ToppingOptionRecord.created_at, ToppingOptionRecord.label
            ),
            "topping options",
        )
        return [ToppingOption.model_validate(r) for r in records]

    # Categories

    async def add_category(self, name: str) -> Category:
        record = CategoryRecord(name=name)
        self.db.add(record)
        await self._commit("add category")
        await self.db.refresh(record)
        return Category.model_validate(record)

    async def update_category(self, category_id: str, name: str) -> Category:
        record = await self._get(CategoryRecord, category_id, "category")
        record.name = name
        await self._commit("update category")
        return Category.model_validate(record)

    async def delete_category(self, category_id: str) -> None:
        record = await self._get(CategoryRecord, category_id, "category")
        await self.db.delete(record)
        await self._commit("delete category")

    # Menu items

    async def add_menu_item(
        self, name: str, price: Decimal, category_id: str, image_url: Optional[str] = None
    ) -> MenuItem:
        await self._get(CategoryRecord, category_id, "category")
        record = MenuItemRecord(
            name=name, price=price, category_id=category_id, image_url=image_url
        )
        self.db.add(record)
        await self._commit("add menu item")
        await self.db.refresh(record)
        return MenuItem.model_validate(record)

    async def update_menu_item(
        self,
        item_id: str,
        name: str,
        price: Decimal,
        category_id: str,
        image_url: Optional[str] = None,
    ) -> MenuItem:
        record = await self._get(MenuItemRecord, item_id, "menu item")
        if category_id != record.category_id:
            await self._get(CategoryRecord, category_id, "category")
        record.name = name
        record.price = price
        record.category_id = category_id
        record.image_url = image_url
        await self._commit("update menu item")
        return MenuItem.model_validate(record)

    async def delete_menu_item(self, item_id: str) -> None:
        record = await self._get(MenuItemRecord, item_id, "menu item")
        await self.db.delete(record)
        await self._commit("delete menu item")

    # Sizes

    async def add_size_option(self, label: str, price: Decimal) -> SizeOption:
        record = SizeOptionRecord(label=label, price=price)
        self.db.add(record)
        await self._commit("add size option")
        await self.db.refresh(record)
        return SizeOption.model_validate(record)

    async def update_size_option(self, size_id: str, label: str, price: Decimal) -> SizeOption:
        record = await self._get(SizeOptionRecord, size_id, "size option")
        record.label = label
        record.price = price
        await self._commit("update size option")
        return SizeOption.model_validate(record)

    async def delete_size_option(self, size_id: str) -> None:
        record = await self._get(SizeOptionRecord, size_id, "size option")
        await self.db.delete(record)
        await self._commit("delete size option")

    # Toppings

    async def add_topping_option(self, label: str, price: Decimal) -> ToppingOption:
        record = ToppingOptionRecord(label=label, price=price)
        self.db.add(record)
        await self._commit("add topping option")
        await self.db.refresh(record)
        return ToppingOption.model_validate(record)

    async def update_topping_option(
        self, topping_id: str, label: str, price: Decimal
    ) -> ToppingOption:
        record = await self._get(ToppingOptionRecord, topping_id, "topping option")
        record.label = label
        record.price = price
        await self._commit("update topping option")
        return ToppingOption.model_validate(record)

    async def delete_topping_option(self, topping_id: str) -> None:
        record = await self._get(ToppingOptionRecord, topping_id, "topping option")
        await self.db.delete(record)
        await self._commit("delete topping option")
