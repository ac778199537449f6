"""Catalog models and provider interface."""
from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Annotated, List, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, PlainSerializer

from teapos.services.ordering.pricing import to_money

# Decimal internally, plain JSON number on the wire
Money = Annotated[
    Decimal,
    BeforeValidator(to_money),
    PlainSerializer(float, return_type=float, when_used="json"),
]


class Category(BaseModel):
    """Menu category."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: str
    name: str


class MenuItem(BaseModel):
    """Menu item as fetched from the catalog. Replaced wholesale on refresh."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: str
    name: str
    price: Money
    category_id: str
    image_url: Optional[str] = None


class SizeOption(BaseModel):
    """Size modifier; ``price`` is added to the item's base price."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: str
    label: str
    price: Money


class ToppingOption(BaseModel):
    """Topping modifier; ``price`` is added once per selected topping."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: str
    label: str
    price: Money


class ModifierLevels(BaseModel):
    """Sugar and ice vocabularies. These carry no price."""

    sugar_levels: List[str]
    ice_levels: List[str]
    default_sugar: str
    default_ice: str


class CatalogProvider(ABC):
    """Abstract base class for the remote catalog store."""

    @abstractmethod
    async def fetch_categories(self) -> List[Category]:
        pass

    @abstractmethod
    async def fetch_menu_items(self, category_id: str) -> List[MenuItem]:
        pass

    @abstractmethod
    async def fetch_size_options(self) -> List[SizeOption]:
        pass

    @abstractmethod
    async def fetch_topping_options(self) -> List[ToppingOption]:
        pass

    @abstractmethod
    async def add_category(self, name: str) -> Category:
        pass

    @abstractmethod
    async def update_category(self, category_id: str, name: str) -> Category:
        pass

    @abstractmethod
    async def delete_category(self, category_id: str) -> None:
        pass

    @abstractmethod
    async def add_menu_item(
        self, name: str, price: Decimal, category_id: str, image_url: Optional[str] = None
    ) -> MenuItem:
        pass

    @abstractmethod
    async def update_menu_item(
        self,
        item_id: str,
        name: str,
        price: Decimal,
        category_id: str,
        image_url: Optional[str] = None,
    ) -> MenuItem:
        pass

    @abstractmethod
    async def delete_menu_item(self, item_id: str) -> None:
        pass

    @abstractmethod
    async def add_size_option(self, label: str, price: Decimal) -> SizeOption:
        pass

    @abstractmethod
    async def update_size_option(self, size_id: str, label: str, price: Decimal) -> SizeOption:
        pass

    @abstractmethod
    async def delete_size_option(self, size_id: str) -> None:
        pass

    @abstractmethod
    async def add_topping_option(self, label: str, price: Decimal) -> ToppingOption:
        pass

    @abstractmethod
    async def update_topping_option(
        self, topping_id: str, label: str, price: Decimal
    ) -> ToppingOption:
        pass

    @abstractmethod
    async def delete_topping_option(self, topping_id: str) -> None:
        pass
