"""Built-in default catalog loaded from YAML."""
import logging
from pathlib import Path
from typing import Dict, List, Optional

import yaml
from pydantic import BaseModel

from teapos.core.errors import DataError
from teapos.services.catalog.base import (
    Category,
    MenuItem,
    ModifierLevels,
    SizeOption,
    ToppingOption,
)

logger = logging.getLogger(__name__)

DEFAULT_CATALOG_FILE = Path(__file__).parent / "data" / "default_catalog.yaml"


class DefaultCatalog(BaseModel):
    """The fixed catalog the POS falls back to when the store cannot answer."""

    categories: List[Category]
    menu_items: List[MenuItem]
    sizes: List[SizeOption]
    toppings: List[ToppingOption]
    levels: ModifierLevels

    def menu_items_for(self, category_id: str) -> List[MenuItem]:
        return [item for item in self.menu_items if item.category_id == category_id]


_cache: Dict[Path, DefaultCatalog] = {}


def load_default_catalog(catalog_file: Optional[str] = None) -> DefaultCatalog:
    """Load (and cache) the default catalog.

    A configured file that does not exist falls back to the packaged one.
    A file that exists but does not parse is a DataError.
    """
    path = Path(catalog_file) if catalog_file else DEFAULT_CATALOG_FILE
    if not path.exists():
        logger.warning(f"[CATALOG] Defaults file {path} not found, using packaged defaults")
        path = DEFAULT_CATALOG_FILE

    if path not in _cache:
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
            _cache[path] = DefaultCatalog(
                categories=data.get("categories", []),
                menu_items=data.get("menu_items", []),
                sizes=data.get("sizes", []),
                toppings=data.get("toppings", []),
                levels=data.get("levels", {}),
            )
        except (yaml.YAMLError, ValueError) as e:
            raise DataError(f"Default catalog {path.name} is malformed: {e}") from e
        logger.debug(f"[CATALOG] Loaded default catalog from {path}")
    return _cache[path]
