# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""In-memory item catalog built from an ``ItemList`` XML file.

The catalog gives human-friendly names to (category, index) pairs when
drop items are added to a bag. The source file looks like:

    <ItemList>
        <Category Index="0" Name="Swords">
            <Item Index="0" Name="Kris" Slot="0" ReqLevel="10" ... />
        </Category>
    </ItemList>

Loading is lenient: an item with an unparseable attribute is logged and
skipped, the rest of the catalog is kept.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated, Any
from xml import sax

from .attributes import XmlAttr, parse_value, schema_of
from .models import ItemBagError

logger = logging.getLogger(__name__)


@dataclass
class CatalogItem:
    xml_tag = 'Item'

    index: Annotated[int, XmlAttr('Index')] = 0
    name: Annotated[str, XmlAttr('Name')] = ''
    slot: Annotated[int, XmlAttr('Slot')] = 0
    skill_index: Annotated[int, XmlAttr('SkillIndex')] = 0
    two_hand: Annotated[int, XmlAttr('TwoHand')] = 0
    width: Annotated[int, XmlAttr('Width')] = 0
    height: Annotated[int, XmlAttr('Height')] = 0
    serial: Annotated[int, XmlAttr('Serial')] = 0
    option: Annotated[int, XmlAttr('Option')] = 0
    drop: Annotated[int, XmlAttr('Drop')] = 0
    drop_level: Annotated[int, XmlAttr('DropLevel')] = 0
    req_level: Annotated[int, XmlAttr('ReqLevel')] = 0
    min_damage: Annotated[int, XmlAttr('MinDamage')] = 0
    max_damage: Annotated[int, XmlAttr('MaxDamage')] = 0
    attack_speed: Annotated[int, XmlAttr('AttackSpeed')] = 0
    durability: Annotated[int, XmlAttr('Durability')] = 0
    category: int = 0

    def __str__(self) -> str:
        return f'{self.index}: {self.name} (Level {self.req_level})'


class ItemListCatalog:
    """Items indexed by category, with lookup and name search."""

    def __init__(self):
        self._items: list[CatalogItem] = []
        self._by_category: dict[int, list[CatalogItem]] = {}
        self._category_names: dict[int, str] = {}

    @classmethod
    def load(cls, path: str | Path) -> ItemListCatalog:
        """Load a catalog from an ItemList XML file.

        Raises:
            FileNotFoundError: If the file does not exist.
            ItemListError: If the file is not a well-formed ItemList.
        """
        path = Path(path)
        logger.info("Loading ItemList from %s", path)
        if not path.is_file():
            raise FileNotFoundError(f"File not found: {path}")
        return cls.parse(path.read_bytes())

    @classmethod
    def parse(cls, source: str | bytes) -> ItemListCatalog:
        """Build a catalog from ItemList XML text.

        Raises:
            ItemListError: If the XML is malformed or the root is not ItemList.
        """
        catalog = cls()
        handler = _ItemListHandler(catalog)
        try:
            sax.parseString(source, handler)
        except sax.SAXParseException as e:
            raise ItemListError(f"Malformed ItemList XML: {e.getMessage()}") from e
        if not handler.found_root:
            raise ItemListError("ItemList element not found")
        logger.info(
            "ItemList loaded: %d items in %d categories",
            len(catalog._items),
            len(catalog._by_category),
        )
        return catalog

    def add(self, item: CatalogItem) -> None:
        self._items.append(item)
        self._by_category.setdefault(item.category, []).append(item)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self):
        return iter(self._items)

    def categories(self) -> list[int]:
        return sorted(self._by_category)

    def category_name(self, category: int) -> str:
        return self._category_names.get(category, f'Category {category}')

    def items_by_category(self, category: int) -> list[CatalogItem]:
        return list(self._by_category.get(category, []))

    def get_item(self, category: int, index: int) -> CatalogItem | None:
        """Return the item at (category, index), or None if absent."""
        return next(
            (item for item in self._by_category.get(category, []) if item.index == index),
            None,
        )

    def search(self, term: str) -> list[CatalogItem]:
        """Items whose name contains ``term`` (case-insensitive) or whose
        index contains it as digits. A blank term returns every item.
        """
        term = term.strip()
        if not term:
            return list(self._items)
        lowered = term.lower()
        return [
            item for item in self._items
            if lowered in item.name.lower() or term in str(item.index)
        ]


class _ItemListHandler(sax.handler.ContentHandler):
    """SAX handler filling an ItemListCatalog."""

    def __init__(self, catalog: ItemListCatalog):
        super().__init__()
        self.catalog = catalog
        self.found_root = False
        self._path: list[str] = []
        self._category: int | None = None

    def startElement(self, name: str, attrs: Any) -> None:
        self._path.append(name)
        if len(self._path) == 1:
            self.found_root = name == 'ItemList'
        elif not self.found_root:
            return
        elif self._path == ['ItemList', 'Category']:
            self._start_category(attrs)
        elif self._path == ['ItemList', 'Category', 'Item'] and self._category is not None:
            self._add_item(attrs)

    def endElement(self, name: str) -> None:
        if self._path == ['ItemList', 'Category']:
            self._category = None
        self._path.pop()

    def _start_category(self, attrs: Any) -> None:
        try:
            self._category = parse_value(attrs.get('Index', '0'), int)
        except ValueError:
            logger.warning("Skipping category with invalid Index %r", attrs.get('Index'))
            self._category = None
            return
        self.catalog._category_names[self._category] = attrs.get(
            'Name', f'Category {self._category}'
        )
        logger.debug("Processing category %d", self._category)

    def _add_item(self, attrs: Any) -> None:
        values = {}
        for spec in schema_of(CatalogItem).attrs:
            raw = attrs.get(spec.xml_name)
            if raw is None:
                continue
            try:
                values[spec.field] = parse_value(raw, spec.type)
            except ValueError as e:
                logger.warning(
                    "Skipping item in category %d: %s %s", self._category, spec.xml_name, e
                )
                return
        self.catalog.add(CatalogItem(category=self._category, **values))


class ItemListError(ItemBagError):
    """Raised when an ItemList file cannot be read."""
