# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""ItemBagSession - explicit ownership of the document being edited.

A session owns exactly one ItemBagDocument together with the file it came
from. All edits go through the session, which validates targets and field
values and tracks whether there are unsaved changes.

Entities are addressed with dot-separated paths, the same way nested Bag
nodes are:

    'config', 'summon_book', 'add_coin', 'ruud'   bag-level settings
    '0'                                           first DropSection
    '0.1'                                         its second DropAllow
    '0.1.0'                                       first Drop of that allow
    '0.1.0.3'                                     fourth item of that drop

Example:
    >>> session = ItemBagSession.open('Box of Kundun+1.xml')
    >>> session.update('config', item_rate=5000)
    >>> session.set_class_restriction(0, 0, 'DW', False)
    >>> session['0.0.0'].rate
    10000
    >>> session.save()
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from genro_toolbox import smartsplit

from .attributes import check_value, schema_of
from .defaults import STANDARD_DEFAULTS, CategoryDefaults
from .item_list import CatalogItem
from .models import (
    CLASS_CODES,
    Drop,
    DropAllow,
    DropItem,
    DropSection,
    ItemBagDocument,
    ItemBagError,
    UseMode,
    is_evolution_stone,
    new_document,
)
from .service import ItemBagService

logger = logging.getLogger(__name__)

_SETTINGS_LABELS = ('config', 'summon_book', 'add_coin', 'ruud')

# Rate the editor gives a freshly added Drop
NEW_DROP_RATE = 1000


class ItemBagSession:
    """Editing session owning one ItemBag document.

    Attributes:
        document: The document being edited.
        path: File the document was loaded from or last saved to.
        modified: True when there are changes not yet saved.
    """

    def __init__(
        self,
        document: ItemBagDocument | None = None,
        path: str | Path | None = None,
        service: ItemBagService | None = None,
    ):
        self.document = document if document is not None else new_document()
        self.path = Path(path) if path is not None else None
        self.service = service if service is not None else ItemBagService()
        self.modified = False

    @classmethod
    def open(cls, path: str | Path, service: ItemBagService | None = None) -> ItemBagSession:
        """Start a session on an existing file.

        Raises:
            FileNotFoundError: If the file does not exist.
            ItemBagDecodeError: If the file is not a valid ItemBag.
        """
        service = service if service is not None else ItemBagService()
        document = service.load(path)
        return cls(document, path=path, service=service)

    def save(self, path: str | Path | None = None) -> Path:
        """Save the document to ``path`` (or the session path) and return it.

        Raises:
            ItemBagEditError: If no path was given and the session has none.
        """
        target = Path(path) if path is not None else self.path
        if target is None:
            raise ItemBagEditError("No file path to save to")
        self.service.save(target, self.document)
        self.path = target
        self.modified = False
        return target

    # -------------------- path access --------------------------------

    def __getitem__(self, path: str | int) -> Any:
        return self.get(path)

    def get(self, path: str | int) -> Any:
        """Return the entity at ``path``.

        Raises:
            ItemBagEditError: If the path does not address an entity.
        """
        if isinstance(path, int):
            path = str(path)
        parts = [p for p in smartsplit(path, '.') if p] if path else []
        if not parts:
            raise ItemBagEditError("Empty path")
        if parts[0] in _SETTINGS_LABELS:
            if len(parts) > 1:
                raise ItemBagEditError(f"'{parts[0]}' has no children: '{path}'")
            return getattr(self.document, parts[0])

        if len(parts) > 4:
            raise ItemBagEditError(f"Path too deep: '{path}'")
        node: Any = self.document
        for part, (field, kind) in zip(parts, _TREE_LEVELS):
            try:
                position = int(part)
            except ValueError:
                raise ItemBagEditError(f"Invalid path segment '{part}' in '{path}'") from None
            node = _pick(getattr(node, field), position, kind)
        return node

    def update(self, path: str | int, **fields: Any) -> Any:
        """Set attribute fields on the entity at ``path``.

        Only scalar attribute fields can be set and values must match the
        declared type (int or str). ErrtelRank is reset to 0 on items that
        are not Errtel items.

        Raises:
            ItemBagEditError: On unknown fields or wrongly typed values.
        """
        target = self.get(path)
        schema = schema_of(type(target))
        for name, value in fields.items():
            spec = schema.attr(name)
            if spec is None:
                raise ItemBagEditError(f"{schema.tag} has no field '{name}'")
            if not check_value(value, spec.type):
                raise ItemBagEditError(
                    f"{schema.tag}.{name} expects {spec.type.__name__}, "
                    f"got {type(value).__name__}"
                )
        for name, value in fields.items():
            setattr(target, name, value)
        if isinstance(target, DropItem) and not target.is_errtel:
            target.errtel_rank = 0
        if fields:
            self._touch("Updated %s at '%s': %s", schema.tag, path, sorted(fields))
        return target

    # -------------------- sections --------------------------------

    def add_section(self, display_name: str | None = None) -> DropSection:
        """Append a DropSection with one DropAllow/Drop chain."""
        if display_name is None:
            display_name = f'Section {len(self.document.drop_sections) + 1}'
        section = DropSection(
            display_name=display_name,
            drop_allows=[DropAllow(drops=[Drop()])],
        )
        self.document.drop_sections.append(section)
        self._touch("Added drop section '%s'", display_name)
        return section

    def remove_section(self, section: int | DropSection) -> DropSection:
        removed = _remove(self.document.drop_sections, section, 'DropSection')
        self._touch("Removed drop section '%s'", removed.display_name)
        return removed

    def set_use_mode(self, section: int, mode: UseMode | int) -> None:
        try:
            mode = UseMode(mode)
        except ValueError:
            raise ItemBagEditError(f"Invalid UseMode {mode!r}") from None
        self.get(section).use_mode = int(mode)
        self._touch("Section %s use mode set to %s", section, mode.name)

    # -------------------- drop allows --------------------------------

    def add_drop_allow(self, section: int) -> DropAllow:
        allow = DropAllow(drops=[Drop()])
        self.get(section).drop_allows.append(allow)
        self._touch("Added DropAllow to section %s", section)
        return allow

    def remove_drop_allow(self, section: int, allow: int | DropAllow) -> DropAllow:
        removed = _remove(self.get(section).drop_allows, allow, 'DropAllow')
        self._touch("Removed DropAllow from section %s", section)
        return removed

    def set_class_restriction(self, section: int, allow: int, code: str, enabled: bool) -> None:
        if code not in CLASS_CODES:
            raise ItemBagEditError(f"Unknown class code '{code}'")
        self.get(f'{section}.{allow}').set_class_allowed(code, enabled)
        self._touch("Class %s %s in %s.%s", code, 'enabled' if enabled else 'disabled',
                    section, allow)

    # -------------------- drops --------------------------------

    def add_drop(self, section: int, allow: int, drop: Drop | None = None) -> Drop:
        if drop is None:
            drop = Drop(rate=NEW_DROP_RATE)
        self.get(f'{section}.{allow}').drops.append(drop)
        self._touch("Added drop with rate %d, type %d, count %d", drop.rate, drop.type, drop.count)
        return drop

    def remove_drop(self, section: int, allow: int, drop: int | Drop) -> Drop:
        removed = _remove(self.get(f'{section}.{allow}').drops, drop, 'Drop')
        self._touch("Removed drop with rate %d, %d items", removed.rate, len(removed.items))
        return removed

    # -------------------- items --------------------------------

    def items(self, section: int, allow: int, drop: int) -> list[DropItem]:
        return list(self.get(f'{section}.{allow}.{drop}').items)

    def add_item(self, section: int, allow: int, drop: int, item: DropItem) -> DropItem:
        self.get(f'{section}.{allow}.{drop}').items.append(item)
        self._touch("Added item %s (Cat:%d, Index:%d)", item.name, item.cat, item.index)
        return item

    def add_catalog_item(
        self,
        section: int,
        allow: int,
        drop: int,
        catalog_item: CatalogItem,
        defaults: CategoryDefaults | None = STANDARD_DEFAULTS,
        **overrides: Any,
    ) -> DropItem:
        """Add a catalog entry as a DropItem.

        The item starts from the category defaults (pass ``defaults=None``
        to skip them), then ``overrides`` are applied. ErrtelRank is cleared
        for anything that is not an Errtel item, the Muun evolution fields
        for anything that is not an evolution stone.
        """
        item = DropItem(cat=catalog_item.category, index=catalog_item.index,
                        name=catalog_item.name)
        if defaults is not None:
            defaults.apply(item)
        schema = schema_of(DropItem)
        for name, value in overrides.items():
            spec = schema.attr(name)
            if spec is None or not check_value(value, spec.type):
                raise ItemBagEditError(f"Invalid item field {name}={value!r}")
            setattr(item, name, value)
        _clear_invalid_item_fields(item)
        return self.add_item(section, allow, drop, item)

    def remove_item(self, section: int, allow: int, drop: int, item: int | DropItem) -> DropItem:
        removed = _remove(self.get(f'{section}.{allow}.{drop}').items, item, 'Item')
        self._touch("Removed item %s", removed.name)
        return removed

    # -------------------- internals --------------------------------

    def _touch(self, message: str, *args: Any) -> None:
        self.modified = True
        logger.info(message, *args)


# (field on parent, element name) for each level of a numeric path
_TREE_LEVELS = (
    ('drop_sections', 'DropSection'),
    ('drop_allows', 'DropAllow'),
    ('drops', 'Drop'),
    ('items', 'Item'),
)


def _clear_invalid_item_fields(item: DropItem) -> None:
    """Reset ErrtelRank on non-Errtel items and Muun evolution fields on non-stones."""
    if not item.is_errtel:
        item.errtel_rank = 0
    if not is_evolution_stone(item.cat, item.index):
        item.muun_evolution_item_cat = ''
        item.muun_evolution_item_index = ''


def _pick(seq: list, position: int, kind: str) -> Any:
    if not 0 <= position < len(seq):
        raise ItemBagEditError(f"Invalid {kind} index: {position}")
    return seq[position]


def _remove(seq: list, target: int | Any, kind: str) -> Any:
    """Remove by index or by identity; two equal entities are distinct entries."""
    if isinstance(target, bool):
        raise ItemBagEditError(f"Invalid {kind} index: {target!r}")
    if isinstance(target, int):
        _pick(seq, target, kind)
        return seq.pop(target)
    for i, entry in enumerate(seq):
        if entry is target:
            return seq.pop(i)
    raise ItemBagEditError(f"{kind} not found")


class ItemBagEditError(ItemBagError):
    """Raised when a session operation targets something invalid."""
