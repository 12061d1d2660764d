# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""itembag - read, edit and write ItemBag drop-table XML files.

Example:
    >>> from itembag import ItemBagService, ItemBagSession
    >>> session = ItemBagSession.open('Box of Kundun+1.xml')
    >>> session['0.0.0'].items[0].summary()
    '12-205: Errtel of Anger [Errtel:2]'
    >>> session.save()
"""

from .itembag_xml import (
    ItemBagCodecError,
    ItemBagDecodeError,
    ItemBagEncodeError,
    ItemBagXmlParser,
    ItemBagXmlSerializer,
)
from .item_list import CatalogItem, ItemListCatalog, ItemListError
from .models import (
    CLASS_CODES,
    AddCoin,
    BagConfig,
    Drop,
    DropAllow,
    DropItem,
    DropSection,
    ItemBagDocument,
    ItemBagError,
    Ruud,
    SummonBook,
    UseMode,
    is_errtel_item,
    is_evolution_stone,
    new_document,
)
from .service import ItemBagService
from .session import ItemBagEditError, ItemBagSession
from .settings import SettingsStore

__version__ = '0.1.0'

__all__ = [
    'CLASS_CODES',
    'AddCoin',
    'BagConfig',
    'CatalogItem',
    'Drop',
    'DropAllow',
    'DropItem',
    'DropSection',
    'ItemBagCodecError',
    'ItemBagDecodeError',
    'ItemBagDocument',
    'ItemBagEditError',
    'ItemBagEncodeError',
    'ItemBagError',
    'ItemBagService',
    'ItemBagSession',
    'ItemBagXmlParser',
    'ItemBagXmlSerializer',
    'ItemListCatalog',
    'ItemListError',
    'Ruud',
    'SettingsStore',
    'SummonBook',
    'UseMode',
    'is_errtel_item',
    'is_evolution_stone',
    'new_document',
]
