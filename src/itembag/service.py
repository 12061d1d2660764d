# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""ItemBagService - file-level operations on ItemBag documents.

Load and save are async-capable through @smartasync: called from plain
code they block and return the result, awaited from a coroutine they run
the file I/O in a worker thread so the caller's event loop stays free.

Example:
    >>> service = ItemBagService()
    >>> doc = service.load('Box of Kundun+1.xml')
    >>> service.save('copy.xml', doc)
    >>>
    >>> # Async context
    >>> doc = await service.load('Box of Kundun+1.xml')
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from genro_toolbox import smartasync

from .itembag_xml import ItemBagXmlParser, ItemBagXmlSerializer
from .models import ItemBagDocument, new_document

logger = logging.getLogger(__name__)


class ItemBagService:
    """Load, save, list and create ItemBag documents.

    Saved files are encoded with ``encoding``, which is also named in their
    XML declaration; load takes the encoding from that declaration.
    """

    def __init__(self, encoding: str = 'utf-8'):
        self.encoding = encoding

    @smartasync
    async def load(self, path: str | Path) -> ItemBagDocument:
        """Load an ItemBag file.

        Raises:
            FileNotFoundError: If the file does not exist.
            ItemBagDecodeError: If the content is not a valid ItemBag.
        """
        path = Path(path)
        logger.info("Loading ItemBag from %s", path)
        if not path.is_file():
            logger.error("ItemBag file does not exist: %s", path)
            raise FileNotFoundError(f"File not found: {path}")

        data = await asyncio.to_thread(path.read_bytes)
        logger.debug("ItemBag file read, size: %d bytes", len(data))
        try:
            document = ItemBagXmlParser.parse(data)
        except Exception:
            logger.exception("Error loading ItemBag from %s", path)
            raise
        logger.info("ItemBag loaded: %s", document.config.name or 'Unknown')
        return document

    @smartasync
    async def save(self, path: str | Path, document: ItemBagDocument) -> None:
        """Write a document to ``path``, replacing any existing file.

        Raises:
            ItemBagEncodeError: If the document holds an unformattable value.
        """
        path = Path(path)
        logger.info("Saving ItemBag '%s' to %s", document.config.name, path)
        try:
            xml = ItemBagXmlSerializer.serialize(document, encoding=self.encoding)
            await asyncio.to_thread(path.write_bytes, xml.encode(self.encoding))
        except Exception:
            logger.exception("Error saving ItemBag to %s", path)
            raise
        logger.info("ItemBag saved to %s", path)

    def list_files(self, folder: str | Path) -> list[Path]:
        """Return the sorted ``*.xml`` files in ``folder``.

        A missing folder is not an error: the result is empty.
        """
        folder = Path(folder)
        if not folder.is_dir():
            logger.warning("Folder does not exist: %s", folder)
            return []
        files = sorted(p for p in folder.glob('*.xml') if p.is_file())
        logger.debug("Found %d ItemBag files in %s", len(files), folder)
        return files

    def create_new(self, name: str = 'New ItemBag') -> ItemBagDocument:
        logger.debug("Creating new ItemBag '%s'", name)
        return new_document(name)
