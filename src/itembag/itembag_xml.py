# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""XML codec for ItemBag documents.

Classes:
    ItemBagXmlParser - parse ItemBag XML into an ItemBagDocument (SAX handler)
    ItemBagXmlSerializer - render an ItemBagDocument as ItemBag XML

Decoding substitutes the declared default for every absent attribute, but a
present attribute that does not parse as its declared type is an error.
Unknown elements and attributes are ignored.

Encoding writes attributes in declaration order and applies the DropItem
omission rules (Durability, ErrtelRank, OptSlotInfo, MuunEvolution*,
Duration, Rate). The layout matches hand-edited server files: XML
declaration, tab indentation, CRLF line endings.

Example:
    >>> from itembag.itembag_xml import ItemBagXmlParser, ItemBagXmlSerializer
    >>> doc = ItemBagXmlParser.parse('<ItemBag><BagConfig Name="Box"/></ItemBag>')
    >>> doc.config.name
    'Box'
    >>> xml = ItemBagXmlSerializer.serialize(doc)
"""

from __future__ import annotations

import logging
from typing import Any
from xml import sax
from xml.sax import saxutils

from .attributes import EntitySchema, format_value, parse_value, schema_of
from .models import ItemBagDocument, ItemBagError

logger = logging.getLogger(__name__)

_ATTR_ENTITIES = {'"': '&quot;', '\t': '&#9;', '\n': '&#10;', '\r': '&#13;'}

XML_DECLARATION = '<?xml version="1.0" encoding="{encoding}"?>'


# =============================================================================
# SERIALIZER
# =============================================================================


class ItemBagXmlSerializer:
    """Render an ItemBagDocument as XML text.

    Example:
        >>> xml = ItemBagXmlSerializer.serialize(new_document())
        >>> xml.splitlines()[1]
        '<ItemBag>'
    """

    def __init__(
        self,
        document: ItemBagDocument,
        encoding: str = 'utf-8',
        doc_header: bool | str = True,
        indent: str = '\t',
        newline: str = '\r\n',
    ):
        """Initialize the serializer.

        Args:
            document: The document to serialize.
            encoding: Encoding named in the XML declaration and used when
                writing to a file.
            doc_header: XML declaration:
                - True: declaration naming ``encoding``
                - False: no declaration
                - str: custom declaration string
            indent: Indentation unit per nesting level.
            newline: Line separator.
        """
        self.document = document
        self.encoding = encoding
        self.doc_header = doc_header
        self.indent = indent
        self.newline = newline

    @classmethod
    def serialize(
        cls,
        document: ItemBagDocument,
        filename: str | None = None,
        encoding: str = 'utf-8',
        doc_header: bool | str = True,
        indent: str = '\t',
        newline: str = '\r\n',
    ) -> str | None:
        """Serialize a document to XML.

        Args:
            document: The document to serialize.
            filename: Optional file path to write to. If provided, returns None.
            encoding: File encoding (default utf-8).
            doc_header: XML declaration (see __init__).
            indent: Indentation unit.
            newline: Line separator.

        Returns:
            XML string if filename is None, else None (written to file).

        Raises:
            ItemBagEncodeError: If a field holds a value of the wrong type.
        """
        instance = cls(
            document=document,
            encoding=encoding,
            doc_header=doc_header,
            indent=indent,
            newline=newline,
        )
        result = instance._serialize()

        if filename:
            with open(filename, 'wb') as f:
                f.write(result.encode(encoding))
            return None

        return result

    def _serialize(self) -> str:
        lines: list[str] = []
        if self.doc_header is True:
            lines.append(XML_DECLARATION.format(encoding=self.encoding))
        elif isinstance(self.doc_header, str):
            lines.append(self.doc_header)
        self._entity_to_lines(self.document, 0, lines)
        return self.newline.join(lines)

    def _entity_to_lines(self, entity: Any, depth: int, lines: list[str]) -> None:
        schema = schema_of(type(entity))
        pad = self.indent * depth
        attrs_str = self._attrs_to_xml(entity, schema)

        children = []
        for spec in schema.children:
            value = getattr(entity, spec.field)
            children.extend(value if spec.many else [value])

        if not children:
            lines.append(f'{pad}<{schema.tag}{attrs_str} />')
            return

        lines.append(f'{pad}<{schema.tag}{attrs_str}>')
        for child in children:
            self._entity_to_lines(child, depth + 1, lines)
        lines.append(f'{pad}</{schema.tag}>')

    @staticmethod
    def _attrs_to_xml(entity: Any, schema: EntitySchema) -> str:
        parts = []
        for spec in schema.attrs:
            if not spec.write:
                continue
            value = getattr(entity, spec.field)
            try:
                text = format_value(value, spec.type)
            except TypeError as e:
                raise ItemBagEncodeError(
                    f"{schema.tag}.{spec.xml_name}: {e}",
                    tag=schema.tag,
                    attribute=spec.xml_name,
                    value=value,
                ) from e
            if spec.should_write(value, entity):
                parts.append(f'{spec.xml_name}="{saxutils.escape(text, _ATTR_ENTITIES)}"')
        return ' ' + ' '.join(parts) if parts else ''


# =============================================================================
# PARSER
# =============================================================================


class ItemBagXmlParser(sax.handler.ContentHandler):
    """ItemBag XML parser (SAX handler).

    Builds the document top-down: each start tag creates the entity for the
    element and attaches it to its parent. A stack frame is None while inside
    an element the schema does not know, so its whole subtree is skipped.

    Example:
        >>> doc = ItemBagXmlParser.parse(
        ...     '<ItemBag><DropSection DisplayName="Boss"/></ItemBag>'
        ... )
        >>> doc.drop_sections[0].display_name
        'Boss'
        >>> doc.config.item_rate
        10000
    """

    root_tag = ItemBagDocument.xml_tag

    def __init__(self):
        super().__init__()
        self.document: ItemBagDocument | None = None
        self._stack: list[tuple[Any, set[str]] | None] = []

    @classmethod
    def parse(cls, source: str | bytes) -> ItemBagDocument:
        """Parse ItemBag XML.

        Args:
            source: XML string, or bytes in the encoding named by the XML
                declaration (utf-8 when absent, BOM tolerated).

        Returns:
            The decoded ItemBagDocument.

        Raises:
            ItemBagDecodeError: On malformed XML, a root element other than
                ItemBag, or an integer attribute that does not parse.
        """
        if isinstance(source, str) and source.startswith('\ufeff'):
            source = source[1:]

        handler = cls()
        try:
            sax.parseString(source, handler)
        except sax.SAXParseException as e:
            raise ItemBagDecodeError(
                f"Malformed XML: {e.getMessage()}", line=e.getLineNumber()
            ) from e

        if handler.document is None:
            raise ItemBagDecodeError(f"{cls.root_tag} element not found")
        logger.debug(
            "Decoded ItemBag '%s' with %d drop sections",
            handler.document.config.name,
            len(handler.document.drop_sections),
        )
        return handler.document

    @property
    def line(self) -> int | None:
        locator = getattr(self, '_locator', None)
        return locator.getLineNumber() if locator is not None else None

    def startElement(self, name: str, attrs: Any) -> None:
        if not self._stack:
            if name != self.root_tag:
                raise ItemBagDecodeError(
                    f"Root element is '{name}', expected '{self.root_tag}'",
                    tag=name,
                    line=self.line,
                )
            self.document = self._decode_entity(ItemBagDocument, attrs)
            self._stack.append((self.document, set()))
            return

        parent = self._stack[-1]
        if parent is None:
            self._stack.append(None)
            return

        owner, seen = parent
        spec = schema_of(type(owner)).child_by_tag(name)
        if spec is None or (not spec.many and spec.field in seen):
            # unknown element, or repeated singleton: first occurrence wins
            self._stack.append(None)
            return

        entity = self._decode_entity(spec.cls, attrs)
        if spec.many:
            getattr(owner, spec.field).append(entity)
        else:
            setattr(owner, spec.field, entity)
            seen.add(spec.field)
        self._stack.append((entity, set()))

    def endElement(self, name: str) -> None:
        self._stack.pop()

    def _decode_entity(self, cls: type, attrs: Any) -> Any:
        """Create an entity from element attributes, defaults for the absent ones."""
        schema = schema_of(cls)
        values = {}
        for spec in schema.attrs:
            raw = attrs.get(spec.xml_name)
            if raw is None:
                continue
            try:
                values[spec.field] = parse_value(raw, spec.type)
            except ValueError as e:
                raise ItemBagDecodeError(
                    f"{schema.tag}.{spec.xml_name}: {e}",
                    tag=schema.tag,
                    attribute=spec.xml_name,
                    value=raw,
                    line=self.line,
                ) from e
        return cls(**values)


# =============================================================================
# EXCEPTIONS
# =============================================================================


class ItemBagCodecError(ItemBagError):
    """Base for encode/decode failures.

    Attributes:
        tag: XML element involved, if known.
        attribute: XML attribute involved, if known.
        value: Offending value, if any.
        line: Source line number (decode only), if known.
    """

    def __init__(
        self,
        message: str,
        tag: str | None = None,
        attribute: str | None = None,
        value: Any = None,
        line: int | None = None,
    ):
        if line is not None:
            message = f"{message} (line {line})"
        super().__init__(message)
        self.tag = tag
        self.attribute = attribute
        self.value = value
        self.line = line


class ItemBagDecodeError(ItemBagCodecError):
    """Raised when an ItemBag document cannot be decoded."""


class ItemBagEncodeError(ItemBagCodecError):
    """Raised when an ItemBag document cannot be encoded."""
