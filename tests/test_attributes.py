# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Tests for the attribute schema: XmlAttr metadata and value conversion."""

from dataclasses import dataclass, field
from typing import Annotated

import pytest

from itembag import Drop, DropItem, ItemBagDocument
from itembag.attributes import (
    INT_MAX,
    INT_MIN,
    XmlAttr,
    XmlChildren,
    check_value,
    format_value,
    parse_value,
    schema_of,
)


class TestSchema:

    def test_drop_schema(self):
        schema = schema_of(Drop)

        assert schema.tag == 'Drop'
        assert [a.xml_name for a in schema.attrs] == ['Rate', 'Type', 'Count']
        assert schema.attr('rate').default == 10000
        (child,) = schema.children
        assert (child.field, child.xml_tag, child.many) == ('items', 'Item', True)

    def test_document_children(self):
        schema = schema_of(ItemBagDocument)

        assert schema.attrs == ()
        assert [c.xml_tag for c in schema.children] == [
            'BagConfig', 'SummonBook', 'AddCoin', 'Ruud', 'DropSection',
        ]
        assert schema.child_by_tag('Ruud').many is False
        assert schema.child_by_tag('Unknown') is None

    def test_cached(self):
        assert schema_of(DropItem) is schema_of(DropItem)

    def test_write_flag(self):
        kind_a = schema_of(DropItem).attr('kind_a')

        assert kind_a.should_write(5, DropItem()) is False

    def test_custom_entity(self):
        @dataclass
        class Leaf:
            xml_tag = 'Leaf'
            size: Annotated[int, XmlAttr('Size')] = 1

        @dataclass
        class Tree:
            xml_tag = 'Tree'
            leaves: Annotated[list[Leaf], XmlChildren(Leaf)] = field(default_factory=list)

        assert schema_of(Tree).child_by_tag('Leaf').cls is Leaf

    def test_not_a_dataclass(self):
        class Plain:
            xml_tag = 'Plain'

        with pytest.raises(TypeError, match='not a dataclass'):
            schema_of(Plain)

    def test_missing_tag(self):
        @dataclass
        class NoTag:
            value: int = 0

        with pytest.raises(TypeError, match='has no xml_tag'):
            schema_of(NoTag)

    def test_unsupported_attribute_type(self):
        @dataclass
        class Floaty:
            xml_tag = 'Floaty'
            ratio: Annotated[float, XmlAttr('Ratio')] = 0.5

        with pytest.raises(TypeError, match='must be int or str'):
            schema_of(Floaty)


class TestValues:

    @pytest.mark.parametrize('raw,expected', [
        ('0', 0), ('-1', -1), ('+12', 12), (' 7 ', 7), ('007', 7),
    ])
    def test_parse_int(self, raw, expected):
        assert parse_value(raw, int) == expected

    @pytest.mark.parametrize('raw', ['', ' ', 'abc', '1.0', '1e3', '--1', '0x1F'])
    def test_parse_int_rejected(self, raw):
        with pytest.raises(ValueError, match='invalid integer literal'):
            parse_value(raw, int)

    @pytest.mark.parametrize('raw', ['2147483648', '-2147483649'])
    def test_parse_int_out_of_range(self, raw):
        with pytest.raises(ValueError, match='out of range'):
            parse_value(raw, int)

    def test_parse_int_bounds(self):
        assert parse_value('2147483647', int) == INT_MAX
        assert parse_value('-2147483648', int) == INT_MIN

    def test_parse_str_verbatim(self):
        assert parse_value(' MAX ', str) == ' MAX '

    def test_format(self):
        assert format_value(-5, int) == '-5'
        assert format_value('MAX', str) == 'MAX'

    @pytest.mark.parametrize('value,tp', [(True, int), ('1', int), (1, str), (1.0, int)])
    def test_format_rejected(self, value, tp):
        with pytest.raises(TypeError, match='expected'):
            format_value(value, tp)

    def test_check_value(self):
        assert check_value(3, int)
        assert not check_value(False, int)
        assert not check_value('3', int)
        assert check_value('3', str)
