# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Tests for the ItemBag document model."""

import pytest

from itembag import (
    CLASS_CODES,
    DropAllow,
    DropItem,
    ItemBagDocument,
    UseMode,
    is_errtel_item,
    is_evolution_stone,
    new_document,
)


class TestErrtelAndStones:

    @pytest.mark.parametrize('cat,index,expected', [
        (12, 200, True),
        (12, 299, True),
        (13, 250, True),
        (12, 199, False),
        (13, 300, False),
        (11, 250, False),
        (14, 250, False),
    ])
    def test_is_errtel_item(self, cat, index, expected):
        assert is_errtel_item(cat, index) is expected

    def test_drop_item_property(self):
        assert DropItem(cat=12, index=205).is_errtel
        assert not DropItem(cat=12, index=5).is_errtel

    def test_evolution_stones(self):
        assert is_evolution_stone(16, 211)
        assert is_evolution_stone(20, 510)
        assert not is_evolution_stone(16, 210)


class TestDefaults:

    def test_document_defaults(self):
        doc = ItemBagDocument()

        assert doc.name == ''
        assert doc.config.bag_use_rate == 10000
        assert doc.config.set_item_count == 1
        assert doc.ruud.min_value == 1
        assert doc.drop_sections == []

    def test_new_document_chain(self):
        doc = new_document('Box')

        assert doc.name == 'Box'
        (section,) = doc.drop_sections
        (allow,) = section.drop_allows
        (drop,) = allow.drops
        assert section.use_mode == UseMode.ANY
        assert all(allow.class_allowed(code) for code in CLASS_CODES)
        assert (drop.rate, drop.type, drop.count, drop.items) == (10000, 0, 1, [])

    def test_new_document_default_name(self):
        assert new_document().name == 'New ItemBag'

    def test_documents_do_not_share_lists(self):
        first, second = ItemBagDocument(), ItemBagDocument()
        first.drop_sections.append(None)

        assert second.drop_sections == []


class TestClassFlags:

    def test_toggle(self):
        allow = DropAllow()

        allow.set_class_allowed('SLA', False)

        assert allow.sla == 0
        assert not allow.class_allowed('SLA')
        assert allow.class_allowed('DW')

    def test_unknown_code(self):
        with pytest.raises(ValueError, match="Unknown class code 'dw'"):
            DropAllow().class_allowed('dw')


class TestSummary:

    def test_minimal(self):
        assert DropItem(cat=14, index=13).summary() == '14-13: Unknown'

    def test_enchanted_weapon(self):
        item = DropItem(
            cat=0, index=5, name='Blade', item_max_level=9,
            skill=1, luck=1, option=2, exc='-2',
        )

        assert item.summary() == '0-5: Blade (Level: 0-9) [S:1 L:1 O:2] [Exc:-2]'

    def test_errtel_and_timing(self):
        item = DropItem(cat=12, index=205, name='Errtel', errtel_rank=2, duration=60, rate=5)

        assert item.summary() == '12-205: Errtel [Errtel:2] [Duration:60s] [Rate:5]'

    def test_muun_and_slots(self):
        item = DropItem(
            cat=16, index=211, name='Stone', socket_count=2,
            opt_slot_info='1;2', muun_evolution_item_cat='16',
            muun_evolution_item_index='3',
        )

        assert item.summary() == '16-211: Stone [Socket:2] [OptSlots:1;2] [Muun:16-3]'


class TestDocumentXmlHelpers:

    def test_to_xml_and_back(self):
        doc = new_document('Helpers')

        assert ItemBagDocument.from_xml(doc.to_xml()) == doc

    def test_to_xml_file(self, tmp_path):
        path = tmp_path / 'doc.xml'

        assert new_document().to_xml(str(path)) is None
        assert path.exists()

    def test_to_xml_kwargs(self):
        xml = new_document().to_xml(doc_header=False)

        assert xml.startswith('<ItemBag>')
