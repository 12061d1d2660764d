# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Tests for ItemBagService: load, save, list_files, create_new.

load and save are decorated with @smartasync, so they are exercised both
from sync code and awaited from async tests.
"""

import asyncio

import pytest

from itembag import ItemBagDecodeError, ItemBagEncodeError, ItemBagService, new_document


class TestLoad:

    def test_load_sample(self, sample_file):
        doc = ItemBagService().load(sample_file)

        assert doc.name == 'Box of Kundun+1'
        assert len(doc.drop_sections) == 2

    def test_load_str_path(self, sample_file):
        doc = ItemBagService().load(str(sample_file))

        assert doc.config.item_rate == 8000

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError, match='File not found'):
            ItemBagService().load(tmp_path / 'nope.xml')

    def test_invalid_content(self, tmp_path):
        path = tmp_path / 'bad.xml'
        path.write_text('<ItemBag><BagConfig ItemRate="x"/></ItemBag>', encoding='utf-8')

        with pytest.raises(ItemBagDecodeError, match='ItemRate'):
            ItemBagService().load(path)

    def test_load_file_with_bom(self, tmp_path, sample_xml):
        path = tmp_path / 'bom.xml'
        path.write_bytes(b'\xef\xbb\xbf' + sample_xml.encode('utf-8'))

        assert ItemBagService().load(path).name == 'Box of Kundun+1'


class TestSave:

    def test_save_then_load(self, tmp_path):
        service = ItemBagService()
        doc = new_document('Saved')
        path = tmp_path / 'saved.xml'

        service.save(path, doc)

        assert path.read_bytes().startswith(b'<?xml version="1.0" encoding="utf-8"?>\r\n<ItemBag>')
        assert service.load(path) == doc

    def test_save_replaces_existing(self, sample_file):
        service = ItemBagService()

        service.save(sample_file, new_document('Replaced'))

        assert service.load(sample_file).name == 'Replaced'

    def test_non_utf8_round_trip(self, tmp_path):
        service = ItemBagService(encoding='cp1252')
        path = tmp_path / 'caja.xml'

        service.save(path, new_document('Caja épica'))

        assert path.read_bytes().startswith(b'<?xml version="1.0" encoding="cp1252"?>')
        assert service.load(path).name == 'Caja épica'
        assert ItemBagService().load(path).name == 'Caja épica'

    def test_save_invalid_document(self, tmp_path):
        doc = new_document()
        doc.config.money_drop = 'lots'
        path = tmp_path / 'bad.xml'

        with pytest.raises(ItemBagEncodeError):
            ItemBagService().save(path, doc)
        assert not path.exists()


class TestAsync:

    @pytest.mark.asyncio
    async def test_load_in_async_context(self, sample_file):
        doc = await ItemBagService().load(sample_file)

        assert doc.name == 'Box of Kundun+1'

    @pytest.mark.asyncio
    async def test_concurrent_save_and_load(self, tmp_path):
        service = ItemBagService()
        paths = [tmp_path / f'bag{i}.xml' for i in range(3)]

        await asyncio.gather(*(
            service.save(p, new_document(f'Bag {i}')) for i, p in enumerate(paths)
        ))
        docs = await asyncio.gather(*(service.load(p) for p in paths))

        assert [d.name for d in docs] == ['Bag 0', 'Bag 1', 'Bag 2']


class TestListAndCreate:

    def test_list_files_sorted(self, tmp_path):
        for name in ('b.xml', 'a.xml', 'notes.txt'):
            (tmp_path / name).write_text('', encoding='utf-8')
        (tmp_path / 'sub.xml').mkdir()

        files = ItemBagService().list_files(tmp_path)

        assert [f.name for f in files] == ['a.xml', 'b.xml']

    def test_list_missing_folder(self, tmp_path):
        assert ItemBagService().list_files(tmp_path / 'missing') == []

    def test_create_new(self):
        doc = ItemBagService().create_new('Fresh')

        assert doc.name == 'Fresh'
        section = doc.drop_sections[0]
        assert section.display_name == 'Section 1'
        assert section.drop_allows[0].drops[0].items == []
