# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Pytest configuration and fixtures."""

import pytest

from genro_toolbox import reset_smartasync_cache

from itembag import ItemBagService

SAMPLE_ITEMBAG = """<?xml version="1.0" encoding="utf-8"?>
<ItemBag>
\t<BagConfig Name="Box of Kundun+1" ItemRate="8000" SetItemRate="100" MoneyDrop="5000" />
\t<SummonBook Enable="1" DropRate="50" ItemCat="14" ItemIndex="11" />
\t<AddCoin Enable="1" CoinType="0" CoinValue="10" PlayerMinLevel="50" />
\t<Ruud GainRate="2000" MinValue="5" MaxValue="25" PlayerMaxLevel="400" />
\t<DropSection UseMode="-1" DisplayName="Normal">
\t\t<DropAllow DW="1" DK="1" ELF="0" PlayerMinLevel="10" PlayerMaxLevel="MAX" MapNumber="2">
\t\t\t<Drop Rate="10000" Type="0" Count="2">
\t\t\t\t<Item Cat="12" Index="205" ItemMinLevel="0" ItemMaxLevel="0" ErrtelRank="2" Name="Errtel of Anger" />
\t\t\t\t<Item Cat="0" Index="5" ItemMinLevel="0" ItemMaxLevel="9" Skill="1" Luck="1" Option="2" Exc="-2" Durability="40" Name="Blade" />
\t\t\t</Drop>
\t\t</DropAllow>
\t</DropSection>
\t<DropSection UseMode="1" DisplayName="Party">
\t\t<DropAllow>
\t\t\t<Drop Rate="500" />
\t\t</DropAllow>
\t</DropSection>
</ItemBag>
"""

SAMPLE_ITEMLIST = """<?xml version="1.0" encoding="utf-8"?>
<ItemList>
\t<Category Index="0" Name="Swords">
\t\t<Item Index="0" Name="Kris" Slot="0" ReqLevel="10" Durability="20" />
\t\t<Item Index="5" Name="Blade" Slot="0" ReqLevel="36" Durability="39" />
\t\t<Item Index="6" Name="Broken" ReqLevel="lots" />
\t</Category>
\t<Category Index="12" Name="Wings and Errtels">
\t\t<Item Index="205" Name="Errtel of Anger" ReqLevel="0" />
\t\t<Item Index="15" Name="Jewel of Chaos" />
\t</Category>
\t<Category Index="7" Name="Helms">
\t\t<Item Index="1" Name="Dragon Helm" ReqLevel="57" />
\t</Category>
</ItemList>
"""


@pytest.fixture(autouse=True)
def reset_smartasync_caches():
    """Reset smartasync cache before each test.

    Async context detection starts fresh for each test, so sync and async
    tests do not leak state into each other.
    """
    reset_smartasync_cache()
    yield


@pytest.fixture
def sample_xml():
    return SAMPLE_ITEMBAG


@pytest.fixture
def sample_file(tmp_path):
    path = tmp_path / 'Box of Kundun+1.xml'
    path.write_text(SAMPLE_ITEMBAG, encoding='utf-8')
    return path


@pytest.fixture
def itemlist_xml():
    return SAMPLE_ITEMLIST
