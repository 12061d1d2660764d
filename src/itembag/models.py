# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""ItemBag document model.

An ItemBag is a named drop table read by the game server to decide what a
lootable container yields. The model mirrors the XML layout:

    ItemBag
        BagConfig, SummonBook, AddCoin, Ruud   (singletons, always present)
        DropSection*                            (party-context gate)
            DropAllow*                          (class/level/reset/map gate)
                Drop*                           (rate, type, count)
                    Item*                       (DropItem)

Every field carries its XML attribute name and default. Decoding fills
absent attributes with these defaults; encoding writes every attribute
except the few DropItem fields with an omit predicate.

Example:
    >>> doc = new_document('Box of Kundun')
    >>> drop = doc.drop_sections[0].drop_allows[0].drops[0]
    >>> drop.items.append(DropItem(cat=12, index=205, errtel_rank=2))
    >>> xml = doc.to_xml()
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Annotated, Any

from .attributes import (
    XmlAttr,
    XmlChild,
    XmlChildren,
    omit_empty,
    omit_empty_or_zero,
    omit_not_positive,
)

ERRTEL_CATEGORIES = (12, 13)
ERRTEL_INDEX_RANGE = (200, 299)
EVOLUTION_STONES = ((16, 211), (20, 510))

CLASS_CODES = (
    'DW', 'DK', 'ELF', 'MG', 'DL', 'SU', 'RF', 'GL',
    'RW', 'SLA', 'GC', 'LW', 'LM', 'IK', 'AC',
)


def is_errtel_item(cat: int, index: int) -> bool:
    """True for Errtel items: category 12 or 13, index 200-299 inclusive."""
    low, high = ERRTEL_INDEX_RANGE
    return cat in ERRTEL_CATEGORIES and low <= index <= high


def is_evolution_stone(cat: int, index: int) -> bool:
    """True for the Muun evolution stone items."""
    return (cat, index) in EVOLUTION_STONES


def omit_unless_errtel(value: int, owner: Any) -> bool:
    # ErrtelRank is invalid on anything but an Errtel item, whatever its value
    return not (value > 0 and is_errtel_item(owner.cat, owner.index))


class UseMode(IntEnum):
    """Party-context gate of a DropSection."""

    ANY = -1
    SOLO = 0
    PARTY = 1


# =============================================================================
# Drop tree
# =============================================================================


@dataclass
class DropItem:
    """A single item candidate inside a Drop (XML element ``Item``)."""

    xml_tag = 'Item'

    cat: Annotated[int, XmlAttr('Cat')] = 0
    index: Annotated[int, XmlAttr('Index')] = 0
    item_min_level: Annotated[int, XmlAttr('ItemMinLevel')] = 0
    item_max_level: Annotated[int, XmlAttr('ItemMaxLevel')] = 0
    skill: Annotated[int, XmlAttr('Skill')] = 0
    luck: Annotated[int, XmlAttr('Luck')] = 0
    option: Annotated[int, XmlAttr('Option')] = 0
    exc: Annotated[str, XmlAttr('Exc')] = '-1'
    set_item: Annotated[int, XmlAttr('SetItem')] = 0
    socket_count: Annotated[int, XmlAttr('SocketCount')] = 0
    elemental_item: Annotated[int, XmlAttr('ElementalItem')] = 0
    durability: Annotated[int, XmlAttr('Durability', omit=omit_not_positive)] = 0
    errtel_rank: Annotated[int, XmlAttr('ErrtelRank', omit=omit_unless_errtel)] = 0
    opt_slot_info: Annotated[str, XmlAttr('OptSlotInfo', omit=omit_empty)] = ''
    muun_evolution_item_cat: Annotated[
        str, XmlAttr('MuunEvolutionItemCat', omit=omit_empty_or_zero)
    ] = ''
    muun_evolution_item_index: Annotated[
        str, XmlAttr('MuunEvolutionItemIndex', omit=omit_empty_or_zero)
    ] = ''
    kind_a: Annotated[int, XmlAttr('KindA', write=False)] = 0
    duration: Annotated[int, XmlAttr('Duration', omit=omit_not_positive)] = 0
    rate: Annotated[int, XmlAttr('Rate', omit=omit_not_positive)] = 0
    name: Annotated[str, XmlAttr('Name')] = ''

    @property
    def is_errtel(self) -> bool:
        return is_errtel_item(self.cat, self.index)

    def summary(self) -> str:
        """One-line description for list views.

        Only non-default enchantments are shown, e.g.
        ``'0-5: Blade (Level: 0-9) [S:1 L:1 O:2] [Exc:-2]'``.
        """
        text = f'{self.cat}-{self.index}: {self.name or "Unknown"}'
        if self.item_min_level > 0 or self.item_max_level > 0:
            text += f' (Level: {self.item_min_level}-{self.item_max_level})'
        if self.skill or self.luck or self.option:
            text += f' [S:{self.skill} L:{self.luck} O:{self.option}]'
        if self.exc != '-1':
            text += f' [Exc:{self.exc}]'
        if self.socket_count > 0:
            text += f' [Socket:{self.socket_count}]'
        if self.elemental_item > 0:
            text += f' [Element:{self.elemental_item}]'
        if self.set_item > 0:
            text += f' [Set:{self.set_item}]'
        if self.errtel_rank > 0:
            text += f' [Errtel:{self.errtel_rank}]'
        if self.opt_slot_info not in ('', '0'):
            text += f' [OptSlots:{self.opt_slot_info}]'
        if self.muun_evolution_item_cat not in ('', '0'):
            text += f' [Muun:{self.muun_evolution_item_cat}-{self.muun_evolution_item_index}]'
        if self.duration > 0:
            text += f' [Duration:{self.duration}s]'
        if self.rate > 0:
            text += f' [Rate:{self.rate}]'
        return text


@dataclass
class Drop:
    """A roll inside a DropAllow: ``rate`` out of 10000, ``count`` items."""

    xml_tag = 'Drop'

    rate: Annotated[int, XmlAttr('Rate')] = 10000
    type: Annotated[int, XmlAttr('Type')] = 0
    count: Annotated[int, XmlAttr('Count')] = 1
    items: Annotated[list[DropItem], XmlChildren(DropItem)] = field(default_factory=list)


@dataclass
class DropAllow:
    """Class eligibility and level/reset/map gate for a set of drops.

    Class flags are 1 when the class may receive the drop. ``map_number``
    -1 means no map restriction.
    """

    xml_tag = 'DropAllow'

    dw: Annotated[int, XmlAttr('DW')] = 1
    dk: Annotated[int, XmlAttr('DK')] = 1
    elf: Annotated[int, XmlAttr('ELF')] = 1
    mg: Annotated[int, XmlAttr('MG')] = 1
    dl: Annotated[int, XmlAttr('DL')] = 1
    su: Annotated[int, XmlAttr('SU')] = 1
    rf: Annotated[int, XmlAttr('RF')] = 1
    gl: Annotated[int, XmlAttr('GL')] = 1
    rw: Annotated[int, XmlAttr('RW')] = 1
    sla: Annotated[int, XmlAttr('SLA')] = 1
    gc: Annotated[int, XmlAttr('GC')] = 1
    lw: Annotated[int, XmlAttr('LW')] = 1
    lm: Annotated[int, XmlAttr('LM')] = 1
    ik: Annotated[int, XmlAttr('IK')] = 1
    ac: Annotated[int, XmlAttr('AC')] = 1
    player_min_level: Annotated[int, XmlAttr('PlayerMinLevel')] = 1
    player_max_level: Annotated[str, XmlAttr('PlayerMaxLevel')] = 'MAX'
    player_min_reset: Annotated[int, XmlAttr('PlayerMinReset')] = 0
    player_max_reset: Annotated[str, XmlAttr('PlayerMaxReset')] = 'MAX'
    map_number: Annotated[int, XmlAttr('MapNumber')] = -1
    drops: Annotated[list[Drop], XmlChildren(Drop)] = field(default_factory=list)

    def class_allowed(self, code: str) -> bool:
        return getattr(self, _class_field(code)) == 1

    def set_class_allowed(self, code: str, enabled: bool) -> None:
        setattr(self, _class_field(code), 1 if enabled else 0)


def _class_field(code: str) -> str:
    if code not in CLASS_CODES:
        raise ValueError(f"Unknown class code '{code}'")
    return code.lower()


@dataclass
class DropSection:
    """Top-level group of drop rules, gated by party context."""

    xml_tag = 'DropSection'

    use_mode: Annotated[int, XmlAttr('UseMode')] = -1
    display_name: Annotated[str, XmlAttr('DisplayName')] = 'Section 1'
    drop_allows: Annotated[list[DropAllow], XmlChildren(DropAllow)] = field(default_factory=list)


# =============================================================================
# Bag-level settings
# =============================================================================


@dataclass
class BagConfig:
    xml_tag = 'BagConfig'

    name: Annotated[str, XmlAttr('Name')] = ''
    item_rate: Annotated[int, XmlAttr('ItemRate')] = 10000
    set_item_rate: Annotated[int, XmlAttr('SetItemRate')] = 0
    set_item_count: Annotated[int, XmlAttr('SetItemCount')] = 1
    mastery_set_item_include: Annotated[int, XmlAttr('MasterySetItemInclude')] = 0
    money_drop: Annotated[int, XmlAttr('MoneyDrop')] = 0
    is_pentagram_for_beginners_drop: Annotated[int, XmlAttr('IsPentagramForBeginnersDrop')] = 0
    party_drop_rate: Annotated[int, XmlAttr('PartyDropRate')] = 0
    party_one_drop_only: Annotated[int, XmlAttr('PartyOneDropOnly')] = 0
    party_share_type: Annotated[int, XmlAttr('PartyShareType')] = 0
    bag_use_effect: Annotated[int, XmlAttr('BagUseEffect')] = -1
    bag_use_type: Annotated[int, XmlAttr('BagUseType')] = 0
    bag_use_rate: Annotated[int, XmlAttr('BagUseRate')] = 10000


@dataclass
class SummonBook:
    xml_tag = 'SummonBook'

    enable: Annotated[int, XmlAttr('Enable')] = 0
    drop_rate: Annotated[int, XmlAttr('DropRate')] = 0
    item_cat: Annotated[int, XmlAttr('ItemCat')] = 0
    item_index: Annotated[int, XmlAttr('ItemIndex')] = 0


@dataclass
class AddCoin:
    xml_tag = 'AddCoin'

    enable: Annotated[int, XmlAttr('Enable')] = 0
    coin_type: Annotated[int, XmlAttr('CoinType')] = 0
    coin_value: Annotated[int, XmlAttr('CoinValue')] = 0
    player_min_level: Annotated[int, XmlAttr('PlayerMinLevel')] = 1
    player_max_level: Annotated[str, XmlAttr('PlayerMaxLevel')] = 'MAX'
    player_min_reset: Annotated[int, XmlAttr('PlayerMinReset')] = 0
    player_max_reset: Annotated[str, XmlAttr('PlayerMaxReset')] = 'MAX'


@dataclass
class Ruud:
    xml_tag = 'Ruud'

    gain_rate: Annotated[int, XmlAttr('GainRate')] = 0
    min_value: Annotated[int, XmlAttr('MinValue')] = 1
    max_value: Annotated[int, XmlAttr('MaxValue')] = 10
    player_min_level: Annotated[int, XmlAttr('PlayerMinLevel')] = 1
    player_max_level: Annotated[str, XmlAttr('PlayerMaxLevel')] = 'MAX'
    player_min_reset: Annotated[int, XmlAttr('PlayerMinReset')] = 0
    player_max_reset: Annotated[str, XmlAttr('PlayerMaxReset')] = 'MAX'


# =============================================================================
# Document
# =============================================================================


@dataclass
class ItemBagDocument:
    """Root of an ItemBag file."""

    xml_tag = 'ItemBag'

    config: Annotated[BagConfig, XmlChild(BagConfig)] = field(default_factory=BagConfig)
    summon_book: Annotated[SummonBook, XmlChild(SummonBook)] = field(default_factory=SummonBook)
    add_coin: Annotated[AddCoin, XmlChild(AddCoin)] = field(default_factory=AddCoin)
    ruud: Annotated[Ruud, XmlChild(Ruud)] = field(default_factory=Ruud)
    drop_sections: Annotated[list[DropSection], XmlChildren(DropSection)] = field(
        default_factory=list
    )

    @property
    def name(self) -> str:
        return self.config.name

    @classmethod
    def from_xml(cls, source: str | bytes) -> ItemBagDocument:
        """Decode an ItemBag XML string or bytes.

        Raises:
            ItemBagDecodeError: On malformed XML, wrong root or bad integers.
        """
        from .itembag_xml import ItemBagXmlParser

        return ItemBagXmlParser.parse(source)

    def to_xml(self, filename: str | None = None, **kwargs: Any) -> str | None:
        """Encode to XML text, or write to ``filename`` and return None.

        Keyword arguments are passed to ItemBagXmlSerializer.serialize.
        """
        from .itembag_xml import ItemBagXmlSerializer

        return ItemBagXmlSerializer.serialize(self, filename=filename, **kwargs)


def new_document(name: str = 'New ItemBag') -> ItemBagDocument:
    """Create a document with one default DropSection/DropAllow/Drop chain."""
    doc = ItemBagDocument(config=BagConfig(name=name))
    doc.drop_sections.append(
        DropSection(drop_allows=[DropAllow(drops=[Drop()])])
    )
    return doc


class ItemBagError(Exception):
    """Base class of all errors raised by the itembag package."""
