# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Category-based starting values for new drop items.

When an item is picked from the catalog, an editor proposes enchantment
values that suit its category: weapons come with skill, luck and +8
option, armor with luck and +8 option, Errtel items with rank 1, and so
on. These values are only a starting point; they play no part in decoding
or encoding.

The rules form a lookup table so the table can be replaced or extended
without touching any other code:

    >>> table = CategoryDefaults([
    ...     DefaultRule(categories=(0,), defaults=EnchantmentDefaults(skill=1)),
    ... ])
    >>> table.lookup(0, 5).skill
    1
"""

from __future__ import annotations

from dataclasses import asdict, dataclass

from .models import ERRTEL_CATEGORIES, ERRTEL_INDEX_RANGE, DropItem

# Exc values understood by the server
EXC_NONE = '-1'
EXC_RANDOM = '-2'


@dataclass(frozen=True)
class EnchantmentDefaults:
    """Proposed DropItem enchantment fields."""

    skill: int = 0
    luck: int = 0
    option: int = 0
    exc: str = EXC_NONE
    set_item: int = 0
    socket_count: int = 0
    elemental_item: int = 0
    errtel_rank: int = 0


@dataclass(frozen=True)
class DefaultRule:
    """Defaults for a set of categories, optionally limited to an index range."""

    categories: tuple[int, ...]
    defaults: EnchantmentDefaults
    index_range: tuple[int, int] | None = None

    def matches(self, cat: int, index: int) -> bool:
        if cat not in self.categories:
            return False
        if self.index_range is None:
            return True
        low, high = self.index_range
        return low <= index <= high


class CategoryDefaults:
    """Ordered rule table; the first matching rule wins."""

    def __init__(
        self,
        rules: list[DefaultRule],
        fallback: EnchantmentDefaults | None = None,
    ):
        self.rules = list(rules)
        self.fallback = fallback if fallback is not None else EnchantmentDefaults()

    def lookup(self, cat: int, index: int) -> EnchantmentDefaults:
        for rule in self.rules:
            if rule.matches(cat, index):
                return rule.defaults
        return self.fallback

    def apply(self, item: DropItem) -> DropItem:
        """Copy the defaults for ``item``'s category onto it, in place."""
        for name, value in asdict(self.lookup(item.cat, item.index)).items():
            setattr(item, name, value)
        return item


WEAPON = EnchantmentDefaults(skill=1, luck=1, option=2, exc=EXC_RANDOM)
ARMOR = EnchantmentDefaults(luck=1, option=2, exc=EXC_RANDOM)
ERRTEL = EnchantmentDefaults(errtel_rank=1)
ACCESSORY = EnchantmentDefaults(luck=1, option=1, exc=EXC_RANDOM)
PLAIN = EnchantmentDefaults()
MODERATE = EnchantmentDefaults(luck=1, option=1)

STANDARD_RULES = [
    DefaultRule(categories=(0, 2, 3, 4, 5), defaults=WEAPON),
    DefaultRule(categories=(7, 8, 9, 10, 11), defaults=ARMOR),
    DefaultRule(categories=ERRTEL_CATEGORIES, defaults=ERRTEL, index_range=ERRTEL_INDEX_RANGE),
    DefaultRule(categories=(13,), defaults=ACCESSORY),
    DefaultRule(categories=(14,), defaults=PLAIN),  # jewels
    DefaultRule(categories=(16,), defaults=PLAIN),  # muun
]

STANDARD_DEFAULTS = CategoryDefaults(STANDARD_RULES, fallback=MODERATE)
