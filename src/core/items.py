"""
Practiceable items and item universes.

An item is one symbol in one variant ("A" uppercase, "a" lowercase, "7" as a
number). A universe is the ordered set of items a game offers; it is always
passed explicitly so independent games (and tests) can use their own.
"""

from __future__ import annotations

import string
from dataclasses import dataclass
from typing import Iterable, Mapping

ALL_VARIANTS = "both"

UPPERCASE = "uppercase"
LOWERCASE = "lowercase"
NUMBER = "number"


@dataclass(frozen=True, order=True)
class ItemKey:
    """Stable identifier of a practiceable unit."""

    symbol: str
    variant: str

    @property
    def item_id(self) -> str:
        return f"{self.symbol}-{self.variant}"

    @property
    def glyph(self) -> str:
        """Character as it is shown to the learner."""
        if self.variant == LOWERCASE:
            return self.symbol.lower()
        return self.symbol

    @classmethod
    def parse(cls, item_id: str) -> ItemKey:
        """Inverse of ``item_id``: ``"A-uppercase"`` -> ItemKey("A", "uppercase")."""
        symbol, sep, variant = item_id.rpartition("-")
        if not sep or not symbol or not variant:
            raise ValueError(f"Malformed item id: {item_id!r}")
        return cls(symbol=symbol, variant=variant)

    def __str__(self) -> str:
        return self.item_id


def _accepts(variant: str, variant_filter: str | None) -> bool:
    return variant_filter in (None, ALL_VARIANTS) or variant == variant_filter


class ItemUniverse:
    """
    Ordered mapping of symbol -> allowed variants.

    Order is preserved so snapshots and initial seeding are stable. The
    name is the game id that scopes statistics: two games may share item
    keys ("A-uppercase") without sharing progress.
    """

    def __init__(self, name: str, variants_by_symbol: Mapping[str, Iterable[str]]):
        self.name = name
        self._variants: dict[str, tuple[str, ...]] = {
            symbol: tuple(variants) for symbol, variants in variants_by_symbol.items()
        }
        for symbol, variants in self._variants.items():
            if not variants:
                raise ValueError(f"Symbol {symbol!r} in universe {name!r} has no variants")

    @classmethod
    def uniform(cls, name: str, symbols: Iterable[str], variants: Iterable[str]) -> ItemUniverse:
        """Universe where every symbol allows the same variants."""
        variants = tuple(variants)
        return cls(name, {symbol: variants for symbol in symbols})

    @property
    def symbols(self) -> tuple[str, ...]:
        return tuple(self._variants)

    def variants_for(self, symbol: str, variant_filter: str | None = ALL_VARIANTS) -> tuple[str, ...]:
        """Variants of ``symbol`` that pass ``variant_filter``."""
        return tuple(v for v in self._variants[symbol] if _accepts(v, variant_filter))

    def items(self, variant_filter: str | None = ALL_VARIANTS) -> list[ItemKey]:
        """Every eligible item, in universe order."""
        return [
            ItemKey(symbol, variant)
            for symbol in self._variants
            for variant in self.variants_for(symbol, variant_filter)
        ]

    def __contains__(self, item: object) -> bool:
        if not isinstance(item, ItemKey):
            return False
        return item.variant in self._variants.get(item.symbol, ())

    def __len__(self) -> int:
        return sum(len(variants) for variants in self._variants.values())

    def __repr__(self) -> str:
        return f"<ItemUniverse {self.name} symbols={len(self._variants)} items={len(self)}>"


# Letter Match: the full alphabet in both cases.
LETTER_UNIVERSE = ItemUniverse.uniform(
    "letter-match",
    string.ascii_uppercase,
    (UPPERCASE, LOWERCASE),
)

# Orientation game: I and O are left out (symmetric under reversal), digits have no case.
ORIENTATION_UNIVERSE = ItemUniverse(
    "orientation-game",
    {
        **{
            letter: (UPPERCASE, LOWERCASE)
            for letter in string.ascii_uppercase
            if letter not in ("I", "O")
        },
        **{digit: (NUMBER,) for digit in string.digits},
    },
)
