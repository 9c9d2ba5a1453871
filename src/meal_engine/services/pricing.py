"""Combo price lookup."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal


@dataclass(frozen=True)
class ComboPricing:
    """Price table for the combos a tenant can order."""

    prices: Mapping[str, Decimal] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, raw: Mapping[str, object]) -> "ComboPricing":
        return cls(prices={name: Decimal(str(value)) for name, value in raw.items()})

    def price_for(self, combo_type: str) -> Decimal | None:
        """Return the price of a combo, or None when it is not on the menu."""
        return self.prices.get(combo_type.strip())

    def combos(self) -> list[str]:
        return sorted(self.prices)
