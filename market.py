"""Stocks and their price variation model."""

import random
from dataclasses import dataclass
from functools import total_ordering
from typing import Dict, List

from config import STOCK_GENERATION, NAME_PREFIXES, NAME_SUFFIXES


def _trunc_div(numerator: int, denominator: int) -> int:
    """Integer division rounding toward zero."""
    quotient = abs(numerator) // abs(denominator)
    return quotient if (numerator >= 0) == (denominator > 0) else -quotient


@total_ordering
@dataclass(eq=False)
class Stock:
    """A tradable stock whose value follows a damped random walk.

    Each call to ``vary`` draws an integer uniformly from
    ``[-variation, variation]`` (both ends inclusive) and adds it to the
    momentum carried over from the last turn, scaled down to 3/5. The value
    then moves by the new momentum.
    """
    id: int
    name: str
    initial_value: int
    variation: int
    value: int = None
    momentum: int = 0

    def __post_init__(self):
        if self.value is None:
            self.value = self.initial_value

    def vary(self, rng: random.Random) -> int:
        """Vary the value of the stock and return how much it moved."""
        draw = rng.randint(-self.variation, self.variation)
        self.momentum = _trunc_div(self.momentum * 3, 5) + draw
        self.value += self.momentum
        return self.momentum

    def reset(self):
        """Reset the stock after it went bankrupt."""
        self.value = self.initial_value
        self.momentum = 0

    @property
    def bankrupt(self) -> bool:
        return self.value <= 0

    def to_dict(self) -> Dict:
        return {
            'id': self.id,
            'name': self.name,
            'initial_value': self.initial_value,
            'value': self.value,
            'variation': self.variation,
            'momentum': self.momentum,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'Stock':
        return cls(
            id=data['id'],
            name=data['name'],
            initial_value=data['initial_value'],
            value=data['value'],
            variation=data['variation'],
            momentum=data.get('momentum', 0),
        )

    def __eq__(self, other):
        if not isinstance(other, Stock):
            return NotImplemented
        return (self.id, self.name) == (other.id, other.name)

    def __lt__(self, other):
        if not isinstance(other, Stock):
            return NotImplemented
        return self.id < other.id

    def __hash__(self):
        return hash((self.id, self.name))

    def __str__(self):
        return f"{self.name}, Value: {self.value}"


def generate_name(rng: random.Random, taken: List[str] = None) -> str:
    """Generate a company name, avoiding names already in use where possible."""
    taken = set(taken or [])
    candidates = [
        f"{prefix} {suffix}"
        for prefix in NAME_PREFIXES
        for suffix in NAME_SUFFIXES
        if f"{prefix} {suffix}" not in taken
    ]
    if not candidates:
        # Every combination is in use, fall back to a numbered name
        base = f"{rng.choice(NAME_PREFIXES)} {rng.choice(NAME_SUFFIXES)}"
        number = 2
        while f"{base} {number}" in taken:
            number += 1
        return f"{base} {number}"
    return rng.choice(candidates)


def generate_stock(stock_id: int, rng: random.Random, name: str = None,
                   bounds: Dict[str, int] = None) -> Stock:
    """Generate a stock with a random value and variation within bounds."""
    if bounds is None:
        bounds = STOCK_GENERATION
    if name is None:
        name = generate_name(rng)

    value = rng.randint(bounds['min_value'], bounds['max_value'])
    variation = rng.randint(bounds['min_variation'], bounds['max_variation'])
    return Stock(id=stock_id, name=name, initial_value=value, variation=variation)
