"""
Ordered card pile. Index 0 is the top.
"""

import random
from typing import Generic, Iterable, Iterator, TypeVar

T = TypeVar("T")


class Deck(Generic[T]):
    """Mutable ordered pile of cards with draw-from-top and place-on-bottom."""

    def __init__(self, cards: Iterable[T] | None = None):
        self._cards: list[T] = list(cards) if cards is not None else []

    def draw(self) -> T | None:
        """Remove and return the top card, or None if the deck is empty."""
        if not self._cards:
            return None
        return self._cards.pop(0)

    def shuffle(self, rng: random.Random | None = None) -> None:
        (rng or random).shuffle(self._cards)

    def place_on_bottom(self, card: T) -> None:
        self._cards.append(card)

    def place_on_top(self, card: T) -> None:
        self._cards.insert(0, card)

    def is_empty(self) -> bool:
        return not self._cards

    def size(self) -> int:
        return len(self._cards)

    def cards(self) -> list[T]:
        """Copy of the cards, top first."""
        return list(self._cards)

    def __len__(self) -> int:
        return len(self._cards)

    def __iter__(self) -> Iterator[T]:
        return iter(list(self._cards))

    def __repr__(self) -> str:
        return f"Deck(size={len(self._cards)})"
