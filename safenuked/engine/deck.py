"""Cards and deck construction."""

from dataclasses import dataclass
from typing import Optional, Union


@dataclass
class Card:
    """A card on the table."""

    id: str
    text: str
    is_trap: bool = False
    is_revealed: bool = False
    placed_by: Optional[str] = None  # Comma-joined placer names

    @property
    def placers(self) -> list[str]:
        """Names recorded for each trap placement on this card."""
        if not self.placed_by:
            return []
        return [name.strip() for name in self.placed_by.split(",")]


@dataclass(frozen=True)
class FreshItems:
    """Deck source: brand new item texts (from the provider or hand-written)."""
    items: tuple[str, ...]


@dataclass(frozen=True)
class ReuseDeck:
    """Deck source: the texts of an existing deck, with all state stripped."""
    cards: tuple[Card, ...]


DeckSource = Union[FreshItems, ReuseDeck]


def rebuild_deck(source: DeckSource) -> list[Card]:
    """Build a clean deck: no traps, nothing revealed.

    Args:
        source: Either fresh item texts or a deck whose texts are reused.

    Returns:
        A new list of cards.
    """
    if isinstance(source, FreshItems):
        return [Card(id=f"card-{i}", text=text) for i, text in enumerate(source.items)]
    if isinstance(source, ReuseDeck):
        return [Card(id=card.id, text=card.text) for card in source.cards]
    raise TypeError(f"Unknown deck source: {source!r}")


def find_card(deck: list[Card], card_id: str) -> Optional[Card]:
    """Find a card by id."""
    return next((c for c in deck if c.id == card_id), None)


def safe_cards_remaining(deck: list[Card]) -> int:
    """Number of unrevealed cards that are not traps."""
    return sum(1 for c in deck if not c.is_trap and not c.is_revealed)


def count_traps(deck: list[Card]) -> int:
    return sum(1 for c in deck if c.is_trap)


def reveal_all(deck: list[Card]) -> None:
    """Turn every card face up (end of game)."""
    for card in deck:
        card.is_revealed = True
