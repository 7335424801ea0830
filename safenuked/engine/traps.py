"""Trap assignment: random dealing and manual, multi-player placement."""

import logging
import random
from dataclasses import dataclass, replace
from typing import Optional

from .deck import Card

logger = logging.getLogger(__name__)

AI_PLACER = "AI"


def assign_random_traps(
    deck: list[Card],
    requested: int,
    rng: Optional[random.Random] = None,
) -> list[Card]:
    """Arm random cards in a deck.

    The count is clamped to ``len(deck) - 1`` so at least one safe card
    always exists, which also bounds the rejection loop below.

    Args:
        deck: Cards to arm. Not modified.
        requested: How many traps the settings ask for.
        rng: Random source (module random if omitted).

    Returns:
        A new deck with ``min(requested, len(deck) - 1)`` traps.
    """
    rng = rng or random
    new_deck = [replace(card) for card in deck]
    target = max(0, min(requested, len(new_deck) - 1))

    placed = 0
    while placed < target:
        idx = rng.randrange(len(new_deck))
        if new_deck[idx].is_trap:
            continue
        new_deck[idx].is_trap = True
        new_deck[idx].placed_by = AI_PLACER
        placed += 1

    return new_deck


def place_trap(deck: list[Card], card_id: str, placer_name: str) -> list[Card]:
    """Arm one card on behalf of a player.

    Cards that are already traps can be picked again; the placer's name is
    appended so every placement is recorded.

    Returns:
        A new deck. Unknown card ids leave it unchanged.
    """
    new_deck = []
    for card in deck:
        if card.id == card_id:
            placed_by = f"{card.placed_by}, {placer_name}" if card.placed_by else placer_name
            card = replace(card, is_trap=True, placed_by=placed_by)
        new_deck.append(card)
    return new_deck


@dataclass
class ManualTrapPlacement:
    """Counter for a manual placement phase.

    Players take placements in roster order, cycling, until ``quota``
    placements have been made. Placement never reveals what is already armed.
    """

    quota: int
    placements: int = 0

    @property
    def complete(self) -> bool:
        return self.placements >= self.quota

    @property
    def remaining(self) -> int:
        return max(0, self.quota - self.placements)

    def placing_index(self, roster_size: int) -> int:
        """Roster position of the player who places next."""
        if roster_size <= 0:
            return 0
        return self.placements % roster_size

    def record(self) -> bool:
        """Count one placement.

        Returns:
            False if the quota was already met (nothing counted).
        """
        if self.complete:
            logger.debug("Placement ignored: quota of %d already met", self.quota)
            return False
        self.placements += 1
        return True
