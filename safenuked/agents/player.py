"""Participants in a Safe / Nuked game."""

import random
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from ..engine.deck import Card


class PlayerStatus(Enum):
    """Lifecycle status of a player."""
    ALIVE = "ALIVE"
    ELIMINATED = "ELIMINATED"
    WINNER = "WINNER"


AVATARS = [
    "💀", "🤖", "👽", "🤡", "👹", "🤠", "👻", "🎃",
    "👾", "👿", "🦄", "🐲", "🐹", "🐱", "🐼", "🦊",
    "🦁", "🐯", "🐙", "🦖", "🧛", "🧟", "🕵️", "🥷",
]

AI_PLAYER_ID = "ai-bot"
AI_PLAYER_NAME = "SYSTEM_AI"
AI_AVATAR = "🤖"


@dataclass
class Player:
    """A player in the game.

    Human players are driven by the host UI; AI players (``is_bot``) pick
    cards on their own when the engine schedules them.
    """

    id: str
    name: str
    avatar: str
    status: PlayerStatus = PlayerStatus.ALIVE
    is_host: bool = False
    is_bot: bool = False

    @property
    def alive(self) -> bool:
        """Whether the player can still take turns."""
        return self.status == PlayerStatus.ALIVE

    def choose_card_to_reveal(
        self,
        deck: list["Card"],
        rng: Optional[random.Random] = None,
    ) -> Optional["Card"]:
        """Pick a card to reveal.

        The AI does not cheat: it picks uniformly among unrevealed cards.

        Args:
            deck: The current deck.
            rng: Random source (module random if omitted).

        Returns:
            The chosen card, or None if every card is revealed.
        """
        available = [c for c in deck if not c.is_revealed]
        if not available:
            return None
        return (rng or random).choice(available)

    def choose_card_to_trap(
        self,
        deck: list["Card"],
        rng: Optional[random.Random] = None,
    ) -> Optional["Card"]:
        """Pick a card to arm during manual trap placement.

        Any card is fair game, trapped or not - placements are blind.
        """
        if not deck:
            return None
        return (rng or random).choice(deck)

    def __str__(self) -> str:
        return f"{self.avatar} {self.name}"
