"""Game modes and game settings."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union

from .turns import TURN_TIME_LIMIT

DECK_SIZES = (12, 16, 20, 24)
MIN_TRAPS = 1
MAX_TRAPS = 8
SAFE_MARGIN = 4  # Trap quota may not exceed deck_size - SAFE_MARGIN


class ConfigurationError(ValueError):
    """Invalid game setup. Raised before any state changes."""


class GameMode(str, Enum):
    """How round content is generated."""
    CLASSIC = "CLASSIC"
    PARTY = "PARTY"
    TIMED = "TIMED"
    CUSTOM = "CUSTOM"


@dataclass(frozen=True)
class ModeRules:
    """Rules attached to a game mode."""

    mode: GameMode
    timed: bool = False
    requires_topic: bool = False
    description: str = ""

    def __str__(self) -> str:
        return self.mode.value


MODES = {
    GameMode.CLASSIC: ModeRules(
        mode=GameMode.CLASSIC,
        description="A random category with plausible items. Pure nerve.",
    ),
    GameMode.PARTY: ModeRules(
        mode=GameMode.PARTY,
        description="Funny, weird or slightly edgy categories.",
    ),
    GameMode.TIMED: ModeRules(
        mode=GameMode.TIMED,
        timed=True,
        description=f"Quick-thinking categories. {TURN_TIME_LIMIT} seconds per turn or you detonate.",
    ),
    GameMode.CUSTOM: ModeRules(
        mode=GameMode.CUSTOM,
        requires_topic=True,
        description="Items generated for a topic of your choice.",
    ),
}


def get_mode(name: Union[str, GameMode]) -> ModeRules:
    """Get mode rules by name."""
    if isinstance(name, GameMode):
        return MODES[name]
    try:
        return MODES[GameMode(name.strip().upper())]
    except ValueError:
        raise ConfigurationError(
            f"Unknown mode: {name}. Available: {[m.value for m in GameMode]}"
        ) from None


@dataclass(frozen=True)
class GeneratedDeck:
    """Cards come from the content provider.

    Traps are dealt at random, or placed by the players in turn when
    ``manual_traps`` is set.
    """
    manual_traps: bool = False


@dataclass(frozen=True)
class HandWrittenDeck:
    """The host types every card. Traps are always dealt at random."""


DeckSetup = Union[GeneratedDeck, HandWrittenDeck]

DECK_SETUPS: dict[str, DeckSetup] = {
    "generated": GeneratedDeck(),
    "manual_traps": GeneratedDeck(manual_traps=True),
    "hand_written": HandWrittenDeck(),
}


@dataclass
class GameSettings:
    """Configuration for a game."""

    mode: GameMode = GameMode.CLASSIC
    deck_size: int = 12
    trap_count: int = 4
    topic: Optional[str] = None
    deck: DeckSetup = field(default_factory=GeneratedDeck)
    turn_time_limit: int = TURN_TIME_LIMIT
    # Pacing, in seconds
    ai_think_delay: float = 1.5
    ai_placement_delay: float = 1.0
    elimination_pause: float = 3.0
    reshuffle_pause: float = 2.0
    safe_commentary_chance: float = 0.3

    @property
    def rules(self) -> ModeRules:
        return get_mode(self.mode)

    @property
    def timed(self) -> bool:
        return self.rules.timed

    @property
    def manual_traps(self) -> bool:
        return isinstance(self.deck, GeneratedDeck) and self.deck.manual_traps

    @property
    def hand_written(self) -> bool:
        return isinstance(self.deck, HandWrittenDeck)

    @property
    def max_traps(self) -> int:
        return min(MAX_TRAPS, self.deck_size - SAFE_MARGIN)

    def validate(self) -> None:
        """Check the settings.

        Raises:
            ConfigurationError: On the first problem found.
        """
        if self.deck_size not in DECK_SIZES:
            raise ConfigurationError(
                f"Deck size must be one of {list(DECK_SIZES)}, got {self.deck_size}"
            )
        if not MIN_TRAPS <= self.trap_count <= self.max_traps:
            raise ConfigurationError(
                f"Trap count must be between {MIN_TRAPS} and {self.max_traps} "
                f"for a deck of {self.deck_size}, got {self.trap_count}"
            )
        if not isinstance(self.deck, (GeneratedDeck, HandWrittenDeck)):
            raise ConfigurationError(f"Unknown deck setup: {self.deck!r}")
        if self.rules.requires_topic and not self.hand_written and not (self.topic or "").strip():
            raise ConfigurationError(f"{self.mode.value} mode needs a topic")
        if self.turn_time_limit <= 0:
            raise ConfigurationError("Turn time limit must be positive")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GameSettings":
        """Build settings from the ``game`` section of a YAML config.

        Raises:
            ConfigurationError: For an unknown mode or deck setup.
        """
        deck_name = data.get("deck", "generated")
        if deck_name not in DECK_SETUPS:
            raise ConfigurationError(
                f"Unknown deck setup: {deck_name}. Available: {list(DECK_SETUPS)}"
            )
        return cls(
            mode=get_mode(data.get("mode", GameMode.CLASSIC.value)).mode,
            deck_size=int(data.get("deck_size", 12)),
            trap_count=int(data.get("trap_count", 4)),
            topic=data.get("topic"),
            deck=DECK_SETUPS[deck_name],
            turn_time_limit=int(data.get("turn_time_limit", TURN_TIME_LIMIT)),
        )
