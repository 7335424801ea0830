"""Game engine - rules enforcement, lifecycle states, modes and the deck.

``Game`` itself lives in ``engine.game``; it pulls in the LLM layer, which in
turn needs the mode definitions exported here.
"""

from .deck import Card
from .modes import ConfigurationError, GameMode, GameSettings, GeneratedDeck, HandWrittenDeck
from .phases import GameStatus

__all__ = [
    "Card",
    "ConfigurationError",
    "GameMode",
    "GameSettings",
    "GeneratedDeck",
    "HandWrittenDeck",
    "GameStatus",
]
