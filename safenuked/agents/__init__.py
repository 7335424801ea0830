"""Players, the roster and prompt management."""

from .player import Player, PlayerStatus
from .roster import Roster

__all__ = ["Player", "PlayerStatus", "Roster"]
