"""Turn order and the per-turn countdown."""

from dataclasses import dataclass, field
from typing import Optional, Sequence

from ..agents.player import Player

TURN_TIME_LIMIT = 10  # Seconds per turn in timed mode


@dataclass
class TurnTimer:
    """Per-turn countdown in whole seconds."""
    limit: int = TURN_TIME_LIMIT
    time_left: int = TURN_TIME_LIMIT

    def reset(self) -> None:
        self.time_left = self.limit

    def tick(self) -> bool:
        """Count down one second.

        Returns:
            True exactly when this tick reaches zero.
        """
        if self.time_left <= 0:
            return False
        self.time_left -= 1
        return self.time_left == 0

    @property
    def expired(self) -> bool:
        return self.time_left <= 0


def next_alive_index(current_index: int, players: Sequence[Player]) -> int:
    """Index of the next ALIVE player after ``current_index``, wrapping.

    The search is bounded by the roster size so it terminates even when
    nobody is alive; the caller normally guarantees at least two are.
    """
    size = len(players)
    if size == 0:
        return current_index

    next_index = (current_index + 1) % size
    loops = 0
    while not players[next_index].alive and loops < size:
        next_index = (next_index + 1) % size
        loops += 1
    return next_index


@dataclass
class TurnSequencer:
    """Owns the acting-player index and the turn timer.

    ``serial`` changes every time a turn starts; scheduled actions compare
    it to tell whether the turn they were scheduled for is still running.
    """

    index: int = 0
    serial: int = 0
    timer: TurnTimer = field(default_factory=TurnTimer)

    def current(self, players: Sequence[Player]) -> Optional[Player]:
        """The acting player, if the roster is not empty."""
        if not players:
            return None
        return players[self.index % len(players)]

    def advance(self, players: Sequence[Player]) -> int:
        """Move to the next alive player and restart the countdown."""
        self.index = next_alive_index(self.index, players)
        self.restart_turn()
        return self.index

    def restart_turn(self) -> None:
        """Restart the countdown for the current player."""
        self.timer.reset()
        self.serial += 1

    def reset(self) -> None:
        """Back to the first player."""
        self.index = 0
        self.restart_turn()
