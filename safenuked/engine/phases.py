"""Game lifecycle states and transitions."""

import logging
from enum import Enum, auto
from dataclasses import dataclass

logger = logging.getLogger(__name__)


class GameStatus(Enum):
    """Lifecycle states of a game."""
    LOBBY = auto()          # Roster assembly and configuration
    MANUAL_ENTRY = auto()   # Host types in the card texts
    LOADING_ROUND = auto()  # Content fetch or reshuffle in progress
    SETUP_TRAPS = auto()    # Players arm cards in turn
    PLAYING = auto()        # Cards can be revealed
    GAME_OVER = auto()      # Terminal until restart


TRANSITIONS: dict[GameStatus, frozenset[GameStatus]] = {
    GameStatus.LOBBY: frozenset({GameStatus.MANUAL_ENTRY, GameStatus.LOADING_ROUND}),
    GameStatus.MANUAL_ENTRY: frozenset({GameStatus.PLAYING}),
    GameStatus.LOADING_ROUND: frozenset({GameStatus.SETUP_TRAPS, GameStatus.PLAYING}),
    GameStatus.SETUP_TRAPS: frozenset({GameStatus.PLAYING}),
    GameStatus.PLAYING: frozenset({GameStatus.LOADING_ROUND, GameStatus.GAME_OVER}),
    GameStatus.GAME_OVER: frozenset({GameStatus.LOBBY}),
}


@dataclass
class PhaseState:
    """Current lifecycle state."""
    status: GameStatus
    round_number: int = 1

    @property
    def phase_name(self) -> str:
        """Human-readable name with round number."""
        if self.status in (GameStatus.LOBBY, GameStatus.GAME_OVER):
            return self.status.name.lower()
        return f"round_{self.round_number}_{self.status.name.lower()}"


class PhaseManager:
    """Manages lifecycle transitions and the round counter."""

    def __init__(self):
        self.state = PhaseState(status=GameStatus.LOBBY, round_number=1)

    @property
    def status(self) -> GameStatus:
        return self.state.status

    @property
    def round_number(self) -> int:
        return self.state.round_number

    def can_transition(self, target: GameStatus) -> bool:
        return target in TRANSITIONS[self.state.status]

    def transition(self, target: GameStatus) -> bool:
        """Move to ``target`` if the lifecycle allows it.

        Returns:
            False (and no change) for an illegal transition.
        """
        if not self.can_transition(target):
            logger.debug(
                "Refusing transition %s -> %s", self.state.status.name, target.name
            )
            return False
        self.state = PhaseState(status=target, round_number=self.state.round_number)
        return True

    def next_round(self) -> int:
        """Increment the round counter."""
        self.state.round_number += 1
        return self.state.round_number

    def reset(self) -> PhaseState:
        """Back to the lobby at round 1 (restart from game over)."""
        if self.state.status == GameStatus.GAME_OVER:
            self.state = PhaseState(status=GameStatus.LOBBY, round_number=1)
        return self.state
