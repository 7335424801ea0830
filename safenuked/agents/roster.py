"""Ordered roster of players. Insertion order is turn order."""

import logging
import uuid
from typing import Iterator, Optional

from .player import (
    AI_AVATAR,
    AI_PLAYER_ID,
    AI_PLAYER_NAME,
    AVATARS,
    Player,
    PlayerStatus,
)

logger = logging.getLogger(__name__)


class Roster:
    """The participants of a game, in turn order."""

    MAX_NAME_LENGTH = 10

    def __init__(self):
        self.players: list[Player] = []
        self._next_avatar = 0

    def __len__(self) -> int:
        return len(self.players)

    def __iter__(self) -> Iterator[Player]:
        return iter(self.players)

    def __getitem__(self, index: int) -> Player:
        return self.players[index]

    def add_player(
        self,
        name: str,
        avatar: Optional[str] = None,
        is_bot: bool = False,
        player_id: Optional[str] = None,
    ) -> Optional[Player]:
        """Add a player to the end of the roster.

        Args:
            name: Display name. Trimmed and cut to MAX_NAME_LENGTH.
            avatar: Avatar symbol. Cycles through AVATARS if omitted.
            is_bot: Whether the engine plays for this participant.
            player_id: Explicit id (a fresh uuid if omitted).

        Returns:
            The new player, or None if the name is blank.
        """
        name = (name or "").strip()[:self.MAX_NAME_LENGTH]
        if not name:
            return None

        if avatar is None:
            avatar = AVATARS[self._next_avatar % len(AVATARS)]
            self._next_avatar += 1

        player = Player(
            id=player_id or uuid.uuid4().hex,
            name=name,
            avatar=avatar,
            is_host=not self.players,
            is_bot=is_bot,
        )
        self.players.append(player)
        logger.debug("Player %s joined (bot=%s)", player.name, is_bot)
        return player

    def add_ai_opponent(self) -> Player:
        """Add the SYSTEM_AI opponent used for single-player games."""
        existing = self.get(AI_PLAYER_ID)
        if existing:
            return existing
        return self.add_player(
            AI_PLAYER_NAME,
            avatar=AI_AVATAR,
            is_bot=True,
            player_id=AI_PLAYER_ID,
        )

    def get(self, player_id: str) -> Optional[Player]:
        """Look up a player by id."""
        return next((p for p in self.players if p.id == player_id), None)

    def set_status(self, player_id: str, status: PlayerStatus) -> None:
        """Set a player's status. Unknown ids are ignored."""
        player = self.get(player_id)
        if player:
            player.status = status

    @property
    def alive(self) -> list[Player]:
        """All players still in the game."""
        return [p for p in self.players if p.alive]

    def alive_except(self, excluded_id: str) -> list[Player]:
        """Alive players other than the given one."""
        return [p for p in self.players if p.alive and p.id != excluded_id]

    @property
    def has_bots(self) -> bool:
        return any(p.is_bot for p in self.players)

    def remove_bots(self) -> None:
        """Drop every AI participant."""
        self.players = [p for p in self.players if not p.is_bot]

    def reset_statuses(self) -> None:
        """Bring everyone back to ALIVE."""
        for player in self.players:
            player.status = PlayerStatus.ALIVE
