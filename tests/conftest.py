"""Shared fixtures for the Safe / Nuked tests."""

import asyncio
import random
from typing import Optional

import pytest

from safenuked.engine.game import Game
from safenuked.engine.modes import GameSettings
from safenuked.engine.traps import AI_PLACER
from safenuked.llm.content import CommentaryEvent, RoundContent


class StubContentProvider:
    """Content provider that answers instantly and records every request."""

    def __init__(
        self,
        category: str = "TEST CATEGORY",
        items: Optional[list[str]] = None,
        fail_commentary: bool = False,
    ):
        self.category = category
        self.items = items
        self.fail_commentary = fail_commentary
        self.gate: Optional[asyncio.Event] = None
        self.delays: dict[CommentaryEvent, float] = {}
        self.round_requests: list[tuple] = []
        self.commentary_requests: list[tuple] = []

    async def generate_round_content(self, mode, round_number, topic=None, target_count=12):
        self.round_requests.append((mode, round_number, topic, target_count))
        items = self.items or [f"Item {i}" for i in range(target_count)]
        return RoundContent(category=self.category, items=items).fitted(target_count)

    async def generate_game_master_commentary(self, event, player_name=None, detail=None):
        event = CommentaryEvent(event)
        self.commentary_requests.append((event, player_name, detail))
        if self.gate is not None:
            await self.gate.wait()
        if event in self.delays:
            await asyncio.sleep(self.delays[event])
        if self.fail_commentary:
            raise RuntimeError("provider down")
        return f"{event.value}: {player_name}"


@pytest.fixture
def provider() -> StubContentProvider:
    return StubContentProvider()


@pytest.fixture
def make_game(provider):
    """Build a game in the lobby with the given players and settings."""

    def _make(*names: str, **settings) -> Game:
        game = Game(provider, GameSettings(**settings), rng=random.Random(1234))
        for name in names:
            game.add_player(name)
        return game

    return _make


@pytest.fixture
def rig_traps():
    """Re-arm the current deck so exactly the given card ids are traps."""

    def _rig(game: Game, trap_ids) -> None:
        trap_ids = set(trap_ids)
        for card in game.deck:
            card.is_trap = card.id in trap_ids
            card.placed_by = AI_PLACER if card.is_trap else None

    return _rig
