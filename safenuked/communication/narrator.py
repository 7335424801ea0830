"""Game Master narration.

Commentary is requested in the background and only ever touches the
display log, so a slow or failing provider never holds up the game.
"""

import asyncio
import logging
from typing import Callable, Hashable, Optional

from ..llm.content import CommentaryEvent, ContentProvider
from .channels import GameMasterLog, Source

logger = logging.getLogger(__name__)


class Narrator:
    """Fires commentary requests and posts the answers to the log."""

    def __init__(
        self,
        provider: ContentProvider,
        log: GameMasterLog,
        staleness_key: Callable[[], Hashable],
        round_number: Callable[[], int],
    ):
        """Initialize the narrator.

        Args:
            provider: Source of commentary text.
            log: Log the commentary is posted to.
            staleness_key: Returns a value that changes whenever a late
                answer should no longer be shown.
            round_number: Returns the current round, for log entries.
        """
        self.provider = provider
        self.log = log
        self._staleness_key = staleness_key
        self._round_number = round_number
        self._tasks: set[asyncio.Task] = set()
        self._last: Optional[asyncio.Task] = None

    @property
    def thinking(self) -> bool:
        """Whether any commentary request is still in flight."""
        return any(not t.done() for t in self._tasks)

    def narrate(
        self,
        event: CommentaryEvent,
        player_name: Optional[str] = None,
        detail: Optional[str] = None,
    ) -> asyncio.Task:
        """Request commentary without waiting for it.

        Requests run concurrently, but answers are posted in the order they
        were asked for. Must be called from a running event loop.
        """
        task = asyncio.create_task(
            self._fetch(event, player_name, detail, self._staleness_key(), self._last)
        )
        self._last = task
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _fetch(
        self,
        event: CommentaryEvent,
        player_name: Optional[str],
        detail: Optional[str],
        key: Hashable,
        after: Optional[asyncio.Task],
    ) -> None:
        try:
            text = await self.provider.generate_game_master_commentary(event, player_name, detail)
        except Exception as e:
            logger.warning("Narration for %s dropped: %s", event.value, e)
            text = None

        # Earlier narration goes first, even when its answer came back later
        if after is not None and not after.done():
            await asyncio.wait({after})

        if not text:
            return
        if key != self._staleness_key():
            logger.debug("Discarding stale %s narration: %r", event.value, text)
            return
        self.log.post(text, self._round_number(), Source.GAME_MASTER)

    async def drain(self) -> None:
        """Wait for every pending commentary request to settle."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
