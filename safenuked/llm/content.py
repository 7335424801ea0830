"""Round content and Game Master commentary.

Both calls always return something usable: failures are logged and turned
into sentinel content so the game keeps moving.
"""

import logging
from enum import Enum
from typing import Optional

from pydantic import BaseModel, field_validator

from ..agents.prompts import (
    CONTENT_SYSTEM_PROMPT,
    GAME_MASTER_SYSTEM_PROMPT,
    build_commentary_prompt,
    build_round_prompt,
)
from ..engine.modes import GameMode
from .openrouter import OpenRouterClient

logger = logging.getLogger(__name__)

OFFLINE_CATEGORY = "OFFLINE MODE"
SYSTEM_ERROR_CATEGORY = "SYSTEM ERROR"
MISSING_KEY_ITEM = "MISSING API KEY"
MISSING_KEY_COMMENTARY = "Error: Logic Core Offline (Missing API Key)"


class CommentaryEvent(str, Enum):
    """Events the Game Master comments on."""
    START = "START"
    SAFE = "SAFE"
    DEATH = "DEATH"
    WIN = "WIN"


class RoundContent(BaseModel):
    """Category and card texts for a round."""
    category: str
    items: list[str]

    @field_validator("items")
    @classmethod
    def _drop_blank_items(cls, items: list[str]) -> list[str]:
        return [item.strip() for item in items if item and item.strip()]

    def fitted(self, target_count: int) -> "RoundContent":
        """Exactly ``target_count`` items: padded with placeholders or truncated."""
        items = list(self.items[:target_count])
        deficit = target_count - len(items)
        items.extend(f"Mystery Item {i}" for i in range(deficit))
        return RoundContent(category=self.category, items=items)


def offline_content(target_count: int) -> RoundContent:
    """Placeholder content used when generation fails."""
    return RoundContent(
        category=OFFLINE_CATEGORY,
        items=[f"Error / Offline {i}" for i in range(target_count)],
    )


def default_commentary(event: CommentaryEvent) -> str:
    """Short fallback line when commentary generation fails."""
    return "Eliminated." if event == CommentaryEvent.DEATH else "Safe."


class ContentProvider:
    """Generates round content and Game Master lines with an LLM.

    Without a client (no API key) every call answers with the
    SYSTEM ERROR sentinel instead of failing.
    """

    def __init__(self, client: Optional[OpenRouterClient] = None):
        """Initialize the provider.

        Args:
            client: LLM client, or None when no API key is configured.
        """
        self.client = client

    @property
    def configured(self) -> bool:
        return self.client is not None

    async def generate_round_content(
        self,
        mode: GameMode,
        round_number: int,
        topic: Optional[str] = None,
        target_count: int = 12,
    ) -> RoundContent:
        """Generate a category and exactly ``target_count`` items.

        Args:
            mode: Game mode, which picks the prompt.
            round_number: Round being generated (for logging).
            topic: User topic for CUSTOM mode.
            target_count: Number of items wanted.

        Returns:
            Round content. Never raises.
        """
        if not self.configured:
            logger.error("No API key configured; round %d uses placeholder content", round_number)
            return RoundContent(
                category=SYSTEM_ERROR_CATEGORY,
                items=[MISSING_KEY_ITEM] * target_count,
            )

        prompt = build_round_prompt(mode, target_count, topic)
        try:
            raw = await self.client.generate_json(CONTENT_SYSTEM_PROMPT, prompt)
            if not raw:
                raise ValueError("empty response")
            content = RoundContent.model_validate_json(raw)
        except Exception:
            logger.exception("Round %d content generation failed", round_number)
            return offline_content(target_count)

        if mode == GameMode.CUSTOM and topic:
            content.category = topic.upper()

        return content.fitted(target_count)

    async def generate_game_master_commentary(
        self,
        event: CommentaryEvent,
        player_name: Optional[str] = None,
        detail: Optional[str] = None,
    ) -> str:
        """Generate a short Game Master line for an event. Never raises."""
        event = CommentaryEvent(event)
        if not self.configured:
            return MISSING_KEY_COMMENTARY

        prompt = build_commentary_prompt(event.value, player_name, detail)
        try:
            text = await self.client.generate(
                GAME_MASTER_SYSTEM_PROMPT,
                prompt,
                temperature=0.9,
                max_tokens=50,
            )
        except Exception as e:
            logger.warning("Commentary for %s failed: %s", event.value, e)
            return default_commentary(event)

        return text.strip() or "Proceed."
