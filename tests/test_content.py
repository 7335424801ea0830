"""Tests for round content generation and commentary."""

import json

import pytest

from safenuked.agents.prompts import build_commentary_prompt, build_round_prompt
from safenuked.engine.modes import GameMode
from safenuked.llm.content import (
    MISSING_KEY_COMMENTARY,
    MISSING_KEY_ITEM,
    OFFLINE_CATEGORY,
    SYSTEM_ERROR_CATEGORY,
    CommentaryEvent,
    ContentProvider,
    RoundContent,
)
from safenuked.llm.openrouter import extract_json_object


class FakeClient:
    """Stands in for OpenRouterClient and records prompts."""

    def __init__(self, json_reply: str = "", text_reply: str = "", error: Exception = None):
        self.json_reply = json_reply
        self.text_reply = text_reply
        self.error = error
        self.prompts: list[tuple[str, str]] = []

    async def generate_json(self, system_prompt, user_prompt, **kwargs):
        self.prompts.append((system_prompt, user_prompt))
        if self.error:
            raise self.error
        return self.json_reply

    async def generate(self, system_prompt, user_prompt, **kwargs):
        self.prompts.append((system_prompt, user_prompt))
        if self.error:
            raise self.error
        return self.text_reply


def _reply(category: str, items: list[str]) -> str:
    return json.dumps({"category": category, "items": items})


class TestRoundContent:
    """The content model."""

    def test_blank_items_are_dropped(self):
        content = RoundContent(category="C", items=[" a ", "", "   ", "b"])
        assert content.items == ["a", "b"]

    def test_fitted_pads_and_truncates(self):
        content = RoundContent(category="C", items=["a", "b", "c"])
        assert content.fitted(2).items == ["a", "b"]
        assert content.fitted(5).items == ["a", "b", "c", "Mystery Item 0", "Mystery Item 1"]


class TestGenerateRoundContent:
    """Round generation through the LLM client."""

    @pytest.mark.asyncio
    async def test_successful_generation(self):
        items = [f"Cheese {i}" for i in range(12)]
        client = FakeClient(json_reply=_reply("Types of Cheese", items))
        provider = ContentProvider(client)

        content = await provider.generate_round_content(GameMode.CLASSIC, 1, target_count=12)

        assert content.category == "Types of Cheese"
        assert content.items == items
        assert "12 distinct" in client.prompts[0][1]

    @pytest.mark.asyncio
    async def test_short_reply_is_padded(self):
        provider = ContentProvider(FakeClient(json_reply=_reply("Short", ["a", "b"])))
        content = await provider.generate_round_content(GameMode.PARTY, 1, target_count=4)
        assert content.items == ["a", "b", "Mystery Item 0", "Mystery Item 1"]

    @pytest.mark.asyncio
    async def test_custom_topic_becomes_category(self):
        client = FakeClient(json_reply=_reply("whatever", ["x"] * 12))
        provider = ContentProvider(client)

        content = await provider.generate_round_content(GameMode.CUSTOM, 1, topic="Space snacks")

        assert content.category == "SPACE SNACKS"
        assert '"Space snacks"' in client.prompts[0][1]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("client", [
        FakeClient(error=RuntimeError("timeout")),
        FakeClient(json_reply="not json"),
        FakeClient(json_reply=""),
        FakeClient(json_reply=json.dumps({"items": ["a"]})),
    ])
    async def test_failures_fall_back_to_offline_content(self, client):
        provider = ContentProvider(client)
        content = await provider.generate_round_content(GameMode.CLASSIC, 3, target_count=12)

        assert content.category == OFFLINE_CATEGORY
        assert content.items == [f"Error / Offline {i}" for i in range(12)]

    @pytest.mark.asyncio
    async def test_missing_key_uses_sentinel(self):
        provider = ContentProvider()
        content = await provider.generate_round_content(GameMode.CLASSIC, 1, target_count=16)

        assert not provider.configured
        assert content.category == SYSTEM_ERROR_CATEGORY
        assert content.items == [MISSING_KEY_ITEM] * 16


class TestCommentary:
    """Game Master lines."""

    @pytest.mark.asyncio
    async def test_commentary_is_stripped(self):
        client = FakeClient(text_reply="  Goodbye, meatbag.  ")
        provider = ContentProvider(client)

        text = await provider.generate_game_master_commentary(CommentaryEvent.DEATH, "Alice", "Brie")

        assert text == "Goodbye, meatbag."
        assert "Alice" in client.prompts[0][1]
        assert '"Brie"' in client.prompts[0][1]

    @pytest.mark.asyncio
    async def test_empty_commentary(self):
        provider = ContentProvider(FakeClient(text_reply="   "))
        assert await provider.generate_game_master_commentary(CommentaryEvent.START) == "Proceed."

    @pytest.mark.asyncio
    @pytest.mark.parametrize("event,expected", [
        (CommentaryEvent.DEATH, "Eliminated."),
        (CommentaryEvent.SAFE, "Safe."),
        (CommentaryEvent.WIN, "Safe."),
    ])
    async def test_failure_uses_default_line(self, event, expected):
        provider = ContentProvider(FakeClient(error=RuntimeError("boom")))
        assert await provider.generate_game_master_commentary(event, "Alice") == expected

    @pytest.mark.asyncio
    async def test_missing_key_commentary(self):
        provider = ContentProvider()
        text = await provider.generate_game_master_commentary(CommentaryEvent.WIN, "Alice")
        assert text == MISSING_KEY_COMMENTARY


class TestPrompts:
    """Prompt construction."""

    def test_custom_without_topic_uses_classic_prompt(self):
        assert build_round_prompt(GameMode.CUSTOM, 12) == build_round_prompt(GameMode.CLASSIC, 12)

    def test_round_prompt_mentions_count(self):
        assert "20" in build_round_prompt(GameMode.TIMED, 20)

    def test_commentary_prompt_defaults(self):
        prompt = build_commentary_prompt("SAFE")
        assert "Unknown" in prompt
        assert "something" in prompt


class TestExtractJson:
    """Cleaning up JSON replies."""

    @pytest.mark.parametrize("reply", [
        '{"category": "C", "items": ["a"]}',
        '```json\n{"category": "C", "items": ["a"]}\n```',
        'Sure! Here you go: {"category": "C", "items": ["a"]} Enjoy.',
    ])
    def test_object_is_extracted(self, reply):
        content = RoundContent.model_validate_json(extract_json_object(reply))
        assert content.category == "C"
        assert content.items == ["a"]

    def test_text_without_object_is_returned(self):
        assert extract_json_object("  no json here ") == "no json here"
