"""OpenRouter API client for LLM access."""

import logging
import os
import re
from typing import Optional

from openai import AsyncOpenAI
from pydantic import BaseModel

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "google/gemini-2.5-flash"
APP_TITLE = "Safe / Nuked"

_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


class Message(BaseModel):
    """A chat message."""
    role: str
    content: str


def extract_json_object(text: str) -> str:
    """Cut the outermost JSON object out of a model reply.

    Models sometimes wrap JSON in markdown fences or add a sentence around
    it. Text without braces is returned stripped, for the caller to reject.
    """
    text = _FENCE.sub("", text.strip())
    start, end = text.find("{"), text.rfind("}")
    if start != -1 and end > start:
        return text[start:end + 1]
    return text


class OpenRouterClient:
    """Client for OpenRouter API (OpenAI-compatible)."""

    OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = DEFAULT_MODEL,
        timeout: float = 20.0,
    ):
        """Initialize the OpenRouter client.

        Args:
            api_key: OpenRouter API key. If not provided, reads from OPENROUTER_API_KEY env var.
            model: Model used when a call does not name one.
            timeout: Request timeout in seconds.
        """
        self.api_key = api_key or os.getenv("OPENROUTER_API_KEY")
        if not self.api_key:
            raise ValueError(
                "OpenRouter API key required. Set OPENROUTER_API_KEY environment variable "
                "or pass api_key parameter."
            )

        self.model = model
        self.client = AsyncOpenAI(
            base_url=self.OPENROUTER_BASE_URL,
            api_key=self.api_key,
            timeout=timeout,
            default_headers={"X-Title": APP_TITLE},
        )

    async def chat(
        self,
        messages: list[Message],
        model: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 1024,
        json_mode: bool = False,
    ) -> str:
        """Send a chat completion request.

        Args:
            messages: List of chat messages.
            model: Model identifier, e.g. "google/gemini-2.5-flash".
            temperature: Sampling temperature (0-2).
            max_tokens: Maximum tokens in response.
            json_mode: Ask for a JSON object reply.

        Returns:
            The assistant's response text.
        """
        options = {}
        if json_mode:
            options["response_format"] = {"type": "json_object"}

        model = model or self.model
        logger.debug("Chat request to %s (%d messages)", model, len(messages))
        response = await self.client.chat.completions.create(
            model=model,
            messages=[m.model_dump() for m in messages],
            temperature=temperature,
            max_tokens=max_tokens,
            **options,
        )

        return response.choices[0].message.content or ""

    async def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        model: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 1024,
    ) -> str:
        """Generate a response with system and user prompts."""
        return await self.chat(
            _prompt_pair(system_prompt, user_prompt),
            model,
            temperature,
            max_tokens,
        )

    async def generate_json(
        self,
        system_prompt: str,
        user_prompt: str,
        model: Optional[str] = None,
        temperature: float = 0.9,
        max_tokens: int = 1024,
    ) -> str:
        """Generate a JSON object reply.

        Returns:
            The JSON text with any surrounding chatter removed. Parsing and
            validation are up to the caller.
        """
        text = await self.chat(
            _prompt_pair(system_prompt, user_prompt),
            model,
            temperature,
            max_tokens,
            json_mode=True,
        )
        return extract_json_object(text)


def _prompt_pair(system_prompt: str, user_prompt: str) -> list[Message]:
    return [
        Message(role="system", content=system_prompt),
        Message(role="user", content=user_prompt),
    ]
