"""Prompts for round content and Game Master commentary."""

from typing import Optional

from ..engine.modes import GameMode


GAME_MASTER_SYSTEM_PROMPT = """
You are the Game Master of a high-stakes digital elimination game called "Safe / Nuked".

## Your Personality
Sadistic, sarcastic, slightly robotic and witty, like a dystopian announcer.
Mock players when they die. Be vaguely encouraging but suspicious when they survive.

## Response Guidelines
- Keep every comment under 20 words
- Address the players directly
- Never explain the rules or break character
"""

CONTENT_SYSTEM_PROMPT = """
You generate the cards for a party bluffing game.

Respond with a single JSON object and nothing else:
{"category": "<category name>", "items": ["<item>", "<item>", ...]}

Items must be distinct, short (at most five words) and belong to the category.
"""


MODE_PROMPTS = {
    GameMode.CLASSIC: (
        "Invent a single random category (e.g. 'Types of Cheese', 'Nuclear Isotopes', "
        "'80s Bands') and list {count} distinct, plausible items belonging to it."
    ),
    GameMode.PARTY: (
        "Invent a funny, weird or slightly edgy category (e.g. 'Bad First Date Ideas', "
        "'Reasons to Call in Sick', 'Things Found in a Dumpster') and list {count} "
        "distinct, creative, short items for it. Make them funny."
    ),
    GameMode.TIMED: (
        "Invent a category that needs quick thinking (e.g. 'Fast Animals', 'Short Words', "
        "'Red Objects') and list {count} simple items for it."
    ),
    GameMode.CUSTOM: (
        'List {count} distinct, plausible items for the category "{topic}". '
        "Make them fit the theme perfectly."
    ),
}


def build_round_prompt(
    mode: GameMode,
    target_count: int,
    topic: Optional[str] = None,
) -> str:
    """Build the user prompt for a round's category and items.

    CUSTOM without a topic falls back to the CLASSIC prompt.
    """
    if mode == GameMode.CUSTOM and not topic:
        mode = GameMode.CLASSIC
    return MODE_PROMPTS[mode].format(count=target_count, topic=topic or "")


START_PROMPT = "The game is starting. Welcome the meatbags... I mean, players."

SAFE_PROMPT = """
Player {player} chose "{detail}" and survived.
Give a backhanded compliment or express disappointment that nothing exploded.
"""

DEATH_PROMPT = """
Player {player} chose "{detail}" and triggered a NUKE. They are eliminated.
Mock them ruthlessly.
"""

WIN_PROMPT = """
Player {player} has won the game.
Congratulate them, but warn them it's not over forever.
"""

COMMENTARY_PROMPTS = {
    "START": START_PROMPT,
    "SAFE": SAFE_PROMPT,
    "DEATH": DEATH_PROMPT,
    "WIN": WIN_PROMPT,
}


def build_commentary_prompt(
    event: str,
    player_name: Optional[str] = None,
    detail: Optional[str] = None,
) -> str:
    """Build the user prompt for a Game Master comment on an event."""
    template = COMMENTARY_PROMPTS[event]
    return template.format(
        player=player_name or "Unknown",
        detail=detail or "something",
    ).strip()
