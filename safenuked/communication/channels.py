"""The Game Master display log."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel

INITIAL_MESSAGE = "System initialized. Awaiting players."


class Source(str, Enum):
    """Who produced a log line."""
    SYSTEM = "SYSTEM"        # Engine status messages
    GAME_MASTER = "GM"       # Generated commentary


class LogEntry(BaseModel):
    """A single line shown to the players."""
    round_number: int
    content: str
    source: Source = Source.SYSTEM


class GameMasterLog:
    """Ordered log of what the Game Master has said.

    The latest entry is what the host UI shows; the rest is scrollback.
    """

    def __init__(self, initial: Optional[str] = INITIAL_MESSAGE):
        self.entries: list[LogEntry] = []
        if initial:
            self.post(initial, round_number=0)

    def post(
        self,
        content: str,
        round_number: int,
        source: Source = Source.SYSTEM,
    ) -> LogEntry:
        """Append a line to the log."""
        entry = LogEntry(round_number=round_number, content=content, source=source)
        self.entries.append(entry)
        return entry

    @property
    def current(self) -> str:
        """The most recent message, or an empty string."""
        return self.entries[-1].content if self.entries else ""

    def get_entries(self, round_number: Optional[int] = None) -> list[LogEntry]:
        """Get entries, optionally filtered by round."""
        if round_number is None:
            return self.entries
        return [e for e in self.entries if e.round_number == round_number]

    def since(self, index: int) -> list[LogEntry]:
        """Entries appended after the first ``index`` ones."""
        return self.entries[index:]

    def clear(self) -> None:
        self.entries.clear()
