"""The Game Master log and narration."""

from .channels import GameMasterLog, LogEntry, Source
from .narrator import Narrator

__all__ = ["GameMasterLog", "LogEntry", "Source", "Narrator"]
