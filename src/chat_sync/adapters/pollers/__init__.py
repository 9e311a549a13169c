"""Pollers."""

from chat_sync.adapters.pollers.poll_loop import PollLoop
from chat_sync.adapters.pollers.poll_scheduler import LoopDefinition, LoopName, PollScheduler

__all__ = [
    "LoopDefinition",
    "LoopName",
    "PollLoop",
    "PollScheduler",
]
