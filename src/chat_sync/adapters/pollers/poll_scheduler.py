"""Poll scheduler: the fixed roster of independently timed polling loops."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from chat_sync.adapters.pollers.poll_loop import Fetcher, Handler, PollLoop

logger = logging.getLogger(__name__)


class LoopName(StrEnum):
    """The polling loops of a client."""

    SERVERS = "servers"
    CHANNEL_MESSAGES = "channel_messages"
    DIRECT_CONVERSATIONS = "direct_conversations"
    DIRECT_MESSAGES = "direct_messages"
    VOICE_PRESENCE = "voice_presence"
    MODERATION_COMMANDS = "moderation_commands"


@dataclass(frozen=True)
class LoopDefinition:
    """How one loop fetches and applies its snapshots."""

    name: LoopName
    interval_seconds: float
    fetch: Fetcher[Any, Any]
    apply: Handler[Any, Any]
    on_stale: Handler[Any, Any] | None = None


class PollScheduler:
    """Owns one PollLoop per LoopName; loops never wait for each other."""

    def __init__(self, definitions: Iterable[LoopDefinition]) -> None:
        """Create the loops.

        Raises:
            ValueError: If the definitions do not cover every LoopName exactly once.
        """
        self._loops: dict[LoopName, PollLoop[Any, Any]] = {}
        for definition in definitions:
            if definition.name in self._loops:
                raise ValueError(f"Duplicate loop definition: {definition.name}")
            self._loops[definition.name] = PollLoop(
                definition.name.value,
                definition.interval_seconds,
                definition.fetch,
                definition.apply,
                definition.on_stale,
            )
        missing = set(LoopName) - set(self._loops)
        if missing:
            raise ValueError(f"Missing loop definitions: {sorted(missing)}")

    def loop(self, name: LoopName) -> PollLoop[Any, Any]:
        return self._loops[name]

    def generation(self, name: LoopName) -> int:
        return self._loops[name].generation

    def start(self, name: LoopName, scope: Any) -> None:
        """Start a loop for a scope (no-op if it already polls that scope)."""
        self._loops[name].start(scope)

    def halt(self, name: LoopName) -> None:
        """Stop a loop whose governing context no longer applies."""
        self._loops[name].halt()

    def ensure(self, name: LoopName, scope: Any | None) -> None:
        """Start the loop for a scope, or halt it when the scope is None."""
        if scope is None:
            self.halt(name)
        else:
            self.start(name, scope)

    def running_scopes(self) -> dict[LoopName, Any]:
        return {name: loop.scope for name, loop in self._loops.items() if loop.is_running}

    async def stop_all(self, *, cancel_in_flight: bool = True) -> None:
        """Stop every loop, e.g. on logout."""
        await asyncio.gather(
            *(loop.stop(cancel_in_flight=cancel_in_flight) for loop in self._loops.values())
        )
        logger.info("Stopped all pollers")
