"""Generation-tagged polling loop."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar

from chat_sync.domain.contracts.poll_loop import PollLoopProtocol
from chat_sync.domain.models.errors import ChatApiError

logger = logging.getLogger(__name__)

ScopeT = TypeVar("ScopeT")
ResultT = TypeVar("ResultT")

Fetcher = Callable[[ScopeT], Awaitable[ResultT]]
Handler = Callable[[ScopeT, ResultT], Awaitable[None]]


class PollLoop(PollLoopProtocol, Generic[ScopeT, ResultT]):
    """Polls one scope at a fixed interval and applies the responses.

    Ticks are interval-based: a slow request never delays the schedule. At most
    one request is in flight per loop, across generations; a tick that finds
    the previous request still pending is skipped.

    Every request is tagged with the loop's generation. Restarting or stopping
    the loop bumps the generation, so a response that arrives afterwards is
    not applied to the new scope. Without ``on_stale`` the retired request is
    cancelled on restart. With ``on_stale`` it is left to finish, keeps the
    in-flight slot until it resolves, and the new generation ticks right after.
    """

    def __init__(
        self,
        name: str,
        interval_seconds: float,
        fetch: Fetcher[ScopeT, ResultT],
        apply: Handler[ScopeT, ResultT],
        on_stale: Handler[ScopeT, ResultT] | None = None,
    ) -> None:
        """Initialize the loop.

        Args:
            name: Loop name, used in log messages and task names.
            interval_seconds: Time between two ticks.
            fetch: Issues the request for a scope.
            apply: Applies a response of the current generation.
            on_stale: Receives responses of a retired generation; they are
                dropped when not set.
        """
        self.name = name
        self.interval_seconds = interval_seconds
        self._fetch = fetch
        self._apply = apply
        self._on_stale = on_stale
        self._generation = 0
        self._scope: ScopeT | None = None
        self._task: asyncio.Task | None = None
        self._in_flight: asyncio.Task | None = None
        self.skipped_ticks = 0

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def scope(self) -> ScopeT | None:
        return self._scope

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self, scope: ScopeT) -> None:
        """Start polling a scope; restarts with a new generation if the scope changed."""
        if self.is_running and self._scope == scope:
            return

        self._retire(cancel_in_flight=False)
        self._scope = scope
        generation = self._generation
        self._task = asyncio.create_task(
            self._poll_loop(generation, scope), name=f"poll:{self.name}:{generation}"
        )
        logger.info(f"Started {self.name} poller for {scope} (generation {generation})")

    def halt(self) -> None:
        """Stop polling without waiting for the loop task to finish."""
        if self._scope is None and not self.is_running:
            return
        self._retire(cancel_in_flight=False)
        self._scope = None
        logger.info(f"Stopped {self.name} poller")

    async def stop(self, *, cancel_in_flight: bool = False) -> None:
        """Stop polling and wait for the loop task to end.

        Args:
            cancel_in_flight: Also cancel a request that would otherwise be left
                to finish and reach ``on_stale``.
        """
        task = self._task
        in_flight = self._in_flight
        self._retire(cancel_in_flight=cancel_in_flight)
        self._scope = None

        pending = [task]
        if in_flight is not asyncio.current_task() and (
            cancel_in_flight or self._on_stale is None
        ):
            pending.append(in_flight)
        await asyncio.gather(*(t for t in pending if t is not None), return_exceptions=True)
        logger.info(f"Stopped {self.name} poller")

    def _retire(self, *, cancel_in_flight: bool) -> None:
        self._generation += 1
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

        in_flight = self._in_flight
        if in_flight is None or in_flight.done():
            self._in_flight = None
            return
        if self._on_stale is not None and not cancel_in_flight:
            # Keeps the slot; the next generation starts once it resolves.
            in_flight.add_done_callback(self._resume_after_retired)
            return
        if in_flight is not asyncio.current_task():
            in_flight.cancel()
        self._in_flight = None

    def _resume_after_retired(self, task: asyncio.Task) -> None:
        if self._in_flight is not task:
            return
        self._in_flight = None
        if self.is_running and self._scope is not None:
            self._launch_tick(self._generation, self._scope)

    async def _poll_loop(self, generation: int, scope: ScopeT) -> None:
        """Main polling loop: tick immediately, then every interval."""
        try:
            while True:
                self._launch_tick(generation, scope)
                await asyncio.sleep(self.interval_seconds)
        except asyncio.CancelledError:
            logger.debug(f"{self.name} poller generation {generation} cancelled")
            raise

    def _launch_tick(self, generation: int, scope: ScopeT) -> None:
        if self._in_flight is not None and not self._in_flight.done():
            self.skipped_ticks += 1
            logger.debug(f"Skipping {self.name} tick: previous request still in flight")
            return
        self._in_flight = asyncio.create_task(
            self._tick(generation, scope), name=f"poll-tick:{self.name}:{generation}"
        )

    async def _tick(self, generation: int, scope: ScopeT) -> None:
        try:
            result = await self._fetch(scope)
        except asyncio.CancelledError:
            raise
        except ChatApiError as e:
            details = e.details
            logger.warning(
                f"{self.name} poll failed for {scope}: "
                f"{details.reason} (status: {details.status_code}, error: {e})"
            )
            return
        except Exception as e:
            logger.warning(f"{self.name} poll failed for {scope}: {e}", exc_info=True)
            return

        if generation != self._generation:
            if self._on_stale is None:
                logger.debug(
                    f"Discarding stale {self.name} response for {scope} "
                    f"(generation {generation}, current {self._generation})"
                )
                return
            await self._run_handler(self._on_stale, scope, result)
            return

        await self._run_handler(self._apply, scope, result)

    async def _run_handler(
        self, handler: Handler[ScopeT, ResultT], scope: ScopeT, result: ResultT
    ) -> None:
        try:
            await handler(scope, result)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"{self.name} failed to apply response for {scope}: {e}", exc_info=True)
