"""Tests for PollLoop generation handling."""

import asyncio
import logging

import pytest
from fakes import settle

from chat_sync.adapters.pollers import PollLoop
from chat_sync.domain.models import ChatApiError


class GatedSource:
    """Fetch function whose responses for some scopes wait for a gate."""

    def __init__(self, gated: set[str] | None = None) -> None:
        self.gate = asyncio.Event()
        self.gated = gated or set()
        self.calls: list[str] = []
        self.cancelled: list[str] = []
        self.applied: list[tuple[str, str]] = []
        self.stale: list[tuple[str, str]] = []

    async def fetch(self, scope: str) -> str:
        self.calls.append(scope)
        if scope in self.gated:
            try:
                await self.gate.wait()
            except asyncio.CancelledError:
                self.cancelled.append(scope)
                raise
        return f"result-{scope}"

    async def apply(self, scope: str, result: str) -> None:
        self.applied.append((scope, result))

    async def on_stale(self, scope: str, result: str) -> None:
        self.stale.append((scope, result))


@pytest.mark.asyncio
async def test_first_tick_is_immediate() -> None:
    source = GatedSource()
    loop = PollLoop("test", 60, source.fetch, source.apply)

    loop.start("a")
    await settle()

    assert source.applied == [("a", "result-a")]
    assert loop.scope == "a"
    await loop.stop()
    assert loop.scope is None


@pytest.mark.asyncio
async def test_response_of_previous_scope_is_discarded() -> None:
    """Given a request for scope a in flight, when the loop restarts on b, then a's response is dropped."""
    source = GatedSource(gated={"a"})
    loop = PollLoop("test", 60, source.fetch, source.apply)
    loop.start("a")
    await settle()

    loop.start("b")
    await settle()
    source.gate.set()
    await settle()

    assert source.applied == [("b", "result-b")]
    await loop.stop()


@pytest.mark.asyncio
async def test_stale_response_goes_to_on_stale_handler() -> None:
    source = GatedSource(gated={"a"})
    loop = PollLoop("test", 60, source.fetch, source.apply, on_stale=source.on_stale)
    loop.start("a")
    await settle()

    loop.halt()
    source.gate.set()
    await settle()

    assert source.applied == []
    assert source.stale == [("a", "result-a")]


@pytest.mark.asyncio
async def test_restart_bumps_generation_and_same_scope_does_not() -> None:
    source = GatedSource()
    loop = PollLoop("test", 60, source.fetch, source.apply)

    loop.start("a")
    first = loop.generation
    loop.start("a")
    assert loop.generation == first

    loop.start("b")
    assert loop.generation > first
    await loop.stop()


@pytest.mark.asyncio
async def test_tick_skipped_while_request_in_flight() -> None:
    """Given a slow request, when the interval elapses, then no second request is issued."""
    source = GatedSource(gated={"a"})
    loop = PollLoop("test", 0.01, source.fetch, source.apply)

    loop.start("a")
    await asyncio.sleep(0.05)

    assert source.calls == ["a"]
    assert loop.skipped_ticks >= 1

    source.gate.set()
    await settle()
    assert source.applied == [("a", "result-a")]
    await loop.stop()


class HangingSource:
    """Fetch function that hangs until cancelled and tracks how many run at once."""

    def __init__(self) -> None:
        self.running = 0
        self.peak = 0

    async def fetch(self, scope: str) -> str:
        self.running += 1
        self.peak = max(self.peak, self.running)
        try:
            await asyncio.Event().wait()
        finally:
            self.running -= 1
        return scope

    async def apply(self, scope: str, result: str) -> None:
        pass


@pytest.mark.asyncio
async def test_rapid_restarts_keep_one_request_in_flight() -> None:
    """Given a hung server, when the scope changes 20 times, then one request runs at a time."""
    source = HangingSource()
    loop = PollLoop("test", 60, source.fetch, source.apply)

    for i in range(20):
        loop.start(f"channel-{i}")
        await settle()

    assert source.peak == 1
    assert source.running == 1
    await loop.stop()
    assert source.running == 0


@pytest.mark.asyncio
async def test_restart_cancels_request_of_previous_scope() -> None:
    source = GatedSource(gated={"a"})
    loop = PollLoop("test", 60, source.fetch, source.apply)
    loop.start("a")
    await settle()

    loop.start("b")
    await settle()

    assert source.cancelled == ["a"]
    assert source.calls == ["a", "b"]
    assert source.applied == [("b", "result-b")]
    await loop.stop()


@pytest.mark.asyncio
async def test_stale_request_holds_slot_until_it_resolves() -> None:
    """Given on_stale, when the loop restarts mid-request, then the new scope waits for it."""
    source = GatedSource(gated={"a"})
    loop = PollLoop("test", 60, source.fetch, source.apply, on_stale=source.on_stale)
    loop.start("a")
    await settle()

    for scope in ("b", "c", "d"):
        loop.start(scope)
        await settle()

    assert source.calls == ["a"]
    assert source.cancelled == []

    source.gate.set()
    await settle()

    assert source.stale == [("a", "result-a")]
    assert source.calls == ["a", "d"]
    assert source.applied == [("d", "result-d")]
    await loop.stop()


@pytest.mark.asyncio
async def test_stop_can_cancel_requests_in_flight() -> None:
    source = GatedSource(gated={"a"})
    loop = PollLoop("test", 60, source.fetch, source.apply)
    loop.start("a")
    await settle()

    await loop.stop(cancel_in_flight=True)

    assert source.cancelled == ["a"]
    assert not loop.is_running


@pytest.mark.asyncio
async def test_fetch_error_is_logged_and_polling_continues(
    caplog: pytest.LogCaptureFixture,
) -> None:
    """Given the server answers 503, when a tick fails, then it is logged and the next tick runs."""
    calls: list[str] = []

    async def failing_fetch(scope: str) -> str:
        calls.append(scope)
        raise ChatApiError("unavailable", status_code=503)

    async def apply(scope: str, result: str) -> None:
        raise AssertionError("apply must not be called")

    loop = PollLoop("servers", 0.01, failing_fetch, apply)
    with caplog.at_level(logging.WARNING):
        loop.start("a")
        await asyncio.sleep(0.05)
        await loop.stop()

    assert len(calls) >= 2
    assert "Server unavailable" in caplog.text
    assert "status: 503" in caplog.text


@pytest.mark.asyncio
async def test_apply_error_is_logged(caplog: pytest.LogCaptureFixture) -> None:
    async def fetch(scope: str) -> str:
        return "result"

    async def broken_apply(scope: str, result: str) -> None:
        raise ValueError("bad snapshot")

    loop = PollLoop("servers", 60, fetch, broken_apply)
    with caplog.at_level(logging.ERROR):
        loop.start("a")
        await settle()
        await loop.stop()

    assert "failed to apply response" in caplog.text
    assert "bad snapshot" in caplog.text
