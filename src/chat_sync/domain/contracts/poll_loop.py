"""Protocol for a generation-tagged polling loop."""

from typing import Any, Protocol


class PollLoopProtocol(Protocol):
    """A named loop polling one scope at a fixed interval."""

    @property
    def generation(self) -> int:
        """Counter bumped on every restart or stop."""
        ...

    @property
    def scope(self) -> Any:
        """Scope the loop currently polls, or None when stopped."""
        ...

    def start(self, scope: Any) -> None:
        """Start polling a scope, restarting if another scope was polled."""
        ...

    def halt(self) -> None:
        """Stop polling without waiting for the loop to wind down."""
        ...

    async def stop(self, *, cancel_in_flight: bool = False) -> None:
        """Stop polling and discard responses still in flight."""
        ...
