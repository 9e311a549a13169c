"""Protocol for one-line user-visible notices."""

from typing import Protocol


class NoticeSinkProtocol(Protocol):
    """Shows a transient one-line message to the user."""

    def show_notice(self, message: str) -> None:
        """Show a transient notice."""
        ...
