"""User-visible message port.

Used for notices the user should see directly (as opposed to diagnostics,
which go through logging), such as an unsupported operation being invoked.
"""

from typing import Protocol


class MessageSink(Protocol):
    """Protocol for delivering short messages to the user."""

    def notify(self, message: str) -> None:
        """Show a message to the user.

        Args:
            message: Text to display.
        """
        ...
