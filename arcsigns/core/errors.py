"""CLI error handling with actionable hints.

Provides consistent error formatting and common error factory functions
for all arcsigns CLI commands.
"""

from typing import NoReturn

import click


class ArcsignsCliError(click.ClickException):
    """CLI error with actionable hint for users.

    Attributes:
        message: The primary error message.
        hint: Optional actionable suggestion for the user.

    Example:
        raise ArcsignsCliError(
            "Not in an arc working tree",
            hint="Run the command on a file inside an arc checkout",
        )
    """

    def __init__(self, message: str, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint = hint

    def format_message(self) -> str:
        """Format the error message with hint if present."""
        msg = self.message
        if self.hint:
            msg += f"\nHint: {self.hint}"
        return msg


def not_in_repository_error(path: str) -> NoReturn:
    """Raise error when a path is not inside an arc working tree.

    Raises:
        ArcsignsCliError: Always raises with path context.
    """
    raise ArcsignsCliError(
        f"'{path}' is not inside an arc working tree",
        hint="Run the command on a file inside an arc checkout (or outside .arc/)",
    )


def path_not_found_error(path: str) -> NoReturn:
    """Raise error when a file does not exist.

    Raises:
        ArcsignsCliError: Always raises with path context.
    """
    raise ArcsignsCliError(
        f"File '{path}' does not exist",
        hint="Check the path, or run 'arcsigns moved' if it was renamed",
    )
