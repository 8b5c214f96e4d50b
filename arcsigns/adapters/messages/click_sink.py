"""MessageSink writing to the terminal with click."""

import click


class ClickMessageSink:
    """Echo messages to stderr so they do not mix with command output."""

    def __init__(self, err: bool = True) -> None:
        self.err = err

    def notify(self, message: str) -> None:
        click.echo(message, err=self.err)
