"""arcsigns CLI entrypoint.

Command-line front end for inspecting a file through the arc command layer:
repository state, stored content, blame and renames.
"""

from __future__ import annotations

import asyncio
import functools
import logging
import sys
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any, TypeVar

import click
import tomli_w

from arcsigns.core.errors import (
    ArcsignsCliError,
    not_in_repository_error,
    path_not_found_error,
)
from arcsigns.domain.exceptions import ArcsignsDomainError

if TYPE_CHECKING:
    from arcsigns.adapters.factory import ArcsignsFactory
    from arcsigns.domain.config import ArcsignsConfig
    from arcsigns.domain.entities import BlameRecord
    from arcsigns.ports.vcs import VersionedFile

T = TypeVar("T")

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: str, verbose: bool = False) -> None:
    """Send diagnostics to stderr at the configured level."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else getattr(logging, level.upper()),
        format=LOG_FORMAT,
        stream=sys.stderr,
    )


def handle_cli_errors(command_name: str):
    """Decorator converting domain and unexpected errors to CLI errors.

    Args:
        command_name: Name of the command for error messages.
    """

    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except ArcsignsCliError:
                raise
            except ArcsignsDomainError as e:
                raise ArcsignsCliError(e.message, hint=e.hint) from e
            except Exception as e:
                ctx = click.get_current_context()
                if ctx.obj.get("verbose", False):
                    import traceback

                    traceback.print_exc()
                raise ArcsignsCliError(
                    f"Unexpected error in {command_name}: {e}",
                    hint="Run with --verbose for more details",
                ) from e

        return wrapper

    return decorator


def _load_config(config_path: Path | None) -> ArcsignsConfig:
    from arcsigns.adapters.config.toml_config_provider import TomlConfigProvider

    return TomlConfigProvider().load(Path.cwd(), config_path)


def _get_factory(ctx: click.Context) -> ArcsignsFactory:
    """Return the factory for this invocation, creating it on first use."""
    factory = ctx.obj.get("factory")
    if factory is None:
        from arcsigns.adapters.factory import ArcsignsFactory

        factory = ArcsignsFactory(ctx.obj["config"])
        ctx.obj["factory"] = factory
    return factory


def _run(coro_fn: Callable[..., Awaitable[T]], *args: Any) -> T:
    return asyncio.run(coro_fn(*args))


async def _open_file(
    factory: ArcsignsFactory, path: Path, must_exist: bool = True
) -> VersionedFile:
    if must_exist and not path.exists():
        path_not_found_error(str(path))
    file = await factory.open_file(path)
    if file is None:
        not_in_repository_error(str(path))
    return file


def _format_blame(record: BlameRecord) -> str:
    if not record.is_committed:
        return f"{record.author} {record.author_contact}"
    when = ""
    if record.author_time is not None:
        when = datetime.fromtimestamp(record.author_time, UTC).strftime("%Y-%m-%d")
    return f"{record.abbreviated_commit_id} ({record.author} {when}) {record.summary}"


@click.group()
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose output.",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file to use instead of the nearest .arcsigns.toml.",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, config_path: Path | None) -> None:
    """arcsigns - file state, history and blame from arc."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    if "config" not in ctx.obj:
        ctx.obj["config"] = _load_config(config_path)
    configure_logging(ctx.obj["config"].log.level, verbose)


@cli.command()
@click.argument("path", type=click.Path(path_type=Path))
@click.pass_context
@handle_cli_errors("info")
def info(ctx: click.Context, path: Path) -> None:
    """Show repository and entry information for PATH."""
    factory = _get_factory(ctx)

    async def run() -> VersionedFile:
        return await _open_file(factory, path)

    file = _run(run)
    repo = file.repo
    click.echo(f"Root:      {repo.root_path}")
    click.echo(f"Arc dir:   {repo.metadata_path}")
    click.echo(f"Branch:    {repo.branch if repo.branch is not None else '(unknown)'}")
    click.echo(f"Detached:  {'yes' if repo.detached else 'no'}")
    click.echo(f"User:      {repo.username or '(unknown)'}")
    click.echo(f"Path:      {file.relpath or '(unresolved)'}")
    click.echo(f"Hash:      {file.content_hash or '(none)'}")
    click.echo(f"Mode:      {file.mode_bits}")


@cli.command()
@click.argument(
    "directory",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=".",
)
@click.pass_context
@handle_cli_errors("changed")
def changed(ctx: click.Context, directory: Path) -> None:
    """List files with unstaged modifications."""
    factory = _get_factory(ctx)

    async def run() -> list[str]:
        repo = await factory.cache.get(directory.resolve())
        if repo is None:
            not_in_repository_error(str(directory))
        return await repo.files_changed()

    for relpath in _run(run):
        click.echo(relpath)


@cli.command()
@click.argument("path", type=click.Path(path_type=Path))
@click.option("--revision", "-r", default="HEAD", show_default=True, help="Revision to read.")
@click.pass_context
@handle_cli_errors("show")
def show(ctx: click.Context, path: Path, revision: str) -> None:
    """Print PATH as stored at a revision."""
    factory = _get_factory(ctx)

    async def run() -> tuple[list[str], str | None]:
        file = await _open_file(factory, path)
        return await file.get_show_text(revision)

    lines, stderr = _run(run)
    if not lines and stderr:
        raise ArcsignsCliError(stderr.strip(), hint="Check that the revision exists")
    for line in lines:
        click.echo(line)


@cli.command()
@click.argument("path", type=click.Path(path_type=Path))
@click.argument("line", type=click.IntRange(min=1))
@click.option(
    "--ignore-whitespace",
    "-w",
    is_flag=True,
    default=None,
    help="Ignore whitespace changes (default from [blame] config).",
)
@click.pass_context
@handle_cli_errors("blame")
def blame(ctx: click.Context, path: Path, line: int, ignore_whitespace: bool | None) -> None:
    """Show who last changed LINE of PATH."""
    factory = _get_factory(ctx)
    if ignore_whitespace is None:
        ignore_whitespace = ctx.obj["config"].blame.ignore_whitespace

    async def run() -> BlameRecord:
        file = await _open_file(factory, path)
        return await file.run_blame(line, ignore_whitespace)

    click.echo(_format_blame(_run(run)))


@cli.command()
@click.argument("path", type=click.Path(path_type=Path))
@click.argument("commit")
@click.pass_context
@handle_cli_errors("body")
def body(ctx: click.Context, path: Path, commit: str) -> None:
    """Print the message of COMMIT."""
    factory = _get_factory(ctx)

    async def run() -> list[str]:
        file = await _open_file(factory, path)
        return await file.get_commit_body(commit)

    for line in _run(run):
        click.echo(line)


@cli.command()
@click.argument("path", type=click.Path(path_type=Path))
@click.pass_context
@handle_cli_errors("moved")
def moved(ctx: click.Context, path: Path) -> None:
    """Report where PATH moved to if a rename is staged."""
    factory = _get_factory(ctx)

    async def run() -> str | None:
        file = await _open_file(factory, path, must_exist=False)
        return await file.has_moved()

    new_relpath = _run(run)
    if new_relpath is None:
        click.echo("Not moved")
    else:
        click.echo(new_relpath)


@cli.command()
@click.argument("path", type=click.Path(path_type=Path))
@click.pass_context
@handle_cli_errors("unstage")
def unstage(ctx: click.Context, path: Path) -> None:
    """Remove PATH from the staged set."""
    factory = _get_factory(ctx)

    async def run() -> None:
        file = await _open_file(factory, path, must_exist=False)
        await file.unstage()

    _run(run)
    click.echo(f"Unstaged {path}")


@cli.command()
@click.pass_context
@handle_cli_errors("version")
def version(ctx: click.Context) -> None:
    """Show arcsigns and backend versions."""
    from arcsigns.version import __version__

    arc_version = _run(_get_factory(ctx).detect_version)
    click.echo(f"arcsigns {__version__}")
    click.echo(f"arc {arc_version.major}")


@cli.group()
def config() -> None:
    """Inspect and create configuration files."""


@config.command("show")
@click.option(
    "--global", "-g", "show_global", is_flag=True, help="Show only the global config file"
)
@click.pass_context
@handle_cli_errors("config show")
def config_show(ctx: click.Context, show_global: bool) -> None:
    """Print the effective configuration as TOML.

    With --global, print only what the global config file sets on top of the
    defaults.
    """
    from arcsigns.shared.config_io import (
        config_to_data,
        get_global_config_path,
        load_config,
    )

    global_path = get_global_config_path()
    click.echo(f"# Global config: {global_path}")
    if show_global:
        if not global_path.exists():
            raise ArcsignsCliError(
                f"No global config at {global_path}",
                hint="Use 'arcsigns config init --global' to create one",
            )
        try:
            effective = load_config(global_path)
        except ValueError as e:
            raise ArcsignsCliError(
                f"Invalid global config: {e}",
                hint=f"Fix or remove {global_path}",
            ) from e
    else:
        effective = ctx.obj["config"]
    click.echo(tomli_w.dumps(config_to_data(effective)), nl=False)


@config.command("init")
@click.option(
    "--global", "-g", "init_global", is_flag=True, help="Write the global config file"
)
@click.option(
    "--force",
    "-f",
    is_flag=True,
    help="Overwrite an existing config file.",
)
@handle_cli_errors("config init")
def config_init(init_global: bool, force: bool) -> None:
    """Write a config file holding the default settings.

    Writes .arcsigns.toml in the current directory, or the global config
    file with --global.
    """
    from arcsigns.domain.config import ArcsignsConfig
    from arcsigns.shared.config_io import (
        LOCAL_CONFIG_NAME,
        get_global_config_path,
        save_config,
    )

    path = get_global_config_path() if init_global else Path.cwd() / LOCAL_CONFIG_NAME
    if path.exists() and not force:
        raise ArcsignsCliError(
            f"Config already exists at {path}",
            hint="Use --force to overwrite it",
        )
    save_config(ArcsignsConfig.default(), path)
    click.echo(f"Wrote {path}")

if __name__ == "__main__":
    cli()
