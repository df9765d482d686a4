"""
hostlink CLI - run commands, move files and gather facts on this host.

Commands:
    hostlink exec <command>         - Run a shell command
    hostlink facts                  - Show host facts as JSON
    hostlink put <source> <dest>    - Write a local file through the connector
    hostlink fetch <source> [dest]  - Read a file through the connector
    hostlink version                - Show version
"""

import sys
from typing import Optional

import click
from rich.console import Console

from hostlink.config import Settings
from hostlink.connector import LocalConnector
from hostlink.context import Context
from hostlink.errors import CommandCancelled, CommandError, ConnectorError
from hostlink.logging import set_level, setup_logging


class CliState:
    """Objects shared by all subcommands."""

    def __init__(self, timeout: Optional[float]):
        self.timeout = timeout
        self.connector = LocalConnector()

    def context(self) -> Context:
        """New context honoring --timeout."""
        ctx = Context.background()
        if self.timeout:
            ctx = ctx.with_timeout(self.timeout)
        return ctx


@click.group(invoke_without_command=True)
@click.option('--log-level', default=None, help='Log level (default: $HOSTLINK_LOG_LEVEL or INFO)')
@click.option('--timeout', type=float, default=None,
              help='Deadline in seconds for each operation (default: $HOSTLINK_COMMAND_TIMEOUT)')
@click.pass_context
def cli(ctx, log_level: Optional[str], timeout: Optional[float]):
    """hostlink - run commands and gather facts through a connector."""
    try:
        settings = Settings.from_env()
    except ValueError as e:
        raise click.BadParameter(str(e))

    level = log_level or settings.log_level
    setup_logging(level)
    set_level(level)

    ctx.obj = CliState(timeout if timeout is not None else settings.command_timeout)

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@cli.command("exec")
@click.argument('command')
@click.pass_obj
def exec_command(state: CliState, command: str):
    """
    Run a shell command and print its combined output.

    Example:
        hostlink exec "uname -a"
        hostlink --timeout 5 exec "sleep 10"
    """
    with state.connector as connector:
        try:
            output = connector.execute_command(state.context(), command)
        except CommandError as e:
            _echo_output(e.output)
            click.secho(f"Error: {e}", fg="red", err=True)
            if isinstance(e, CommandCancelled):
                sys.exit(130)
            sys.exit(_exit_status(e.exit_code))
        except KeyboardInterrupt:
            click.secho("Interrupted", fg="red", err=True)
            sys.exit(130)

    _echo_output(output)


@cli.command()
@click.option('--section', type=click.Choice(['os', 'process']),
              help='Only show one section of the facts')
@click.pass_obj
def facts(state: CliState, section: Optional[str]):
    """
    Show facts about this host as JSON.

    Example:
        hostlink facts
        hostlink facts --section os
    """
    with state.connector as connector:
        try:
            document = connector.info(state.context())
        except ConnectorError as e:
            click.secho(f"Error: {e}", fg="red", err=True)
            sys.exit(1)

    if document is None:
        click.secho("No facts available on this platform.", fg="yellow", err=True)
        return

    if section:
        document = document[section]
    console = Console()
    console.print_json(data=document, sort_keys=True, highlight=console.is_terminal)


@cli.command()
@click.argument('source', type=click.Path(exists=True, dir_okay=False))
@click.argument('dest')
@click.option('--mode', default='0644', help='Permission bits in octal (default: 0644)')
@click.pass_obj
def put(state: CliState, source: str, dest: str, mode: str):
    """
    Write SOURCE to DEST, creating parent directories as needed.

    Example:
        hostlink put ./motd /etc/motd --mode 0644
    """
    try:
        file_mode = int(mode, 8)
    except ValueError:
        raise click.BadParameter(f"not an octal mode: {mode}", param_hint="--mode")

    with open(source, "rb") as f:
        content = f.read()

    with state.connector as connector:
        try:
            connector.put_file(state.context(), content, dest, file_mode)
        except ConnectorError as e:
            click.secho(f"Error: {e}", fg="red", err=True)
            sys.exit(1)

    click.secho(f"Wrote {len(content)} bytes to {dest}", fg="green", err=True)


@cli.command()
@click.argument('source')
@click.argument('dest', required=False)
@click.pass_obj
def fetch(state: CliState, source: str, dest: Optional[str]):
    """
    Copy SOURCE to DEST, or to stdout when DEST is omitted.

    Example:
        hostlink fetch /etc/os-release
        hostlink fetch /proc/meminfo ./meminfo.txt
    """
    with state.connector as connector:
        try:
            if dest:
                with open(dest, "wb") as out:
                    connector.fetch_file(state.context(), source, out)
            else:
                out = click.get_binary_stream("stdout")
                connector.fetch_file(state.context(), source, out)
                out.flush()
        except ConnectorError as e:
            click.secho(f"Error: {e}", fg="red", err=True)
            sys.exit(1)


@cli.command()
def version():
    """Show hostlink version."""
    from hostlink import __version__
    click.echo(f"hostlink version {__version__}")


def _exit_status(exit_code: Optional[int]) -> int:
    """CLI exit status for a failed command (128 + signal when killed)."""
    if exit_code is None or exit_code == 0:
        return 1
    if exit_code < 0:
        return 128 - exit_code
    return exit_code


def _echo_output(output: bytes) -> None:
    """Print command output as text."""
    if output:
        click.echo(output.decode("utf-8", errors="replace"), nl=False)


def main():
    """Entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
