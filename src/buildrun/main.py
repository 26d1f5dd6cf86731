"""CLI entrypoint for buildrun."""

from pathlib import Path

import rich_click as click

from buildrun import __version__
from buildrun.config import Settings
from buildrun.console import Console
from buildrun.download import Downloader
from buildrun.errors import BuildRunError
from buildrun.runner import TaskRunner

click.rich_click.USE_MARKDOWN = True


@click.group()
@click.version_option(version=__version__, prog_name="buildrun")
@click.option("--debug/--no-debug", default=None, help="Emit detailed diagnostic lines.")
@click.option("--quiet/--no-quiet", default=None, help="Suppress all console output.")
@click.pass_context
def buildrun(ctx: click.Context, debug: bool | None, quiet: bool | None) -> None:
    """Run build commands and fetch cached resources."""

    try:
        settings = Settings.from_env()
        settings.validate()
    except ValueError as error:
        raise click.ClickException(str(error)) from error
    if debug is not None:
        settings.debug = debug
    if quiet is not None:
        settings.quiet = quiet
    ctx.obj = settings


@buildrun.command(
    "exec",
    context_settings={"ignore_unknown_options": True, "allow_interspersed_args": False},
)
@click.argument("tool")
@click.argument("arguments", nargs=-1, type=click.UNPROCESSED)
@click.pass_obj
def exec_tool(settings: Settings, tool: str, arguments: tuple[str, ...]) -> None:
    """Run one external tool and fail unless it exits with status 0."""

    runner = TaskRunner.from_settings(settings, _console(settings))
    try:
        runner.run_executable(tool, *arguments)
    except BuildRunError as error:
        raise click.ClickException(error.message) from error


@buildrun.command("fetch")
@click.argument("uri")
@click.option(
    "--cache-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory holding cached resources.",
)
@click.option("--offline/--online", default=None, help="Forbid any network access.")
@click.pass_obj
def fetch(settings: Settings, uri: str, cache_dir: Path | None, offline: bool | None) -> None:
    """Download URI into the cache unless a matching copy is already present."""

    if offline is not None:
        settings.offline = offline
    try:
        with Downloader.from_settings(settings, _console(settings)) as downloader:
            path = downloader.fetch(uri, cache_dir or settings.cache_dir)
    except (BuildRunError, ValueError) as error:
        raise click.ClickException(str(error)) from error
    click.echo(str(path))


def _console(settings: Settings) -> Console:
    return Console.from_settings(settings, click.echo)


if __name__ == "__main__":  # pragma: no cover
    buildrun()
