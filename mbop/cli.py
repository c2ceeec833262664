"""Command-line interface: sail a crew, ask for a completion, list models."""

from __future__ import annotations

import logging
import platform
import sys
from typing import Any, NoReturn

import click
import requests

from .llm import CompletionHistory, ConfigError, Message, OpenAIClient
from .sail import DEFAULT_MODEL, SailManager
from .util import print_banner, setup_logging

log = logging.getLogger(__name__)

VERSION = "0.1.0"
GIT_COMMIT = ""
BUILD_DATE = ""
PYTHON_VERSION = platform.python_version()
OS_ARCH = f"{platform.system().lower()} {platform.machine().lower()}"

_RULE = "-" * 33

_FAILURES = (ConfigError, OSError, LookupError, ValueError, requests.RequestException)


def version_text() -> str:
    """Return the build and version summary shown by the version command."""
    return (
        f"{_RULE}\n"
        f"Version: {VERSION}\n"
        f"OS Arch: {OS_ARCH}\n"
        f"Python Version: {PYTHON_VERSION}\n"
        f"Git Commit: {GIT_COMMIT}\n"
        f"Build Date: {BUILD_DATE}\n"
        f"{_RULE}"
    )


def _fatal(message: str, exc: BaseException) -> NoReturn:
    log.critical("%s: %s", message, exc)
    raise click.ClickException(f"{message}: {exc}")


class _AliasedGroup(click.Group):
    """A group whose commands may also be called by short aliases."""

    def __init__(self, *args: Any, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.aliases: dict[str, str] = {}

    def add_aliased(self, command: click.Command, *aliases: str) -> None:
        self.add_command(command)
        for alias in aliases:
            self.aliases[alias] = command.name

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        return super().get_command(ctx, self.aliases.get(cmd_name, cmd_name))

    def resolve_command(self, ctx: click.Context, args: list[str]):
        _, command, rest = super().resolve_command(ctx, args)
        return (command.name if command else None), command, rest


def _connected_client() -> OpenAIClient:
    try:
        client = OpenAIClient.from_env()
    except ConfigError as exc:
        _fatal("failed to connect to openai api", exc)
    try:
        client.test_connection()
    except _FAILURES as exc:
        _fatal("failed to connect to openai api", exc)
    log.info("connected to openai api")
    return client


@click.command("sail", short_help="Engage crew and attempt to solve a task")
@click.option("--debug", "-d", is_flag=True, default=False, help="enable debug logging")
@click.option("--model", "-m", default=DEFAULT_MODEL, show_default=True,
              help="model to use for generation")
@click.option("--task", "-t", required=True, help="task to work towards")
@click.option("--crewDir", "-c", "crew_dir", default="./crew", show_default=True,
              help="directory of the crew definitions")
def _sail(debug: bool, model: str, task: str, crew_dir: str) -> None:
    try:
        manager = SailManager(task, crew_dir, model=model, debug=debug)
    except _FAILURES as exc:
        _fatal("failed to initialize sail manager", exc)
    try:
        manager.run()
    except _FAILURES as exc:
        _fatal("failed to run sail", exc)


@click.command("chatCompletion", short_help="Attempt a chat completion")
@click.option("--model", "-m", default=DEFAULT_MODEL, show_default=True,
              help="model to use for generation")
@click.option("--query", "-q", required=True, help="query to use for generation")
def _chat_completion(model: str, query: str) -> None:
    client = _connected_client()
    log.info("attempting to get completion with model %s for query %s", model, query)
    history = CompletionHistory(model=model, messages=[Message(role="user", content=query)])
    try:
        content, _ = client.get_completion(history)
    except _FAILURES as exc:
        _fatal("failed to retrieve chat completion", exc)
    log.info("chat completion for %s: %s", query, content)


@click.command("retrieveModels", short_help="Retrieve models from OpenAI")
def _retrieve_models() -> None:
    client = _connected_client()
    log.info("attempting to get models from openai")
    try:
        models = client.get_models()
    except _FAILURES as exc:
        _fatal("failed to retrieve models", exc)
    for model in models.data:
        log.info("name=%s object=%s owned_by=%s", model.id, model.object, model.owned_by)


@click.command("quit", short_help="A command the quit the utility when running in interactive mode")
@click.pass_context
def _quit(ctx: click.Context) -> None:
    ctx.exit(0)


@click.command("version", short_help="Show current build and version information")
def _version() -> None:
    click.echo(version_text(), nl=False)


def build_cli() -> click.Group:
    """Build the root command with all subcommands and their aliases."""
    root = _AliasedGroup(name="mbop", help="Merry Band of Pirates")
    root.add_aliased(_sail, "s")
    root.add_aliased(_chat_completion, "cc")
    root.add_aliased(_retrieve_models, "rm")
    root.add_aliased(_quit, "exit", "bye", "x", "q")
    root.add_aliased(_version, "v")
    return root


def main(argv: list[str] | None = None) -> int:
    """Set up logging, print the banner and run the command line; return the exit code."""
    setup_logging("mbop")
    print_banner()
    try:
        result = build_cli().main(args=argv, prog_name="mbop", standalone_mode=False)
    except click.ClickException as exc:
        exc.show()
        log.error("run error occurred: %s", exc.format_message())
        return exc.exit_code
    except click.Abort:
        log.error("run error occurred: aborted")
        return 1
    return result if isinstance(result, int) else 0


if __name__ == "__main__":
    sys.exit(main())