import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import click
import httpx

from src.config import Config, load_config
from src.extension.ai_client import AIClient
from src.extension.credentials import KeyringSecretStore, SecretStore
from src.extension.handlers import register_commands
from src.extension.host import EditorHost
from src.extension.registry import CommandRegistry, ExtensionContext, command_id
from src.extension.terminal_host import TerminalHost, parse_line_range
from src.logging_config import configure_logging


logger = logging.getLogger(__name__)


@dataclass
class Extension:
    """An activated extension: its registry and the context shared by commands."""

    registry: CommandRegistry
    context: ExtensionContext

    async def execute(self, name: str) -> None:
        await self.registry.execute(command_id(name))


def build_extension(
    host: EditorHost,
    config: Optional[Config] = None,
    secrets: Optional[SecretStore] = None,
    http_client: Optional[httpx.AsyncClient] = None,
) -> Extension:
    """Activate the extension for ``host`` and register its commands."""

    if config is None:
        try:
            config = load_config()
        except ValueError as exc:
            logger.critical("Configuration error: %s", exc)
            raise
    configure_logging(config.log_level, config.timezone, config.log_file)

    ai_client = AIClient.from_config(config)
    context = ExtensionContext(
        host=host,
        secrets=secrets if secrets is not None else KeyringSecretStore(),
        ai_client=ai_client,
        http_client=http_client,
    )
    registry = CommandRegistry(context)
    register_commands(registry)

    logger.info(
        "Extension activated",
        extra={"endpoint": ai_client.endpoint, "model": ai_client.model},
    )
    return Extension(registry=registry, context=context)


def _run(host: EditorHost, name: str) -> None:
    try:
        extension = build_extension(host)
    except ValueError as exc:
        raise click.ClickException(f"Configuration error: {exc}") from exc
    asyncio.run(extension.execute(name))


_file_option = click.option(
    "--file",
    "source",
    type=click.Path(exists=True, dir_okay=False, allow_dash=True),
    default="-",
    show_default=True,
    help="File holding the code; '-' reads stdin.",
)
_lines_option = click.option("--lines", default=None, help="Restrict the selection to START-END (1-based).")
_output_option = click.option(
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write the response here instead of stdout.",
)


def _code_command(name: str, help_text: str, prompts_user: bool = False):
    @click.command(help=help_text)
    @_file_option
    @_lines_option
    @_output_option
    def _command(source: str, lines: Optional[str], output: Optional[Path]) -> None:
        if prompts_user and source == "-":
            raise click.UsageError("This command asks a question on stdin; pass the code with --file.")
        try:
            parse_line_range(lines)
        except ValueError as exc:
            raise click.BadParameter(str(exc), param_hint="--lines") from exc
        with click.open_file(source, "r", encoding="utf-8") as stream:
            host = TerminalHost.from_file(stream, lines=lines, output_path=output)
        _run(host, name)

    return _command


@click.group()
@click.version_option(package_name="chatgpt-coding-with-you")
def cli() -> None:
    """Send selected code to a chat-completion API and read the answer."""


@cli.command("set-api-key")
def set_api_key_command() -> None:
    """Store or replace the API key in the system keyring."""

    _run(TerminalHost(), "setApiKey")


@cli.command("hello")
def hello_command() -> None:
    """Check that the extension is installed."""

    _run(TerminalHost(), "helloWorld")


cli.add_command(_code_command("commentSelectedCode", "Add comments to the selected code."), "comment")
cli.add_command(_code_command("describeSelectedCode", "Explain what the selected code does."), "describe")
cli.add_command(_code_command("rewriteSelectedCode", "Rewrite the selected code idiomatically."), "rewrite")
cli.add_command(
    _code_command(
        "askCustomQuestion",
        "Ask your own question about the selected code (pass --file so the question can be typed).",
        prompts_user=True,
    ),
    "ask",
)


def main() -> None:
    """Entry point for the ``coding-with-you`` script."""

    cli()


if __name__ == "__main__":
    main()
