import logging

from src.extension import commands
from src.extension.registry import CommandRegistry, ExtensionContext, command_id


logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "Sorry, something went wrong while talking to the chat service."

COMMANDS = {
    "setApiKey": commands.set_api_key,
    "commentSelectedCode": commands.comment_selected_code,
    "describeSelectedCode": commands.describe_selected_code,
    "rewriteSelectedCode": commands.rewrite_selected_code,
    "askCustomQuestion": commands.ask_custom_question,
    "helloWorld": commands.hello_world,
}


def register_commands(registry: CommandRegistry) -> None:
    """Register every editor command and the shared error handler."""

    for name, callback in COMMANDS.items():
        registry.register(command_id(name), callback)

    registry.add_error_handler(handle_error)

    logger.info("Commands registered", extra={"count": len(COMMANDS)})


async def handle_error(identifier: str, context: ExtensionContext) -> None:
    """Log unexpected errors and show a generic message to the user."""

    logger.error(
        "Unhandled exception while running command",
        exc_info=context.error,
        extra={"command": identifier},
    )
    await context.host.show_error_message(GENERIC_ERROR_MESSAGE)
