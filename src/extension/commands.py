import logging
from typing import Optional

from src.extension import prompts
from src.extension.completion import request_completion
from src.extension.credentials import get_credential
from src.extension.registry import ExtensionContext


logger = logging.getLogger(__name__)

NO_SELECTION_MESSAGE = "No code selected. Select some code and try again."
PLACEHOLDER_TEXT = "Waiting for response..."
QUESTION_PROMPT = "What would you like to ask about the selected code?"
QUESTION_PLACEHOLDER = "e.g. Why does this loop never terminate?"
HELLO_MESSAGE = "Hello World from ChatGPT Coding With You!"


async def hello_world(context: ExtensionContext) -> None:
    """Show a greeting; handy to confirm the extension is active."""

    logger.info("Handling helloWorld command")
    await context.host.show_information_message(HELLO_MESSAGE)


async def set_api_key(context: ExtensionContext) -> None:
    """Prompt for a new API key, replacing any stored value."""

    logger.info("Handling setApiKey command")
    credential = await get_credential(context.host, context.secrets, reset=True)
    if credential:
        await context.host.show_information_message("API key saved.")


async def comment_selected_code(context: ExtensionContext) -> None:
    """Ask the model to comment the selected code."""

    logger.info("Handling commentSelectedCode command")
    await _run_code_command(context, prompts.COMMENT_INSTRUCTION)


async def describe_selected_code(context: ExtensionContext) -> None:
    """Ask the model to describe the selected code."""

    logger.info("Handling describeSelectedCode command")
    await _run_code_command(context, prompts.DESCRIBE_INSTRUCTION)


async def rewrite_selected_code(context: ExtensionContext) -> None:
    """Ask the model to rewrite the selected code."""

    logger.info("Handling rewriteSelectedCode command")
    await _run_code_command(context, prompts.REWRITE_INSTRUCTION)


async def ask_custom_question(context: ExtensionContext) -> None:
    """Ask a free-form question about the selected code."""

    logger.info("Handling askCustomQuestion command")
    selection = await _require_selection(context)
    if selection is None:
        return

    answer = await context.host.show_input_box(QUESTION_PROMPT, placeholder=QUESTION_PLACEHOLDER)
    question = (answer or "").strip()
    if not question:
        logger.info("Custom question dismissed")
        return

    await _send_query(context, prompts.build_question_query(question, selection))


async def _run_code_command(context: ExtensionContext, instruction: str) -> None:
    selection = await _require_selection(context)
    if selection is None:
        return
    await _send_query(context, prompts.build_query(instruction, selection))


async def _require_selection(context: ExtensionContext) -> Optional[str]:
    """Return the current selection, or report an error and return None."""

    selection = await context.host.get_selection()
    if not selection or not selection.strip():
        logger.info("Command aborted: empty selection")
        await context.host.show_error_message(NO_SELECTION_MESSAGE)
        return None
    return selection


async def _send_query(context: ExtensionContext, query: str) -> None:
    """Send ``query`` and put the completion into a new side-by-side document."""

    credential = await get_credential(context.host, context.secrets)
    document = await context.host.open_document(PLACEHOLDER_TEXT, language="markdown")
    completion = await request_completion(
        context.ai_client,
        query,
        credential,
        http_client=context.http_client,
    )
    await context.host.replace_document_text(document, completion)
