import asyncio
from unittest.mock import AsyncMock

import pytest

from src.extension import commands, prompts
from src.extension.ai_client import AIClient
from src.extension.credentials import CREDENTIAL_KEY
from src.extension.registry import ExtensionContext
from tests.fakes import FakeEditorHost, InMemorySecretStore


def _make_context(selection="", input_answers=(), stored_key="sk-stored"):
    host = FakeEditorHost(selection=selection, input_answers=input_answers)
    secrets = InMemorySecretStore({CREDENTIAL_KEY: stored_key} if stored_key else {})
    return ExtensionContext(host=host, secrets=secrets, ai_client=AIClient(model="test-model"))


@pytest.fixture
def fake_completion(monkeypatch):
    request = AsyncMock(return_value="completion text")
    monkeypatch.setattr(commands, "request_completion", request)
    return request


@pytest.mark.parametrize(
    "command",
    [
        commands.comment_selected_code,
        commands.describe_selected_code,
        commands.rewrite_selected_code,
        commands.ask_custom_question,
    ],
)
@pytest.mark.parametrize("selection", ["", "   \n\t"])
def test_code_commands_require_selection(fake_completion, command, selection):
    context = _make_context(selection=selection, input_answers=["question"])

    asyncio.run(command(context))

    fake_completion.assert_not_called()
    assert context.host.error_messages == [commands.NO_SELECTION_MESSAGE]
    assert context.host.documents == []
    assert context.host.input_prompts == []


@pytest.mark.parametrize(
    ("command", "instruction"),
    [
        (commands.comment_selected_code, prompts.COMMENT_INSTRUCTION),
        (commands.describe_selected_code, prompts.DESCRIBE_INSTRUCTION),
        (commands.rewrite_selected_code, prompts.REWRITE_INSTRUCTION),
    ],
)
def test_code_commands_send_template_and_replace_document(fake_completion, command, instruction):
    context = _make_context(selection="print('hi')")

    asyncio.run(command(context))

    fake_completion.assert_awaited_once_with(
        context.ai_client,
        prompts.build_query(instruction, "print('hi')"),
        "sk-stored",
        http_client=None,
    )
    document = context.host.documents[0]
    assert document.text == "completion text"
    assert context.host.replacements == [(document, "completion text")]


def test_document_shows_placeholder_until_response(monkeypatch):
    context = _make_context(selection="x = 1")
    seen = []

    async def _request(ai_client, query, credential, http_client=None):
        seen.append(context.host.documents[0].text)
        return "done"

    monkeypatch.setattr(commands, "request_completion", _request)

    asyncio.run(commands.describe_selected_code(context))

    assert seen == [commands.PLACEHOLDER_TEXT]
    assert context.host.documents[0].text == "done"


def test_ask_custom_question_uses_question(fake_completion):
    context = _make_context(selection="x = 1", input_answers=["Why is x one?"])

    asyncio.run(commands.ask_custom_question(context))

    query = fake_completion.await_args.args[1]
    assert query == "Why is x one?\n\nx = 1"


def test_ask_custom_question_dismissed_sends_nothing(fake_completion):
    context = _make_context(selection="x = 1", input_answers=[None])

    asyncio.run(commands.ask_custom_question(context))

    fake_completion.assert_not_called()
    assert context.host.documents == []
    assert context.host.error_messages == []


def test_missing_credential_prompts_before_request(fake_completion):
    context = _make_context(selection="x = 1", input_answers=["sk-typed"], stored_key=None)

    asyncio.run(commands.comment_selected_code(context))

    assert fake_completion.await_args.args[2] == "sk-typed"
    assert context.secrets.get(CREDENTIAL_KEY) == "sk-typed"


def test_declined_credential_still_sends_request(fake_completion):
    context = _make_context(selection="x = 1", input_answers=[None], stored_key=None)

    asyncio.run(commands.comment_selected_code(context))

    assert fake_completion.await_args.args[2] == ""


def test_set_api_key_always_prompts():
    context = _make_context(input_answers=["sk-replacement"], stored_key="sk-old")

    asyncio.run(commands.set_api_key(context))

    assert context.secrets.get(CREDENTIAL_KEY) == "sk-replacement"
    assert context.host.info_messages == ["API key saved."]


def test_set_api_key_dismissed_keeps_old_value():
    context = _make_context(input_answers=[None], stored_key="sk-old")

    asyncio.run(commands.set_api_key(context))

    assert context.secrets.get(CREDENTIAL_KEY) == "sk-old"
    assert context.host.info_messages == []


def test_hello_world_shows_greeting():
    context = _make_context()

    asyncio.run(commands.hello_world(context))

    assert context.host.info_messages == [commands.HELLO_MESSAGE]


def test_request_errors_propagate_to_caller(monkeypatch):
    context = _make_context(selection="x = 1")
    monkeypatch.setattr(commands, "request_completion", AsyncMock(side_effect=RuntimeError("boom")))

    with pytest.raises(RuntimeError):
        asyncio.run(commands.rewrite_selected_code(context))

    assert context.host.documents[0].text == commands.PLACEHOLDER_TEXT
