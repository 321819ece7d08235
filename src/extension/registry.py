"""Command registration and dispatch for the editor integration."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, List, Optional

import httpx

from src.extension.ai_client import AIClient
from src.extension.credentials import PROJECT_NAME, SecretStore
from src.extension.host import EditorHost


logger = logging.getLogger(__name__)


@dataclass
class ExtensionContext:
    """Everything a command callback needs, shared across invocations."""

    host: EditorHost
    secrets: SecretStore
    ai_client: AIClient
    http_client: Optional[httpx.AsyncClient] = None
    error: Optional[BaseException] = None


CommandCallback = Callable[[ExtensionContext], Awaitable[None]]
ErrorHandler = Callable[[str, ExtensionContext], Awaitable[None]]


def command_id(name: str) -> str:
    """Namespace a command name with the project name."""

    return f"{PROJECT_NAME}.{name}"


class CommandRegistry:
    """Maps namespaced command identifiers to async callbacks."""

    def __init__(self, context: ExtensionContext):
        self.context = context
        self._commands: Dict[str, CommandCallback] = {}
        self._error_handlers: List[ErrorHandler] = []

    @property
    def command_ids(self) -> List[str]:
        return list(self._commands)

    def register(self, identifier: str, callback: CommandCallback) -> None:
        if identifier in self._commands:
            raise ValueError(f"Command already registered: {identifier}")
        self._commands[identifier] = callback

    def add_error_handler(self, handler: ErrorHandler) -> None:
        self._error_handlers.append(handler)

    async def execute(self, identifier: str) -> None:
        """Run a registered command, routing failures to the error handlers.

        Unknown identifiers raise ``KeyError``. Exceptions raised by the
        command are logged and handed to the error handlers; they are re-raised
        only when no handler is registered.
        """

        callback = self._commands[identifier]
        logger.info("Executing command", extra={"command": identifier})
        try:
            await callback(self.context)
        except Exception as exc:
            self.context.error = exc
            if not self._error_handlers:
                raise
            for handler in self._error_handlers:
                await handler(identifier, self.context)
        finally:
            self.context.error = None
