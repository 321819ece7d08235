"""Interface the editor integration provides to the commands."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Protocol


@dataclass
class Document:
    """An untitled document opened beside the active editor."""

    text: str = ""
    language: Optional[str] = None
    name: str = field(default="Untitled")


class EditorHost(Protocol):
    """Editor API surface used by the commands.

    Every method is a coroutine so integrations can bridge to UI threads or RPC
    without blocking the command.
    """

    async def get_selection(self) -> str:
        """Return the highlighted text in the active editor, or ``""``."""

    async def show_information_message(self, message: str) -> None:
        ...

    async def show_error_message(self, message: str) -> None:
        ...

    async def show_input_box(
        self, prompt: str, placeholder: Optional[str] = None, password: bool = False
    ) -> Optional[str]:
        """Ask the user for a line of text; ``None`` means the box was dismissed."""

    async def open_document(self, content: str, language: Optional[str] = None) -> Document:
        """Open a new document beside the active editor holding ``content``."""

    async def replace_document_text(self, document: Document, text: str) -> None:
        """Replace the whole body of ``document``."""
