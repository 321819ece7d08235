"""Editor host for running the commands from a shell.

The "active editor" is a file (or stdin) with an optional line range acting as
the selection, and the side-by-side document is written to an output file or
stdout once its text is replaced.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Tuple

import click

from src.extension.host import Document


logger = logging.getLogger(__name__)


def parse_line_range(value: Optional[str]) -> Optional[Tuple[int, int]]:
    """Parse a ``START-END`` (or single ``LINE``) 1-based inclusive range."""

    if not value:
        return None
    start_str, _, end_str = value.partition("-")
    try:
        start = int(start_str)
        end = int(end_str) if end_str else start
    except ValueError as exc:  # noqa: BLE001
        raise ValueError("Line range must look like START-END, e.g. 10-24") from exc
    if start < 1 or end < start:
        raise ValueError("Line range must be positive and START must not exceed END")
    return start, end


class TerminalHost:
    """EditorHost implementation backed by click prompts and plain files."""

    def __init__(
        self,
        source: str = "",
        line_range: Optional[Tuple[int, int]] = None,
        output_path: Optional[Path] = None,
    ):
        self.source = source
        self.line_range = line_range
        self.output_path = output_path

    @classmethod
    def from_file(
        cls,
        stream,
        lines: Optional[str] = None,
        output_path: Optional[Path] = None,
    ) -> "TerminalHost":
        return cls(source=stream.read(), line_range=parse_line_range(lines), output_path=output_path)

    async def get_selection(self) -> str:
        if self.line_range is None:
            return self.source
        start, end = self.line_range
        lines = self.source.splitlines(keepends=True)
        return "".join(lines[start - 1 : end])

    async def show_information_message(self, message: str) -> None:
        click.echo(message, err=True)

    async def show_error_message(self, message: str) -> None:
        click.secho(message, err=True, fg="red")

    async def show_input_box(
        self, prompt: str, placeholder: Optional[str] = None, password: bool = False
    ) -> Optional[str]:
        label = f"{prompt} ({placeholder})" if placeholder and not password else prompt
        try:
            return click.prompt(label, default="", show_default=False, hide_input=password, err=True)
        except click.Abort:
            return None

    async def open_document(self, content: str, language: Optional[str] = None) -> Document:
        document = Document(text=content, language=language, name=str(self.output_path or "<stdout>"))
        click.echo(content, err=True)
        return document

    async def replace_document_text(self, document: Document, text: str) -> None:
        document.text = text
        if self.output_path:
            self.output_path.write_text(text, encoding="utf-8")
            logger.info("Document written", extra={"path": str(self.output_path)})
        else:
            click.echo(text)
