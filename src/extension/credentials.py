"""Storage and retrieval of the single API credential."""

from __future__ import annotations

import logging
from typing import Optional, Protocol

import keyring
from keyring.errors import PasswordDeleteError

from src.extension.host import EditorHost


logger = logging.getLogger(__name__)

PROJECT_NAME = "chatgpt-coding-with-you"
CREDENTIAL_KEY = f"{PROJECT_NAME}.apiKey"
CREDENTIAL_PROMPT = "Enter your OpenAI API key"
CREDENTIAL_PLACEHOLDER = "sk-..."


class SecretStore(Protocol):
    """Key-value secret storage owned by the host."""

    def get(self, key: str) -> Optional[str]:
        ...

    def store(self, key: str, value: str) -> None:
        ...

    def delete(self, key: str) -> None:
        ...


class KeyringSecretStore:
    """Secret store backed by the operating system keyring.

    Every key lives under one keyring service so the extension's secrets are
    easy to find and remove from the OS credential manager.
    """

    def __init__(self, service_name: str = PROJECT_NAME):
        self.service_name = service_name

    def get(self, key: str) -> Optional[str]:
        return keyring.get_password(self.service_name, key)

    def store(self, key: str, value: str) -> None:
        keyring.set_password(self.service_name, key, value)

    def delete(self, key: str) -> None:
        try:
            keyring.delete_password(self.service_name, key)
        except PasswordDeleteError:
            logger.debug("No stored secret to delete", extra={"key": key})


async def get_credential(host: EditorHost, secrets: SecretStore, reset: bool = False) -> str:
    """Return the stored credential, prompting for one when absent or on reset.

    A dismissed or blank prompt returns ``""`` and leaves the store untouched,
    so the following request goes out with an empty bearer token and the
    provider's rejection becomes the response text.
    """

    if not reset:
        stored = secrets.get(CREDENTIAL_KEY)
        if stored:
            return stored

    logger.info("Prompting for API credential", extra={"reset": reset})
    answer = await host.show_input_box(CREDENTIAL_PROMPT, placeholder=CREDENTIAL_PLACEHOLDER, password=True)
    credential = (answer or "").strip()
    if not credential:
        logger.warning("No API credential entered")
        return ""

    secrets.store(CREDENTIAL_KEY, credential)
    logger.info("API credential stored")
    return credential
