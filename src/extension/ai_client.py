"""Lightweight container for chat-completion provider settings."""

from dataclasses import dataclass

from src.config import DEFAULT_API_ENDPOINT, DEFAULT_MODEL, DEFAULT_REQUEST_TIMEOUT, Config


@dataclass
class AIClient:
    """Holds the endpoint, model and timeout used for every completion request.

    The credential is not kept here: it lives in the host's secret store
    and is read right before each request.
    """

    endpoint: str = DEFAULT_API_ENDPOINT
    model: str = DEFAULT_MODEL
    timeout: float = DEFAULT_REQUEST_TIMEOUT

    @classmethod
    def from_config(cls, config: Config) -> "AIClient":
        return cls(endpoint=config.api_endpoint, model=config.model, timeout=config.request_timeout)
