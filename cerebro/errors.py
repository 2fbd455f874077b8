# cerebro/errors.py
from __future__ import annotations


class CerebroError(Exception):
    """Base class for every error raised by the agent layer."""


class PlayerLookupError(CerebroError):
    """The statistics store could not answer a query."""


class PlayerNotFoundError(PlayerLookupError):
    def __init__(self, player_id: str):
        super().__init__(f"Player lookup failed: no player with id '{player_id}'")
        self.player_id = player_id


class ProviderError(CerebroError):
    """An LLM provider call failed and should not be retried."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class NoAvailableModelsError(ProviderError):
    """Every configured model answered with a retryable status."""


class ModelOutputParseError(CerebroError):
    """Model text could not be turned into the structure we asked for."""

    def __init__(self, message: str, raw: str | None = None):
        super().__init__(message)
        self.raw = raw
