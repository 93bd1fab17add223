"""
User trading preferences.

Preferences are edited at runtime (dashboard PATCH, CLI) and persisted,
unlike Settings which come from the environment and never change while
the process runs.
"""

import logging
from collections.abc import Mapping
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from goldtrackr.storage.state import JsonStateStore


logger = logging.getLogger(__name__)

PREFERENCES_KEY = "preferences"


class TradingPreferences(BaseModel):
    """Order routing and sizing preferences."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    selected_exchange: Literal["coinbase", "kraken"] = "coinbase"
    dry_run: bool = True
    auto_trade_enabled: bool = False
    max_trade_size: float = Field(default=0.5, gt=0.0, allow_inf_nan=False)


class PreferencesStore:
    """
    Holds the current preferences and persists every accepted change.

    Updates are validated as a whole; an invalid update leaves the
    current preferences untouched.
    """

    def __init__(self, state: JsonStateStore | None = None) -> None:
        """
        Initialize store.

        Args:
            state: Backing state file. None keeps preferences in memory.
        """
        self._state = state
        self._current = self._load()

    def _load(self) -> TradingPreferences:
        if self._state is None:
            return TradingPreferences()

        stored = self._state.get(PREFERENCES_KEY)
        if stored is None:
            return TradingPreferences()

        try:
            return TradingPreferences.model_validate(stored)
        except ValidationError as e:
            logger.warning(f"Stored preferences invalid, using defaults: {e.error_count()} errors")
            return TradingPreferences()

    @property
    def current(self) -> TradingPreferences:
        """Current preferences."""
        return self._current

    def update(self, changes: Mapping[str, Any]) -> TradingPreferences | None:
        """
        Apply a partial update.

        Args:
            changes: Field name to new value.

        Returns:
            New preferences, or None if the update was rejected.
        """
        merged = {**self._current.model_dump(), **dict(changes)}
        try:
            updated = TradingPreferences.model_validate(merged)
        except ValidationError as e:
            logger.warning(f"Rejected preferences update {sorted(changes)}: {e.error_count()} errors")
            return None

        self._current = updated
        if self._state is not None:
            self._state.set(PREFERENCES_KEY, updated.model_dump())

        logger.info(
            f"Preferences updated: exchange={updated.selected_exchange} "
            f"dry_run={updated.dry_run} auto_trade={updated.auto_trade_enabled} "
            f"max_size={updated.max_trade_size}"
        )
        return updated
