"""Process-wide runtime AI settings."""

import threading
from collections.abc import Mapping
from typing import Any, Optional

from pydantic import ValidationError

from stackr_ai.config import Settings
from stackr_ai.exceptions import SettingsValidationError
from stackr_ai.models import AISettings, SettingsSnapshot
from stackr_ai.telemetry import get_logger

logger = get_logger(__name__)


class SettingsStore:
    """Holds the current ``AISettings`` snapshot.

    Snapshots are immutable; ``update`` builds a new one and swaps the
    reference under a lock, so ``get`` never needs to lock and never sees a
    half-applied update.
    """

    def __init__(self, initial: Optional[AISettings] = None):
        self._settings = initial or AISettings()
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: Settings) -> "SettingsStore":
        """Seed the store from environment configuration."""
        try:
            initial = AISettings(
                cache_enabled=settings.ai_cache_enabled,
                cache_ttl=settings.ai_cache_ttl_seconds,
                default_provider=settings.ai_default_provider,
                auto_fallback=settings.ai_auto_fallback,
                max_retries=settings.ai_max_retries,
            )
        except ValidationError as e:
            raise SettingsValidationError(_format_errors(e)) from e
        return cls(initial)

    def get(self) -> SettingsSnapshot:
        """Current settings plus the catalog of known providers."""
        return SettingsSnapshot(**self._settings.model_dump())

    def update(self, partial: Optional[Mapping[str, Any]] = None, **changes: Any) -> SettingsSnapshot:
        """
        Merge the given fields into the current settings.

        Args:
            partial: Fields to change; unspecified fields keep their value.
                ``available_providers`` is read-only and ignored
            **changes: Same, as keyword arguments

        Returns:
            The new snapshot

        Raises:
            SettingsValidationError: If a field is unknown or a value invalid;
                the current settings are left untouched
        """
        fields = {**(partial or {}), **changes}
        # Derived from the catalog; echoed back by clients that PATCH what they read
        fields.pop("available_providers", None)
        with self._lock:
            try:
                updated = AISettings.model_validate({**self._settings.model_dump(), **fields})
            except ValidationError as e:
                raise SettingsValidationError(_format_errors(e)) from e
            self._settings = updated

        logger.info("ai_settings_updated", fields=sorted(fields))
        return self.get()


def _format_errors(error: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in item['loc'])}: {item['msg']}" for item in error.errors()
    )
