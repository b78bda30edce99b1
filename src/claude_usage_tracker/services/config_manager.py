"""Application configuration manager wrapping QSettings."""

import logging
from datetime import timedelta
from pathlib import Path

from PySide6.QtCore import QObject, Signal, Slot, QSettings

from claude_usage_tracker.services.file_ingestor import FileIngestor
from claude_usage_tracker.services.session_blocks import SessionBlockBuilder
from claude_usage_tracker.services.usage_repository import UsageRepository

logger = logging.getLogger(__name__)

# Default values
DEFAULTS = {
    "general/dataRoot": "~/.claude",
    "session/durationHours": 5.0,
    "session/liveToleranceMinutes": 300,
    "session/burnRateWindowMinutes": 60,
    "session/alignToHour": False,
    "session/tokenLimit": 0,
    "refresh/intervalSeconds": 30,
    "refresh/debounceMs": 1000,
    "ingest/maxWorkers": 4,
    "advanced/debugLogging": False,
}


class ConfigManager(QObject):
    """Centralized settings plus factories for the configured services."""

    settings_changed = Signal(str)  # key

    def __init__(self, parent=None, settings: QSettings | None = None):
        super().__init__(parent)
        self._settings = settings if settings is not None else QSettings()

    @Slot(str, result=str)
    def get_string(self, key: str) -> str:
        return str(self._settings.value(key, DEFAULTS.get(key, "")))

    @Slot(str, result=int)
    def get_int(self, key: str) -> int:
        val = self._settings.value(key, DEFAULTS.get(key, 0))
        try:
            return int(val)
        except (ValueError, TypeError):
            return int(DEFAULTS.get(key, 0))

    @Slot(str, result=float)
    def get_float(self, key: str) -> float:
        val = self._settings.value(key, DEFAULTS.get(key, 0.0))
        try:
            return float(val)
        except (ValueError, TypeError):
            return float(DEFAULTS.get(key, 0.0))

    @Slot(str, result=bool)
    def get_bool(self, key: str) -> bool:
        val = self._settings.value(key, DEFAULTS.get(key, False))
        if isinstance(val, bool):
            return val
        if isinstance(val, str):
            return val.lower() in ("true", "1", "yes")
        return bool(val)

    @Slot(str, str)
    def set_string(self, key: str, value: str):
        self._settings.setValue(key, value)
        self.settings_changed.emit(key)

    @Slot(str, int)
    def set_int(self, key: str, value: int):
        self._settings.setValue(key, value)
        self.settings_changed.emit(key)

    @Slot(str, float)
    def set_float(self, key: str, value: float):
        self._settings.setValue(key, value)
        self.settings_changed.emit(key)

    @Slot(str, bool)
    def set_bool(self, key: str, value: bool):
        self._settings.setValue(key, value)
        self.settings_changed.emit(key)

    def data_root(self) -> Path:
        return Path(self.get_string("general/dataRoot")).expanduser()

    def build_block_builder(self) -> SessionBlockBuilder:
        hours = self.get_float("session/durationHours")
        if hours <= 0:
            logger.warning("Invalid session duration %r, using default", hours)
            hours = DEFAULTS["session/durationHours"]
        return SessionBlockBuilder(
            window=timedelta(hours=hours),
            live_tolerance=timedelta(minutes=self.get_int("session/liveToleranceMinutes")),
            burn_rate_window=timedelta(minutes=self.get_int("session/burnRateWindowMinutes")),
            align_to_hour=self.get_bool("session/alignToHour"),
        )

    def build_ingestor(self) -> FileIngestor:
        return FileIngestor(max_workers=self.get_int("ingest/maxWorkers"))

    def build_repository(self, clock=None, data_root: str | Path | None = None) -> UsageRepository:
        """Repository wired from settings. data_root overrides the stored one."""
        return UsageRepository(
            data_root=data_root or self.data_root(),
            ingestor=self.build_ingestor(),
            builder=self.build_block_builder(),
            token_limit=self.get_int("session/tokenLimit") or None,
            clock=clock,
        )
