"""Decides when to re-run ingestion and publishes the resulting snapshot."""

import logging
from enum import Enum

from PySide6.QtCore import QObject, Signal, QThread, QTimer

from claude_usage_tracker.services.file_watcher import FileWatcher
from claude_usage_tracker.services.usage_repository import UsageRepository
from claude_usage_tracker.types import DataRootNotFoundError, UsageSnapshot
from claude_usage_tracker.utils.clock import SystemClock

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_S = 30
DAY_CHECK_INTERVAL_MS = 60_000


class RefreshReason(str, Enum):
    MANUAL = "manual"
    FILE_CHANGE = "file_change"
    DAY_CHANGE = "day_change"
    TIMER = "timer"
    APP_BECAME_ACTIVE = "app_became_active"
    WINDOW_FOCUS = "window_focus"
    WAKE_FROM_SLEEP = "wake_from_sleep"

    @property
    def invalidates_cache(self) -> bool:
        """Whether cached file records must be dropped before refreshing.

        File changes are caught by the per-file modification time check;
        only a new day, a wake or an explicit request start from scratch.
        """
        return self in _INVALIDATING_REASONS


_INVALIDATING_REASONS = frozenset({
    RefreshReason.MANUAL,
    RefreshReason.DAY_CHANGE,
    RefreshReason.WAKE_FROM_SLEEP,
})


class _RefreshWorker(QThread):
    """Background thread that computes one snapshot."""

    succeeded = Signal(object)  # UsageSnapshot
    failed = Signal(str)

    def __init__(self, repository: UsageRepository, reason: RefreshReason, parent=None):
        super().__init__(parent)
        self._repository = repository
        self._reason = reason

    def run(self):
        try:
            self.succeeded.emit(self._repository.snapshot(self._reason.value))
        except DataRootNotFoundError as e:
            logger.warning("%s", e)
            self.failed.emit(str(e))
        except Exception:
            logger.exception("Refresh failed (%s)", self._reason.value)
            self.failed.emit(f"Refresh failed ({self._reason.value})")


class RefreshCoordinator(QObject):
    """Runs at most one refresh at a time and publishes whole snapshots.

    A refresh requested while another is running is dropped; the running
    one publishes its result.
    """

    snapshot_ready = Signal(object)  # UsageSnapshot
    refresh_failed = Signal(str)
    refreshing_changed = Signal()

    def __init__(
        self,
        repository: UsageRepository,
        watcher: FileWatcher | None = None,
        interval_s: int = DEFAULT_INTERVAL_S,
        clock=None,
        parent=None,
    ):
        super().__init__(parent)
        self._repository = repository
        self._watcher = watcher if watcher is not None else FileWatcher(self)
        self._clock = clock or SystemClock()
        self._worker: _RefreshWorker | None = None
        self._snapshot: UsageSnapshot | None = None
        self._last_error = ""
        self._current_day = self._clock.now().astimezone().date()

        self._timer = QTimer(self)
        self._timer.setInterval(max(1, interval_s) * 1000)
        self._timer.timeout.connect(lambda: self.request_refresh(RefreshReason.TIMER))

        self._day_timer = QTimer(self)
        self._day_timer.setInterval(DAY_CHECK_INTERVAL_MS)
        self._day_timer.timeout.connect(self.check_day_change)

        self._watcher.changed.connect(self._on_files_changed)

    @property
    def snapshot(self) -> UsageSnapshot | None:
        return self._snapshot

    @property
    def last_error(self) -> str:
        return self._last_error

    @property
    def is_refreshing(self) -> bool:
        return self._worker is not None

    def start(self):
        """Start watching, the periodic timers and an initial refresh."""
        self._watcher.start(str(self._repository.projects_dir))
        self._timer.start()
        self._day_timer.start()
        self.request_refresh(RefreshReason.MANUAL)

    def stop(self):
        self._timer.stop()
        self._day_timer.stop()
        self._watcher.stop()
        self.wait()

    def wait(self, timeout_ms: int = 5000) -> bool:
        """Block until the in-flight refresh thread finishes."""
        if self._worker is None:
            return True
        return self._worker.wait(timeout_ms)

    def request_refresh(self, reason: RefreshReason) -> bool:
        """Start a refresh unless one is already running.

        Returns True when a refresh was started.
        """
        if self._worker is not None:
            logger.debug("Refresh already in flight, dropping %s", reason.value)
            return False

        if reason.invalidates_cache:
            self._repository.clear_cache()

        worker = _RefreshWorker(self._repository, reason, self)
        worker.succeeded.connect(self._on_succeeded)
        worker.failed.connect(self._on_failed)
        worker.finished.connect(self._on_worker_finished)
        self._worker = worker
        self.refreshing_changed.emit()
        worker.start()
        return True

    def handle_window_focus(self):
        self.request_refresh(RefreshReason.WINDOW_FOCUS)

    def handle_app_became_active(self):
        self.request_refresh(RefreshReason.APP_BECAME_ACTIVE)

    def handle_wake_from_sleep(self):
        self.request_refresh(RefreshReason.WAKE_FROM_SLEEP)

    def check_day_change(self) -> bool:
        """Trigger a day-change refresh when the local date has moved."""
        today = self._clock.now().astimezone().date()
        if today == self._current_day:
            return False
        logger.info("Day changed from %s to %s", self._current_day, today)
        self._current_day = today
        self.request_refresh(RefreshReason.DAY_CHANGE)
        return True

    def _on_files_changed(self, paths: list):
        logger.debug("Files changed: %s", paths)
        self.request_refresh(RefreshReason.FILE_CHANGE)

    def _on_succeeded(self, snapshot: UsageSnapshot):
        self._snapshot = snapshot
        self._last_error = ""
        # Appends to already known files only show up as file events
        self._watcher.set_watched_files({r.source_file for r in snapshot.today_records})
        self.snapshot_ready.emit(snapshot)

    def _on_failed(self, message: str):
        self._last_error = message
        self.refresh_failed.emit(message)

    def _on_worker_finished(self):
        worker = self._worker
        self._worker = None
        if worker is not None:
            worker.deleteLater()
        self.refreshing_changed.emit()
