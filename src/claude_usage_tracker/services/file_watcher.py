"""File system watcher that coalesces bursts of changes into one signal."""

import logging
import os

from PySide6.QtCore import QObject, Signal, QFileSystemWatcher, QTimer

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_MS = 1000


class FileWatcher(QObject):
    """Watches the Claude projects tree for appended or new log files.

    Every raw file or directory event restarts a single-shot timer. When
    the quiet period elapses, `changed` fires once with every path seen.
    """

    changed = Signal(list)  # paths

    def __init__(self, parent=None, debounce_ms: int = DEFAULT_DEBOUNCE_MS):
        super().__init__(parent)
        self._watcher = QFileSystemWatcher(self)
        self._root = ""
        self._watched_files: set[str] = set()
        self._pending: set[str] = set()

        self._debounce_timer = QTimer(self)
        self._debounce_timer.setSingleShot(True)
        self._debounce_timer.setInterval(debounce_ms)
        self._debounce_timer.timeout.connect(self._flush)

        self._watcher.fileChanged.connect(self._on_file_changed)
        self._watcher.directoryChanged.connect(self._on_directory_changed)

    @property
    def debounce_ms(self) -> int:
        return self._debounce_timer.interval()

    def set_debounce_ms(self, value: int):
        self._debounce_timer.setInterval(value)

    def start(self, root: str):
        """Start watching the projects root and its project directories."""
        self.stop()
        if not os.path.isdir(root):
            logger.warning("Cannot watch missing directory: %s", root)
            return
        self._root = root
        self._watcher.addPath(root)
        self._watch_project_dirs()

    def stop(self):
        """Stop all file watching and drop pending events."""
        if self._watcher.files():
            self._watcher.removePaths(self._watcher.files())
        if self._watcher.directories():
            self._watcher.removePaths(self._watcher.directories())
        self._watched_files.clear()
        self._debounce_timer.stop()
        self._pending.clear()
        self._root = ""

    def watch_directories(self, paths):
        current = set(self._watcher.directories())
        for path in paths:
            if path and path not in current:
                self._watcher.addPath(path)

    def watch_files(self, paths):
        """Add log files to the watch list (appends only show up on files)."""
        for path in paths:
            if path not in self._watched_files and os.path.exists(path):
                self._watcher.addPath(path)
                self._watched_files.add(path)

    def unwatch_file(self, path: str):
        if path in self._watched_files:
            self._watcher.removePath(path)
            self._watched_files.discard(path)

    def set_watched_files(self, paths):
        """Watch exactly these log files, dropping any others."""
        wanted = set(paths)
        for path in sorted(self._watched_files - wanted):
            self.unwatch_file(path)
        self.watch_files(sorted(wanted))

    @property
    def watched_files(self) -> set[str]:
        return set(self._watched_files)

    def is_pending(self) -> bool:
        return self._debounce_timer.isActive()

    def _on_file_changed(self, path: str):
        # Qt stops watching a file that was replaced on disk
        if path in self._watched_files and path not in self._watcher.files():
            if os.path.exists(path):
                self._watcher.addPath(path)
            else:
                self._watched_files.discard(path)
        self._schedule(path)

    def _on_directory_changed(self, path: str):
        if path == self._root:
            # New project directories appear here
            self._watch_project_dirs()
        self._schedule(path)

    def _watch_project_dirs(self):
        if not self._root or not os.path.isdir(self._root):
            return
        self.watch_directories(
            os.path.join(self._root, name) for name in sorted(os.listdir(self._root))
            if not name.startswith(".") and os.path.isdir(os.path.join(self._root, name))
        )

    def _schedule(self, path: str):
        self._pending.add(path)
        self._debounce_timer.start()

    def _flush(self):
        paths = sorted(self._pending)
        self._pending.clear()
        if paths:
            logger.debug("Debounced %d changed paths", len(paths))
            self.changed.emit(paths)
