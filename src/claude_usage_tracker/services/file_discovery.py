"""Discover Claude Code usage log files under the data root."""

import logging
import os
import time
from datetime import datetime
from pathlib import Path

from claude_usage_tracker.types import DataRootNotFoundError, FileMetadata
from claude_usage_tracker.utils.path_codec import decode_project_dir, project_name

logger = logging.getLogger(__name__)

PROJECTS_SUBDIR = "projects"
JSONL_SUFFIX = ".jsonl"


def discover(data_root: str | Path) -> list[FileMetadata]:
    """List every .jsonl file in every project directory under data_root.

    Raises DataRootNotFoundError when data_root itself is missing. A data
    root without a projects/ directory simply has no files yet.
    """
    root = Path(data_root).expanduser()
    if not root.is_dir():
        raise DataRootNotFoundError(str(root))

    projects_dir = root / PROJECTS_SUBDIR
    if not projects_dir.is_dir():
        logger.debug("No projects directory under %s", root)
        return []

    files = []
    for entry in sorted(projects_dir.iterdir()):
        if entry.name.startswith(".") or not entry.is_dir():
            continue
        files.extend(_discover_project_files(entry))
    return files


def _discover_project_files(project_dir: Path) -> list[FileMetadata]:
    decoded = decode_project_dir(project_dir.name)
    name = project_name(decoded) or project_dir.name
    found = []
    for dirpath, dirnames, filenames in os.walk(project_dir):
        dirnames[:] = sorted(d for d in dirnames if not d.startswith("."))
        for filename in sorted(filenames):
            if filename.startswith(".") or not filename.endswith(JSONL_SUFFIX):
                continue
            path = os.path.join(dirpath, filename)
            try:
                stat = os.stat(path)
            except OSError:
                # Vanished between listing and stat
                continue
            found.append(FileMetadata(
                path=path,
                project_dir=project_dir.name,
                project_name=name,
                project_path=decoded,
                modification_time=stat.st_mtime,
            ))
    return found


def filter_modified_today(
    files: list[FileMetadata],
    now: datetime | None = None,
) -> list[FileMetadata]:
    """Keep files whose modification time falls on or after local midnight."""
    if now is None:
        now = datetime.now()
    today = now.astimezone().replace(hour=0, minute=0, second=0, microsecond=0)
    cutoff = today.timestamp()
    return [f for f in files if f.modification_time >= cutoff]


def filter_modified_within_hours(
    files: list[FileMetadata],
    hours: float,
    now: datetime | None = None,
) -> list[FileMetadata]:
    """Keep files modified within the last `hours` hours."""
    reference = now.timestamp() if now is not None else time.time()
    cutoff = reference - hours * 3600
    return [f for f in files if f.modification_time >= cutoff]
