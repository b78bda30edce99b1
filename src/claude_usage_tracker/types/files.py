"""Discovered log file metadata."""

from dataclasses import dataclass


@dataclass(frozen=True)
class FileMetadata:
    path: str
    project_dir: str       # Encoded directory name under projects/
    project_name: str      # Last decoded path segment
    project_path: str      # Decoded filesystem path
    modification_time: float
