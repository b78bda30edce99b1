"""Decode Claude Code project directory names into paths and display names."""

import re


def decode_project_dir(encoded: str) -> str:
    """Decode a Claude project directory name to a filesystem path.

    -home-wiz-AI-LLM → /home/wiz/AI/LLM
    """
    if not encoded:
        return ""
    encoded = strip_composite_suffix(encoded)
    return encoded.replace("-", "/")


def strip_composite_suffix(project_dir: str) -> str:
    """Remove the ::hex suffix from composite project IDs.

    -home-wiz-project::a1b2c3d4 → -home-wiz-project
    """
    match = re.match(r'^(.+?)::[0-9a-fA-F]{8}$', project_dir)
    if match:
        return match.group(1)
    return project_dir


def project_name(project_path: str) -> str:
    """Get the last path segment as the project display name.

    /home/wiz/AI/LLM → LLM
    """
    stripped = project_path.rstrip("/")
    if not stripped:
        return project_path
    return stripped.rsplit("/", 1)[-1]
