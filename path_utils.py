"""Separator-agnostic path helpers for path strings from any platform."""

from __future__ import annotations

import re

_SEPARATORS = re.compile(r"[/\\]")


def get_file_name(path: str) -> str:
    """Return the final component of ``path`` (``/`` or ``\\`` separated)."""
    return _SEPARATORS.split(path)[-1]


def get_path_separator(path: str) -> str:
    return "\\" if "\\" in path else "/"


def get_directory(path: str) -> str:
    """Return everything before the last separator, or ``""`` for a bare name."""
    separator = get_path_separator(path)
    index = path.rfind(separator)
    return path[:index] if index >= 0 else ""


def join_path(directory: str, file_name: str) -> str:
    """Join with the separator style already used by ``directory``."""
    if not directory:
        return file_name
    separator = get_path_separator(directory)
    if directory.endswith(separator):
        return f"{directory}{file_name}"
    return f"{directory}{separator}{file_name}"


__all__ = ["get_directory", "get_file_name", "get_path_separator", "join_path"]
