"""Detect batch items whose renamed paths would land on the same target."""

from __future__ import annotations

import logging
from collections import Counter, defaultdict
from typing import Dict, Iterable, List

from path_utils import get_directory, join_path

logger = logging.getLogger(__name__)


def resulting_path(path: str, name: str, new_name: str) -> str:
    """Full path an item would have after being renamed to ``new_name``."""
    if not name:
        return join_path(get_directory(path), new_name)
    if path.endswith(name):
        return path[: len(path) - len(name)] + new_name
    return path.replace(name, new_name, 1)


def _key(path: str, case_insensitive: bool) -> str:
    return path.casefold() if case_insensitive else path


def detect_collisions(items: Iterable, *, case_insensitive: bool = False) -> Dict[str, bool]:
    """Map each item's ``path`` to whether its target is shared by another item.

    Items need ``path``, ``name`` and ``new_name`` attributes. The whole batch
    is recomputed on every call.
    """
    items = list(items)
    targets = [
        _key(resulting_path(item.path, item.name, item.new_name), case_insensitive)
        for item in items
    ]
    counts = Counter(targets)
    flags: Dict[str, bool] = {}
    for item, target in zip(items, targets):
        flags[item.path] = flags.get(item.path, False) or counts[target] > 1
    collided = sum(1 for flag in flags.values() if flag)
    if collided:
        logger.debug("%d of %d items share a target path", collided, len(flags))
    return flags


def collision_groups(
    items: Iterable, *, case_insensitive: bool = False
) -> Dict[str, List[str]]:
    """Return target path -> source paths, for targets claimed more than once."""
    groups: Dict[str, List[str]] = defaultdict(list)
    labels: Dict[str, str] = {}
    for item in items:
        target = resulting_path(item.path, item.name, item.new_name)
        key = _key(target, case_insensitive)
        labels.setdefault(key, target)
        groups[key].append(item.path)
    return {labels[key]: paths for key, paths in groups.items() if len(paths) > 1}


__all__ = ["collision_groups", "detect_collisions", "resulting_path"]
