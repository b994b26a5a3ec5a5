"""Character-level diff between an original and a modified file name."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List

# Combined input length above which the LCS table is skipped.
DIFF_LENGTH_THRESHOLD = 500


class DiffType(str, Enum):
    UNCHANGED = "unchanged"
    REMOVED = "removed"
    ADDED = "added"


@dataclass(frozen=True)
class DiffSegment:
    type: DiffType
    text: str


def _common_prefix_length(a: str, b: str) -> int:
    limit = min(len(a), len(b))
    i = 0
    while i < limit and a[i] == b[i]:
        i += 1
    return i


def _common_suffix_length(a: str, b: str, prefix: int) -> int:
    limit = min(len(a), len(b)) - prefix
    i = 0
    while i < limit and a[-1 - i] == b[-1 - i]:
        i += 1
    return i


def _coalesce(segments: Iterable[DiffSegment]) -> List[DiffSegment]:
    """Drop empty segments and merge neighbours of the same type."""
    merged: List[DiffSegment] = []
    for segment in segments:
        if not segment.text:
            continue
        if merged and merged[-1].type is segment.type:
            merged[-1] = DiffSegment(segment.type, merged[-1].text + segment.text)
        else:
            merged.append(segment)
    return merged


def _lcs_segments(a: str, b: str) -> List[DiffSegment]:
    """Minimal edit script from a suffix LCS table, walked front to back."""
    m, n = len(a), len(b)
    table = [[0] * (n + 1) for _ in range(m + 1)]
    for i in range(m - 1, -1, -1):
        row, below = table[i], table[i + 1]
        for j in range(n - 1, -1, -1):
            if a[i] == b[j]:
                row[j] = below[j + 1] + 1
            else:
                row[j] = max(below[j], row[j + 1])

    segments: List[DiffSegment] = []
    i = j = 0
    while i < m and j < n:
        if a[i] == b[j]:
            segments.append(DiffSegment(DiffType.UNCHANGED, a[i]))
            i += 1
            j += 1
        elif table[i + 1][j] >= table[i][j + 1]:
            segments.append(DiffSegment(DiffType.REMOVED, a[i]))
            i += 1
        else:
            segments.append(DiffSegment(DiffType.ADDED, b[j]))
            j += 1
    if i < m:
        segments.append(DiffSegment(DiffType.REMOVED, a[i:]))
    if j < n:
        segments.append(DiffSegment(DiffType.ADDED, b[j:]))
    return segments


def compute_diff(
    original: str, modified: str, *, threshold: int = DIFF_LENGTH_THRESHOLD
) -> List[DiffSegment]:
    """Return unchanged/removed/added segments turning ``original`` into ``modified``.

    Unchanged and removed segments joined give ``original``; unchanged and
    added segments joined give ``modified``. Two identical inputs, including
    two empty strings, give a single unchanged segment.
    """
    if original == modified:
        return [DiffSegment(DiffType.UNCHANGED, original)]

    prefix = _common_prefix_length(original, modified)
    suffix = _common_suffix_length(original, modified, prefix)
    old_middle = original[prefix:len(original) - suffix]
    new_middle = modified[prefix:len(modified) - suffix]

    if len(original) + len(modified) > threshold:
        middle = [
            DiffSegment(DiffType.REMOVED, old_middle),
            DiffSegment(DiffType.ADDED, new_middle),
        ]
    else:
        middle = _lcs_segments(old_middle, new_middle)

    return _coalesce(
        [
            DiffSegment(DiffType.UNCHANGED, original[:prefix]),
            *middle,
            DiffSegment(DiffType.UNCHANGED, original[len(original) - suffix:]),
        ]
    )


def original_text(segments: Iterable[DiffSegment]) -> str:
    return "".join(s.text for s in segments if s.type is not DiffType.ADDED)


def modified_text(segments: Iterable[DiffSegment]) -> str:
    return "".join(s.text for s in segments if s.type is not DiffType.REMOVED)


__all__ = [
    "DIFF_LENGTH_THRESHOLD",
    "DiffSegment",
    "DiffType",
    "compute_diff",
    "modified_text",
    "original_text",
]
