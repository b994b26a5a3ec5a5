"""Find/replace pattern compilation, guarded matching and group highlighting."""

from __future__ import annotations

import heapq
import logging
import re
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

logger = logging.getLogger(__name__)


class PatternError(ValueError):
    """Raised when a find pattern cannot be compiled."""

    def __init__(self, pattern: str, message: str) -> None:
        self.pattern = pattern
        super().__init__(message)


@dataclass(frozen=True)
class CompiledPattern:
    """A find pattern compiled once with its mode baked in."""

    source: str
    regex: re.Pattern[str]
    regex_mode: bool = False
    case_sensitive: bool = False

    @property
    def group_count(self) -> int:
        return self.regex.groups


@dataclass(frozen=True)
class MatchSpan:
    """A match (group 0) or capture group located in the searched text."""

    start: int
    end: int
    group_index: int
    content: str


@dataclass(frozen=True)
class HighlightRegion:
    start: int
    end: int
    group_index: int


@dataclass(frozen=True)
class HighlightSegment:
    text: str
    group_index: Optional[int] = None


def compile_pattern(
    find_text: str,
    *,
    regex_mode: bool = False,
    case_sensitive: bool = False,
) -> CompiledPattern:
    """Compile user find text, escaping it unless regex mode is on."""
    expression = find_text if regex_mode else re.escape(find_text)
    flags = 0 if case_sensitive else re.IGNORECASE
    try:
        compiled = re.compile(expression, flags)
    except re.error as exc:
        logger.debug("Rejected pattern %r: %s", find_text, exc)
        raise PatternError(find_text, str(exc)) from exc
    return CompiledPattern(
        source=find_text,
        regex=compiled,
        regex_mode=regex_mode,
        case_sensitive=case_sensitive,
    )


def is_valid_pattern(find_text: str, regex_mode: bool = True) -> Optional[str]:
    """Return the syntax diagnostic for an invalid pattern, else None."""
    try:
        compile_pattern(find_text, regex_mode=regex_mode)
    except PatternError as exc:
        return str(exc)
    return None


def has_capture_groups(find_text: str) -> bool:
    """Check whether a regex has at least one capturing group."""
    try:
        return compile_pattern(find_text, regex_mode=True).group_count > 0
    except PatternError:
        return False


def iter_matches(
    text: str, pattern: CompiledPattern, first_only: bool = False
) -> Iterator[re.Match[str]]:
    """Yield non-overlapping matches left to right.

    Searching always runs against the whole string so that anchors and
    look-behinds see the real context. An empty match moves the cursor one
    position forward before the next attempt.
    """
    cursor = 0
    length = len(text)
    while cursor <= length:
        match = pattern.regex.search(text, cursor)
        if match is None:
            return
        yield match
        if first_only:
            return
        start, end = match.span()
        cursor = end + 1 if end == start else end


def spans_for_match(match: re.Match[str]) -> List[MatchSpan]:
    """Group 0 first, then every participating capture group in index order."""
    spans: List[MatchSpan] = []
    for index in range(match.re.groups + 1):
        start, end = match.span(index)
        if start == -1:
            continue
        spans.append(MatchSpan(start, end, index, match.group(index)))
    return spans


def find_matches(
    text: str, pattern: CompiledPattern, first_only: bool = False
) -> List[MatchSpan]:
    """Return match and capture-group spans for every match in ``text``."""
    spans: List[MatchSpan] = []
    for match in iter_matches(text, pattern, first_only):
        spans.extend(spans_for_match(match))
    return spans


def highlight_regions(spans: Iterable[MatchSpan]) -> List[HighlightRegion]:
    """Flatten possibly nested spans into sorted, non-overlapping regions.

    Where spans overlap, the one registered last wins, so an inner capture
    group shows over its parent group and over group 0.
    """
    starts: Dict[int, List[Tuple[int, MatchSpan]]] = defaultdict(list)
    boundaries = set()
    for order, span in enumerate(spans):
        if span.end <= span.start:
            continue
        starts[span.start].append((order, span))
        boundaries.update((span.start, span.end))

    points = sorted(boundaries)
    active: List[Tuple[int, int, int]] = []
    regions: List[HighlightRegion] = []
    for left, right in zip(points, points[1:]):
        for order, span in starts.get(left, ()):
            heapq.heappush(active, (-order, span.end, span.group_index))
        while active and active[0][1] <= left:
            heapq.heappop(active)
        if not active:
            continue
        group_index = active[0][2]
        last = regions[-1] if regions else None
        if last and last.end == left and last.group_index == group_index:
            regions[-1] = HighlightRegion(last.start, right, group_index)
        else:
            regions.append(HighlightRegion(left, right, group_index))
    return regions


def highlight_segments(text: str, spans: Iterable[MatchSpan]) -> List[HighlightSegment]:
    """Cut ``text`` into plain and group-coloured pieces that cover it exactly."""
    segments: List[HighlightSegment] = []
    cursor = 0
    for region in highlight_regions(spans):
        if region.start > cursor:
            segments.append(HighlightSegment(text[cursor:region.start]))
        segments.append(HighlightSegment(text[region.start:region.end], region.group_index))
        cursor = region.end
    if cursor < len(text):
        segments.append(HighlightSegment(text[cursor:]))
    return segments


__all__ = [
    "CompiledPattern",
    "HighlightRegion",
    "HighlightSegment",
    "MatchSpan",
    "PatternError",
    "compile_pattern",
    "find_matches",
    "has_capture_groups",
    "highlight_regions",
    "highlight_segments",
    "is_valid_pattern",
    "iter_matches",
    "spans_for_match",
]
