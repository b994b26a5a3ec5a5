"""Replacement templates with ``$``-tokens and per-segment attribution.

Every character of a replacement result comes from exactly one place:

* text copied from the original name (left unmarked),
* a group reference such as ``$1`` or ``$&`` (marked with the group index),
* literal template text (marked with ``LITERAL_GROUP``).

The "$`" and "$'" tokens copy original text into the output. That text
already existed in the name, so it stays unmarked like any other copy.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from pattern_matcher import (
    CompiledPattern,
    MatchSpan,
    PatternError,
    compile_pattern,
    iter_matches,
)

LITERAL_GROUP = -1
DIGITS = "0123456789"


class TokenKind(str, Enum):
    LITERAL = "literal"
    GROUP = "group"
    BEFORE = "before"
    AFTER = "after"


@dataclass(frozen=True)
class TemplateToken:
    kind: TokenKind
    text: str = ""
    group_index: int = 0


@dataclass(frozen=True)
class ReplacementSegment(MatchSpan):
    """A marked run of the output; ``start``/``end`` index the result string."""

    @property
    def is_literal(self) -> bool:
        return self.group_index == LITERAL_GROUP


@dataclass
class ReplacementResult:
    result: str
    segments: List[ReplacementSegment] = field(default_factory=list)
    error: Optional[str] = None


def parse_template(template: str, group_count: int) -> List[TemplateToken]:
    """Split a template into literal runs and ``$``-tokens.

    ``$n``/``$nn`` refer to a capture group only when that group exists in
    the pattern; otherwise the token is kept as literal text.
    """
    tokens: List[TemplateToken] = []
    plain: List[str] = []

    def flush() -> None:
        if plain:
            tokens.append(TemplateToken(TokenKind.LITERAL, "".join(plain)))
            plain.clear()

    i = 0
    length = len(template)
    while i < length:
        char = template[i]
        if char != "$" or i + 1 >= length:
            plain.append(char)
            i += 1
            continue

        nxt = template[i + 1]
        if nxt == "$":
            flush()
            tokens.append(TemplateToken(TokenKind.LITERAL, "$"))
            i += 2
        elif nxt == "&":
            flush()
            tokens.append(TemplateToken(TokenKind.GROUP, group_index=0))
            i += 2
        elif nxt == "`":
            flush()
            tokens.append(TemplateToken(TokenKind.BEFORE))
            i += 2
        elif nxt == "'":
            flush()
            tokens.append(TemplateToken(TokenKind.AFTER))
            i += 2
        elif nxt in DIGITS:
            flush()
            pair = template[i + 1:i + 3]
            if len(pair) == 2 and pair[1] in DIGITS and 1 <= int(pair) <= group_count:
                tokens.append(TemplateToken(TokenKind.GROUP, group_index=int(pair)))
                i += 3
            elif 1 <= int(nxt) <= group_count:
                tokens.append(TemplateToken(TokenKind.GROUP, group_index=int(nxt)))
                i += 2
            else:
                tokens.append(TemplateToken(TokenKind.LITERAL, "$" + nxt))
                i += 2
        else:
            plain.append(char)
            i += 1
    flush()
    return tokens


def _resolve(
    token: TemplateToken, match: re.Match[str], text: str
) -> Tuple[str, Optional[int]]:
    if token.kind is TokenKind.LITERAL:
        return token.text, LITERAL_GROUP
    if token.kind is TokenKind.BEFORE:
        return text[:match.start()], None
    if token.kind is TokenKind.AFTER:
        return text[match.end():], None
    content = match.group(token.group_index)
    return content or "", token.group_index


def apply_template(
    text: str,
    pattern: CompiledPattern,
    template: str,
    first_only: bool = False,
) -> ReplacementResult:
    """Replace matches of ``pattern`` in ``text`` and record output segments."""
    tokens = parse_template(template, pattern.group_count)
    pieces: List[str] = []
    segments: List[ReplacementSegment] = []
    position = 0
    cursor = 0

    for match in iter_matches(text, pattern, first_only):
        start, end = match.span()
        copied = text[cursor:start]
        pieces.append(copied)
        position += len(copied)
        for token in tokens:
            content, group_index = _resolve(token, match, text)
            if not content:
                continue
            if group_index is not None:
                segments.append(
                    ReplacementSegment(position, position + len(content), group_index, content)
                )
            pieces.append(content)
            position += len(content)
        cursor = end

    pieces.append(text[cursor:])
    return ReplacementResult("".join(pieces), segments)


def apply_replacement(
    text: str,
    find_text: str,
    template: str,
    *,
    regex_mode: bool = False,
    case_sensitive: bool = False,
    first_only: bool = False,
) -> ReplacementResult:
    """Compile ``find_text`` and apply ``template``; bad patterns leave text as is."""
    if not find_text:
        return ReplacementResult(text)
    try:
        pattern = compile_pattern(
            find_text, regex_mode=regex_mode, case_sensitive=case_sensitive
        )
    except PatternError as exc:
        return ReplacementResult(text, [], str(exc))
    return apply_template(text, pattern, template, first_only)


def segment_output(
    result: str, segments: List[ReplacementSegment]
) -> List[Tuple[str, Optional[int]]]:
    """Interleave unmarked output with the marked segments, in order."""
    pieces: List[Tuple[str, Optional[int]]] = []
    cursor = 0
    for segment in sorted(segments, key=lambda seg: seg.start):
        if segment.start > cursor:
            pieces.append((result[cursor:segment.start], None))
        pieces.append((result[segment.start:segment.end], segment.group_index))
        cursor = segment.end
    if cursor < len(result):
        pieces.append((result[cursor:], None))
    return pieces


__all__ = [
    "LITERAL_GROUP",
    "ReplacementResult",
    "ReplacementSegment",
    "TemplateToken",
    "TokenKind",
    "apply_replacement",
    "apply_template",
    "parse_template",
    "segment_output",
]
