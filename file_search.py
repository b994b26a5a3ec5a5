"""Find files by substring, extension list or regex and report where names match."""

from __future__ import annotations

import argparse
import logging
import os
import re
import sys
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from pattern_matcher import (
    MatchSpan,
    PatternError,
    compile_pattern,
    highlight_segments,
    iter_matches,
)

logger = logging.getLogger(__name__)

Range = Tuple[int, int]

_ILLEGAL_EXTENSION_CHARS = re.compile(r'[/\\:*?"<>|]')
_SIZE_UNITS = ["B", "KB", "MB", "GB", "TB"]


class PatternType(str, Enum):
    SIMPLE = "simple"
    EXTENSION = "extension"
    REGEX = "regex"


@dataclass
class FileMatch:
    path: str
    name: str
    match_ranges: List[Range] = field(default_factory=list)
    size: int = 0
    is_directory: bool = False


def match_simple(name: str, pattern: str, case_sensitive: bool = False) -> List[Range]:
    """Every occurrence of ``pattern``, overlapping ones included."""
    if not pattern:
        return []
    haystack = name if case_sensitive else name.lower()
    needle = pattern if case_sensitive else pattern.lower()
    ranges: List[Range] = []
    start = haystack.find(needle)
    while start != -1:
        ranges.append((start, start + len(needle)))
        start = haystack.find(needle, start + 1)
    return ranges


def _split_extensions(extensions: str) -> List[str]:
    return [ext.strip() for ext in extensions.split(",")]


def match_extension(name: str, extensions: str, case_sensitive: bool = False) -> List[Range]:
    """Range of the first listed extension that ``name`` ends with, if any.

    ``extensions`` is comma separated; a leading dot is optional (``"jpg, .png"``).
    """
    check = name if case_sensitive else name.lower()
    for ext in _split_extensions(extensions):
        if not ext:
            continue
        suffix = ext if ext.startswith(".") else f".{ext}"
        if not case_sensitive:
            suffix = suffix.lower()
        if check.endswith(suffix):
            return [(len(name) - len(suffix), len(name))]
    return []


def match_regex(name: str, pattern: str, case_sensitive: bool = False) -> List[Range]:
    """Whole-match ranges of a regex. Raises ``PatternError`` for bad syntax."""
    compiled = compile_pattern(pattern, regex_mode=True, case_sensitive=case_sensitive)
    return [match.span() for match in iter_matches(name, compiled)]


def match_ranges(
    name: str, pattern: str, pattern_type: PatternType, case_sensitive: bool = False
) -> List[Range]:
    pattern_type = PatternType(pattern_type)
    if pattern_type is PatternType.SIMPLE:
        return match_simple(name, pattern, case_sensitive)
    if pattern_type is PatternType.EXTENSION:
        return match_extension(name, pattern, case_sensitive)
    return match_regex(name, pattern, case_sensitive)


def validate_search_pattern(pattern: str, pattern_type: PatternType) -> Optional[str]:
    """Return a user-facing message when the pattern can't be searched with, else None."""
    if not pattern.strip():
        return "Pattern cannot be empty"

    pattern_type = PatternType(pattern_type)
    if pattern_type is PatternType.REGEX:
        try:
            compile_pattern(pattern, regex_mode=True, case_sensitive=True)
        except PatternError as exc:
            return f"Invalid regex: {exc}"

    if pattern_type is PatternType.EXTENSION:
        extensions = _split_extensions(pattern)
        if any(not ext for ext in extensions):
            return "Invalid extension format: empty extension found"
        for ext in extensions:
            cleaned = ext[1:] if ext.startswith(".") else ext
            if not cleaned or _ILLEGAL_EXTENSION_CHARS.search(cleaned):
                return f'Invalid extension: "{ext}"'

    return None


def build_highlighted_segments(text: str, ranges: List[Range]) -> List[Tuple[str, bool]]:
    """Split ``text`` into (piece, is_match) runs; overlapping ranges merge."""
    spans = [MatchSpan(start, end, 0, text[start:end]) for start, end in ranges]
    segments = highlight_segments(text, spans)
    if not segments:
        return [(text, False)]
    return [(segment.text, segment.group_index is not None) for segment in segments]


def format_file_size(size: int) -> str:
    """Human readable size with 1024-based units, e.g. ``1.5 KB``."""
    value = float(max(size, 0))
    unit = 0
    while value >= 1024 and unit < len(_SIZE_UNITS) - 1:
        value /= 1024
        unit += 1
    return f"{round(value, 1):g} {_SIZE_UNITS[unit]}"


def search_files(
    base_path: Path | str,
    pattern: str,
    pattern_type: PatternType,
    *,
    include_subdirs: bool = True,
    case_sensitive: bool = False,
) -> List[FileMatch]:
    """Walk ``base_path`` and return every file or directory whose name matches.

    The base directory itself is never reported. Results are sorted by path.
    """
    problem = validate_search_pattern(pattern, pattern_type)
    if problem:
        raise PatternError(pattern, problem)

    root = Path(base_path).expanduser()
    if not root.is_dir():
        raise FileNotFoundError(f"Directory not found: {base_path}")

    results: List[FileMatch] = []
    for dirpath, dirnames, filenames in os.walk(root):
        dir_path = Path(dirpath)
        for entry in dirnames + filenames:
            ranges = match_ranges(entry, pattern, pattern_type, case_sensitive)
            if not ranges:
                continue
            entry_path = dir_path / entry
            stat = entry_path.stat()
            results.append(
                FileMatch(
                    path=str(entry_path),
                    name=entry,
                    match_ranges=ranges,
                    size=stat.st_size,
                    is_directory=entry_path.is_dir(),
                )
            )
        if not include_subdirs:
            break

    logger.debug("Search for %r under %s matched %d entries", pattern, root, len(results))
    return sorted(results, key=lambda match: match.path)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="List files and folders whose names match a pattern."
    )
    parser.add_argument("directory", help="Folder to search.")
    parser.add_argument("pattern", help="Text, comma separated extensions, or regex.")
    parser.add_argument(
        "--type",
        dest="pattern_type",
        choices=[pattern_type.value for pattern_type in PatternType],
        default=PatternType.SIMPLE.value,
        help="How to read the pattern (default: simple).",
    )
    parser.add_argument("--case-sensitive", action="store_true", help="Match case exactly.")
    parser.add_argument(
        "--no-recursive",
        dest="include_subdirs",
        action="store_false",
        help="Only search directly inside the folder.",
    )
    parser.add_argument(
        "--log-level",
        choices=["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"],
        default="WARNING",
        help="Logging verbosity",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        matches = search_files(
            args.directory,
            args.pattern,
            PatternType(args.pattern_type),
            include_subdirs=args.include_subdirs,
            case_sensitive=args.case_sensitive,
        )
    except PatternError as exc:
        print(f"Pattern error: {exc}")
        return 1
    except FileNotFoundError as exc:
        parser.error(str(exc))

    if not matches:
        print("No matches found.")
        return 0

    for match in matches:
        marked = "".join(
            f"[{piece}]" if is_match else piece
            for piece, is_match in build_highlighted_segments(match.name, match.match_ranges)
        )
        kind = "dir" if match.is_directory else format_file_size(match.size)
        print(f"{match.path}  {marked}  ({kind})")
    total = sum(match.size for match in matches if not match.is_directory)
    print(f"\n{len(matches)} matches, {format_file_size(total)} in files.")
    return 0


__all__ = [
    "FileMatch",
    "PatternType",
    "build_highlighted_segments",
    "build_parser",
    "format_file_size",
    "main",
    "match_extension",
    "match_ranges",
    "match_regex",
    "match_simple",
    "search_files",
    "validate_search_pattern",
]


if __name__ == "__main__":
    raise SystemExit(main())
