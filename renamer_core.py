"""Batch rename previews: find/replace, numbering and collision checks over a file set."""

from __future__ import annotations

import argparse
import dataclasses
import logging
import os
import sys
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from collision_detector import collision_groups, detect_collisions, resulting_path
from config_manager import AppConfig, ConfigLoadError
from path_utils import get_file_name
from pattern_matcher import CompiledPattern, MatchSpan, PatternError, compile_pattern, find_matches
from replacement_template import (
    ReplacementResult,
    ReplacementSegment,
    apply_replacement,
    apply_template,
    segment_output,
)
from sequence_numbering import NumberingPosition, NumberingSpec, apply_numbering
from text_diff import DiffSegment, compute_diff

logger = logging.getLogger(__name__)


def _is_case_insensitive_filesystem() -> bool:
    """Detect whether the temp directory's file system ignores case (Windows, macOS)."""
    with tempfile.NamedTemporaryFile(prefix="CasE_TeSt_", delete=False) as tmp:
        tmp_path = Path(tmp.name)
    try:
        folded = Path(str(tmp_path).lower())
        return str(folded) != str(tmp_path) and folded.exists()
    finally:
        tmp_path.unlink(missing_ok=True)


# File system type doesn't change while the program runs
CASE_INSENSITIVE_FS = _is_case_insensitive_filesystem()


class RenameBlockedError(RuntimeError):
    """Raised when renames are requested while target paths collide."""

    def __init__(self, groups: Dict[str, List[str]]) -> None:
        self.groups = groups
        super().__init__(
            f"{len(groups)} target path(s) would be claimed by more than one file"
        )


@dataclass(frozen=True)
class RenameConfig:
    """Everything that decides a new name, fixed for one batch run."""

    find_text: str = ""
    replace_text: str = ""
    case_sensitive: bool = False
    regex_mode: bool = False
    replace_first_only: bool = False
    numbering: NumberingSpec = field(default_factory=NumberingSpec)

    @classmethod
    def from_app_config(cls, config: AppConfig) -> "RenameConfig":
        return cls(
            find_text=config.find_text,
            replace_text=config.replace_text,
            case_sensitive=config.case_sensitive,
            regex_mode=config.regex_mode,
            replace_first_only=config.replace_first_only,
            numbering=NumberingSpec(
                enabled=config.numbering_enabled,
                start_number=config.numbering_start,
                increment=config.numbering_increment,
                padding=config.numbering_padding,
                separator=config.numbering_separator,
                position=NumberingPosition(config.numbering_position),
                insert_index=config.numbering_insert_index,
            ),
        )


@dataclass(frozen=True)
class RenameResult:
    new_name: str
    error: Optional[str] = None


@dataclass(frozen=True)
class NamePiece:
    """A run of a new name with how it came to be there."""

    text: str
    group_index: Optional[int] = None
    is_number: bool = False


@dataclass
class RenameItem:
    """Preview of one file in the batch; rebuilt whenever the config changes."""

    path: str
    name: str
    new_name: str
    name_after_replace: str = ""
    match_spans: List[MatchSpan] = field(default_factory=list)
    # Positions index ``new_name``
    segments: List[ReplacementSegment] = field(default_factory=list)
    number_start: int = 0
    number_end: int = 0
    error: Optional[str] = None
    has_collision: bool = False
    status: str = "pending"  # pending, done, done (dry run), skipped, error
    message: str = ""

    @property
    def changed(self) -> bool:
        return self.new_name != self.name

    @property
    def new_path(self) -> str:
        return resulting_path(self.path, self.name, self.new_name)

    @property
    def has_number(self) -> bool:
        return self.number_end > self.number_start

    def diff(self) -> List[DiffSegment]:
        return compute_diff(self.name, self.new_name)

    def new_name_pieces(self) -> List[NamePiece]:
        """Cut ``new_name`` into unmarked, group, literal and number runs."""
        pieces: List[NamePiece] = []
        position = 0
        for text, group_index in segment_output(self.new_name, self.segments):
            end = position + len(text)
            cuts = {position, end}
            if self.has_number:
                cuts.update(
                    bound for bound in (self.number_start, self.number_end)
                    if position < bound < end
                )
            ordered = sorted(cuts)
            for low, high in zip(ordered, ordered[1:]):
                is_number = self.has_number and self.number_start <= low and high <= self.number_end
                pieces.append(
                    NamePiece(self.new_name[low:high], None if is_number else group_index, is_number)
                )
            position = end
        return pieces

    def to_dict(self) -> dict:
        return {
            "old": self.path,
            "new": self.new_path,
            "name": self.name,
            "new_name": self.new_name,
            "collision": self.has_collision,
            "error": self.error,
            "status": self.status,
            "message": self.message,
        }


def calculate_new_name(
    original_name: str,
    find_text: str,
    replace_text: str,
    case_sensitive: bool = False,
    regex_mode: bool = False,
    replace_first_only: bool = False,
) -> RenameResult:
    """Apply one find/replace to a single name. Empty find text changes nothing."""
    result = apply_replacement(
        original_name,
        find_text,
        replace_text,
        regex_mode=regex_mode,
        case_sensitive=case_sensitive,
        first_only=replace_first_only,
    )
    return RenameResult(result.result, result.error)


def _compile(config: RenameConfig) -> Tuple[Optional[CompiledPattern], Optional[str]]:
    if not config.find_text:
        return None, None
    try:
        pattern = compile_pattern(
            config.find_text,
            regex_mode=config.regex_mode,
            case_sensitive=config.case_sensitive,
        )
    except PatternError as exc:
        return None, str(exc)
    return pattern, None


def _shift_segments(
    segments: Iterable[ReplacementSegment], insert_at: int, inserted: int
) -> List[ReplacementSegment]:
    """Move segments past text inserted at ``insert_at``, splitting any that straddle it."""
    shifted: List[ReplacementSegment] = []
    for seg in segments:
        if seg.end <= insert_at:
            shifted.append(seg)
        elif seg.start >= insert_at:
            shifted.append(
                ReplacementSegment(seg.start + inserted, seg.end + inserted, seg.group_index, seg.content)
            )
        else:
            head = insert_at - seg.start
            shifted.append(ReplacementSegment(seg.start, insert_at, seg.group_index, seg.content[:head]))
            shifted.append(
                ReplacementSegment(
                    insert_at + inserted, seg.end + inserted, seg.group_index, seg.content[head:]
                )
            )
    return shifted


def _build_item(
    path: str,
    file_index: int,
    config: RenameConfig,
    pattern: Optional[CompiledPattern],
    error: Optional[str],
) -> RenameItem:
    name = get_file_name(path)
    if pattern is None:
        replaced = ReplacementResult(name, [], error)
        spans: List[MatchSpan] = []
    else:
        replaced = apply_template(name, pattern, config.replace_text, config.replace_first_only)
        spans = find_matches(name, pattern, config.replace_first_only)

    numbered = apply_numbering(replaced.result, file_index, config.numbering)
    segments = replaced.segments
    if numbered.has_number:
        separator = config.numbering.separator
        insert_at = 0 if numbered.number_start == 0 else numbered.number_start - len(separator)
        inserted = len(numbered.name) - len(replaced.result)
        segments = _shift_segments(segments, insert_at, inserted)

    return RenameItem(
        path=path,
        name=name,
        new_name=numbered.name,
        name_after_replace=replaced.result,
        match_spans=spans,
        segments=segments,
        number_start=numbered.number_start,
        number_end=numbered.number_end,
        error=replaced.error,
    )


def preview_item(path: str, file_index: int, config: RenameConfig) -> RenameItem:
    """Preview a single file; collisions need the whole batch and stay unset."""
    pattern, error = _compile(config)
    return _build_item(path, file_index, config, pattern, error)


def preview_batch(
    paths: Sequence[str], config: RenameConfig, *, case_insensitive: bool = False
) -> List[RenameItem]:
    """Preview every path in order and flag items whose targets collide."""
    pattern, error = _compile(config)
    if error:
        logger.debug("Pattern error for batch of %d: %s", len(paths), error)
    items = [
        _build_item(str(path), index, config, pattern, error)
        for index, path in enumerate(paths)
    ]
    flags = detect_collisions(items, case_insensitive=case_insensitive)
    for item in items:
        item.has_collision = flags[item.path]
    return items


def has_blocking_collisions(items: Iterable[RenameItem]) -> bool:
    return any(item.has_collision for item in items)


def rename_operations(items: Iterable[RenameItem]) -> List[Tuple[str, str]]:
    """(old path, new path) pairs for items whose name actually changes."""
    return [(item.path, item.new_path) for item in items if item.changed]


def collect_paths(root: Path | str, recursive: bool = True) -> List[str]:
    """List files under ``root`` (or ``root`` itself when it is a file), sorted."""
    root_path = Path(root).expanduser().resolve()
    if not root_path.exists():
        raise FileNotFoundError(f"Path not found: {root}")
    if root_path.is_file():
        return [str(root_path)]

    paths: List[str] = []
    for dirpath, dirnames, filenames in os.walk(root_path):
        dir_path = Path(dirpath)
        paths.extend(str(dir_path / fname) for fname in filenames)
        if not recursive:
            break
    return sorted(paths)


def _occupied_by_other(source: Path, target: Path) -> bool:
    """True when ``target`` exists and is not just ``source`` in another case."""
    if not target.exists():
        return False
    if str(source).casefold() != str(target).casefold():
        return True
    try:
        return not source.samefile(target)
    except OSError:
        return True


def apply_renames(
    items: Iterable[RenameItem],
    *,
    dry_run: bool = False,
    stop_on_error: bool = False,
) -> None:
    """Rename every changed item in place, recording a status on each."""
    items = list(items)
    if has_blocking_collisions(items):
        raise RenameBlockedError(collision_groups(items))

    for item in items:
        if item.status != "pending":
            continue
        if not item.changed:
            item.status = "skipped"
            item.message = "Name unchanged"
            continue

        source = Path(item.path)
        target = Path(item.new_path)
        if _occupied_by_other(source, target):
            item.status = "error"
            item.message = f"Target already exists on disk: {target}"
        else:
            try:
                if dry_run:
                    item.status = "done (dry run)"
                else:
                    source.rename(target)
                    item.status = "done"
                logger.info("Renamed %s -> %s%s", source, target, " (dry run)" if dry_run else "")
            except OSError as exc:
                item.status = "error"
                item.message = str(exc)

        if item.status == "error":
            logger.warning("Failed to rename %s: %s", source, item.message)
            if stop_on_error:
                break


def summarize(items: Iterable[RenameItem]) -> dict:
    """Return simple metrics about a preview or its rename results."""
    summary = {"total": 0, "changed": 0, "collisions": 0, "errors": 0, "completed": 0}
    for item in items:
        summary["total"] += 1
        if item.changed:
            summary["changed"] += 1
        if item.has_collision:
            summary["collisions"] += 1
        if item.status == "error":
            summary["errors"] += 1
        if item.status.startswith("done"):
            summary["completed"] += 1
    return summary


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Preview and apply find/replace and numbering renames on a set of files."
    )
    parser.add_argument("paths", nargs="+", help="Files or directories to rename.")
    parser.add_argument("--find", dest="find_text", help="Text or pattern to find.")
    parser.add_argument(
        "--replace", dest="replace_text", help="Replacement template ($1, $&, $$ ...)."
    )
    parser.add_argument(
        "--regex", dest="regex_mode", action="store_true", default=None,
        help="Treat --find as a regular expression.",
    )
    parser.add_argument(
        "--case-sensitive", dest="case_sensitive", action="store_true", default=None,
        help="Match case exactly.",
    )
    parser.add_argument(
        "--first-only", dest="replace_first_only", action="store_true", default=None,
        help="Replace only the first match in each name.",
    )
    parser.add_argument(
        "--number", dest="numbering_enabled", action="store_true", default=None,
        help="Add a sequence number to each name.",
    )
    parser.add_argument("--start", dest="numbering_start", type=int, help="First number.")
    parser.add_argument(
        "--increment", dest="numbering_increment", type=int, help="Step between numbers."
    )
    parser.add_argument(
        "--padding", dest="numbering_padding", type=int, help="Minimum digits (zero padded)."
    )
    parser.add_argument(
        "--separator", dest="numbering_separator", help="Text between number and name."
    )
    parser.add_argument(
        "--position",
        dest="numbering_position",
        choices=[position.value for position in NumberingPosition],
        help="Where the number goes in the base name.",
    )
    parser.add_argument(
        "--insert-index", dest="numbering_insert_index", type=int,
        help="Character index used with --position index.",
    )
    parser.add_argument(
        "--no-recursive", dest="recursive", action="store_false", default=None,
        help="Only list files directly inside given directories.",
    )
    parser.add_argument(
        "--config",
        help="Path to config JSON (default: ~/.config/batchrename/config.json)",
    )
    parser.add_argument(
        "--apply",
        action="store_true",
        help="Actually perform the renames.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Explicitly skip renames even if --apply is provided.",
    )
    parser.add_argument(
        "--log-level",
        choices=["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"],
        default="WARNING",
        help="Logging verbosity",
    )
    return parser


# AppConfig fields that share a name with an argparse dest
_OVERRIDES = [f.name for f in dataclasses.fields(AppConfig)]


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    config_path = Path(args.config).expanduser() if args.config else None
    try:
        app_config = AppConfig.load(config_path)
        overrides = {
            name: getattr(args, name)
            for name in _OVERRIDES
            if getattr(args, name, None) is not None
        }
        app_config = dataclasses.replace(app_config, **overrides)
        app_config.validate(config_path)
    except ConfigLoadError as exc:
        print(f"Configuration error: {exc}")
        print(
            f"Fix or remove '{exc.path}' (it's JSON) and rerun. "
            "Deleting it will recreate the default settings."
        )
        return 2

    paths: List[str] = []
    for raw in args.paths:
        try:
            paths.extend(collect_paths(raw, recursive=app_config.recursive))
        except FileNotFoundError as exc:
            parser.error(str(exc))

    items = preview_batch(
        paths, RenameConfig.from_app_config(app_config), case_insensitive=CASE_INSENSITIVE_FS
    )
    errors = {item.error for item in items if item.error}
    if errors:
        for error in sorted(errors):
            print(f"Pattern error: {error}")
        return 1

    changed = [item for item in items if item.changed]
    if not changed:
        print("No changes to be made.")
        return 0

    print(f"Found {len(changed)} of {len(items)} files to rename:")
    for item in changed:
        marker = " [collision]" if item.has_collision else ""
        print(f"{item.path} -> {item.new_name}{marker}")

    if has_blocking_collisions(items):
        print("\nSome new names collide; nothing will be renamed:")
        for target, sources in collision_groups(items).items():
            print(f" - {target} <- {', '.join(sources)}")
        return 1

    if not args.apply:
        print("\nPreview mode only. Use --apply to execute changes.")
        return 0

    apply_renames(items, dry_run=args.dry_run, stop_on_error=app_config.stop_on_error)
    summary = summarize(items)
    if args.dry_run:
        print(
            f"\nDry run complete: {summary['completed']} pending renames "
            f"({summary['errors']} would fail)."
        )
    else:
        print(f"\nCompleted {summary['completed']} renames ({summary['errors']} errors).")
    for item in items:
        if item.status == "error":
            print(f" - Failed: {item.path} -> {item.new_path}: {item.message}")
    return 0


__all__ = [
    "CASE_INSENSITIVE_FS",
    "NamePiece",
    "RenameBlockedError",
    "RenameConfig",
    "RenameItem",
    "RenameResult",
    "apply_renames",
    "calculate_new_name",
    "collect_paths",
    "has_blocking_collisions",
    "main",
    "preview_batch",
    "preview_item",
    "rename_operations",
    "summarize",
]


if __name__ == "__main__":
    raise SystemExit(main())
