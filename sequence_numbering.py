"""Sequence numbers for batch renames: formatting and placement in a name."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Tuple


class NumberingPosition(str, Enum):
    START = "start"
    END = "end"
    INDEX = "index"


@dataclass(frozen=True)
class NumberingSpec:
    """Numbering rules for one batch run. Read-only once constructed."""

    enabled: bool = False
    start_number: int = 1
    increment: int = 1
    padding: int = 1
    separator: str = "_"
    position: NumberingPosition = NumberingPosition.START
    insert_index: int = 0

    def __post_init__(self) -> None:
        if self.padding < 1:
            raise ValueError(f"padding must be at least 1, got {self.padding}")
        if not isinstance(self.position, NumberingPosition):
            object.__setattr__(self, "position", NumberingPosition(self.position))


@dataclass(frozen=True)
class NumberingResult:
    formatted_number: str
    insert_index: int


@dataclass(frozen=True)
class NumberedName:
    """A file name with its number located, for highlighting."""

    name: str
    number_start: int = 0
    number_end: int = 0

    @property
    def has_number(self) -> bool:
        return self.number_end > self.number_start


def format_number(number: int, padding: int) -> str:
    """Left-pad with zeros to ``padding`` digits; never truncates."""
    return str(number).zfill(padding)


def split_extension(name: str) -> Tuple[str, str]:
    """Split at the last dot, except for dotfiles like ``.bashrc``."""
    dot = name.rfind(".")
    if dot > 0:
        return name[:dot], name[dot:]
    return name, ""


def split_padding(formatted_number: str) -> Tuple[str, str]:
    """Separate leading zero padding from the significant digits."""
    padding_end = 0
    for char in formatted_number[:-1]:
        if char != "0":
            break
        padding_end += 1
    return formatted_number[:padding_end], formatted_number[padding_end:]


def number_for(file_index: int, spec: NumberingSpec, base_name_length: int) -> NumberingResult:
    number = spec.start_number + file_index * spec.increment
    if spec.position is NumberingPosition.START:
        index = 0
    elif spec.position is NumberingPosition.END:
        index = base_name_length
    else:
        index = max(0, min(spec.insert_index, base_name_length))
    return NumberingResult(format_number(number, spec.padding), index)


def _number_offset(
    base_length: int, separator: str, position: NumberingPosition, insert_index: int
) -> int:
    """Offset of the number inside the base that ``insert_number`` builds."""
    index = max(0, min(insert_index, base_length))
    if position is NumberingPosition.START or (
        position is NumberingPosition.INDEX and index == 0
    ):
        return 0
    if position is NumberingPosition.END or index >= base_length:
        return base_length + len(separator)
    return index + len(separator)


def insert_number(
    base: str,
    formatted_number: str,
    separator: str,
    position: NumberingPosition,
    insert_index: int,
) -> str:
    """Place ``formatted_number`` into ``base`` with the separator rules.

    A number at the start is followed by the separator, one at the end is
    preceded by it, and one inside the base gets a separator on each side.
    """
    offset = _number_offset(len(base), separator, position, insert_index)
    if offset == 0:
        return formatted_number + separator + base
    before, after = base[: offset - len(separator)], base[offset - len(separator):]
    if not after:
        return before + separator + formatted_number
    return before + separator + formatted_number + separator + after


def apply_numbering(name: str, file_index: int, spec: NumberingSpec) -> NumberedName:
    """Number the base part of ``name`` for the file at ``file_index``."""
    if not spec.enabled:
        return NumberedName(name)
    base, extension = split_extension(name)
    result = number_for(file_index, spec, len(base))
    numbered = insert_number(
        base, result.formatted_number, spec.separator, spec.position, result.insert_index
    )
    offset = _number_offset(len(base), spec.separator, spec.position, result.insert_index)
    return NumberedName(
        numbered + extension, offset, offset + len(result.formatted_number)
    )


__all__ = [
    "NumberedName",
    "NumberingPosition",
    "NumberingResult",
    "NumberingSpec",
    "apply_numbering",
    "format_number",
    "insert_number",
    "number_for",
    "split_extension",
    "split_padding",
]
