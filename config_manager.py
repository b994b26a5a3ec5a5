"""Configuration management for batchrename."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, asdict, fields
from pathlib import Path
from typing import Optional

from sequence_numbering import NumberingPosition

logger = logging.getLogger(__name__)

CONFIG_PATH = Path.home() / ".config" / "batchrename" / "config.json"


class ConfigLoadError(RuntimeError):
    """Raised when the application config cannot be loaded."""

    def __init__(self, path: Path, message: str) -> None:
        self.path = Path(path)
        super().__init__(message)


@dataclass
class AppConfig:
    find_text: str = ""
    replace_text: str = ""
    case_sensitive: bool = False
    regex_mode: bool = False
    replace_first_only: bool = False
    numbering_enabled: bool = False
    numbering_start: int = 1
    numbering_increment: int = 1
    numbering_padding: int = 1
    numbering_separator: str = "_"
    numbering_position: str = NumberingPosition.START.value
    numbering_insert_index: int = 0
    recursive: bool = True
    stop_on_error: bool = False

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "AppConfig":
        is_default_path = path is None
        path = path or CONFIG_PATH
        logger.debug("Loading config from: %s", path)

        if not path.exists():
            if is_default_path:
                # First run: write the defaults so the user has a file to edit
                logger.info("No config at %s, creating defaults", path)
                config = cls()
                config.save(path)
                return config
            raise FileNotFoundError(f"Config file not found at specified path: {path}")

        try:
            data = json.loads(path.read_text())
        except json.JSONDecodeError as exc:  # pragma: no cover - depends on user input
            raise ConfigLoadError(path, f"Failed to parse config: {exc}") from exc
        except OSError as exc:  # pragma: no cover - depends on filesystem issues
            raise ConfigLoadError(path, f"Unable to read config: {exc}") from exc

        if not isinstance(data, dict):
            raise ConfigLoadError(path, "Config root must be a JSON object")

        known = {f.name for f in fields(cls)}
        config = cls(**{key: value for key, value in data.items() if key in known})
        config.validate(path)
        return config

    def validate(self, path: Optional[Path] = None) -> None:
        path = path or CONFIG_PATH
        try:
            NumberingPosition(self.numbering_position)
        except ValueError as exc:
            raise ConfigLoadError(
                path, f"Unknown numbering_position: {self.numbering_position!r}"
            ) from exc
        if not isinstance(self.numbering_padding, int) or self.numbering_padding < 1:
            raise ConfigLoadError(
                path, f"numbering_padding must be an integer >= 1, got {self.numbering_padding!r}"
            )

    def save(self, path: Optional[Path] = None) -> None:
        path = path or CONFIG_PATH
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(asdict(self), indent=2))


__all__ = [
    "AppConfig",
    "CONFIG_PATH",
    "ConfigLoadError",
]
