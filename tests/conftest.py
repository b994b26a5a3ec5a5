"""Pytest configuration and shared fixtures."""

import tempfile
from pathlib import Path
from typing import Generator

import pytest

from config_manager import AppConfig


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_files(temp_dir: Path) -> Path:
    """Create a flat folder of photos and notes."""
    (temp_dir / "IMG_001.jpg").touch()
    (temp_dir / "IMG_002.jpg").touch()
    (temp_dir / "IMG_003.JPG").touch()
    (temp_dir / "notes.txt").write_text("hello")
    (temp_dir / ".hidden").touch()

    return temp_dir


@pytest.fixture
def nested_files(temp_dir: Path) -> Path:
    """Create files spread over nested folders."""
    (temp_dir / "album").mkdir()
    (temp_dir / "album" / "photo one.jpg").touch()
    (temp_dir / "album" / "deep").mkdir()
    (temp_dir / "album" / "deep" / "photo two.jpg").touch()
    (temp_dir / "top.jpg").touch()

    return temp_dir


@pytest.fixture
def config_path(tmp_path: Path) -> Path:
    """Path of a saved default config, kept apart from the files being renamed."""
    path = tmp_path / "test_config.json"
    AppConfig().save(path)
    return path


@pytest.fixture
def collision_files(temp_dir: Path) -> Path:
    """Create files that will collide after renaming."""
    (temp_dir / "a.txt").touch()
    (temp_dir / "b.txt").touch()
    (temp_dir / "c.md").touch()
    # With find "^[ab]" / replace "x" both .txt files become "x.txt"

    return temp_dir
