"""Tests for the rich-text helpers in renamer_gui."""

import pytest

pytest.importorskip("PySide6.QtWidgets")

from renamer_core import RenameConfig, preview_item  # noqa: E402
from renamer_gui import (  # noqa: E402
    GROUP_COLORS,
    confirm_text,
    diff_html,
    new_name_html,
    number_html,
    original_name_html,
    pattern_error_text,
    replace_placeholder,
)
from sequence_numbering import NumberingSpec  # noqa: E402
from text_diff import DiffType, compute_diff  # noqa: E402


class TestOriginalNameHtml:
    """Tests for original_name_html function."""

    def test_group_colours(self):
        """Test that the capture group is coloured."""
        item = preview_item(
            "/d/a12.txt", 0, RenameConfig(find_text=r"(\d+)", replace_text="#", regex_mode=True)
        )
        markup = original_name_html(item)
        assert markup.startswith("a<span")
        assert GROUP_COLORS[1] in markup
        assert ">12</span>" in markup

    def test_escapes_markup(self):
        """Test that names are HTML escaped."""
        item = preview_item("/d/<b>.txt", 0, RenameConfig())
        assert original_name_html(item) == "&lt;b&gt;.txt"


class TestNewNameHtml:
    """Tests for new_name_html function."""

    def test_literal_and_number(self):
        """Test that literal text and the number are both marked."""
        config = RenameConfig(
            find_text="a",
            replace_text="#",
            numbering=NumberingSpec(enabled=True, padding=3),
        )
        markup = new_name_html(preview_item("/d/a.txt", 0, config))
        assert markup.count("<span") == 3
        assert ">00</span>" in markup
        assert ">1</span>" in markup
        assert ">#</span>" in markup

    def test_unchanged(self):
        """Test that an unchanged name has no markup."""
        assert new_name_html(preview_item("/d/a.txt", 0, RenameConfig())) == "a.txt"


class TestNumberHtml:
    """Tests for number_html function."""

    def test_no_padding(self):
        """Test that unpadded numbers have a single span."""
        assert number_html("10").count("<span") == 1


class TestDiffHtml:
    """Tests for diff_html function."""

    def test_sides(self):
        """Test that each side only shows its own changes."""
        segments = compute_diff("old.txt", "new.txt")
        assert ">old</span>.txt" in diff_html(segments, DiffType.REMOVED)
        assert "new" not in diff_html(segments, DiffType.REMOVED)
        assert ">new</span>.txt" in diff_html(segments, DiffType.ADDED)


class TestPatternErrorText:
    """Tests for pattern_error_text function."""

    def test_invalid_regex(self):
        """Test that a broken regex is reported."""
        assert pattern_error_text("(abc", regex_mode=True)

    def test_literal_mode(self):
        """Test that the same text is fine as a literal."""
        assert pattern_error_text("(abc", regex_mode=False) == ""

    def test_empty(self):
        """Test that an empty find field shows no error."""
        assert pattern_error_text("", regex_mode=True) == ""


class TestReplacePlaceholder:
    """Tests for replace_placeholder function."""

    def test_groups_offered(self):
        """Test that group references are offered for patterns with groups."""
        assert "$1" in replace_placeholder(r"IMG_(\d+)", regex_mode=True)

    def test_no_groups(self):
        """Test that group references are left out without groups."""
        assert "$1" not in replace_placeholder(r"IMG_\d+", regex_mode=True)
        assert "$1" not in replace_placeholder(r"IMG_(\d+)", regex_mode=False)


class TestConfirmText:
    """Tests for confirm_text function."""

    def test_lists_file_names(self):
        """Test that each rename is listed by file name."""
        text = confirm_text([("/d/a.txt", "/d/z.txt")])
        assert text.startswith("Rename 1 files?")
        assert "a.txt → z.txt" in text

    def test_truncates(self):
        """Test that long batches are cut off after the limit."""
        operations = [(f"/d/{i}.txt", f"/d/n{i}.txt") for i in range(12)]
        text = confirm_text(operations, limit=10)
        assert "9.txt → n9.txt" in text
        assert "10.txt → n10.txt" not in text
        assert "… and 2 more" in text
