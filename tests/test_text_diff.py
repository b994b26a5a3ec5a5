"""Tests for text_diff module."""

from text_diff import (
    DiffSegment,
    DiffType,
    compute_diff,
    modified_text,
    original_text,
)

U, R, A = DiffType.UNCHANGED, DiffType.REMOVED, DiffType.ADDED


class TestComputeDiff:
    """Tests for compute_diff function."""

    def test_identical(self):
        """Test that equal strings give one unchanged segment."""
        assert compute_diff("abc", "abc") == [DiffSegment(U, "abc")]

    def test_both_empty(self):
        """Test that two empty strings give one empty unchanged segment."""
        assert compute_diff("", "") == [DiffSegment(U, "")]

    def test_pure_addition(self):
        """Test diff from an empty original."""
        assert compute_diff("", "new") == [DiffSegment(A, "new")]

    def test_pure_removal(self):
        """Test diff to an empty result."""
        assert compute_diff("old", "") == [DiffSegment(R, "old")]

    def test_replacement_in_middle(self):
        """Test that removed text comes before added text."""
        assert compute_diff("photo_01.jpg", "image_01.jpg") == [
            DiffSegment(R, "photo"),
            DiffSegment(A, "image"),
            DiffSegment(U, "_01.jpg"),
        ]

    def test_keeps_common_characters(self):
        """Test that the LCS keeps shared characters in the middle."""
        segments = compute_diff("abXcd", "abYcd")
        assert segments == [
            DiffSegment(U, "ab"),
            DiffSegment(R, "X"),
            DiffSegment(A, "Y"),
            DiffSegment(U, "cd"),
        ]

    def test_insertion(self):
        """Test a pure insertion between common text."""
        assert compute_diff("file.txt", "file_001.txt") == [
            DiffSegment(U, "file"),
            DiffSegment(A, "_001"),
            DiffSegment(U, ".txt"),
        ]

    def test_no_adjacent_same_type(self):
        """Test that neighbouring segments always differ in type."""
        segments = compute_diff("a1b2c3d4", "aXbYcZd4")
        assert all(a.type is not b.type for a, b in zip(segments, segments[1:]))
        assert all(segment.text for segment in segments)

    def test_round_trip(self):
        """Test that both sides can be rebuilt from the segments."""
        pairs = [
            ("", "x"),
            ("kitten", "sitting"),
            ("IMG_0001.JPG", "2024-Holiday-0001.jpg"),
            ("aaaa", "aa"),
            ("abc", "cba"),
        ]
        for original, modified in pairs:
            segments = compute_diff(original, modified)
            assert original_text(segments) == original
            assert modified_text(segments) == modified

    def test_long_input_fallback(self):
        """Test that long inputs report the changed middle as one removal and one addition."""
        original = "a" * 300 + "bX" + "c" * 300
        modified = "a" * 300 + "Yb" + "c" * 300
        assert compute_diff(original, modified) == [
            DiffSegment(U, "a" * 300),
            DiffSegment(R, "bX"),
            DiffSegment(A, "Yb"),
            DiffSegment(U, "c" * 300),
        ]

    def test_combined_length_500_uses_lcs(self):
        """Test that a combined length of exactly 500 still keeps shared characters."""
        original = "a" * 124 + "bX" + "c" * 124
        modified = "a" * 124 + "Yb" + "c" * 124
        assert len(original) + len(modified) == 500
        assert compute_diff(original, modified) == [
            DiffSegment(U, "a" * 124),
            DiffSegment(A, "Y"),
            DiffSegment(U, "b"),
            DiffSegment(R, "X"),
            DiffSegment(U, "c" * 124),
        ]

    def test_combined_length_501_falls_back(self):
        """Test that one character past 500 switches to the prefix/suffix split."""
        original = "a" * 124 + "bX" + "c" * 124
        modified = "a" * 124 + "Ybb" + "c" * 124
        assert len(original) + len(modified) == 501
        assert compute_diff(original, modified) == [
            DiffSegment(U, "a" * 124),
            DiffSegment(R, "bX"),
            DiffSegment(A, "Ybb"),
            DiffSegment(U, "c" * 124),
        ]
        assert compute_diff(original, modified, threshold=501) == [
            DiffSegment(U, "a" * 124),
            DiffSegment(A, "Y"),
            DiffSegment(U, "b"),
            DiffSegment(R, "X"),
            DiffSegment(A, "b"),
            DiffSegment(U, "c" * 124),
        ]

    def test_threshold_is_configurable(self):
        """Test that a small threshold skips the LCS and keeps round-trips."""
        segments = compute_diff("abXcd", "aYbcd", threshold=4)
        assert segments == [
            DiffSegment(U, "a"),
            DiffSegment(R, "bX"),
            DiffSegment(A, "Yb"),
            DiffSegment(U, "cd"),
        ]
        assert original_text(segments) == "abXcd"
        assert modified_text(segments) == "aYbcd"

    def test_deterministic(self):
        """Test that repeated calls give identical results."""
        assert compute_diff("rename me", "renamed") == compute_diff("rename me", "renamed")
