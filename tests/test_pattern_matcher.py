"""Tests for pattern_matcher module."""

import pytest

from pattern_matcher import (
    HighlightRegion,
    HighlightSegment,
    MatchSpan,
    PatternError,
    compile_pattern,
    find_matches,
    has_capture_groups,
    highlight_regions,
    highlight_segments,
    is_valid_pattern,
    iter_matches,
)


def _spans(text, find, **kwargs):
    kwargs.setdefault("regex_mode", True)
    first_only = kwargs.pop("first_only", False)
    return find_matches(text, compile_pattern(find, **kwargs), first_only)


class TestCompilePattern:
    """Tests for compile_pattern function."""

    def test_literal_mode_escapes_metacharacters(self):
        """Test that a dot in literal mode only matches a dot."""
        pattern = compile_pattern(".")
        assert [m.span() for m in iter_matches("file.txt", pattern)] == [(4, 5)]

    def test_regex_mode_uses_pattern_as_is(self):
        """Test that a dot in regex mode matches any character."""
        pattern = compile_pattern(".", regex_mode=True)
        assert len(list(iter_matches("abc", pattern))) == 3

    def test_case_insensitive_by_default(self):
        """Test that matching ignores case unless asked not to."""
        assert _spans("xABC", "abc", regex_mode=False)[0].start == 1

    def test_case_sensitive(self):
        """Test that case-sensitive matching respects case."""
        assert _spans("xABC", "abc", regex_mode=False, case_sensitive=True) == []

    def test_group_count(self):
        """Test that the compiled value reports its capture groups."""
        assert compile_pattern("(a)(b)?", regex_mode=True).group_count == 2
        assert compile_pattern("(a)", regex_mode=False).group_count == 0

    def test_invalid_regex_raises_pattern_error(self):
        """Test that bad syntax raises PatternError with the source pattern."""
        with pytest.raises(PatternError) as excinfo:
            compile_pattern("(", regex_mode=True)
        assert excinfo.value.pattern == "("
        assert str(excinfo.value)

    def test_pattern_error_is_value_error(self):
        """Test that PatternError can be caught as ValueError."""
        with pytest.raises(ValueError):
            compile_pattern("[a-", regex_mode=True)

    def test_invalid_regex_is_fine_in_literal_mode(self):
        """Test that regex syntax is harmless when escaped."""
        assert _spans("a(b", "(", regex_mode=False)[0].start == 1


class TestZeroLengthMatches:
    """Tests for the empty-match cursor guard."""

    def test_dot_star(self):
        """Test that .* yields the whole text and a trailing empty match."""
        spans = _spans("abc", ".*")
        assert [(s.start, s.end) for s in spans] == [(0, 3), (3, 3)]

    def test_caret(self):
        """Test that ^ only matches at the start of the text."""
        assert [(s.start, s.end) for s in _spans("abc", "^")] == [(0, 0)]

    def test_dollar(self):
        """Test that $ only matches at the end of the text."""
        assert [(s.start, s.end) for s in _spans("abc", "$")] == [(3, 3)]

    def test_a_star(self):
        """Test that a* alternates empty and non-empty matches."""
        spans = _spans("baaac", "a*")
        assert [(s.start, s.end) for s in spans] == [(0, 0), (1, 4), (4, 4), (5, 5)]

    def test_empty_text(self):
        """Test that an empty string gives a single empty match for .*."""
        assert [(s.start, s.end) for s in _spans("", ".*")] == [(0, 0)]

    def test_lookahead(self):
        """Test that a pure lookahead stops after the last character."""
        assert [s.start for s in _spans("abc", "(?=.)")] == [0, 1, 2]

    def test_lookbehind_sees_earlier_text(self):
        """Test that look-behinds see text before the cursor."""
        spans = _spans("aXbX", "(?<=b)X")
        assert [(s.start, s.end) for s in spans] == [(3, 4)]


class TestFindMatches:
    """Tests for find_matches function."""

    def test_group_order(self):
        """Test that group 0 comes first, then groups by index."""
        assert _spans("abc", "(a(b)c)") == [
            MatchSpan(0, 3, 0, "abc"),
            MatchSpan(0, 3, 1, "abc"),
            MatchSpan(1, 2, 2, "b"),
        ]

    def test_optional_group_absent(self):
        """Test that a group that did not participate emits no span."""
        assert _spans("abc", "(x)?abc") == [MatchSpan(0, 3, 0, "abc")]

    def test_empty_group_present(self):
        """Test that a participating empty group still emits a span."""
        spans = _spans("abc", "a(x*)b")
        assert MatchSpan(1, 1, 1, "") in spans

    def test_all_matches(self):
        """Test that every non-overlapping match is returned."""
        spans = _spans("a1b22c333", r"\d+")
        assert [s.content for s in spans] == ["1", "22", "333"]

    def test_first_only(self):
        """Test that first_only stops after one match."""
        spans = _spans("a1b22c333", r"\d+", first_only=True)
        assert [s.content for s in spans] == ["1"]

    def test_no_match(self):
        """Test that a miss gives an empty list."""
        assert _spans("abc", "z") == []


class TestPatternHelpers:
    """Tests for is_valid_pattern and has_capture_groups."""

    def test_valid_pattern(self):
        """Test that a valid regex has no diagnostic."""
        assert is_valid_pattern(r"(\d+)") is None

    def test_invalid_pattern(self):
        """Test that an invalid regex returns a diagnostic."""
        assert is_valid_pattern("(abc") is not None

    def test_literal_never_invalid(self):
        """Test that literal text is always valid."""
        assert is_valid_pattern("(abc", regex_mode=False) is None

    def test_has_capture_groups(self):
        """Test capture group detection."""
        assert has_capture_groups(r"(\d+)") is True
        assert has_capture_groups(r"(?:\d+)") is False
        assert has_capture_groups("(") is False


class TestHighlightRegions:
    """Tests for highlight_regions function."""

    def test_inner_group_wins(self):
        """Test that nested groups override their parents."""
        regions = highlight_regions(_spans("abc", "(a(b)c)"))
        assert regions == [
            HighlightRegion(0, 1, 1),
            HighlightRegion(1, 2, 2),
            HighlightRegion(2, 3, 1),
        ]

    def test_adjacent_same_group_merge(self):
        """Test that touching regions of the same group merge."""
        spans = [MatchSpan(0, 2, 0, "ab"), MatchSpan(2, 4, 0, "cd")]
        assert highlight_regions(spans) == [HighlightRegion(0, 4, 0)]

    def test_separate_regions(self):
        """Test that gaps between spans stay uncovered."""
        spans = _spans("a1b2", r"\d")
        assert highlight_regions(spans) == [HighlightRegion(1, 2, 0), HighlightRegion(3, 4, 0)]

    def test_empty_spans_ignored(self):
        """Test that zero-length spans produce no region."""
        assert highlight_regions([MatchSpan(1, 1, 0, "")]) == []

    def test_later_span_wins_on_partial_overlap(self):
        """Test that the most recently registered span wins where spans overlap."""
        spans = [MatchSpan(0, 3, 1, "abc"), MatchSpan(2, 5, 2, "cde")]
        assert highlight_regions(spans) == [HighlightRegion(0, 2, 1), HighlightRegion(2, 5, 2)]


class TestHighlightSegments:
    """Tests for highlight_segments function."""

    def test_covers_text(self):
        """Test that segments rebuild the original text."""
        text = "xx abc yy"
        segments = highlight_segments(text, _spans(text, "(a(b)c)"))
        assert "".join(s.text for s in segments) == text
        assert segments == [
            HighlightSegment("xx "),
            HighlightSegment("a", 1),
            HighlightSegment("b", 2),
            HighlightSegment("c", 1),
            HighlightSegment(" yy"),
        ]

    def test_no_spans(self):
        """Test that text without matches is one plain segment."""
        assert highlight_segments("abc", []) == [HighlightSegment("abc")]
