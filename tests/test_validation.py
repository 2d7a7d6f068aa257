"""Tests for input validation rules."""

import pytest

from rrdoubles.validation import (
    MAX_NAME_LENGTH,
    ValidationError,
    parse_score,
    validate_player_name,
    validate_score,
)


class TestParseScore:
    """Test cases for parse_score function."""

    def test_valid_scores(self):
        assert parse_score(11) == 11
        assert parse_score(0) == 0
        assert parse_score("7") == 7
        assert parse_score(" 21 ") == 21

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_missing_score(self, value):
        with pytest.raises(ValidationError, match="required"):
            parse_score(value)

    @pytest.mark.parametrize("value", ["abc", "11.5", "1e3", True])
    def test_non_numeric_score(self, value):
        with pytest.raises(ValidationError, match="whole number"):
            parse_score(value)

    @pytest.mark.parametrize("value", [-1, "-3"])
    def test_negative_score(self, value):
        with pytest.raises(ValidationError, match="negative"):
            parse_score(value)


class TestValidateScore:
    """Test cases for validate_score function."""

    def test_valid(self):
        assert validate_score(11, 5) == (True, "")
        assert validate_score("0", "0") == (True, "")

    def test_tied_scores_are_allowed(self):
        assert validate_score(10, 10) == (True, "")

    def test_reports_failing_team(self):
        is_valid, msg = validate_score(11, "x")
        assert is_valid is False
        assert msg.startswith("Team 2:")

        is_valid, msg = validate_score(-2, 11)
        assert is_valid is False
        assert msg.startswith("Team 1:")


class TestValidatePlayerName:
    """Test cases for validate_player_name function."""

    def test_valid(self):
        assert validate_player_name("Ana") == (True, "")
        assert validate_player_name("  Ben  ", ["Ana"]) == (True, "")

    @pytest.mark.parametrize("name", [None, "", "   "])
    def test_empty(self, name):
        is_valid, msg = validate_player_name(name)
        assert is_valid is False
        assert "empty" in msg

    def test_too_long(self):
        is_valid, msg = validate_player_name("x" * (MAX_NAME_LENGTH + 1))
        assert is_valid is False
        assert "too long" in msg

    def test_duplicate_is_case_insensitive(self):
        is_valid, msg = validate_player_name("ana ", ["Ana", "Ben"])
        assert is_valid is False
        assert "already exists" in msg
