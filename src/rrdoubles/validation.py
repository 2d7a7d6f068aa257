"""Validation rules for user input.

Scores and player names are checked here, at the CLI/web boundary, so the
scheduler and standings code can assume well-formed data.
"""

from typing import Optional, Union

MAX_NAME_LENGTH = 50

ScoreInput = Union[int, str, None]


class ValidationError(Exception):
    """Raised when validation fails."""

    pass


def parse_score(value: ScoreInput) -> int:
    """Parse a single score.

    Accepts ints and numeric strings (surrounding whitespace allowed).

    Raises:
        ValidationError: If the value is missing, not a whole number or negative

    Examples:
        >>> parse_score(" 11 ")
        11
        >>> parse_score(0)
        0
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError("Score is required")

    if isinstance(value, bool):
        raise ValidationError(f"Score must be a whole number, got {value!r}")

    if isinstance(value, int):
        score = value
    else:
        try:
            score = int(str(value).strip())
        except ValueError:
            raise ValidationError(f"Score must be a whole number, got {value!r}")

    if score < 0:
        raise ValidationError(f"Score cannot be negative (got {score})")

    return score


def validate_score(score1: ScoreInput, score2: ScoreInput) -> tuple[bool, str]:
    """Validate the two team scores of a match.

    Equal scores are accepted; standings treat them as neither a win nor
    a loss.

    Returns:
        Tuple of (is_valid, error_message)

    Examples:
        >>> validate_score(11, 5)
        (True, '')
        >>> validate_score("11", "-1")
        (False, 'Team 2: Score cannot be negative (got -1)')
    """
    for team_num, value in ((1, score1), (2, score2)):
        try:
            parse_score(value)
        except ValidationError as e:
            return False, f"Team {team_num}: {e}"

    return True, ""


def validate_player_name(
    name: Optional[str], existing_names: Optional[list[str]] = None
) -> tuple[bool, str]:
    """Validate a new player's name.

    Rules:
    - Must not be blank once surrounding whitespace is stripped
    - At most MAX_NAME_LENGTH characters
    - Must differ (case-insensitively) from every existing name

    Returns:
        Tuple of (is_valid, error_message)
    """
    cleaned = (name or "").strip()
    if not cleaned:
        return False, "Player name cannot be empty"

    if len(cleaned) > MAX_NAME_LENGTH:
        return False, f"Player name is too long (max {MAX_NAME_LENGTH} characters)"

    taken = {n.strip().casefold() for n in existing_names or []}
    if cleaned.casefold() in taken:
        return False, f"A player named '{cleaned}' already exists"

    return True, ""
