"""Partnership ledger: which pairs of players have already been teammates."""

from rrdoubles.models import Match, Team


def partnership_key(id1: str, id2: str) -> str:
    """Order-independent key for a pair of player ids.

    Examples:
        >>> partnership_key("b", "a")
        'a-b'
    """
    return "-".join(sorted((id1, id2)))


def team_key(team: Team) -> str:
    """Partnership key of a two-player team."""
    return partnership_key(team[0].id, team[1].id)


def used_partnerships(matches: list[Match]) -> set[str]:
    """Collect the partnership keys of both teams of every match."""
    used = set()
    for match in matches:
        used.add(team_key(match.team1))
        used.add(team_key(match.team2))
    return used
