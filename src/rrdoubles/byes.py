"""Bye bookkeeping across rounds."""

from collections import defaultdict

from rrdoubles.models import Match, Player


def players_in_round(matches: list[Match], round_number: int) -> set[str]:
    """Return ids of every player who appears in a match of the round."""
    playing = set()
    for match in matches:
        if match.round == round_number:
            playing.update(match.player_ids)
    return playing


def count_byes(players: list[Player], matches: list[Match]) -> dict[str, int]:
    """Count how many rounds each player has sat out.

    Every distinct round number present in ``matches`` is one round. A
    roster player absent from all matches of that round is credited one
    bye for it.

    Args:
        players: Current roster
        matches: Match history (any order)

    Returns:
        Mapping player id -> number of byes (0 for everyone when there are
        no matches yet)
    """
    bye_counts = {p.id: 0 for p in players}

    playing_by_round = defaultdict(set)
    for match in matches:
        playing_by_round[match.round].update(match.player_ids)

    for playing in playing_by_round.values():
        for player in players:
            if player.id not in playing:
                bye_counts[player.id] += 1

    return bye_counts
