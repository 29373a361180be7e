from typing import NamedTuple

BASE_SCORE = 10000
MOVE_PENALTY = 50
SECOND_PENALTY = 10


class ScoreRating(NamedTuple):
    label: str
    stars: int


def calculate_score(moves: int, elapsed_seconds: int) -> int:
    """Score a finished session.

    ``max(0, 10000 - 50 * moves - 10 * elapsed_seconds)``. Used both for the
    completion screen and for ranking leaderboard entries.
    """
    return max(0, BASE_SCORE - moves * MOVE_PENALTY - elapsed_seconds * SECOND_PENALTY)


def rate_score(score: int, pair_count: int) -> ScoreRating:
    """Map a score to the victory banner rating (30 points per pair is par)."""
    max_possible = pair_count * 30
    percentage = (score / max_possible) * 100 if max_possible > 0 else 0
    if percentage >= 90:
        return ScoreRating('Perfect!', 3)
    if percentage >= 75:
        return ScoreRating('Excellent!', 2)
    if percentage >= 60:
        return ScoreRating('Good!', 1)
    return ScoreRating('Nice Try!', 0)


def format_time(seconds: int) -> str:
    mins, secs = divmod(int(seconds), 60)
    return f"{mins}:{secs:02d}"
