"""Game domain services: board, timer, scoring, leaderboard and sessions.

This package contains the memory game engine. HTTP routes and socket
handlers import from here, keeping transport concerns separated from core
game mechanics.
"""

from .board import Tile, generate_board
from .levels import Level, GAME_LEVELS, get_level
from .scoring import calculate_score
from .leaderboard import HighScoreEntry, Leaderboard
from .session import GameSession, GameState, Snapshot

__all__ = [
    'Tile',
    'generate_board',
    'Level',
    'GAME_LEVELS',
    'get_level',
    'calculate_score',
    'HighScoreEntry',
    'Leaderboard',
    'GameSession',
    'GameState',
    'Snapshot',
]
