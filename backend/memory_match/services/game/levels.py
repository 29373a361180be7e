from dataclasses import dataclass
from typing import Iterable, Optional, Tuple


@dataclass(frozen=True)
class Level:
    name: str
    grid_size: int
    pair_count: int

    @property
    def tile_count(self) -> int:
        return self.pair_count * 2

    def to_dict(self):
        return {
            'name': self.name,
            'grid_size': self.grid_size,
            'pair_count': self.pair_count,
            'estimated_time': estimated_time(self.pair_count),
        }


GAME_LEVELS: Tuple[Level, ...] = (
    Level(name='Easy', grid_size=8, pair_count=32),
    Level(name='Medium', grid_size=10, pair_count=50),
    Level(name='Hard', grid_size=12, pair_count=72),
)


def get_level(name: str, levels: Iterable[Level] = GAME_LEVELS) -> Optional[Level]:
    """Case-insensitive lookup by level name."""
    wanted = (name or '').strip().lower()
    for level in levels:
        if level.name.lower() == wanted:
            return level
    return None


def estimated_time(pair_count: int) -> str:
    if pair_count <= 12:
        return '1-3 min'
    if pair_count <= 18:
        return '2-5 min'
    return '3-8 min'
