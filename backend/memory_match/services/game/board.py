import random
from dataclasses import dataclass, asdict
from typing import List, Optional


SYMBOLS = [
    '🎯', '🎪', '🎨', '🎭', '🎸', '🎹', '🎺', '🎻', '🎲', '🎰', '🎳', '🎮',
    '🚀', '🚁', '🚂', '🚗', '🚙', '🚌', '🚐', '🚑', '🚒', '🚓', '🚔', '🚕',
    '⭐', '⚡', '🔥', '❄️', '🌟', '🎀', '🎁', '💎', '🏆', '🎊', '🎉', '🌈',
    '🦄', '🐻', '🐱', '🐶', '🐸', '🦊', '🐨', '🐼', '🦁', '🐯', '🐮', '🐷',
    '🍕', '🍔', '🍟', '🌭', '🍿', '🎂', '🍰', '🧁', '🍪', '🍩', '🍭', '🍬',
]

COLORS = [
    '#FF6B6B', '#4ECDC4', '#45B7D1', '#96CEB4', '#FFEAA7', '#DDA0DD', '#98D8C8',
    '#F7DC6F', '#BB8FCE', '#85C1E9', '#F8C471', '#82E0AA', '#F1948A', '#AED6F1',
]


@dataclass(frozen=True)
class Tile:
    id: int
    pair_id: int
    symbol: str
    color: str

    def to_dict(self):
        return asdict(self)


def generate_board(pair_count: int, rng: Optional[random.Random] = None) -> List[Tile]:
    """Build a shuffled deck of ``2 * pair_count`` tiles.

    Both tiles of a pair carry the same symbol and color and differ only in
    ``id``. Symbols and colors cycle independently when ``pair_count``
    exceeds the palette, so pairs past the 60th reuse a symbol with a
    different color.
    """
    if pair_count < 0:
        raise ValueError('pair_count must not be negative')
    rng = rng or random.Random()

    tiles: List[Tile] = []
    tile_id = 0
    for pair_id in range(pair_count):
        symbol = SYMBOLS[pair_id % len(SYMBOLS)]
        color = COLORS[pair_id % len(COLORS)]
        for _ in range(2):
            tiles.append(Tile(id=tile_id, pair_id=pair_id, symbol=symbol, color=color))
            tile_id += 1

    # Fisher-Yates
    for i in range(len(tiles) - 1, 0, -1):
        j = rng.randint(0, i)
        tiles[i], tiles[j] = tiles[j], tiles[i]
    return tiles
