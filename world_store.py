# world_store.py
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple

Coord = Tuple[int, int, int]


class BlockType(str, Enum):
    STONE = "stone"
    GRASS = "grass"
    WOOD = "wood"
    LEAF = "leaf"
    DIRT = "dirt"
    SAND = "sand"
    BRICK = "brick"
    GLASS = "glass"


@dataclass(frozen=True)
class Block:
    x: int
    y: int
    z: int
    type: BlockType

    @property
    def key(self) -> Coord:
        return (self.x, self.y, self.z)

    def to_data(self) -> dict:
        return {"x": self.x, "y": self.y, "z": self.z, "type": self.type.value}


class WorldStore:
    """Canonical block table keyed by integer coordinate.

    The store is the only writer of block data. A placement at an occupied
    coordinate is a no-op (first writer wins); there is no update in place.
    """

    def __init__(self):
        self._blocks: Dict[Coord, Block] = {}

    def load(self, blocks: Iterable[Block]) -> int:
        """Seed the store at startup; returns how many blocks were added."""
        added = 0
        for block in blocks:
            if block.key not in self._blocks:
                self._blocks[block.key] = block
                added += 1
        return added

    def get(self, x: int, y: int, z: int) -> Optional[Block]:
        return self._blocks.get((x, y, z))

    def put(self, x: int, y: int, z: int, block_type) -> Optional[Block]:
        key = (x, y, z)
        if key in self._blocks:
            return None
        block = Block(x, y, z, BlockType(block_type))
        self._blocks[key] = block
        return block

    def remove(self, x: int, y: int, z: int) -> Optional[Block]:
        return self._blocks.pop((x, y, z), None)

    def list_all(self) -> List[Block]:
        return list(self._blocks.values())

    def __len__(self):
        return len(self._blocks)

    def __contains__(self, key):
        return tuple(key) in self._blocks
