from array import array
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Iterator, List, Optional, Tuple

import numpy as np

from maze_pathfinder.core.errors import AdjacencyRejected

Cell = Tuple[int, int]


class TileType(IntEnum):
    PATH = 0
    WALL = 1
    BORDER_WALL = 2
    START = 3
    END = 4


PROTECTED_TYPES = frozenset({TileType.BORDER_WALL, TileType.START, TileType.END})


def is_protected(tile_type: TileType) -> bool:
    """BorderWall/Start/End are only changed by the endpoint state machine."""
    return tile_type in PROTECTED_TYPES


class Mark(IntEnum):
    # Cosmetic overlay written by the search engine
    NONE = 0
    VISITED = 1
    PATH = 2


class NeighborMode(Enum):
    # Value is the step length between candidates
    MAZE = 2
    PATH = 1


@dataclass(frozen=True)
class EndpointState:
    start_exists: bool
    end_exists: bool


class Grid:
    MIN_SIZE = 5
    MAX_SIZE = 201
    DEFAULT_SIZE = 21

    # up, right, down, left
    DIRECTIONS = ((0, 1), (1, 0), (0, -1), (-1, 0))

    __slots__ = ('size', 'width', 'height', 'tiles', 'marks', 'start_exists', 'end_exists')

    def __init__(self, size: int = DEFAULT_SIZE):
        self.size = 0
        self.width = 0
        self.height = 0
        self.tiles = array('B')
        self.marks = array('B')
        self.start_exists = False
        self.end_exists = False
        self.resize(size)

    @classmethod
    def normalize_size(cls, n: int) -> int:
        n = max(cls.MIN_SIZE, min(cls.MAX_SIZE, int(n)))
        if n % 2 == 0:
            n += 1
        return n

    def resize(self, n: int) -> int:
        """
        Rebuilds the grid at the normalized size: interior WALL, outer ring
        BORDER_WALL, no marks, no endpoints.
        """
        size = self.normalize_size(n)
        self.size = size
        self.width = size
        self.height = size

        tiles = array('B', [TileType.WALL] * (size * size))
        for i in range(size):
            tiles[i] = TileType.BORDER_WALL                      # bottom row
            tiles[(size - 1) * size + i] = TileType.BORDER_WALL  # top row
            tiles[i * size] = TileType.BORDER_WALL               # left column
            tiles[i * size + size - 1] = TileType.BORDER_WALL    # right column
        self.tiles = tiles
        self.marks = array('B', [Mark.NONE] * (size * size))

        self.start_exists = False
        self.end_exists = False
        return size

    def get_index(self, x: int, y: int) -> int:
        if 0 <= x < self.width and 0 <= y < self.height:
            return y * self.width + x
        raise IndexError(f"Coordinate ({x}, {y}) out of bounds")

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def is_interior(self, x: int, y: int) -> bool:
        return 1 <= x <= self.width - 2 and 1 <= y <= self.height - 2

    def is_border(self, x: int, y: int) -> bool:
        return self.in_bounds(x, y) and not self.is_interior(x, y)

    def get_type(self, x: int, y: int) -> TileType:
        return TileType(self.tiles[self.get_index(x, y)])

    # --- Editing ---

    def paint_tile(self, x: int, y: int, tile_type: TileType):
        """Free-hand painting. Silently ignored on protected tiles."""
        if is_protected(tile_type):
            raise ValueError(f"Cannot paint {tile_type.name}; use toggle_endpoint")
        idx = self.get_index(x, y)
        if is_protected(self.tiles[idx]):
            return
        self.tiles[idx] = tile_type
        self.marks[idx] = Mark.NONE

    def carve(self, x: int, y: int):
        self.paint_tile(x, y, TileType.PATH)

    def clear_interior_to_path(self):
        for idx, tile in enumerate(self.tiles):
            if not is_protected(tile):
                self.tiles[idx] = TileType.PATH
                self.marks[idx] = Mark.NONE

    # --- Topology ---

    def get_valid_neighbors(self, x: int, y: int, target_type: TileType, mode: NeighborMode) -> List[Cell]:
        """
        MAZE mode looks two cells away for strictly interior tiles of target_type.
        PATH mode looks one cell away; besides interior tiles of target_type it
        also accepts an END tile on the border when searching for PATH, so a
        search can step onto a border-placed goal.
        """
        step = mode.value
        neighbors = []
        for dx, dy in self.DIRECTIONS:
            nx, ny = x + dx * step, y + dy * step
            if self.is_interior(nx, ny):
                if self.tiles[ny * self.width + nx] == target_type:
                    neighbors.append((nx, ny))
            elif mode is NeighborMode.PATH and self.in_bounds(nx, ny):
                if target_type == TileType.PATH and self.tiles[ny * self.width + nx] == TileType.END:
                    neighbors.append((nx, ny))
        return neighbors

    def is_touching_path(self, x: int, y: int) -> bool:
        for dx, dy in self.DIRECTIONS:
            nx, ny = x + dx, y + dy
            if self.in_bounds(nx, ny) and self.tiles[ny * self.width + nx] == TileType.PATH:
                return True
        return False

    def find_endpoints(self) -> Tuple[Optional[Cell], Optional[Cell]]:
        start = end = None
        for idx, tile in enumerate(self.tiles):
            if tile == TileType.START:
                start = (idx % self.width, idx // self.width)
            elif tile == TileType.END:
                end = (idx % self.width, idx // self.width)
        return start, end

    # --- Endpoints ---

    @property
    def endpoint_state(self) -> EndpointState:
        return EndpointState(self.start_exists, self.end_exists)

    def toggle_endpoint(self, x: int, y: int) -> EndpointState:
        """
        Cycles a border cell through the Start/End slots.

        Raises AdjacencyRejected (without touching any state) when the cell has
        no PATH neighbor to connect to.
        """
        if not self.is_border(x, y):
            raise ValueError(f"({x}, {y}) is not a border cell")
        if not self.is_touching_path(x, y):
            raise AdjacencyRejected((x, y))

        idx = y * self.width + x
        current = self.tiles[idx]

        if not self.start_exists:
            if current == TileType.END:
                self.end_exists = False
            self.tiles[idx] = TileType.START
            self.start_exists = True
        elif current == TileType.START:
            self.tiles[idx] = TileType.BORDER_WALL
            self.start_exists = False
        elif not self.end_exists:
            if current == TileType.START:
                self.start_exists = False
            self.tiles[idx] = TileType.END
            self.end_exists = True
        elif current == TileType.END:
            self.tiles[idx] = TileType.BORDER_WALL
            self.end_exists = False

        self.marks[idx] = Mark.NONE
        return self.endpoint_state

    # --- Visitation overlay ---

    def set_mark(self, x: int, y: int, mark: Mark):
        idx = self.get_index(x, y)
        if self.tiles[idx] in (TileType.START, TileType.END):
            return
        self.marks[idx] = mark

    def get_mark(self, x: int, y: int) -> Mark:
        return Mark(self.marks[self.get_index(x, y)])

    def clear_marks(self):
        self.marks = array('B', [Mark.NONE] * (self.width * self.height))

    def marked_cells(self) -> Iterator[Cell]:
        for idx, mark in enumerate(self.marks):
            if mark != Mark.NONE:
                yield (idx % self.width, idx // self.width)

    # --- Snapshots ---

    def snapshot(self) -> np.ndarray:
        """Tile codes as a (height, width) uint8 array, indexed [y, x]."""
        return np.frombuffer(self.tiles.tobytes(), dtype=np.uint8).reshape(self.height, self.width).copy()

    def marks_snapshot(self) -> np.ndarray:
        return np.frombuffer(self.marks.tobytes(), dtype=np.uint8).reshape(self.height, self.width).copy()
