import logging
import random
from datetime import datetime
from typing import Callable, Optional

import numpy as np

from maze_pathfinder.core.grid import EndpointState, Grid, TileType
from maze_pathfinder.core.errors import AdjacencyRejected, MissingEndpoints
from maze_pathfinder.algo.dfs import RecursiveBacktracker
from maze_pathfinder.algo.engine import CellCallback, DoneCallback, SearchEngine, SearchHandle

logger = logging.getLogger(__name__)


class MazeEditor:
    """
    Entry point for a view/controller: owns the grid and the search engine
    and turns recoverable errors into status messages.

    Grid edits are ignored while a search is running.
    """

    def __init__(self, size: int = Grid.DEFAULT_SIZE, seed: int = None,
                 rng: Optional[random.Random] = None,
                 status: Optional[Callable[[str], None]] = None):
        self.grid = Grid(size)
        self.rng = rng if rng is not None else random.Random(seed)
        self.status = status
        self.engine = SearchEngine(self.grid, status=self._forward)

    @property
    def is_searching(self) -> bool:
        return self.engine.is_searching

    # --- Grid lifecycle ---

    def resize(self, n) -> np.ndarray:
        value = n
        try:
            if isinstance(value, str):
                value = float(value)
            requested = int(value)
        except OverflowError:
            requested = Grid.MAX_SIZE if value > 0 else Grid.MIN_SIZE
        except (TypeError, ValueError):
            logger.debug("Ignoring non-numeric size %r", n)
            return self.grid.snapshot()

        self.engine.cancel_search()
        size = self.grid.resize(requested)
        logger.info("Grid resized to %dx%d", size, size)
        return self.grid.snapshot()

    def reset_grid(self):
        self.engine.cancel_search()
        self.grid.resize(self.grid.size)

    def regenerate_maze(self, seed: int = None):
        self.engine.cancel_search()
        self.grid.resize(self.grid.size)
        if seed is not None:
            generator = RecursiveBacktracker(self.grid, seed=seed)
        else:
            generator = RecursiveBacktracker(self.grid, rng=self.rng)
        generator.run_all()
        logger.info("Generated %dx%d maze (%d carves)", self.grid.size, self.grid.size, generator.step_count)

    # --- Edits ---

    def _editable(self) -> bool:
        if self.engine.is_searching:
            self._report("Grid is locked while a search is running", logging.WARNING)
            return False
        return True

    def toggle_endpoint(self, x: int, y: int) -> Optional[EndpointState]:
        if not self._editable():
            return None
        try:
            return self.grid.toggle_endpoint(x, y)
        except AdjacencyRejected as e:
            self._report(f"[{datetime.now():%Y-%m-%d %H:%M:%S}] {e}", logging.WARNING)
            return None

    def paint_tile(self, x: int, y: int, tile_type: TileType):
        if self._editable():
            self.grid.paint_tile(x, y, tile_type)

    def clear_interior_to_path(self):
        if self._editable():
            self.grid.clear_interior_to_path()

    # --- Search ---

    def run_search(self, algorithm: str,
                   on_visit: Optional[CellCallback] = None,
                   on_path_step: Optional[CellCallback] = None,
                   on_done: Optional[DoneCallback] = None) -> Optional[SearchHandle]:
        try:
            return self.engine.run_search(algorithm, on_visit, on_path_step, on_done)
        except MissingEndpoints as e:
            self._report(f"Cannot search: {e}", logging.WARNING)
            return None

    def cancel_search(self):
        self.engine.cancel_search()

    def set_speed(self, multiplier: float) -> float:
        return self.engine.set_speed(multiplier)

    # --- Status ---

    def _forward(self, message: str):
        # Engine already logged it
        if self.status:
            self.status(message)

    def _report(self, message: str, level: int = logging.INFO):
        logger.log(level, message)
        if self.status:
            self.status(message)
