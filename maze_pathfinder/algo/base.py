import random
from abc import ABC, abstractmethod
from typing import Iterator, Optional, Tuple
from maze_pathfinder.core.grid import Grid

class Generator(ABC):
    """
    Base for maze carvers. Carvers work in place on a freshly walled grid and
    draw every random choice from self.rng so a seed fully determines the maze.
    """
    # Emit a progress string every N carves
    progress_every = 100

    def __init__(self, grid: Grid, seed: int = None, rng: Optional[random.Random] = None):
        self.grid = grid
        self.seed = seed
        self.rng = rng if rng is not None else random.Random(seed)
        self.step_count = 0

    def carve_between(self, a: Tuple[int, int], b: Tuple[int, int]):
        """Opens two lattice cells and the wall tile between them."""
        (ax, ay), (bx, by) = a, b
        self.grid.carve(ax, ay)
        self.grid.carve(bx, by)
        self.grid.carve((ax + bx) // 2, (ay + by) // 2)
        self.step_count += 1

    def should_report(self) -> bool:
        return self.step_count % self.progress_every == 0

    @abstractmethod
    def run(self) -> Iterator[str]:
        """
        Yields progress strings while carving; the last one is "Done".
        """

    def run_all(self) -> int:
        """Runs the carver to completion and returns the number of carves."""
        for _ in self.run():
            pass
        return self.step_count
