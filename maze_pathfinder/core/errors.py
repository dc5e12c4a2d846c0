from typing import Tuple


class MazeError(Exception):
    """Base class for recoverable editor/search errors."""


class AdjacencyRejected(MazeError):
    def __init__(self, cell: Tuple[int, int]):
        super().__init__(f"Selected border wall {cell} not touching path!")
        self.cell = cell


class MissingEndpoints(MazeError):
    def __init__(self, start_found: bool, end_found: bool):
        missing = [name for name, found in (("start", start_found), ("end", end_found)) if not found]
        super().__init__(f"No {' or '.join(missing)} placed")
        self.start_found = start_found
        self.end_found = end_found
