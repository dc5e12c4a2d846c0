from dataclasses import dataclass, field
from typing import List, Tuple, Union

Cell = Tuple[int, int]


@dataclass(frozen=True)
class Visit:
    """A cell was taken off the frontier and expanded."""
    cell: Cell


@dataclass(frozen=True)
class PathStep:
    """One cell of the solution was revealed (start to end order)."""
    cell: Cell


@dataclass(frozen=True)
class PathFound:
    cells: List[Cell] = field(default_factory=list)

    @property
    def length(self) -> int:
        # Edge count, not cell count
        return max(0, len(self.cells) - 1)


@dataclass(frozen=True)
class Exhausted:
    """Frontier emptied without reaching the goal."""


SearchEvent = Union[Visit, PathStep, PathFound, Exhausted]
TERMINAL_EVENTS = (PathFound, Exhausted)
