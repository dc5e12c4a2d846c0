import heapq
import itertools
from abc import ABC, abstractmethod
from collections import deque
from typing import Callable, Dict, Generator, Iterator, List, Optional, Tuple
from maze_pathfinder.core.grid import Grid, Mark, NeighborMode, TileType
from maze_pathfinder.core.events import Exhausted, PathFound, PathStep, SearchEvent, Visit

Cell = Tuple[int, int]
Predecessors = Dict[Cell, Cell]
CostFunction = Callable[[Cell, Cell], float]


def unit_cost(a: Cell, b: Cell) -> float:
    """Uniform movement cost. Hook point for weighted tiles."""
    return 1


class Solver(ABC):
    name = "Solver"

    def __init__(self, grid: Grid, cost: CostFunction = unit_cost):
        self.grid = grid
        self.cost = cost
        self.path: List[Cell] = []
        self.visited_count = 0

    @abstractmethod
    def search(self, start: Cell, end: Cell) -> Generator[Visit, None, Optional[Predecessors]]:
        """
        Yields a Visit per expanded cell. Returns the predecessor map once the
        goal is reached, or None when the frontier runs dry.
        """

    def run(self, start: Tuple[int, int], end: Tuple[int, int]) -> Iterator[SearchEvent]:
        came_from = yield from self.search(start, end)

        if came_from is None:
            yield Exhausted()
            return

        self.path = self.reconstruct_path(came_from, start, end)
        for cell in self.path:
            self.grid.set_mark(cell[0], cell[1], Mark.PATH)
            yield PathStep(cell)
        yield PathFound(list(self.path))

    def neighbors(self, cell: Cell) -> List[Cell]:
        return self.grid.get_valid_neighbors(cell[0], cell[1], TileType.PATH, NeighborMode.PATH)

    def visit(self, cell: Cell) -> Visit:
        self.grid.set_mark(cell[0], cell[1], Mark.VISITED)
        self.visited_count += 1
        return Visit(cell)

    @staticmethod
    def reconstruct_path(came_from: Predecessors, start: Cell, end: Cell) -> List[Cell]:
        path = []
        curr = end
        while curr != start:
            path.append(curr)
            curr = came_from[curr]
        path.append(start)
        path.reverse()
        return path


class BFS(Solver):
    name = "BFS"

    def search(self, start, end):
        queue = deque([start])
        visited = {start}
        came_from: Predecessors = {}

        while queue:
            current = queue.popleft()
            yield self.visit(current)

            if current == end:
                return came_from

            for neighbor in self.neighbors(current):
                if neighbor not in visited:
                    visited.add(neighbor)
                    came_from[neighbor] = current
                    queue.append(neighbor)

        return None


class DFS(Solver):
    """
    Stack-based DFS. Cells are marked visited when popped, and the goal is
    detected among a freshly expanded cell's neighbors before anything is
    pushed, so the goal itself is never expanded.
    """
    name = "DFS"

    def search(self, start, end):
        # Stack of (cell, parent)
        stack: List[Tuple[Cell, Optional[Cell]]] = [(start, None)]
        visited = set()
        came_from: Predecessors = {}

        while stack:
            current, parent = stack.pop()
            if current in visited:
                continue

            visited.add(current)
            if parent is not None:
                came_from[current] = parent
            yield self.visit(current)

            neighbors = self.neighbors(current)
            if end in neighbors:
                came_from[end] = current
                return came_from

            for neighbor in neighbors:
                if neighbor not in visited:
                    stack.append((neighbor, current))

        return None


class AStar(Solver):
    name = "A*"

    def search(self, start, end):
        # Priority Queue: (priority, insertion order, cell)
        order = itertools.count()
        open_set = [(0, next(order), start)]

        cost_so_far: Dict[Cell, float] = {start: 0}
        came_from: Predecessors = {}
        closed = set()

        while open_set:
            _, _, current = heapq.heappop(open_set)
            if current in closed:
                continue # Stale entry
            closed.add(current)

            yield self.visit(current)

            if current == end:
                return came_from

            for neighbor in self.neighbors(current):
                if neighbor in closed:
                    continue
                new_cost = cost_so_far[current] + self.cost(current, neighbor)
                old_cost = cost_so_far.get(neighbor)

                if old_cost is None or new_cost < old_cost:
                    cost_so_far[neighbor] = new_cost
                    came_from[neighbor] = current
                    priority = new_cost + self.heuristic(neighbor, end)
                    heapq.heappush(open_set, (priority, next(order), neighbor))

        return None

    def heuristic(self, a, b):
        # Manhattan distance
        return abs(a[0] - b[0]) + abs(a[1] - b[1])


class Dijkstra(AStar):
    """ Dijkstra is just A* with h(n) = 0. """
    name = "Dijkstra"

    def heuristic(self, a, b):
        return 0


SOLVERS = {
    "bfs": BFS,
    "dfs": DFS,
    "dijkstra": Dijkstra,
    "astar": AStar,
}


def get_solver_class(name: str):
    try:
        return SOLVERS[name.lower()]
    except KeyError:
        raise ValueError(f"Unknown algorithm '{name}'. Choose from: {', '.join(SOLVERS)}") from None
