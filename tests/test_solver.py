import unittest
import random
import sys
import os
from collections import deque

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from maze_pathfinder.core.grid import Grid, Mark, TileType
from maze_pathfinder.core.events import Exhausted, PathFound, PathStep, Visit
from maze_pathfinder.algo.dfs import RecursiveBacktracker
from maze_pathfinder.algo.solvers import BFS, DFS, AStar, Dijkstra, SOLVERS, get_solver_class

ALL_SOLVERS = [BFS, DFS, Dijkstra, AStar]
SHORTEST_SOLVERS = [BFS, Dijkstra, AStar]

def solve(solver_cls, grid):
    start, end = grid.find_endpoints()
    solver = solver_cls(grid)
    events = list(solver.run(start, end))
    return solver, events

def reference_distance(grid, start, end):
    """Plain BFS over PATH tiles (plus the End) to cross-check path lengths."""
    def passable(x, y):
        if not grid.in_bounds(x, y):
            return False
        tile = grid.get_type(x, y)
        return tile == TileType.END or (tile == TileType.PATH and grid.is_interior(x, y))

    dist = {start: 0}
    queue = deque([start])
    while queue:
        x, y = queue.popleft()
        if (x, y) == end:
            return dist[end]
        for n in ((x, y + 1), (x + 1, y), (x, y - 1), (x - 1, y)):
            if n not in dist and passable(*n):
                dist[n] = dist[(x, y)] + 1
                queue.append(n)
    return None

class TestSolvers(unittest.TestCase):
    def create_corridor(self):
        # 5x5, row y=2 carved, Start on the left border, End on the right
        grid = Grid(5)
        for x in range(1, 4):
            grid.paint_tile(x, 2, TileType.PATH)
        grid.toggle_endpoint(0, 2)
        grid.toggle_endpoint(4, 2)
        return grid

    def create_open_room(self):
        grid = Grid(7)
        grid.clear_interior_to_path()
        grid.toggle_endpoint(0, 3)
        grid.toggle_endpoint(6, 3)
        return grid

    def assert_valid_path(self, grid, path):
        start, end = grid.find_endpoints()
        self.assertEqual(path[0], start)
        self.assertEqual(path[-1], end)
        self.assertEqual(len(set(path)), len(path), "Path revisits a cell")
        for (ax, ay), (bx, by) in zip(path, path[1:]):
            self.assertEqual(abs(ax - bx) + abs(ay - by), 1)
        for x, y in path[1:-1]:
            self.assertEqual(grid.get_type(x, y), TileType.PATH)

    def test_corridor_all_algorithms(self):
        expected = [(0, 2), (1, 2), (2, 2), (3, 2), (4, 2)]
        for solver_cls in ALL_SOLVERS:
            with self.subTest(solver=solver_cls.name):
                grid = self.create_corridor()
                solver, events = solve(solver_cls, grid)
                self.assertIsInstance(events[-1], PathFound)
                self.assertEqual(events[-1].cells, expected)
                self.assertEqual(events[-1].length, 4)
                self.assertEqual(solver.path, expected)

    def test_disconnected_all_algorithms(self):
        for solver_cls in ALL_SOLVERS:
            with self.subTest(solver=solver_cls.name):
                grid = self.create_open_room()
                # Wall off the middle column
                for y in range(1, 6):
                    grid.paint_tile(3, y, TileType.WALL)
                solver, events = solve(solver_cls, grid)
                self.assertEqual(events[-1], Exhausted())
                self.assertEqual(solver.path, [])
                self.assertFalse(any(isinstance(e, PathStep) for e in events))

    def test_event_order(self):
        for solver_cls in ALL_SOLVERS:
            with self.subTest(solver=solver_cls.name):
                grid = self.create_open_room()
                _, events = solve(solver_cls, grid)

                kinds = [type(e) for e in events]
                first_step = kinds.index(PathStep)
                self.assertTrue(all(k is Visit for k in kinds[:first_step]))
                self.assertTrue(all(k is PathStep for k in kinds[first_step:-1]))
                self.assertIs(kinds[-1], PathFound)

                steps = [e.cell for e in events if isinstance(e, PathStep)]
                self.assertEqual(steps, events[-1].cells)

    def test_bfs_visits_goal_dfs_does_not(self):
        grid = self.create_corridor()
        _, events = solve(BFS, grid)
        visits = [e.cell for e in events if isinstance(e, Visit)]
        self.assertEqual(visits, [(0, 2), (1, 2), (2, 2), (3, 2), (4, 2)])

        grid = self.create_corridor()
        _, events = solve(DFS, grid)
        visits = [e.cell for e in events if isinstance(e, Visit)]
        # Goal is spotted from (3, 2) before it is ever pushed
        self.assertEqual(visits, [(0, 2), (1, 2), (2, 2), (3, 2)])

    def test_dfs_not_shortest(self):
        grid = self.create_open_room()
        bfs, _ = solve(BFS, grid)

        grid = self.create_open_room()
        dfs, _ = solve(DFS, grid)

        self.assertEqual(len(bfs.path) - 1, 6)
        self.assert_valid_path(grid, dfs.path)
        self.assertGreater(len(dfs.path), len(bfs.path))

    def test_shortest_paths_on_random_grids(self):
        for seed in range(8):
            rng = random.Random(seed)
            grid = Grid(21)
            grid.clear_interior_to_path()
            for y in range(1, 20):
                for x in range(1, 20):
                    if rng.random() < 0.3:
                        grid.paint_tile(x, y, TileType.WALL)
            grid.paint_tile(1, 1, TileType.PATH)
            grid.paint_tile(19, 19, TileType.PATH)
            grid.toggle_endpoint(0, 1)
            grid.toggle_endpoint(20, 19)
            start, end = grid.find_endpoints()
            expected = reference_distance(grid, start, end)

            for solver_cls in ALL_SOLVERS:
                with self.subTest(seed=seed, solver=solver_cls.name):
                    grid.clear_marks()
                    solver, events = solve(solver_cls, grid)
                    if expected is None:
                        self.assertIsInstance(events[-1], Exhausted)
                        continue
                    self.assertIsInstance(events[-1], PathFound)
                    self.assert_valid_path(grid, solver.path)
                    if solver_cls in SHORTEST_SOLVERS:
                        self.assertEqual(len(solver.path) - 1, expected)
                    else:
                        self.assertGreaterEqual(len(solver.path) - 1, expected)

    def test_perfect_maze_single_solution(self):
        grid = Grid(31)
        RecursiveBacktracker(grid, seed=77).run_all()
        grid.toggle_endpoint(0, 1)
        grid.toggle_endpoint(30, 29)

        paths = []
        for solver_cls in ALL_SOLVERS:
            grid.clear_marks()
            solver, _ = solve(solver_cls, grid)
            self.assert_valid_path(grid, solver.path)
            paths.append(solver.path)
        self.assertTrue(all(p == paths[0] for p in paths))

    def test_astar_visits_no_more_than_dijkstra(self):
        grid = self.create_open_room()
        dijkstra, _ = solve(Dijkstra, grid)
        grid = self.create_open_room()
        astar, _ = solve(AStar, grid)
        self.assertLessEqual(astar.visited_count, dijkstra.visited_count)

    def test_marks_after_search(self):
        grid = self.create_corridor()
        solve(BFS, grid)
        for x in range(1, 4):
            self.assertEqual(grid.get_mark(x, 2), Mark.PATH)
        self.assertEqual(grid.get_mark(0, 2), Mark.NONE)
        self.assertEqual(grid.get_mark(4, 2), Mark.NONE)
        self.assertEqual(grid.get_type(2, 2), TileType.PATH)

    def test_cost_hook(self):
        calls = []
        def cost(a, b):
            calls.append((a, b))
            return 1

        grid = self.create_corridor()
        start, end = grid.find_endpoints()
        solver = Dijkstra(grid, cost=cost)
        for _ in solver.run(start, end): pass
        self.assertEqual(len(solver.path), 5)
        self.assertIn(((0, 2), (1, 2)), calls)

    def test_solver_lookup(self):
        self.assertIs(get_solver_class("BFS"), BFS)
        self.assertIs(get_solver_class("astar"), AStar)
        self.assertEqual(set(SOLVERS), {"bfs", "dfs", "dijkstra", "astar"})
        with self.assertRaises(ValueError):
            get_solver_class("wallfollower")

if __name__ == '__main__':
    unittest.main()
