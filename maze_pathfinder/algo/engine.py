import logging
import time
from typing import Callable, Iterator, Optional, Tuple

from maze_pathfinder.core.grid import Grid
from maze_pathfinder.core.errors import MissingEndpoints
from maze_pathfinder.core.events import Exhausted, PathFound, PathStep, SearchEvent, TERMINAL_EVENTS, Visit
from maze_pathfinder.algo.solvers import Solver, get_solver_class

logger = logging.getLogger(__name__)

Cell = Tuple[int, int]
CellCallback = Callable[[Cell], None]
DoneCallback = Callable[[SearchEvent], None]


class SearchHandle:
    """
    One in-flight search. The caller drives it: each step() advances the
    solver to its next suspension point (after a visit or after a path cell
    is revealed) and fires the matching callback.
    """

    def __init__(self, engine: "SearchEngine", solver: Solver, steps: Iterator[SearchEvent],
                 on_visit: Optional[CellCallback] = None,
                 on_path_step: Optional[CellCallback] = None,
                 on_done: Optional[DoneCallback] = None):
        self.engine = engine
        self.solver = solver
        self._steps = steps
        self.on_visit = on_visit
        self.on_path_step = on_path_step
        self.on_done = on_done

        self.result: Optional[SearchEvent] = None
        self.cancelled = False
        self.started_at = time.perf_counter()
        self._budget = 0.0

    @property
    def finished(self) -> bool:
        return self.result is not None or self.cancelled

    @property
    def delay(self) -> float:
        return self.engine.delay

    def step(self) -> Optional[SearchEvent]:
        if self.finished:
            return None

        event = next(self._steps)

        if isinstance(event, Visit):
            if self.on_visit:
                self.on_visit(event.cell)
        elif isinstance(event, PathStep):
            if self.on_path_step:
                self.on_path_step(event.cell)
        elif isinstance(event, TERMINAL_EVENTS):
            self.result = event
            self.engine._finish(self)
            if self.on_done:
                self.on_done(event)
        return event

    def advance(self, elapsed: float) -> int:
        """
        Scheduler tick. Runs as many steps as `elapsed` seconds cover at the
        engine's current delay and returns how many were taken.
        """
        self._budget += elapsed
        taken = 0
        while not self.finished and self._budget >= self.delay:
            self._budget -= self.delay
            self.step()
            taken += 1
        return taken

    def play(self, sleep: Callable[[float], None] = time.sleep) -> Optional[SearchEvent]:
        """Blocking playback at the engine's pacing."""
        while not self.finished:
            self.step()
            if not self.finished:
                sleep(self.delay)
        return self.result

    def run_all(self) -> Optional[SearchEvent]:
        """Helper to run the search to completion without pacing."""
        while not self.finished:
            self.step()
        return self.result

    def cancel(self):
        if self.engine.active is self:
            self.engine.cancel_search()
        else:
            self._close()
            if self.engine.active is None:
                self.engine.grid.clear_marks()

    def _close(self):
        self.cancelled = True
        self._steps.close()


class SearchEngine:
    BASE_DELAY = 0.5
    MIN_SPEED = 0.1
    MAX_SPEED = 150.0

    def __init__(self, grid: Grid, status: Optional[Callable[[str], None]] = None):
        self.grid = grid
        self.status = status
        self.speed = 1.0
        self.delay = self.BASE_DELAY
        self.active: Optional[SearchHandle] = None

    @property
    def is_searching(self) -> bool:
        return self.active is not None

    def set_speed(self, multiplier: float) -> float:
        self.speed = max(self.MIN_SPEED, min(self.MAX_SPEED, float(multiplier)))
        self.delay = self.BASE_DELAY / self.speed
        return self.speed

    def run_search(self, algorithm: str,
                   on_visit: Optional[CellCallback] = None,
                   on_path_step: Optional[CellCallback] = None,
                   on_done: Optional[DoneCallback] = None) -> SearchHandle:
        solver_cls = get_solver_class(algorithm)

        start, end = self.grid.find_endpoints()
        if start is None or end is None:
            raise MissingEndpoints(start is not None, end is not None)

        if self.active:
            logger.debug("Replacing in-flight %s search", self.active.solver.name)
            self.cancel_search()
        self.grid.clear_marks()

        solver = solver_cls(self.grid)
        handle = SearchHandle(self, solver, solver.run(start, end), on_visit, on_path_step, on_done)
        self.active = handle

        logger.info("Solving with %s from %s to %s...", solver.name, start, end)
        return handle

    def cancel_search(self):
        """Stops the active search (if any) and wipes all visited/path marks."""
        handle = self.active
        self.active = None
        if handle is not None:
            handle._close()
            self._report(f"{handle.solver.name} pathfinding cancelled")
        self.grid.clear_marks()

    def _finish(self, handle: SearchHandle):
        if self.active is handle:
            self.active = None

        elapsed = time.perf_counter() - handle.started_at
        solver = handle.solver
        if isinstance(handle.result, PathFound):
            self._report(f"{solver.name} found a path of length {handle.result.length} "
                         f"in {elapsed:.2f}s (visited {solver.visited_count})")
        elif isinstance(handle.result, Exhausted):
            self._report(f"No path found with {solver.name} "
                         f"after {elapsed:.2f}s (visited {solver.visited_count})")

    def _report(self, message: str):
        logger.info(message)
        if self.status:
            self.status(message)
