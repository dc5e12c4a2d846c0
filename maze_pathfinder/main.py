import argparse
import sys
import os
import logging
import time

# Ensure project root is in path so we can import 'maze_pathfinder' package
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from maze_pathfinder.algo.solvers import SOLVERS
from maze_pathfinder.core.events import PathFound
from maze_pathfinder.core.grid import Grid

def setup_logging(verbose: bool):
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )

def parse_cell(text: str):
    try:
        x, y = (int(part) for part in text.split(","))
    except ValueError:
        raise argparse.ArgumentTypeError(f"Expected X,Y but got '{text}'")
    return x, y

def build_maze(size, seed, start=None, end=None):
    """Generates a maze and places the endpoints (defaults: next to the first and last lattice cell)."""
    from maze_pathfinder.core.editor import MazeEditor
    editor = MazeEditor(size=size, seed=seed)
    editor.regenerate_maze(seed)

    n = editor.grid.size
    start = start or (0, 1)
    end = end or (n - 1, n - 2)
    for cell in (start, end):
        if not editor.grid.is_border(*cell) or editor.toggle_endpoint(*cell) is None:
            raise SystemExit(f"Cannot place endpoint at {cell}")
    return editor

def main(argv=None):
    parser = argparse.ArgumentParser(description="Maze Pathfinder: grid editor, maze generator and search visualizer")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Edit Command
    edit_parser = subparsers.add_parser("edit", help="Open the interactive editor")
    edit_parser.add_argument("--size", type=int, default=Grid.DEFAULT_SIZE, help="Grid size (odd, 5-201)")
    edit_parser.add_argument("--seed", type=int, default=None, help="Random Seed")
    edit_parser.add_argument("--speed", type=float, default=1.0, help="Playback speed multiplier (0.1-150)")
    edit_parser.add_argument("--record", action="store_true", help="Record the session to video")

    # Solve Command
    solve_parser = subparsers.add_parser("solve", help="Generate a maze and solve it headless")
    solve_parser.add_argument("--size", type=int, default=Grid.DEFAULT_SIZE, help="Grid size (odd, 5-201)")
    solve_parser.add_argument("--seed", type=int, default=None, help="Random Seed")
    solve_parser.add_argument("--algo", type=str, default="bfs", choices=list(SOLVERS), help="Search algorithm")
    solve_parser.add_argument("--start", type=parse_cell, default=None, help="Start border cell X,Y")
    solve_parser.add_argument("--end", type=parse_cell, default=None, help="End border cell X,Y")
    solve_parser.add_argument("--animate", action="store_true", help="Pace the search like the editor does")
    solve_parser.add_argument("--speed", type=float, default=150.0, help="Speed multiplier used with --animate")

    # Benchmark Command
    bench_parser = subparsers.add_parser("benchmark", help="Race every algorithm on one maze")
    bench_parser.add_argument("--size", type=int, default=Grid.MAX_SIZE, help="Grid size (odd, 5-201)")
    bench_parser.add_argument("--seed", type=int, default=123, help="Random Seed")

    args = parser.parse_args(argv)

    setup_logging(args.verbose)
    logger = logging.getLogger("maze_pathfinder")

    if args.command is None:
        parser.print_help()
        return

    logger.info(f"Running command: {args.command}")

    if args.command == "edit":
        from maze_pathfinder.core.editor import MazeEditor
        from maze_pathfinder.viz.renderer import Renderer

        editor = MazeEditor(size=args.size, seed=args.seed)
        editor.regenerate_maze(args.seed)
        editor.set_speed(args.speed)

        renderer = Renderer(editor, record=args.record)
        if args.record:
            logger.info(f"Recording video to {renderer.recorder.output_file}")
        renderer.init_window()
        renderer.run_loop()

    elif args.command == "solve":
        editor = build_maze(args.size, args.seed, args.start, args.end)
        logger.info(f"Generated {editor.grid.size}x{editor.grid.size} maze")

        handle = editor.run_search(args.algo)
        if handle is None:
            return 1

        if args.animate:
            editor.set_speed(args.speed)
            handle.on_visit = lambda cell: print(f"\rVisited: {handle.solver.visited_count}", end="")
            result = handle.play()
            print()
        else:
            result = handle.run_all()

        if isinstance(result, PathFound):
            print(f"Done. Path Length: {result.length} | Visited: {handle.solver.visited_count}")
        else:
            print(f"No path. Visited: {handle.solver.visited_count}")
            return 1

    elif args.command == "benchmark":
        editor = build_maze(args.size, args.seed)
        grid = editor.grid
        logger.info(f"Running Solver Benchmark ({grid.size}x{grid.size}, seed {args.seed})...")

        print(f"\n{'ALGORITHM':<12} | {'TIME (s)':<10} | {'PATH LEN':<10} | {'VISITED':<10}")
        print("-" * 52)

        for name in SOLVERS:
            t_start = time.perf_counter()
            handle = editor.run_search(name)
            result = handle.run_all()
            duration = time.perf_counter() - t_start

            path_len = result.length if isinstance(result, PathFound) else "-"
            print(f"{handle.solver.name:<12} | {duration:<10.4f} | {path_len:<10} | {handle.solver.visited_count:<10}")

    return 0

if __name__ == "__main__":
    sys.exit(main())
