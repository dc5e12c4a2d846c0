from typing import Iterator, List, Tuple
from maze_pathfinder.core.grid import NeighborMode, TileType
from maze_pathfinder.algo.base import Generator

class RecursiveBacktracker(Generator):
    """
    Iterative backtracker over the odd-coordinate lattice. Lattice cells sit on
    odd (x, y); the walls between them sit on the even coordinate in between.
    """
    START = (1, 1)

    def run(self) -> Iterator[str]:
        self.grid.carve(*self.START)
        
        # Explicit stack: 201x201 grids go far past the recursion limit
        stack: List[Tuple[int, int]] = [self.START]
        
        while stack:
            current = stack.pop()
            
            # Lattice neighbors still walled in
            neighbors = self.grid.get_valid_neighbors(current[0], current[1], TileType.WALL, NeighborMode.MAZE)
            if not neighbors:
                continue # Dead end, backtrack
                
            stack.append(current)
            chosen = self.rng.choice(neighbors)
            self.carve_between(current, chosen)
            stack.append(chosen)
            
            if self.should_report():
                yield f"Carving... Stack: {len(stack)}"
                    
        yield "Done"
