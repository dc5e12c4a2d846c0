from collections import deque

import pygame

from maze_pathfinder.core.editor import MazeEditor
from maze_pathfinder.core.grid import Mark, TileType, is_protected


class Renderer:
    COLOR_BG = (10, 10, 10)
    COLOR_GRID = (40, 40, 40)
    TILE_COLORS = {
        TileType.PATH: (0, 200, 0),
        TileType.WALL: (0, 0, 0),
        TileType.BORDER_WALL: (25, 25, 25),
        TileType.START: (255, 140, 0),
        TileType.END: (220, 40, 40),
    }
    MARK_COLORS = {
        Mark.VISITED: (230, 180, 255),  # Light purple
        Mark.PATH: (77, 180, 255),      # Light blue
    }

    # Number keys -> algorithm names
    ALGO_KEYS = {
        pygame.K_1: "bfs",
        pygame.K_2: "dfs",
        pygame.K_3: "dijkstra",
        pygame.K_4: "astar",
    }
    LOG_LINES = 6

    def __init__(self, editor: MazeEditor, width=1280, height=720, record=False):
        self.editor = editor
        self.grid = editor.grid
        self.screen_width = width
        self.screen_height = height

        # Camera
        self.cell_size = 20.0  # Pixels per cell
        self.offset_x = 0.0
        self.offset_y = 0.0
        self.zoom_speed = 1.1
        self.min_cell_size = 2.0

        # Tools
        from maze_pathfinder.viz.recorder import VideoRecorder
        self.recorder = VideoRecorder(active=record)

        # Log panel fed by the editor's status sink
        self.messages = deque(maxlen=self.LOG_LINES)
        editor.status = self.messages.append

        self.search = None
        self.paint_type = None
        self.font = None
        self.running = True
        self.clock = None
        self.surface = None

    def fit_to_screen(self):
        """Auto-adjust zoom and pan to fit the entire grid on screen with padding."""
        padding = 40
        available_w = self.screen_width - (padding * 2)
        available_h = self.screen_height - (padding * 2)

        zoom_x = available_w / self.grid.width
        zoom_y = available_h / self.grid.height

        # Taking minimum zoom to fit both dimensions
        self.cell_size = min(zoom_x, zoom_y)

        # Center
        total_maze_w = self.grid.width * self.cell_size
        total_maze_h = self.grid.height * self.cell_size

        self.offset_x = (self.screen_width - total_maze_w) / 2
        self.offset_y = (self.screen_height - total_maze_h) / 2

    def init_window(self):
        pygame.init()
        pygame.display.set_caption(f"Maze Pathfinder - {self.grid.width}x{self.grid.height}")
        self.surface = pygame.display.set_mode((self.screen_width, self.screen_height), pygame.RESIZABLE)
        self.clock = pygame.time.Clock()
        self.font = pygame.font.SysFont("Consolas", 16)

        # Initial fit
        self.fit_to_screen()

    def world_to_screen(self, wx, wy):
        sx = wx * self.cell_size + self.offset_x
        sy = wy * self.cell_size + self.offset_y
        return sx, sy

    def screen_to_world(self, sx, sy):
        wx = (sx - self.offset_x) / self.cell_size
        wy = (sy - self.offset_y) / self.cell_size
        # floor, not truncation, so cells left/above the grid stay negative
        return int(wx // 1), int(wy // 1)

    def tile_color(self, x, y):
        mark = self.grid.get_mark(x, y)
        if mark != Mark.NONE:
            return self.MARK_COLORS[mark]
        return self.TILE_COLORS[self.grid.get_type(x, y)]

    # --- Controller ---

    def start_search(self, algorithm):
        handle = self.editor.run_search(algorithm)
        if handle is not None:
            self.search = handle

    def cancel_search(self):
        self.editor.cancel_search()
        self.search = None

    def change_size(self, delta):
        self.cancel_search()
        self.editor.resize(self.grid.size + delta)
        self.editor.regenerate_maze()
        self.fit_to_screen()
        pygame.display.set_caption(f"Maze Pathfinder - {self.grid.width}x{self.grid.height}")

    def handle_click(self, sx, sy, button):
        if self.editor.is_searching:
            return
        x, y = self.screen_to_world(sx, sy)
        if not self.grid.in_bounds(x, y):
            return

        if button == 1 and is_protected(self.grid.get_type(x, y)):
            self.editor.toggle_endpoint(x, y)
            return
        self.paint_type = TileType.PATH if button == 1 else TileType.WALL
        self.paint_at(sx, sy)

    def paint_at(self, sx, sy):
        x, y = self.screen_to_world(sx, sy)
        if self.grid.in_bounds(x, y):
            self.editor.paint_tile(x, y, self.paint_type)

    def handle_key(self, key):
        if key in self.ALGO_KEYS:
            self.start_search(self.ALGO_KEYS[key])
        elif key == pygame.K_c:
            self.cancel_search()
        elif key == pygame.K_g:
            self.cancel_search()
            self.editor.regenerate_maze()
        elif key == pygame.K_r:
            self.cancel_search()
            self.editor.reset_grid()
        elif key == pygame.K_p:
            self.editor.clear_interior_to_path()
        elif key in (pygame.K_PLUS, pygame.K_EQUALS, pygame.K_KP_PLUS):
            self.editor.set_speed(self.editor.engine.speed * 1.5)
        elif key in (pygame.K_MINUS, pygame.K_KP_MINUS):
            self.editor.set_speed(self.editor.engine.speed / 1.5)
        elif key == pygame.K_RIGHTBRACKET:
            self.change_size(2)
        elif key == pygame.K_LEFTBRACKET:
            self.change_size(-2)
        elif key == pygame.K_f:
            self.fit_to_screen()
        elif key == pygame.K_ESCAPE:
            self.running = False

    def handle_input(self):
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False

            elif event.type == pygame.VIDEORESIZE:
                self.screen_width, self.screen_height = event.w, event.h

            elif event.type == pygame.KEYDOWN:
                self.handle_key(event.key)

            elif event.type == pygame.MOUSEBUTTONDOWN and event.button in (1, 3):
                self.handle_click(event.pos[0], event.pos[1], event.button)

            elif event.type == pygame.MOUSEBUTTONUP and event.button in (1, 3):
                self.paint_type = None

            elif event.type == pygame.MOUSEWHEEL:
                # Zoom towards mouse
                mx, my = pygame.mouse.get_pos()

                # World coord before zoom
                wx = (mx - self.offset_x) / self.cell_size
                wy = (my - self.offset_y) / self.cell_size

                if event.y > 0:
                    self.cell_size *= self.zoom_speed
                else:
                    self.cell_size /= self.zoom_speed

                # Clamp zoom
                self.cell_size = max(self.min_cell_size, min(100.0, self.cell_size))

                # Adjust offset to keep mouse at same world coord
                self.offset_x = mx - wx * self.cell_size
                self.offset_y = my - wy * self.cell_size

            elif event.type == pygame.MOUSEMOTION:
                if pygame.mouse.get_pressed()[1]: # Middle drag pans
                    self.offset_x += event.rel[0]
                    self.offset_y += event.rel[1]
                elif self.paint_type is not None and not self.editor.is_searching:
                    self.paint_at(*event.pos)

    # --- Drawing ---

    def draw_grid(self):
        self.surface.fill(self.COLOR_BG)

        # Culling: Calculate visible cell range
        start_x = max(0, int((-self.offset_x) / self.cell_size))
        start_y = max(0, int((-self.offset_y) / self.cell_size))
        end_x = min(self.grid.width, int((self.screen_width - self.offset_x) / self.cell_size) + 1)
        end_y = min(self.grid.height, int((self.screen_height - self.offset_y) / self.cell_size) + 1)

        draw_lines = self.cell_size > 6.0
        size = int(self.cell_size) + 1

        for y in range(start_y, end_y):
            for x in range(start_x, end_x):
                sx, sy = self.world_to_screen(x, y)
                px, py = int(sx), int(sy)
                pygame.draw.rect(self.surface, self.tile_color(x, y), (px, py, size, size))
                if draw_lines:
                    pygame.draw.rect(self.surface, self.COLOR_GRID, (px, py, size, size), 1)

    def draw_hud(self):
        fps = int(self.clock.get_fps())
        rec_status = "REC" if self.recorder.active else ""
        if self.editor.is_searching:
            status = f"Searching ({self.editor.engine.active.solver.name})"
        else:
            status = "Idle"
        info = [
            f"FPS: {fps}",
            f"Size: {self.grid.width}x{self.grid.height}",
            f"Speed: x{self.editor.engine.speed:.1f}",
            f"Status: {status}",
            "1 BFS  2 DFS  3 Dijkstra  4 A*  C cancel  G maze  R reset  P clear",
            rec_status
        ]

        for i, text in enumerate(info):
            lbl = self.font.render(text, True, (255, 255, 255))
            self.surface.blit(lbl, (10, 10 + i * 20))

        # Log panel, newest last
        base_y = self.screen_height - 10 - len(self.messages) * 20
        for i, text in enumerate(self.messages):
            lbl = self.font.render(text, True, (200, 200, 120))
            self.surface.blit(lbl, (10, base_y + i * 20))

    def run_loop(self):
        while self.running:
            dt = self.clock.tick(60) / 1000.0
            self.handle_input()

            # Step Solver at the engine's pacing
            if self.search is not None:
                self.search.advance(dt)
                if self.search.finished:
                    self.search = None

            self.draw_grid()
            self.draw_hud()
            pygame.display.flip()

            if self.recorder.active:
                self.recorder.capture_frame(self.surface)

        self.recorder.stop()
        pygame.quit()
