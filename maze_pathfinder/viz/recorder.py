import logging
import os
import pygame
import cv2
import numpy as np
from datetime import datetime

logger = logging.getLogger(__name__)

RECORDINGS_DIR = "recordings"


def default_output_file(prefix: str = "maze_search") -> str:
    ts = datetime.now().strftime("%Y%m%d_%H%M%S")
    fname = f"{prefix}_{ts}.mp4"
    # Use the recordings dir when present
    if os.path.isdir(RECORDINGS_DIR):
        return os.path.join(RECORDINGS_DIR, fname)
    return fname


class VideoRecorder:
    """Writes editor frames to an mp4. Inactive recorders ignore every call."""

    def __init__(self, active=False, output_file=None, fps=30):
        self.active = active
        self.output_file = output_file
        self.fps = fps
        self.writer = None
        self.frame_size = None
        self.frame_count = 0
        
        if self.active and not self.output_file:
            self.output_file = default_output_file()

    def capture_frame(self, surface: pygame.Surface):
        if not self.active:
            return
            
        width, height = surface.get_size()

        # The editor window can be resized mid-recording; the writer cannot
        if self.writer is not None and (width, height) != self.frame_size:
            frame = self.to_bgr(surface)
            frame = cv2.resize(frame, self.frame_size)
            self.writer.write(frame)
            self.frame_count += 1
            return
        
        # Initialize writer on first frame
        if self.writer is None:
            self.frame_size = (width, height)
            fourcc = cv2.VideoWriter_fourcc(*'mp4v')
            self.writer = cv2.VideoWriter(self.output_file, fourcc, self.fps, self.frame_size)
            logger.info(f"Recording started: {self.output_file}")
            
        self.writer.write(self.to_bgr(surface))
        self.frame_count += 1

    @staticmethod
    def to_bgr(surface: pygame.Surface) -> np.ndarray:
        # surfarray is (width, height, 3) RGB; OpenCV wants (height, width, 3) BGR
        view = pygame.surfarray.array3d(surface)
        frame = np.ascontiguousarray(np.transpose(view, (1, 0, 2)))
        return cv2.cvtColor(frame, cv2.COLOR_RGB2BGR)

    def stop(self):
        if self.writer:
            self.writer.release()
            logger.info(f"Video saved: {self.output_file} ({self.frame_count} frames)")
            self.writer = None
