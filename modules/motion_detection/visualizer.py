"""
Visualization module for motion detection results.
Handles window layout, display and the quit key.
"""

import logging
from typing import Any, Dict, List, Tuple

import cv2
import numpy as np

from .config import (
    ADAPTIVE_BACKGROUND,
    FRAME_DIFFERENCE,
    MIXTURE_OF_GAUSSIANS,
    MotionDetectionConfig,
)

# Window label -> key of the results dict produced by MotionProcessor
WINDOW_LAYOUTS: Dict[str, List[Tuple[str, str]]] = {
    FRAME_DIFFERENCE: [
        ('Frame', 'current'),
        ('Old Frame', 'reference'),
        ('Difference', 'difference'),
        ('Motion', 'mask'),
    ],
    ADAPTIVE_BACKGROUND: [
        ('Frame', 'original'),
        ('Motion Mask', 'mask'),
        ('Background', 'background'),
    ],
    MIXTURE_OF_GAUSSIANS: [
        ('Frame', 'original'),
        ('Foreground Mask', 'mask'),
    ],
}

QUIT_KEYS = (ord('q'), 27)  # 'q' or ESC

logger = logging.getLogger(__name__)


class MotionVisualizationRenderer:
    """Shows each result image in its own window and polls the keyboard."""

    def __init__(self, config: MotionDetectionConfig):
        self.config = config
        self.layout = WINDOW_LAYOUTS[config.algorithm]
        self.wait_ms = config.capture.wait_ms
        self._windows_open = False

    def open_windows(self):
        """Create and position the windows for the current algorithm."""
        positions = self.config.visualization.window_positions
        for label, _ in self.layout:
            cv2.namedWindow(label)
            if label in positions:
                x, y = positions[label]
                cv2.moveWindow(label, x, y)
        logger.debug(f"Opened windows: {', '.join(label for label, _ in self.layout)}")
        self._windows_open = True

    def show(self, label: str, image: np.ndarray):
        cv2.imshow(label, image)

    def display(self, results: Dict[str, Any]):
        """Show every available image of the results in its window."""
        if not self._windows_open:
            self.open_windows()

        for label, key in self.layout:
            image = results.get(key)
            if image is not None:
                self.show(label, image)

    def is_cancel_requested(self) -> bool:
        key = cv2.waitKey(self.wait_ms) & 0xFF
        return key in QUIT_KEYS

    def close(self):
        if self._windows_open:
            cv2.destroyAllWindows()
            self._windows_open = False


class StatisticsReporter:
    """Handles statistics reporting and summary generation."""

    def print_summary(self, stats: Dict[str, Any], config: MotionDetectionConfig):
        """Print processing summary."""
        print("\n" + "=" * 60)
        print("MOTION DETECTION SESSION SUMMARY")
        print("=" * 60)
        print(f"Algorithm: {config.algorithm}")
        print(f"Camera: {config.capture.camera_id}")
        print(f"Total Frames Processed: {stats['frames_processed']}")
        print(f"Warm-up Frames Skipped: {stats['frames_skipped']}")
        print(f"Total Processing Time: {stats['processing_time']:.2f}s")
        print(f"Average FPS: {stats['avg_fps']:.2f}")
        print(f"Foreground Pixels: {stats['foreground_pixels']}")
        print("=" * 60)
