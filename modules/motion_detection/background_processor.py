"""
Per-frame motion detection processing and camera acquisition.
Keeps acquisition, detection and display as separate collaborators.
"""

import logging
import time
from typing import Any, Callable, Dict, Optional

import cv2
import numpy as np

from .config import MotionDetectionConfig
from .detectors import MotionDetector, create_detector
from .exceptions import CameraUnavailableError

logger = logging.getLogger(__name__)


class MotionProcessor:
    """Runs the selected detector on each frame and keeps statistics."""

    def __init__(self, config: MotionDetectionConfig, detector: Optional[MotionDetector] = None):
        self.config = config
        self.detector = detector or create_detector(config)
        self.reset_statistics()

    def process_frame(self, frame: np.ndarray) -> Dict[str, Any]:
        """Process a single frame and return all results."""
        start_time = time.time()

        mask = self.detector.process(frame)

        processing_time = time.time() - start_time
        self.stats['frames_processed'] += 1
        self.stats['processing_time'] += processing_time
        if self.stats['processing_time'] > 0:
            self.stats['avg_fps'] = self.stats['frames_processed'] / self.stats['processing_time']

        if mask is None:
            self.stats['frames_skipped'] += 1
        else:
            self.stats['foreground_pixels'] += int(cv2.countNonZero(mask))

        return {
            'algorithm': self.config.algorithm,
            'original': frame,
            'current': self.detector.current_frame,
            'reference': self.detector.reference_frame,
            'difference': self.detector.difference,
            'mask': mask,
            'background': self.detector.background_image,
            'processing_time': processing_time,
            'frame_number': self.stats['frames_processed']
        }

    def get_statistics(self) -> Dict[str, Any]:
        """Get processing statistics."""
        return self.stats.copy()

    def reset_statistics(self):
        """Reset processing statistics."""
        self.stats = {
            'frames_processed': 0,
            'frames_skipped': 0,
            'processing_time': 0.0,
            'avg_fps': 0.0,
            'foreground_pixels': 0
        }


class CameraSource:
    """Frame source backed by cv2.VideoCapture.

    Any failure to open the device or to read a frame raises
    CameraUnavailableError; there is no retry.
    """

    def __init__(self, config: MotionDetectionConfig, capture_factory: Callable = cv2.VideoCapture):
        self.config = config
        self.capture_factory = capture_factory
        self.cap = None

    def open(self):
        camera_id = self.config.capture.camera_id
        self.cap = self.capture_factory(camera_id)

        if not self.cap.isOpened():
            logger.error(f"Cannot open camera {camera_id}")
            raise CameraUnavailableError(f"Cannot open camera {camera_id}")

        width = int(self.cap.get(cv2.CAP_PROP_FRAME_WIDTH))
        height = int(self.cap.get(cv2.CAP_PROP_FRAME_HEIGHT))
        fps = self.cap.get(cv2.CAP_PROP_FPS)
        logger.info(f"Camera {camera_id}: {width}x{height}, {fps} FPS")

    def next_frame(self) -> np.ndarray:
        if self.cap is None:
            raise CameraUnavailableError("Camera has not been opened")

        ret, frame = self.cap.read()
        if not ret or frame is None:
            logger.error(f"Failed to read frame from camera {self.config.capture.camera_id}")
            raise CameraUnavailableError("Camera returned no frame")
        return frame

    def cleanup(self):
        """Release the capture device."""
        if self.cap is not None:
            self.cap.release()
            self.cap = None

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.cleanup()


def run_session(source, processor: MotionProcessor, display, log_every: int = 100) -> Dict[str, Any]:
    """Pull, process and display frames until the display requests a stop.

    ``source`` needs ``next_frame()``; ``display`` needs ``display(results)``
    and ``is_cancel_requested()``, which is polled once per frame.
    Acquisition errors propagate to the caller.
    """
    logger.info(f"Starting {processor.config.algorithm} session")

    while True:
        frame = source.next_frame()
        results = processor.process_frame(frame)
        display.display(results)

        frame_number = results['frame_number']
        if log_every and frame_number % log_every == 0:
            stats = processor.get_statistics()
            logger.info(f"Processed {frame_number} frames | Avg FPS: {stats['avg_fps']:.2f}")

        if display.is_cancel_requested():
            logger.info(f"Session stopped by user after {frame_number} frames")
            break

    return processor.get_statistics()
