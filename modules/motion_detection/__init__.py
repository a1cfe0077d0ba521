"""
Motion Detection Module

Compares three foreground detection strategies on a live camera stream.

Main Components:
- MotionDetectionConfig: Configuration management
- FrameDifferenceDetector: Fixed-lag frame differencing over a ring buffer
- AdaptiveBackgroundModel: Exponentially weighted running background
- MixtureOfGaussiansModel: OpenCV MOG2 adapter
- MotionProcessor: Per-frame orchestration and statistics
- MotionVisualizationRenderer: Display and quit key handling

Example Usage:
    from modules.motion_detection import MotionDetectionConfig, MotionProcessor

    config = MotionDetectionConfig(algorithm="ADAPTIVE")
    processor = MotionProcessor(config)
    results = processor.process_frame(frame)
    mask = results['mask']
"""

__version__ = "1.0.0"
__all__ = [
    "MotionDetectionConfig",
    "RingBuffer",
    "FrameDifferenceDetector",
    "AdaptiveBackgroundModel",
    "MixtureOfGaussiansModel",
    "create_detector",
    "to_gray",
    "MotionProcessor",
    "CameraSource",
    "run_session",
    "MotionVisualizationRenderer",
    "StatisticsReporter",
    "MotionDetectionError",
    "CameraUnavailableError",
    "CounterOverflowError",
]

# Import main classes for easy access
from .config import MotionDetectionConfig
from .ring_buffer import RingBuffer
from .detectors import (
    AdaptiveBackgroundModel,
    FrameDifferenceDetector,
    MixtureOfGaussiansModel,
    create_detector,
    to_gray,
)
from .background_processor import CameraSource, MotionProcessor, run_session
from .visualizer import MotionVisualizationRenderer, StatisticsReporter
from .exceptions import CameraUnavailableError, CounterOverflowError, MotionDetectionError
