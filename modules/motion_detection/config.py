"""
Configuration module for motion detection.
Centralizes all configuration parameters for the three detection strategies.

Defaults can be overridden through environment variables (or a .env file):
MOTION_CAMERA_ID, MOTION_LAG_WINDOW, MOTION_THRESHOLD, MOTION_ALPHA,
MOTION_MOG_LEARNING_RATE and MOTION_WAIT_MS.
"""

import os
from dataclasses import dataclass, field
from typing import Dict, Tuple

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

FRAME_DIFFERENCE = "FRAME_DIFFERENCE"
ADAPTIVE_BACKGROUND = "ADAPTIVE"
MIXTURE_OF_GAUSSIANS = "MOG2"

ALGORITHMS = (FRAME_DIFFERENCE, ADAPTIVE_BACKGROUND, MIXTURE_OF_GAUSSIANS)

# Numbered menu entries; 4 exits the program
MENU_CHOICES = {
    1: FRAME_DIFFERENCE,
    2: ADAPTIVE_BACKGROUND,
    3: MIXTURE_OF_GAUSSIANS,
}
MENU_EXIT = 4

# Range of the unsigned 32-bit frame counter
UINT32_MAX = 2 ** 32 - 1


def _env_int(name: str, default: int) -> int:
    return int(os.environ.get(name, default))


def _env_float(name: str, default: float) -> float:
    return float(os.environ.get(name, default))


@dataclass
class FrameDifferenceConfig:
    """Configuration for fixed-lag frame differencing."""

    lag_window: int = field(default_factory=lambda: _env_int('MOTION_LAG_WINDOW', 20))
    tolerance: int = 80  # extra ring buffer slots beyond the lag window
    threshold: int = field(default_factory=lambda: _env_int('MOTION_THRESHOLD', 50))
    max_sequence: int = UINT32_MAX

    @property
    def buffer_capacity(self) -> int:
        return self.lag_window + self.tolerance


@dataclass
class AdaptiveBackgroundConfig:
    """Configuration for the exponentially weighted background."""

    learning_rate: float = field(default_factory=lambda: _env_float('MOTION_ALPHA', 0.05))
    threshold: int = field(default_factory=lambda: _env_int('MOTION_THRESHOLD', 50))


@dataclass
class MixtureOfGaussiansConfig:
    """Configuration for the MOG2 background subtractor."""

    history: int = 500
    var_threshold: float = 16.0
    detect_shadows: bool = False  # shadows would add 127-valued pixels to the mask

    # 0 freezes the model, 1 replaces it every frame, -1 lets OpenCV choose
    learning_rate: float = field(default_factory=lambda: _env_float('MOTION_MOG_LEARNING_RATE', 0.05))


@dataclass
class CaptureConfig:
    """Configuration for frame acquisition."""

    camera_id: int = field(default_factory=lambda: _env_int('MOTION_CAMERA_ID', 0))
    wait_ms: int = field(default_factory=lambda: _env_int('MOTION_WAIT_MS', 30))


@dataclass
class VisualizationConfig:
    """Configuration for the display windows."""

    # Window name -> top-left position on screen
    window_positions: Dict[str, Tuple[int, int]] = field(default_factory=lambda: {
        'Frame': (100, 100),
        'Old Frame': (600, 100),
        'Difference': (100, 600),
        'Motion': (600, 600),
        'Motion Mask': (600, 100),
        'Background': (100, 600),
        'Foreground Mask': (600, 100),
    })
    log_every: int = 100  # frames between progress log lines


def validate_learning_rate(rate: float, allow_auto: bool = False) -> float:
    """Check that a learning rate lies in [0, 1] (or is -1 when allowed)."""
    if allow_auto and rate == -1:
        return rate
    if not 0.0 <= rate <= 1.0:
        raise ValueError(f"Learning rate must be within [0, 1], got {rate}")
    return rate


class MotionDetectionConfig:
    """Main configuration class combining all sub-configurations."""

    def __init__(self, algorithm: str = FRAME_DIFFERENCE):
        self.algorithm = algorithm.upper()

        # Sub-configurations
        self.frame_difference = FrameDifferenceConfig()
        self.adaptive = AdaptiveBackgroundConfig()
        self.mog = MixtureOfGaussiansConfig()
        self.capture = CaptureConfig()
        self.visualization = VisualizationConfig()

        self.validate()

    def validate(self):
        """Raise ValueError if any parameter is out of range."""
        if self.algorithm not in ALGORITHMS:
            raise ValueError(f"Unsupported algorithm: {self.algorithm}. Use one of {', '.join(ALGORITHMS)}")

        fd = self.frame_difference
        if fd.lag_window < 1:
            raise ValueError(f"Lag window must be positive, got {fd.lag_window}")
        if fd.tolerance < 1:
            raise ValueError(f"Tolerance must be at least 1, got {fd.tolerance}")
        if not 0 <= fd.threshold <= 255:
            raise ValueError(f"Threshold must be within [0, 255], got {fd.threshold}")
        if not 0 <= self.adaptive.threshold <= 255:
            raise ValueError(f"Threshold must be within [0, 255], got {self.adaptive.threshold}")

        validate_learning_rate(self.adaptive.learning_rate)
        validate_learning_rate(self.mog.learning_rate, allow_auto=True)

        if self.mog.history < 1:
            raise ValueError(f"MOG2 history must be positive, got {self.mog.history}")
        if self.capture.wait_ms < 1:
            raise ValueError(f"Wait time must be at least 1 ms, got {self.capture.wait_ms}")

    @classmethod
    def from_menu_choice(cls, choice: int) -> "MotionDetectionConfig":
        if choice not in MENU_CHOICES:
            raise ValueError(f"Invalid menu choice: {choice}")
        return cls(algorithm=MENU_CHOICES[choice])
