"""
Core motion detection algorithms.

Three strategies share the same per-frame contract, ``process(frame)``,
which returns a binary (0/255) uint8 mask or None while the detector is
still warming up:

- FrameDifferenceDetector: current frame against the frame N steps back
- AdaptiveBackgroundModel: current frame against an exponentially
  weighted running background
- MixtureOfGaussiansModel: OpenCV's MOG2 per-pixel Gaussian mixture
"""

import logging
from typing import Optional

import cv2
import numpy as np

from .config import (
    ADAPTIVE_BACKGROUND,
    FRAME_DIFFERENCE,
    MIXTURE_OF_GAUSSIANS,
    AdaptiveBackgroundConfig,
    FrameDifferenceConfig,
    MixtureOfGaussiansConfig,
    MotionDetectionConfig,
    validate_learning_rate,
)
from .exceptions import CounterOverflowError, FrameShapeError, MotionDetectionError
from .ring_buffer import RingBuffer

logger = logging.getLogger(__name__)


def to_gray(frame: np.ndarray) -> np.ndarray:
    """Convert a BGR frame to single-channel intensity.

    Frames that are already single channel are returned unchanged.
    """
    if frame.ndim == 2:
        return frame
    if frame.ndim == 3 and frame.shape[2] == 1:
        return frame[:, :, 0]
    return cv2.cvtColor(frame, cv2.COLOR_BGR2GRAY)


class MotionDetector:
    """Common interface of the detection strategies."""

    name = ""

    def __init__(self):
        # Intermediate images kept for display
        self.current_frame: Optional[np.ndarray] = None
        self.reference_frame: Optional[np.ndarray] = None
        self.difference: Optional[np.ndarray] = None

    @property
    def background_image(self) -> Optional[np.ndarray]:
        return None

    def process(self, frame: np.ndarray) -> Optional[np.ndarray]:
        raise NotImplementedError

    def reset(self):
        self.current_frame = None
        self.reference_frame = None
        self.difference = None


class FrameDifferenceDetector(MotionDetector):
    """Fixed-lag frame differencing backed by a ring buffer.

    The frame with sequence number ``cur`` is compared to the one written
    ``lag_window`` steps earlier. The buffer holds ``lag_window + tolerance``
    frames so the reference slot is never overwritten before it is read.
    """

    name = FRAME_DIFFERENCE

    def __init__(self, config: FrameDifferenceConfig):
        super().__init__()
        if config.lag_window < 1:
            raise ValueError(f"Lag window must be positive, got {config.lag_window}")
        if config.tolerance < 1:
            raise ValueError(f"Tolerance must be at least 1, got {config.tolerance}")

        self.config = config
        self.lag_window = config.lag_window
        self.threshold = config.threshold
        self.max_sequence = config.max_sequence
        self.buffer = RingBuffer(config.buffer_capacity)

        # Remapping needs room for capacity + (cur % capacity)
        if self.max_sequence < 2 * self.buffer.capacity:
            raise CounterOverflowError(
                f"Counter range {self.max_sequence} too small for buffer capacity {self.buffer.capacity}"
            )

        self.current = 0
        self.frame_shape = None

    @property
    def old(self) -> int:
        """Sequence number of the reference frame (negative while warming up)."""
        return self.current - self.lag_window

    @property
    def warming_up(self) -> bool:
        return self.current < self.lag_window

    def detect(self, frame: np.ndarray) -> Optional[np.ndarray]:
        """Store the frame and return its motion mask, or None during warm-up."""
        gray = to_gray(frame)
        # Reject before touching the buffer or the counter
        if self.frame_shape is not None and gray.shape != self.frame_shape:
            raise FrameShapeError(f"Frame shape {gray.shape} differs from buffered shape {self.frame_shape}")
        self.frame_shape = gray.shape

        self.buffer.write(self.current, gray)
        self.current_frame = self.buffer.read(self.current)

        mask = None
        if not self.warming_up and self.buffer.is_populated(self.old):
            reference = self.buffer.read(self.old)
            self.reference_frame = reference
            self.difference = cv2.absdiff(gray, reference)
            _, mask = cv2.threshold(self.difference, self.threshold, 255, cv2.THRESH_BINARY)

        self._advance()
        return mask

    def process(self, frame: np.ndarray) -> Optional[np.ndarray]:
        return self.detect(frame)

    def _advance(self):
        next_seq = self.current + 1
        if next_seq > self.max_sequence:
            # Keep the slot (seq % capacity) and the lag; stay out of warm-up
            capacity = self.buffer.capacity
            remapped = capacity + next_seq % capacity
            logger.warning(f"Frame counter reached {self.max_sequence}, remapping {next_seq} -> {remapped}")
            next_seq = remapped
        self.current = next_seq

    def reset(self):
        super().reset()
        self.buffer.clear()
        self.current = 0
        self.frame_shape = None


class AdaptiveBackgroundModel(MotionDetector):
    """Running background updated by exponential smoothing.

    The background is seeded from the first frame only. For every later
    frame the mask is computed first and the background updated after,
    so a frame is never compared against itself.
    """

    name = ADAPTIVE_BACKGROUND

    def __init__(self, config: AdaptiveBackgroundConfig):
        super().__init__()
        self.config = config
        self.learning_rate = validate_learning_rate(config.learning_rate)
        self.threshold = config.threshold
        self.background: Optional[np.ndarray] = None
        self.trained = False

    def train(self, frame: np.ndarray):
        """Seed the background with the first frame; later calls do nothing."""
        if self.trained:
            return
        self.background = to_gray(frame).astype(np.float32)
        self.trained = True
        logger.info(f"Initial background stored ({self.background.shape[1]}x{self.background.shape[0]})")

    def _as_float(self, frame: np.ndarray) -> np.ndarray:
        if not self.trained:
            raise MotionDetectionError("Background model used before train()")
        gray = to_gray(frame)
        if gray.shape != self.background.shape:
            raise FrameShapeError(f"Frame shape {gray.shape} differs from background shape {self.background.shape}")
        return gray.astype(np.float32)

    def detect(self, frame: np.ndarray) -> np.ndarray:
        """Threshold |frame - background| into a 0/255 mask."""
        self.difference = cv2.absdiff(self._as_float(frame), self.background)
        return np.where(self.difference > self.threshold, 255, 0).astype(np.uint8)

    def update(self, frame: np.ndarray):
        """background <- alpha * frame + (1 - alpha) * background, in place."""
        cv2.accumulateWeighted(self._as_float(frame), self.background, self.learning_rate)

    def process(self, frame: np.ndarray) -> np.ndarray:
        self.train(frame)
        mask = self.detect(frame)
        self.update(frame)
        self.current_frame = frame
        return mask

    @property
    def background_image(self) -> Optional[np.ndarray]:
        if self.background is None:
            return None
        return np.clip(np.rint(self.background), 0, 255).astype(np.uint8)

    def reset(self):
        super().reset()
        self.background = None
        self.trained = False


class MixtureOfGaussiansModel(MotionDetector):
    """Adapter over OpenCV's MOG2 background subtractor."""

    name = MIXTURE_OF_GAUSSIANS

    def __init__(self, config: MixtureOfGaussiansConfig):
        super().__init__()
        self.config = config
        validate_learning_rate(config.learning_rate, allow_auto=True)
        self._build()

    def _build(self):
        self._subtractor = cv2.createBackgroundSubtractorMOG2(
            history=self.config.history,
            varThreshold=self.config.var_threshold,
            detectShadows=self.config.detect_shadows
        )

    def apply(self, frame: np.ndarray, learning_rate: Optional[float] = None) -> np.ndarray:
        """Update the model with ``frame`` and return its foreground mask.

        ``learning_rate`` overrides the configured rate for this call:
        0 keeps the model frozen, 1 rebuilds it from this frame alone.
        """
        if learning_rate is None:
            learning_rate = self.config.learning_rate
        validate_learning_rate(learning_rate, allow_auto=True)
        return self._subtractor.apply(frame, learningRate=learning_rate)

    def process(self, frame: np.ndarray) -> np.ndarray:
        self.current_frame = frame
        return self.apply(frame)

    @property
    def background_image(self) -> Optional[np.ndarray]:
        return self._subtractor.getBackgroundImage()

    def reset(self):
        """Start the background model from scratch."""
        super().reset()
        self._build()


def create_detector(config: MotionDetectionConfig) -> MotionDetector:
    """Create the detector for the configured algorithm."""
    if config.algorithm == FRAME_DIFFERENCE:
        return FrameDifferenceDetector(config.frame_difference)
    elif config.algorithm == ADAPTIVE_BACKGROUND:
        return AdaptiveBackgroundModel(config.adaptive)
    elif config.algorithm == MIXTURE_OF_GAUSSIANS:
        return MixtureOfGaussiansModel(config.mog)

    raise ValueError(f"Unknown algorithm: {config.algorithm}")
