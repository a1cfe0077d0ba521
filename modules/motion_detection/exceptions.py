"""
Exceptions raised by the motion detection module.
"""


class MotionDetectionError(Exception):
    """Base class for motion detection errors."""


class CameraUnavailableError(MotionDetectionError):
    """The capture device could not be opened or stopped delivering frames."""


class CounterOverflowError(MotionDetectionError):
    """The frame sequence counter cannot be remapped within its range."""


class FrameShapeError(MotionDetectionError):
    """A frame's size differs from the frames the detector already holds."""
