import cv2
import numpy as np
import pytest


class FakeCapture:
    """Stands in for cv2.VideoCapture, replaying a list of frames."""

    def __init__(self, frames=None, opened=True):
        self.frames = list(frames or [])
        self.opened = opened
        self.released = False

    def isOpened(self):
        return self.opened

    def get(self, prop):
        return 0

    def read(self):
        if not self.frames:
            return False, None
        return True, self.frames.pop(0)

    def release(self):
        self.released = True


class FakeDisplay:
    """Records displayed results and cancels after a number of frames."""

    def __init__(self, cancel_after=None):
        self.cancel_after = cancel_after
        self.results = []
        self.polls = 0

    def display(self, results):
        self.results.append(results)

    def is_cancel_requested(self):
        self.polls += 1
        return self.cancel_after is not None and self.polls >= self.cancel_after


def gray_frame(value, shape=(4, 6)):
    return np.full(shape, value, dtype=np.uint8)


def bgr_frame(value, shape=(4, 6)):
    return np.full(shape + (3,), value, dtype=np.uint8)


@pytest.fixture
def fake_gui(monkeypatch):
    """Replace the OpenCV HighGUI calls and record what was shown."""
    calls = {'named': [], 'moved': {}, 'shown': [], 'destroyed': 0, 'keys': []}

    def wait_key(delay):
        if calls['keys']:
            return calls['keys'].pop(0)
        return -1

    def destroy_all():
        calls['destroyed'] += 1

    monkeypatch.setattr(cv2, 'namedWindow', lambda name, *args: calls['named'].append(name))
    monkeypatch.setattr(cv2, 'moveWindow', lambda name, x, y: calls['moved'].__setitem__(name, (x, y)))
    monkeypatch.setattr(cv2, 'imshow', lambda name, image: calls['shown'].append(name))
    monkeypatch.setattr(cv2, 'waitKey', wait_key)
    monkeypatch.setattr(cv2, 'destroyAllWindows', destroy_all)
    return calls
