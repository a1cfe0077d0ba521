import numpy as np
import pytest

from modules.motion_detection.ring_buffer import RingBuffer


def make_frames(count, shape=(3, 3)):
    return [np.full(shape, i, dtype=np.uint8) for i in range(count)]


def test_reads_back_every_frame_before_wraparound():
    buffer = RingBuffer(capacity=8)
    frames = make_frames(6)
    for seq, frame in enumerate(frames):
        buffer.write(seq, frame)

    for seq, frame in enumerate(frames):
        assert np.array_equal(buffer.read(seq), frame)
        assert buffer.read(seq).dtype == frame.dtype


def test_wraparound_overwrites_older_frame():
    capacity = 4
    buffer = RingBuffer(capacity)
    frames = make_frames(capacity + 3)
    for seq, frame in enumerate(frames):
        buffer.write(seq, frame)

    for j in range(3):
        assert np.array_equal(buffer.read(j), frames[capacity + j])
        assert not np.array_equal(buffer.read(j), frames[j])


def test_capacity_five_read_one_returns_sequence_six():
    buffer = RingBuffer(5)
    frames = make_frames(7)
    for seq, frame in enumerate(frames):
        buffer.write(seq, frame)

    assert np.array_equal(buffer.read(1), frames[6])


def test_write_stores_a_copy():
    buffer = RingBuffer(2)
    frame = np.zeros((2, 2), dtype=np.uint8)
    buffer.write(0, frame)
    frame[:] = 99

    assert buffer.read(0).max() == 0


def test_unwritten_slots_are_empty():
    buffer = RingBuffer(3)
    assert buffer.read(2) is None
    assert not buffer.is_populated(2)
    assert len(buffer) == 0

    buffer.write(5, np.ones((1, 1), dtype=np.uint8))
    assert buffer.is_populated(2)
    assert len(buffer) == 1

    buffer.clear()
    assert len(buffer) == 0


def test_slot_is_sequence_modulo_capacity():
    buffer = RingBuffer(100)
    assert buffer.slot(2 ** 32 - 1) == (2 ** 32 - 1) % 100


def test_invalid_arguments():
    with pytest.raises(ValueError):
        RingBuffer(0)
    with pytest.raises(ValueError):
        RingBuffer(3).read(-1)
