#!/usr/bin/env python3
"""
Interactive runner comparing the motion detection strategies on a live camera.

Pick a strategy from the menu; inside a session press 'q' or ESC to return
to the menu.
"""

import argparse
import logging
import sys
from typing import Callable, Dict, Optional

import cv2

from .background_processor import CameraSource, MotionProcessor, run_session
from .config import ALGORITHMS, MENU_EXIT, MotionDetectionConfig
from .exceptions import CameraUnavailableError, MotionDetectionError
from .visualizer import MotionVisualizationRenderer, StatisticsReporter

logger = logging.getLogger('motion_detection')

MENU_TEXT = (
    "Available background subtraction algorithms:\n"
    "1) frame difference\n"
    "2) adaptive background through alpha value\n"
    "3) Mixture of Gaussians (MOG2) method\n"
    "4) exit"
)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Compare motion detection strategies on a camera stream")
    parser.add_argument("--camera", type=int, default=None,
                        help="Camera index passed to cv2.VideoCapture")
    parser.add_argument("--algorithm", type=str.upper, choices=ALGORITHMS, default=None,
                        help="Run a single algorithm instead of showing the menu")
    parser.add_argument("--lag", type=int, default=None,
                        help="Frames between the compared pair in frame difference")
    parser.add_argument("--tolerance", type=int, default=None,
                        help="Extra ring buffer slots beyond the lag window")
    parser.add_argument("--threshold", type=int, default=None,
                        help="Intensity difference above which a pixel counts as motion")
    parser.add_argument("--alpha", type=float, default=None,
                        help="Learning rate of the adaptive background")
    parser.add_argument("--mog-learning-rate", type=float, default=None,
                        help="Learning rate of the MOG2 model (-1 for automatic)")
    parser.add_argument("--history", type=int, default=None,
                        help="Number of frames in the MOG2 history")
    parser.add_argument("--var-threshold", type=float, default=None,
                        help="MOG2 variance threshold")
    parser.add_argument("--detect-shadows", action="store_true", default=False,
                        help="Mark MOG2 shadows (gray 127) in the mask")
    parser.add_argument("--wait-ms", type=int, default=None,
                        help="Keyboard wait between frames in milliseconds")
    parser.add_argument("--log-level", type=str, default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser.parse_args(argv)


def build_config(config: MotionDetectionConfig, args) -> MotionDetectionConfig:
    """Apply command line overrides to a session configuration."""
    if args.camera is not None:
        config.capture.camera_id = args.camera
    if args.wait_ms is not None:
        config.capture.wait_ms = args.wait_ms
    if args.lag is not None:
        config.frame_difference.lag_window = args.lag
    if args.tolerance is not None:
        config.frame_difference.tolerance = args.tolerance
    if args.threshold is not None:
        config.frame_difference.threshold = args.threshold
        config.adaptive.threshold = args.threshold
    if args.alpha is not None:
        config.adaptive.learning_rate = args.alpha
    if args.mog_learning_rate is not None:
        config.mog.learning_rate = args.mog_learning_rate
    if args.history is not None:
        config.mog.history = args.history
    if args.var_threshold is not None:
        config.mog.var_threshold = args.var_threshold
    if args.detect_shadows:
        config.mog.detect_shadows = True

    config.validate()
    return config


def prompt_choice(low: int = 1, high: int = MENU_EXIT, input_func: Callable[[str], str] = input) -> int:
    """Ask until the user enters an integer within [low, high]."""
    while True:
        answer = input_func(f"Please choose number between {low} and {high}\n")
        try:
            choice = int(answer.strip())
        except ValueError:
            continue
        if low <= choice <= high:
            return choice


def run_algorithm(config: MotionDetectionConfig, capture_factory=None) -> Dict:
    """Run one detection session on the camera and print its summary."""
    processor = MotionProcessor(config)
    renderer = MotionVisualizationRenderer(config)
    source = CameraSource(config, capture_factory or cv2.VideoCapture)

    try:
        with source:
            stats = run_session(source, processor, renderer,
                                log_every=config.visualization.log_every)
    finally:
        renderer.close()

    StatisticsReporter().print_summary(stats, config)
    return stats


def main(argv=None, input_func: Optional[Callable[[str], str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level),
                        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    input_func = input_func or input

    print("Background subtractor program awakens ...")

    try:
        if args.algorithm:
            run_algorithm(build_config(MotionDetectionConfig(algorithm=args.algorithm), args))
            return 0

        while True:
            print(MENU_TEXT)
            choice = prompt_choice(input_func=input_func)
            if choice == MENU_EXIT:
                break
            run_algorithm(build_config(MotionDetectionConfig.from_menu_choice(choice), args))

    except CameraUnavailableError as e:
        logger.error(f"[FAIL] {e}")
        return 1
    except MotionDetectionError as e:
        logger.error(f"Frame processing failed: {e}")
        return 1
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1
    except (KeyboardInterrupt, EOFError):
        print("\nInterrupted by user")
        return 0

    return 0


if __name__ == "__main__":
    sys.exit(main())
