"""
Camera Controller Module
========================

Session delegate that keeps the latest camera frame and renders it with
the clinkcode detection overlay.

Usage:
    controller = CameraController(ClinkDetector())
    controller.start()
    frame, result = controller.draw()
"""

import logging
import threading
import time
from typing import Callable, Optional, Sequence, Tuple

import cv2
import numpy as np

from ..clink import ClinkDetector, DetectionResult
from ..config import CameraConfig
from .session import CameraSession, SessionError, SessionState

LOGGER = logging.getLogger(__name__)

ClinkDataSource = Callable[[np.ndarray], Sequence[int]]

MARKER_COLOR = (0, 0, 255)


class CameraController:
    """
    Renders camera frames with the detected marker position.

    The clink data buffer for each frame is produced upstream (the GPU
    summary pass). Without a source a zeroed buffer is used, so frames are
    rendered but no markers are found.

    Attributes:
        title (str): Display title reflecting the session state
        last_result (DetectionResult): Detection of the last drawn frame
    """

    def __init__(
        self,
        detector: ClinkDetector,
        clink_data_source: Optional[ClinkDataSource] = None,
        config: Optional[CameraConfig] = None,
        capture_factory: Optional[Callable] = None,
    ):
        """
        Initialize the controller and its capture session.

        Args:
            detector: Detector run on every drawn frame
            clink_data_source: Callable returning the clink data for a frame
            config: Camera settings for the session
            capture_factory: Optional capture opener passed to the session
        """
        self.detector = detector
        self.clink_data_source = clink_data_source
        self.frame_lock = threading.Lock()
        self.frame: Optional[np.ndarray] = None
        self.timestamp: Optional[float] = None
        self.title = "Metal camera"
        self.last_result: Optional[DetectionResult] = None
        self.active = False
        # one draw at a time
        self._semaphore = threading.Semaphore(1)

        kwargs = {} if capture_factory is None else {"capture_factory": capture_factory}
        self.session = CameraSession(self, config, **kwargs)

    def start(self) -> bool:
        """Start the capture session."""
        self.active = True
        return self.session.start()

    def stop(self) -> None:
        """Stop the capture session and drop the held frame."""
        self.active = False
        self.session.stop()
        with self.frame_lock:
            self.frame = None
            self.timestamp = None

    # ------------------------------------------------------------------ delegate
    def on_frame(self, session: CameraSession, frame: np.ndarray, timestamp: float) -> None:
        with self.frame_lock:
            self.frame = frame
            self.timestamp = timestamp

    def on_state_change(
        self, session: CameraSession, state: SessionState, error: Optional[SessionError]
    ) -> None:
        self.title = f"Metal camera: {state}"
        if error is SessionError.NO_HARDWARE_ACCESS:
            self.active = False
        if error is SessionError.CAPTURE_SESSION_RUNTIME_ERROR and self.active:
            # restart off the capture thread
            threading.Thread(target=self._restart, name="camera-restart", daemon=True).start()

    def _restart(self) -> None:
        if self.active:
            self.session.start()

    # ------------------------------------------------------------------ rendering
    def get_frame(self) -> Optional[np.ndarray]:
        """Copy of the latest captured frame, or None."""
        with self.frame_lock:
            return None if self.frame is None else self.frame.copy()

    def _clink_data_for(self, frame: np.ndarray) -> Sequence[int]:
        if self.clink_data_source is None:
            return self.detector.grid.empty_buffer()
        return self.clink_data_source(frame)

    def draw(self) -> Tuple[Optional[np.ndarray], Optional[DetectionResult]]:
        """
        Detect markers in the latest frame and render the overlay.

        Returns:
            The annotated frame and its detection, or (None, None) if no
            frame has been captured yet
        """
        with self._semaphore:
            frame = self.get_frame()
            if frame is None:
                return None, None

            t0 = time.perf_counter()
            result = self.detector.process(self._clink_data_for(frame), frame)
            rendered = render_overlay(frame, result)
            self.last_result = result
            LOGGER.debug("Frame processed in %.4f secs", time.perf_counter() - t0)
            return rendered, result


def render_overlay(frame: np.ndarray, result: DetectionResult) -> np.ndarray:
    """
    Draw the marker crosshair on a frame.

    Args:
        frame: Frame to annotate in place
        result: Detection for this frame

    Returns:
        The annotated frame
    """
    marker = result.marker
    if marker is None:
        return frame
    h, w = frame.shape[:2]
    x, y = int(round(marker[0])), int(round(marker[1]))
    cv2.line(frame, (x, 0), (x, h - 1), MARKER_COLOR, 2)
    cv2.line(frame, (0, y), (w - 1, y), MARKER_COLOR, 2)
    return frame
