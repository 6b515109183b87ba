"""
Camera Session Module
=====================

Thread-safe capture session that streams frames from an OpenCV camera
to a delegate and reports its state changes.

Usage:
    session = CameraSession(delegate)
    session.start()
    ...
    session.stop()
"""

import enum
import logging
import threading
import time
from typing import Callable, Optional, Protocol

import cv2
import numpy as np

from ..config import CameraConfig

LOGGER = logging.getLogger(__name__)


class SessionState(enum.Enum):
    """Lifecycle states of a camera session."""
    READY = "ready"
    STREAMING = "streaming"
    STOPPED = "stopped"
    ERROR = "error"

    def __str__(self) -> str:
        return self.value


class SessionError(enum.Enum):
    """Errors reported alongside a state change."""
    NO_HARDWARE_ACCESS = "no hardware access"
    CAPTURE_SESSION_RUNTIME_ERROR = "capture session runtime error"

    def __str__(self) -> str:
        return self.value


class CameraSessionDelegate(Protocol):
    """Receiver of frames and state changes."""

    def on_frame(self, session: "CameraSession", frame: np.ndarray, timestamp: float) -> None:
        ...

    def on_state_change(
        self, session: "CameraSession", state: SessionState, error: Optional[SessionError]
    ) -> None:
        ...


class CameraSession:
    """
    Background camera capture session.

    Frames are handed to the delegate from the capture thread. A read
    failure while streaming ends the capture loop and is reported as
    ``CAPTURE_SESSION_RUNTIME_ERROR``; restarting is left to the delegate.

    Attributes:
        state (SessionState): Current session state
    """

    AUTO_DETECT_INDICES = (0, 1, 2)

    def __init__(
        self,
        delegate: CameraSessionDelegate,
        config: Optional[CameraConfig] = None,
        capture_factory: Callable[[int], "cv2.VideoCapture"] = cv2.VideoCapture,
    ):
        """
        Initialize the session.

        Args:
            delegate: Receiver of frames and state changes
            config: Camera settings, defaults to ``CameraConfig()``
            capture_factory: Callable opening a capture for a device index
        """
        self.delegate = delegate
        self.config = config or CameraConfig()
        self.capture_factory = capture_factory
        self.lock = threading.Lock()
        self.cap = None
        self.running = False
        self.thread: Optional[threading.Thread] = None
        self.state = SessionState.READY

    def _set_state(self, state: SessionState, error: Optional[SessionError] = None) -> None:
        self.state = state
        LOGGER.info("Session changed state to %s with error: %s.", state, error or "None")
        self.delegate.on_state_change(self, state, error)

    def _open_capture(self):
        """Open the configured camera, or auto-detect one."""
        if self.config.index is not None:
            cap = self.capture_factory(self.config.index)
            return cap if cap.isOpened() else None
        return self._auto_detect_camera()

    def _auto_detect_camera(self):
        """Auto-detect a working camera that provides non-black frames."""
        for idx in self.AUTO_DETECT_INDICES:
            cap = self.capture_factory(idx)
            if cap.isOpened():
                ret, frame = cap.read()
                if ret and frame is not None and np.mean(frame) > 10:
                    LOGGER.info("Using camera %d", idx)
                    return cap
            cap.release()
        return None

    def _configure(self, cap) -> None:
        cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.config.width)
        cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.config.height)
        cap.set(cv2.CAP_PROP_FPS, self.config.fps)

    def start(self) -> bool:
        """
        Open the camera and start streaming.

        Returns:
            True if the session is streaming, False if no camera could be opened
        """
        previous = self.thread
        if previous and not self.running and previous is not threading.current_thread():
            previous.join(timeout=2.0)

        with self.lock:
            if self.running:
                return True

            cap = self._open_capture()
            if cap is None:
                self._set_state(SessionState.ERROR, SessionError.NO_HARDWARE_ACCESS)
                return False

            self._configure(cap)
            self.cap = cap
            self.running = True
            self.thread = threading.Thread(
                target=self._capture_loop, name="camera-session", daemon=True
            )
            self._set_state(SessionState.STREAMING)
            self.thread.start()
            return True

    def _release_capture(self) -> None:
        if self.cap is not None:
            self.cap.release()
            self.cap = None

    def stop(self) -> None:
        """Stop streaming and release the camera (thread-safe)."""
        with self.lock:
            was_running = self.running
            self.running = False
            thread, self.thread = self.thread, None
        if thread and thread is not threading.current_thread():
            thread.join(timeout=2.0)
        with self.lock:
            self._release_capture()
        if was_running:
            self._set_state(SessionState.STOPPED)

    def _capture_loop(self) -> None:
        """Background capture loop for continuous frame acquisition."""
        cap = self.cap
        while self.running:
            ret, frame = cap.read()
            if not ret or frame is None:
                break
            self.delegate.on_frame(self, frame, time.time())

        with self.lock:
            if not self.running:
                return
            # read failed while streaming
            self.running = False
            self._release_capture()
        self._set_state(SessionState.ERROR, SessionError.CAPTURE_SESSION_RUNTIME_ERROR)

    def is_running(self) -> bool:
        """Check if the session is currently streaming."""
        return self.running
