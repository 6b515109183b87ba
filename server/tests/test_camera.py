"""
Tests for the camera session and controller.

A fake capture stands in for the camera hardware.
"""

import threading
import time

import numpy as np
import pytest

from metalcam.camera import CameraController, CameraSession, SessionError, SessionState
from metalcam.clink import ClinkDetector
from metalcam.config import CameraConfig


class FakeCapture:
    """Stand-in for cv2.VideoCapture."""

    def __init__(self, frame=None, frames=None, opened=True):
        self.frame = frame
        self.frames = frames  # None means endless
        self.opened = opened
        self.released = False
        self.props = {}

    def isOpened(self):
        return self.opened and not self.released

    def read(self):
        time.sleep(0.002)
        if self.frames is not None:
            if self.frames <= 0:
                return False, None
            self.frames -= 1
        return True, self.frame.copy()

    def set(self, prop, value):
        self.props[prop] = value
        return True

    def release(self):
        self.released = True


class RecordingDelegate:
    def __init__(self):
        self.frames = []
        self.states = []
        self.changed = threading.Event()

    def on_frame(self, session, frame, timestamp):
        self.frames.append(timestamp)

    def on_state_change(self, session, state, error):
        self.states.append((state, error))
        self.changed.set()


def wait_for(predicate, timeout=2.0):
    deadline = time.time() + timeout
    while time.time() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return False


BRIGHT = np.full((48, 64, 3), 200, dtype=np.uint8)
BLACK = np.zeros((48, 64, 3), dtype=np.uint8)


class TestCameraSession:
    """Test suite for CameraSession."""

    def test_runtime_error_is_reported(self):
        delegate = RecordingDelegate()
        cap = FakeCapture(BRIGHT, frames=3)
        session = CameraSession(delegate, CameraConfig(index=0), capture_factory=lambda idx: cap)

        assert session.start()
        assert wait_for(lambda: session.state is SessionState.ERROR)
        assert len(delegate.frames) == 3
        assert delegate.states == [
            (SessionState.STREAMING, None),
            (SessionState.ERROR, SessionError.CAPTURE_SESSION_RUNTIME_ERROR),
        ]
        assert cap.released
        assert not session.is_running()

    def test_unavailable_camera(self):
        delegate = RecordingDelegate()
        session = CameraSession(
            delegate, CameraConfig(index=3),
            capture_factory=lambda idx: FakeCapture(BRIGHT, opened=False),
        )

        assert not session.start()
        assert session.state is SessionState.ERROR
        assert delegate.states == [(SessionState.ERROR, SessionError.NO_HARDWARE_ACCESS)]

    def test_auto_detect_skips_black_cameras(self):
        caps = {
            0: FakeCapture(BRIGHT, opened=False),
            1: FakeCapture(BLACK),
            2: FakeCapture(BRIGHT),
        }
        session = CameraSession(RecordingDelegate(), CameraConfig(), capture_factory=caps.get)

        assert session.start()
        assert session.cap is caps[2]
        assert caps[1].released
        session.stop()

    def test_configures_capture(self):
        cap = FakeCapture(BRIGHT)
        config = CameraConfig(index=0, width=1280, height=720, fps=60)
        session = CameraSession(RecordingDelegate(), config, capture_factory=lambda idx: cap)

        session.start()
        session.stop()
        assert sorted(cap.props.values()) == [60, 720, 1280]

    def test_start_stop_are_idempotent(self):
        delegate = RecordingDelegate()
        cap = FakeCapture(BRIGHT)
        session = CameraSession(delegate, CameraConfig(index=0), capture_factory=lambda idx: cap)

        assert session.start()
        assert session.start()
        assert wait_for(lambda: len(delegate.frames) > 2)
        session.stop()
        session.stop()

        assert cap.released
        assert session.state is SessionState.STOPPED
        assert [s for s, _ in delegate.states] == [SessionState.STREAMING, SessionState.STOPPED]


class TestCameraController:
    """Test suite for CameraController."""

    def test_draw_without_frame(self):
        controller = CameraController(ClinkDetector(), capture_factory=lambda idx: FakeCapture(BRIGHT))
        assert controller.draw() == (None, None)

    def test_draws_marker_for_decoded_code(self, valid_code, code_frame, clink_data):
        code, _ = valid_code
        controller = CameraController(
            ClinkDetector(),
            clink_data_source=lambda frame: clink_data,
            config=CameraConfig(index=0),
            capture_factory=lambda idx: FakeCapture(code_frame),
        )
        try:
            assert controller.start()
            assert wait_for(lambda: controller.get_frame() is not None)
            frame, result = controller.draw()
        finally:
            controller.stop()

        assert [c.code for c in result.codes] == [code]
        assert controller.last_result is result
        # crosshair through the code center
        assert tuple(frame[10, 250]) == (0, 0, 255)
        assert tuple(frame[250, 10]) == (0, 0, 255)
        assert controller.title == "Metal camera: stopped"

    def test_no_source_means_no_detection(self, code_frame):
        controller = CameraController(
            ClinkDetector(),
            config=CameraConfig(index=0),
            capture_factory=lambda idx: FakeCapture(code_frame),
        )
        try:
            controller.start()
            assert wait_for(lambda: controller.get_frame() is not None)
            frame, result = controller.draw()
        finally:
            controller.stop()

        assert result.codes == []
        np.testing.assert_array_equal(frame, code_frame)

    def test_restarts_after_runtime_error(self):
        opened = []

        def factory(idx):
            cap = FakeCapture(BRIGHT, frames=2)
            opened.append(cap)
            return cap

        controller = CameraController(
            ClinkDetector(), config=CameraConfig(index=0), capture_factory=factory
        )
        try:
            controller.start()
            assert wait_for(lambda: len(opened) >= 2)
        finally:
            controller.stop()

    def test_gives_up_without_hardware(self):
        controller = CameraController(
            ClinkDetector(), config=CameraConfig(index=0),
            capture_factory=lambda idx: FakeCapture(BRIGHT, opened=False),
        )
        assert not controller.start()
        assert not controller.active
        assert controller.title == "Metal camera: error"


class TestVideoStream:
    """Test suite for the MJPEG frame generator."""

    def test_stream_survives_session_restart(self, monkeypatch):
        from metalcam.api import routes

        opened = []

        def factory(idx):
            cap = FakeCapture(BRIGHT, frames=3)
            opened.append(cap)
            return cap

        controller = CameraController(
            ClinkDetector(), config=CameraConfig(index=0), capture_factory=factory
        )
        monkeypatch.setattr(routes, "camera_controller", controller)

        stream = routes._stream_frames()
        try:
            chunks = 0
            for chunk in stream:
                assert chunk.startswith(b"--frame\r\n")
                chunks += 1
                if len(opened) >= 3:
                    break
            assert chunks > 0
            assert controller.active
        finally:
            stream.close()
            controller.stop()

    def test_stream_ends_when_stopped(self, monkeypatch):
        from metalcam.api import routes

        controller = CameraController(
            ClinkDetector(), config=CameraConfig(index=0),
            capture_factory=lambda idx: FakeCapture(BRIGHT),
        )
        monkeypatch.setattr(routes, "camera_controller", controller)

        stream = routes._stream_frames()
        next(stream)
        controller.stop()
        assert list(stream) == []
