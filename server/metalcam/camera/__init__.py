"""
Camera Module
=============

Capture session and the controller that renders detections.
"""

from .controller import CameraController, render_overlay
from .session import CameraSession, SessionError, SessionState

__all__ = [
    "CameraController",
    "CameraSession",
    "SessionError",
    "SessionState",
    "render_overlay",
]
