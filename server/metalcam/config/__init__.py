"""
Configuration Module
====================
"""

from .settings import (
    ServerConfig,
    CameraConfig,
    DetectorConfig,
    get_server_config,
    get_camera_config,
    get_detector_config,
)

__all__ = [
    "ServerConfig",
    "CameraConfig",
    "DetectorConfig",
    "get_server_config",
    "get_camera_config",
    "get_detector_config",
]
