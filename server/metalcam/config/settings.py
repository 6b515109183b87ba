"""
Server Configuration
====================

Configuration settings for the metal camera server.
"""

import os
from dataclasses import dataclass
from typing import Optional
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


@dataclass
class ServerConfig:
    """Server configuration settings."""
    host: str = "0.0.0.0"
    port: int = 5000
    debug: bool = False
    threaded: bool = True
    log_level: str = "INFO"


@dataclass
class CameraConfig:
    """Camera configuration settings."""
    index: Optional[int] = None  # None for auto-detect
    width: int = 1920
    height: int = 1080
    fps: int = 30


@dataclass
class DetectorConfig:
    """Clinkcode detector configuration settings."""
    grid_resolution: int = 1


def get_server_config() -> ServerConfig:
    """Get server configuration from environment."""
    return ServerConfig(
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "5000")),
        debug=os.getenv("DEBUG", "false").lower() == "true",
        threaded=True,
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )


def get_camera_config() -> CameraConfig:
    """Get camera configuration from environment."""
    index = os.getenv("CAMERA_INDEX")
    return CameraConfig(
        index=int(index) if index else None,
        width=int(os.getenv("CAMERA_WIDTH", "1920")),
        height=int(os.getenv("CAMERA_HEIGHT", "1080")),
        fps=int(os.getenv("CAMERA_FPS", "30"))
    )


def get_detector_config() -> DetectorConfig:
    """Get detector configuration from environment."""
    return DetectorConfig(
        grid_resolution=int(os.getenv("GRID_RESOLUTION", "1")),
    )
