"""
Metal Camera Server
===================

Camera frame server that decodes clinkcode markers and exposes the
OpenCV calib3d helpers the camera app relies on.

Modules:
    - calib3d: OpenCV version query and point dehomogenization
    - clink: Clinkcode marker decoding from the per-frame grid summary
    - camera: Capture session and the frame rendering controller
    - api: Flask API routes and endpoints
    - config: Environment-driven settings
"""

__version__ = "1.0.0"
__author__ = "Metal Camera Team"
