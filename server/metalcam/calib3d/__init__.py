"""
Calib3D Module
==============

Thin wrappers around OpenCV's calib3d helpers used by the camera app.
"""

from .bridge import convert_points_from_homogeneous, opencv_version_string

__all__ = ["opencv_version_string", "convert_points_from_homogeneous"]
