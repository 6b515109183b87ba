"""
Calib3D Bridge Module
=====================

Exposes the two OpenCV calls the camera app needs: the linked library
version and ``convertPointsFromHomogeneous``.

Usage:
    version = opencv_version_string()

    src = np.array([[1, -1, 1], [2, 0, 1]], dtype=np.float64)
    dst = np.zeros(4, dtype=np.float64)
    convert_points_from_homogeneous(src, dst)  # dst now holds [1, -1, 2, 0]
"""

import logging
from typing import Optional, Sequence, Union

import cv2
import numpy as np

from ..errors import HomogeneousConversionError

LOGGER = logging.getLogger(__name__)

SUPPORTED_DIMS = (3, 4)

ArrayLike = Union[np.ndarray, Sequence[float], Sequence[Sequence[float]]]


def opencv_version_string() -> str:
    """Return the version of the linked OpenCV library."""
    return cv2.__version__


def _as_points(src: ArrayLike, dims: Optional[int]) -> np.ndarray:
    """Coerce ``src`` into an ``(N, dims)`` float64 array."""
    if dims is not None and (
        isinstance(dims, bool) or not isinstance(dims, int) or dims not in SUPPORTED_DIMS
    ):
        raise HomogeneousConversionError(
            f"Homogeneous points must have 3 or 4 coordinates, got {dims!r}"
        )
    points = np.asarray(src, dtype=np.float64)

    if points.ndim == 1:
        if dims is None:
            raise HomogeneousConversionError(
                "A flat source buffer requires the point dimensionality"
            )
        if points.size % dims:
            raise HomogeneousConversionError(
                f"Source length {points.size} is not a multiple of {dims}"
            )
        points = points.reshape(-1, dims)
    elif points.ndim == 2:
        if dims is not None and points.shape[1] != dims:
            raise HomogeneousConversionError(
                f"Source points have {points.shape[1]} coordinates, expected {dims}"
            )
    else:
        raise HomogeneousConversionError(
            f"Source must be a flat buffer or an (N, dims) array, got shape {points.shape}"
        )

    if points.shape[1] not in SUPPORTED_DIMS:
        raise HomogeneousConversionError(
            f"Homogeneous points must have 3 or 4 coordinates, got {points.shape[1]}"
        )
    return points


def _check_destination(dst: np.ndarray, expected: int) -> None:
    """Validate a caller-owned destination buffer."""
    if not isinstance(dst, np.ndarray):
        raise HomogeneousConversionError("Destination must be a numpy array")
    if dst.dtype != np.float64:
        raise HomogeneousConversionError(f"Destination must be float64, got {dst.dtype}")
    if not dst.flags.writeable:
        raise HomogeneousConversionError("Destination buffer is read-only")
    if not dst.flags.c_contiguous:
        raise HomogeneousConversionError("Destination buffer must be C-contiguous")
    if dst.size != expected:
        raise HomogeneousConversionError(
            f"Destination holds {dst.size} values, expected {expected}"
        )


def convert_points_from_homogeneous(
    src: ArrayLike,
    dst: Optional[np.ndarray] = None,
    dims: Optional[int] = None,
) -> np.ndarray:
    """
    Convert homogeneous points to Cartesian coordinates with OpenCV.

    Each point ``(x1, .., xn-1, w)`` becomes ``(x1/w, .., xn-1/w)``. Points
    with ``w == 0`` are left unscaled, as OpenCV does.

    Args:
        src: Flat buffer (with ``dims``) or ``(N, dims)`` array of points
        dst: Optional float64 buffer of ``N * (dims - 1)`` values filled in place
        dims: Point dimensionality (3 or 4), required for flat buffers

    Returns:
        ``(N, dims - 1)`` array of Cartesian points; a view of ``dst`` when given

    Raises:
        HomogeneousConversionError: If the buffers do not describe valid points
    """
    points = _as_points(src, dims)
    count, point_dims = points.shape
    out_dims = point_dims - 1

    if dst is not None:
        _check_destination(dst, count * out_dims)
        out = dst.reshape(count, out_dims)
    else:
        out = np.empty((count, out_dims), dtype=np.float64)

    if count == 0:
        return out

    converted = cv2.convertPointsFromHomogeneous(points.reshape(count, 1, point_dims))
    np.copyto(out, converted.reshape(count, out_dims))
    LOGGER.debug("Dehomogenized %d points of dimension %d", count, point_dims)
    return out
