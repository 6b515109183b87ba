"""
API Routes Module
=================

Flask API routes for the metal camera server.
"""

import base64
import binascii
import logging
import time

import cv2
import numpy as np
from flask import Response, render_template_string, request, jsonify

from ..calib3d import convert_points_from_homogeneous, opencv_version_string
from ..camera import CameraController
from ..clink import ClinkDetector, GridLayout
from ..config import get_camera_config, get_detector_config
from ..errors import ClinkDataError, HomogeneousConversionError

LOGGER = logging.getLogger(__name__)

# Global instances
detector = ClinkDetector(GridLayout(get_detector_config().grid_resolution))
camera_controller = CameraController(detector, config=get_camera_config())


def _encode_frame(frame: np.ndarray) -> bytes:
    """Encode frame to JPEG bytes."""
    ret, buffer = cv2.imencode(".jpg", frame)
    return buffer.tobytes() if ret else b""


def _stream_frames():
    """Generator for streaming annotated frames from the camera."""
    if not camera_controller.start():
        return

    # survives session restarts after runtime errors
    while camera_controller.active:
        frame, _ = camera_controller.draw()
        if frame is not None:
            chunk = _encode_frame(frame)
            if chunk:
                yield (b"--frame\r\n" b"Content-Type: image/jpeg\r\n\r\n" + chunk + b"\r\n")
        time.sleep(0.03)  # ~30 FPS


def _decode_image(image_data: str) -> np.ndarray:
    """Decode a base64 image, raising ValueError with a client-facing message."""
    if not image_data or len(image_data) < 100:
        raise ValueError("Invalid image data - too small")
    try:
        img_bytes = base64.b64decode(image_data, validate=True)
    except binascii.Error as e:
        raise ValueError(f"Base64 decode error: {str(e)}") from e

    nparr = np.frombuffer(img_bytes, np.uint8)
    frame = cv2.imdecode(nparr, cv2.IMREAD_COLOR)
    if frame is None or frame.size == 0:
        raise ValueError("Failed to decode image")
    if frame.shape[0] < 10 or frame.shape[1] < 10:
        raise ValueError("Image too small")
    return frame


def register_routes(app, html_template: str):
    """
    Register all API routes with the Flask app.

    Args:
        app: Flask application instance
        html_template: HTML template string for the index page
    """

    @app.route("/")
    def index():
        """Serve the main web interface."""
        return render_template_string(html_template, opencv_version=opencv_version_string())

    @app.route("/video_feed")
    def video_feed():
        """Stream MJPEG video with the clinkcode overlay."""
        return Response(
            _stream_frames(),
            mimetype="multipart/x-mixed-replace; boundary=frame",
        )

    @app.route("/stop_camera", methods=["POST"])
    def stop_camera():
        """Stop the local camera session."""
        camera_controller.stop()
        return jsonify({"status": "ok"})

    @app.route("/version")
    def version():
        """Report the linked OpenCV version."""
        return jsonify({"opencv_version": opencv_version_string()})

    @app.route("/dehomogenize", methods=["POST"])
    def dehomogenize():
        """
        Convert homogeneous points to Cartesian coordinates.

        Request JSON:
            {
                "points": [[x, y, w], ...]   or a flat list with "dims"
                "dims": 3 | 4                (optional)
            }

        Response JSON:
            {
                "points": [[x / w, y / w], ...]
            }
        """
        data = request.get_json(silent=True)
        if not isinstance(data, dict) or "points" not in data:
            return jsonify({"error": "No points"}), 400

        try:
            points = convert_points_from_homogeneous(data["points"], dims=data.get("dims"))
        except (HomogeneousConversionError, TypeError, ValueError) as e:
            return jsonify({"error": str(e)}), 400
        return jsonify({"points": points.tolist()})

    @app.route("/process_frame", methods=["POST"])
    def process_frame():
        """
        Decode clinkcodes in a frame sent by the camera app.

        Request JSON:
            {
                "image": "<base64-encoded image>",
                "clink_data": [<int32>, ...]
            }

        Response JSON:
            {
                "clinkboard_detected": bool,
                "clinkcode_detected": bool,
                "codes": [{"code": int, "center": [x, y], "corners": {...}}],
                "marker": [x, y] | null
            }
        """
        try:
            data = request.get_json(silent=True)
            if not isinstance(data, dict) or "image" not in data:
                return jsonify({"error": "No image data"}), 400
            if "clink_data" not in data:
                return jsonify({"error": "No clink data"}), 400

            try:
                frame = _decode_image(data["image"])
            except ValueError as e:
                return jsonify({"error": str(e)}), 400

            try:
                result = detector.process(data["clink_data"], frame)
            except (ClinkDataError, TypeError, ValueError) as e:
                return jsonify({"error": str(e)}), 400

            return jsonify(result.to_dict())
        except Exception as e:
            LOGGER.exception("Error processing frame")
            return jsonify({"error": str(e)}), 500

    @app.route("/health")
    def health():
        """Health check endpoint."""
        result = camera_controller.last_result
        return jsonify({
            "status": "healthy",
            "camera_running": camera_controller.session.is_running(),
            "camera_state": str(camera_controller.session.state),
            "title": camera_controller.title,
            "codes": [code.code for code in result.codes] if result else [],
        })
