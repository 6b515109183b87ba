"""
Metal Camera Server
===================

Main entry point for the Flask server.

Usage:
    python run.py

Or with gunicorn:
    gunicorn -w 1 -b 0.0.0.0:5000 "run:create_app()"
"""

import logging
import os
import sys

# Add server source to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from flask import Flask
from metalcam.api import register_routes
from metalcam.calib3d import opencv_version_string
from metalcam.config import get_server_config
from metalcam.templates import HTML_TEMPLATE


def create_app() -> Flask:
    """Create the Flask app with all routes registered."""
    app = Flask(__name__)
    app.json.sort_keys = False
    register_routes(app, HTML_TEMPLATE)
    return app


def main():
    """Main entry point."""
    config = get_server_config()
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    print(f"""
╔══════════════════════════════════════════════════════╗
║          Metal Camera Server                         ║
╠══════════════════════════════════════════════════════╣
║  Server running at: http://{config.host}:{config.port:<5}              ║
║  Debug mode: {str(config.debug):<5}                               ║
║  OpenCV: {opencv_version_string():<10}                                  ║
║                                                      ║
║  Endpoints:                                          ║
║    GET  /              - Web interface               ║
║    GET  /video_feed    - Clinkcode overlay stream    ║
║    POST /stop_camera   - Stop the camera session     ║
║    POST /process_frame - Decode clinkcodes in frame  ║
║    POST /dehomogenize  - Homogeneous to Cartesian    ║
║    GET  /version       - OpenCV version              ║
║    GET  /health        - Health check                ║
╚══════════════════════════════════════════════════════╝
    """)
    app = create_app()
    app.run(host=config.host, port=config.port, debug=config.debug, threaded=config.threaded)


if __name__ == "__main__":
    main()
