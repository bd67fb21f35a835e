"""
Badge Print Bridge - Main Application
=====================================

HTTP front end for the printer bridge.

Run: python -m badge_print_bridge
"""

import logging
from typing import Optional

from flask import Flask, g, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import HTTPException, RequestEntityTooLarge

from . import __version__
from .bridge import BridgeError, ClientError, DeviceError, PrintBridge, new_request_id
from .config import BridgeConfig

logger = logging.getLogger(__name__)

STATUS_CODES = {
    error.error_type: error.status_code
    for error in (ClientError, DeviceError, BridgeError)
}


def _error(message: str, status: int):
    return jsonify({
        'success': False,
        'error': message,
        'requestId': g.get('request_id'),
    }), status


def create_app(config: Optional[BridgeConfig] = None,
               bridge: Optional[PrintBridge] = None) -> Flask:
    """
    Build the Flask application.

    Args:
        config: Bridge settings, read from the environment when omitted
        bridge: Prebuilt bridge (tests swap in other handlers this way)
    """
    config = config or BridgeConfig.from_env()
    bridge = bridge or PrintBridge(config)

    app = Flask(__name__)
    app.config['MAX_CONTENT_LENGTH'] = config.max_label_bytes
    app.extensions['print_bridge'] = bridge
    CORS(app)

    # =========================================================================
    # Request correlation
    # =========================================================================

    @app.before_request
    def assign_request_id():
        g.request_id = new_request_id()
        logger.info('[%s] %s %s', g.request_id, request.method, request.path)

        length = request.content_length
        if length is not None and length > config.max_label_bytes:
            raise RequestEntityTooLarge(
                f'Request body of {length} bytes exceeds the {config.max_label_bytes} byte limit'
            )

    @app.after_request
    def add_request_id_header(response):
        if 'request_id' in g:
            response.headers['X-Request-ID'] = g.request_id
        return response

    @app.errorhandler(HTTPException)
    def http_error(e):
        logger.warning('[%s] %s %s', g.get('request_id'), e.code, e.description)
        return _error(e.description, e.code)

    @app.errorhandler(Exception)
    def unexpected_error(e):
        logger.exception('[%s] Unhandled error', g.get('request_id'))
        return _error(str(e) or type(e).__name__, 500)

    # =========================================================================
    # Endpoints
    # =========================================================================

    @app.route('/api', methods=['GET'])
    def api_info():
        """API info (JSON)."""
        return jsonify({
            'service': 'Badge Print Bridge',
            'version': __version__,
            'status': 'running',
            'endpoints': {
                'health': '/health',
                'print': '/print',
            }
        })

    @app.route('/health', methods=['GET'])
    def health():
        """Liveness and default printer address."""
        return jsonify(bridge.health())

    @app.route('/print', methods=['POST'])
    def print_label():
        """Send a label document to a printer."""
        result = bridge.submit(request.get_json(force=True, silent=True), g.request_id)
        status = 200 if result.success else STATUS_CODES[result.error_type]
        return jsonify(result.to_dict()), status

    return app


# =============================================================================
# Main
# =============================================================================

def main():
    """Run the service."""
    config = BridgeConfig.from_env()
    logging.basicConfig(
        level=config.log_level,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )
    app = create_app(config)

    print("=" * 60)
    print("  Badge Print Bridge")
    print("=" * 60)
    print(f"  Version: {__version__}")
    print(f"  Port: {config.port}")
    print(f"  Default printer: {config.default_printer_host or 'unset'}:"
          f"{config.default_printer_port}")
    print(f"  Max label size: {config.max_label_bytes} bytes")
    print("=" * 60)
    print("  API Endpoints:")
    print("    GET  /health                          - Health check")
    print("    POST /print                           - Print label")
    print("    GET  /api                             - Service info")
    print("=" * 60)

    app.run(host=config.host, port=config.port, debug=config.debug, threaded=True)


if __name__ == '__main__':
    main()
