"""
BlockCompare - Main Flask Application
Serves the block-level document comparison API.
"""
from flask import Flask, jsonify, g, request

from config_logging import get_config, get_logger, StructuredLogger, VERSION, APP_NAME
from block_compare.routes import bc_blueprint

config = get_config()
logger = get_logger('app')

app = Flask(__name__)
app.config['MAX_CONTENT_LENGTH'] = config.max_content_length
app.register_blueprint(bc_blueprint)


@app.before_request
def assign_correlation_id():
    """Tag every request so its log lines can be grouped."""
    header_id = request.headers.get('X-Correlation-ID')
    if header_id:
        StructuredLogger.set_correlation_id(header_id)
        g.correlation_id = header_id
    else:
        g.correlation_id = StructuredLogger.new_correlation_id()


@app.route('/api/health')
def health():
    """Liveness check."""
    return jsonify({'status': 'ok', 'app': APP_NAME, 'version': VERSION})


@app.errorhandler(404)
def not_found(e):
    """JSON 404 so API clients never get an HTML error page"""
    return jsonify({
        'success': False,
        'error': {'code': 'NOT_FOUND', 'message': 'Resource not found'}
    }), 404


@app.errorhandler(413)
def too_large(e):
    """Handle request bodies over MAX_CONTENT_LENGTH"""
    return jsonify({
        'success': False,
        'error': {
            'code': 'PAYLOAD_TOO_LARGE',
            'message': f'Request exceeds {config.max_content_length // (1024 * 1024)}MB limit'
        }
    }), 413


if __name__ == '__main__':
    is_valid, errors = config.validate()
    if not is_valid:
        for error in errors:
            logger.warning(f"Configuration problem: {error}")
    logger.info(f"Starting {APP_NAME} v{VERSION} on {config.host}:{config.port}")
    app.run(host=config.host, port=config.port, debug=config.debug)
