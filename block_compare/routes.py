"""
Block Comparison Flask Routes
=============================
API endpoints for block-level document comparison.
"""

import time
from functools import wraps
from flask import Blueprint, request, jsonify, g
from werkzeug.exceptions import BadRequest, HTTPException

from config_logging import get_config, get_logger, ValidationError, ProcessingError, VERSION
from .differ import compare_documents

logger = get_logger('block_compare')

bc_blueprint = Blueprint('block_compare', __name__)


# =============================================================================
# STANDARDIZED ERROR HANDLING DECORATOR
# =============================================================================

def _error_response(code: str, message: str, status: int):
    return jsonify({
        'success': False,
        'error': {
            'code': code,
            'message': message,
            'correlation_id': getattr(g, 'correlation_id', 'unknown')
        }
    }), status


def handle_bc_errors(f):
    """
    Decorator for standardized API error handling in Block Compare routes.
    """
    @wraps(f)
    def decorated(*args, **kwargs):
        start_time = time.time()
        try:
            result = f(*args, **kwargs)

            elapsed = time.time() - start_time
            if elapsed > 5.0:
                logger.warning(f"Slow BC API call: {f.__name__} took {elapsed:.1f}s")

            return result

        except ValidationError as e:
            logger.warning(f"Validation error in {f.__name__}: {e}")
            return _error_response('VALIDATION_ERROR', str(e), 400)
        except ProcessingError as e:
            logger.error(f"Processing error in {f.__name__}: {e}")
            return _error_response('PROCESSING_ERROR', str(e), 500)
        except BadRequest as e:
            logger.warning(f"Invalid JSON in {f.__name__}: {e}")
            return _error_response('INVALID_JSON', f'Invalid JSON format: {e.description}', 400)
        except HTTPException:
            raise
        except Exception as e:
            logger.exception(f"Unexpected error in {f.__name__}: {e}")
            return _error_response('INTERNAL_ERROR', 'An unexpected error occurred', 500)

    return decorated


def _require_string(data: dict, name: str) -> str:
    value = data.get(name)
    if not isinstance(value, str):
        raise ValidationError(f"'{name}' is required and must be a string", field=name)
    return value


# =============================================================================
# ENDPOINTS
# =============================================================================

@bc_blueprint.route('/api/compare/blocks', methods=['POST'])
@handle_bc_errors
def compare_blocks():
    """
    Compare two HTML documents block by block.

    Request body:
        { left_html: str, right_html: str, include_nodes: true? }

    Returns:
        {
            success: true,
            data: {
                left_html, right_html,
                summary: { additions, deletions, changes },
                degraded,
                left_nodes?, right_nodes?
            }
        }
    """
    data = request.get_json(force=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")

    left_html = _require_string(data, 'left_html')
    right_html = _require_string(data, 'right_html')
    # only a JSON true enables it; strings such as "false" do not
    include_nodes = data.get('include_nodes') is True

    logger.info(f"Block comparison requested: left={len(left_html)} chars, "
                f"right={len(right_html)} chars")

    result = compare_documents(left_html, right_html, include_nodes=include_nodes)

    return jsonify({
        'success': True,
        'data': result
    })


@bc_blueprint.route('/api/compare/blocks/config', methods=['GET'])
@handle_bc_errors
def comparison_config():
    """Current comparison settings."""
    config = get_config()
    return jsonify({
        'success': True,
        'data': {
            'version': VERSION,
            'similarity_threshold': config.similarity_threshold,
            'diff_timeout': config.diff_timeout,
            'strict': config.strict
        }
    })
