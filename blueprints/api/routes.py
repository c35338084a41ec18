"""
API routes for JSON endpoints.
Health check and the fixed slot schedule.
"""

from flask import jsonify, current_app, Blueprint

from models.slot import get_slot_options

api_bp = Blueprint('api', __name__)


@api_bp.route('/health')
def health_check():
    """
    Health check endpoint (no authentication required).

    Returns:
        JSON with status and version
    """
    return jsonify({
        'status': 'ok',
        'version': current_app.config.get('APP_VERSION', '1.0.0'),
        'app': current_app.config.get('APP_NAME', 'Agenda de Espaços')
    })


@api_bp.route('/slots')
def api_slots():
    """
    The daily slot schedule ("aulas") with start/end times.

    Returns:
        JSON list of slots
    """
    slots = get_slot_options()

    return jsonify({
        'success': True,
        'slots': slots,
        'count': len(slots)
    })
