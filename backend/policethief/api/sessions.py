from flask import Blueprint, jsonify

from policethief import get_game_service
from policethief.services.games.errors import GameError

sessions = Blueprint('sessions', __name__)


@sessions.route('/health', methods=['GET'])
def health():
    return jsonify({'status': 'ok', 'sessions': len(get_game_service().registry)})


@sessions.route('/sessions/<string:code>', methods=['GET'])
def get_session_state(code):
    """
    Returns the public snapshot of a session. Role data is never included.
    """
    try:
        payload = get_game_service().snapshot(code)
    except GameError as exc:
        return jsonify({'error': exc.message, 'kind': exc.kind.value}), 404
    return jsonify(payload)
