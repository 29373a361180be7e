from flask import Blueprint, abort, current_app, jsonify, request

from memory_match import sessions
from memory_match.services.game.board import generate_board
from memory_match.services.game.levels import GAME_LEVELS, get_level
from memory_match.services.game.scoring import format_time, rate_score


games = Blueprint('games', __name__)


def _session_or_404(session_code):
    session = sessions.get(session_code)
    if session is None:
        abort(404)
    return session


def _payload(session, **extra):
    payload = session.snapshot().to_dict()
    payload['session_code'] = session.name
    payload['formatted_time'] = format_time(payload['elapsed_seconds'])
    if payload['score'] is not None and session.level is not None:
        rating = rate_score(payload['score'], session.level.pair_count)
        payload['rating'] = {'label': rating.label, 'stars': rating.stars}
    payload.update(extra)
    return payload


@games.errorhandler(404)
def not_found(_exc):
    return jsonify({'error': 'Session not found'}), 404


@games.route('/levels', methods=['GET'])
def list_levels():
    return jsonify([level.to_dict() for level in GAME_LEVELS])


@games.route('/sessions', methods=['POST'])
def create_session():
    data = request.get_json(silent=True) or {}
    level_name = data.get('level')
    if not level_name:
        return jsonify({'error': 'level is required'}), 400
    level = get_level(level_name)
    if level is None:
        return jsonify({'error': f'Unknown level {level_name!r}'}), 404
    session = sessions.create(level)
    return jsonify(_payload(session)), 201


@games.route('/sessions/<string:session_code>/state', methods=['GET'])
def get_session_state(session_code):
    return jsonify(_payload(_session_or_404(session_code)))


@games.route('/sessions/<string:session_code>/<any(start, pause, resume, reset):action>', methods=['POST'])
def apply_intent(session_code, action):
    session = _session_or_404(session_code)
    applied = getattr(session, action)()
    if not applied:
        current_app.logger.info(f"[{action}-ignored] session={session.name} state={session.state.value}")
    return jsonify(_payload(session, applied=applied))


@games.route('/sessions/<string:session_code>/flip', methods=['POST'])
def flip_tile(session_code):
    session = _session_or_404(session_code)
    data = request.get_json(silent=True) or {}
    index = data.get('index')
    if isinstance(index, bool) or not isinstance(index, int):
        return jsonify({'error': 'index must be an integer'}), 400
    applied = session.flip(index)
    return jsonify(_payload(session, applied=applied))


@games.route('/sessions/<string:session_code>/new-board', methods=['POST'])
def new_board(session_code):
    session = _session_or_404(session_code)
    level = session.level
    session.initialize(generate_board(level.pair_count), level)
    current_app.logger.info(f"[new-board] session={session.name} level={level.name}")
    return jsonify(_payload(session))


@games.route('/sessions/<string:session_code>', methods=['DELETE'])
def discard_session(session_code):
    if not sessions.discard(session_code):
        abort(404)
    return jsonify({'message': 'Session discarded'})


@games.route('/highscores', methods=['GET'])
def get_highscores():
    names = request.args.getlist('level') or [level.name for level in GAME_LEVELS]
    boards = sessions.leaderboard.for_levels(names)
    return jsonify({
        name: [entry.to_dict() for entry in entries]
        for name, entries in boards.items()
    })
