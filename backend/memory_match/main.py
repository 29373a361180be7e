from flask import Blueprint, jsonify

from memory_match import sessions

main = Blueprint('main', __name__)


@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the Memory Match server!'})


@main.route('/health')
def health():
    return jsonify({'status': 'ok', 'active_sessions': len(sessions)})
