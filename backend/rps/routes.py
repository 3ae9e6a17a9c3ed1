from flask import Blueprint, current_app, jsonify

main = Blueprint('main', __name__)


@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the rock/paper/scissors arena!'})


@main.route('/health')
def health():
    snapshot = current_app.extensions['rps_engine'].snapshot()
    return jsonify({
        'status': 'ok',
        'waiting': snapshot['waiting'],
        'active_rounds': snapshot['active_rounds'],
        'connections': len(current_app.extensions['rps_connections']),
    })
