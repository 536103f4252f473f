from flask import Blueprint, jsonify
from golfrooms.services.rooms import get_coordinator

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the mini-golf room server!'})

@main.route('/health')
def health():
    return jsonify({'status': 'healthy', 'rooms': len(get_coordinator().store)})
