from flask import Blueprint, jsonify
from fhevault import get_store

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the FHEVault strategy server!'})

@main.route('/api/health')
def health():
    return jsonify({'status': 'ok', 'store': get_store().name})
