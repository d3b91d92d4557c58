from flask import Blueprint, jsonify, request, current_app
from fhevault import get_store
from fhevault.services.scoring import compute_strategy, publish_status
from fhevault.services.validation import validate_submission


strategies = Blueprint('strategies', __name__)


def _not_found():
    return jsonify({'success': False, 'error': 'Strategy not found'}), 404


@strategies.route('/submit', methods=['POST'])
def submit_strategy():
    data = request.get_json(silent=True)
    errors = validate_submission(data)
    if errors:
        return jsonify({
            'success': False,
            'error': 'Invalid strategy data',
            'details': errors,
        }), 400
    try:
        record = get_store().create(data)
    except Exception:
        current_app.logger.exception("[submit] strategy submission failed")
        return jsonify({'success': False, 'error': 'Failed to submit strategy'}), 500
    current_app.logger.info(f"[submit] strategy={record.id} hash={record.encrypted_hash[:18]}")
    publish_status(record)
    return jsonify({
        'success': True,
        'strategyId': record.id,
        'message': 'Strategy encrypted and submitted successfully',
    }), 201


@strategies.route('/<string:strategy_id>/compute', methods=['POST'])
def compute(strategy_id):
    try:
        record = compute_strategy(get_store(), strategy_id)
    except Exception:
        current_app.logger.exception(f"[compute] strategy={strategy_id} failed")
        return jsonify({'success': False, 'error': 'Failed to compute strategy score'}), 500
    if record is None:
        return _not_found()
    return jsonify({
        'success': True,
        'strategyId': record.id,
        'encryptedScore': record.encrypted_score,
        'status': record.status,
    })


@strategies.route('/stats', methods=['GET'])
def get_stats():
    try:
        stats = get_store().stats()
    except Exception:
        current_app.logger.exception("[stats] failed")
        return jsonify({'success': False, 'error': 'Failed to retrieve stats'}), 500
    return jsonify({'success': True, **stats})


@strategies.route('/<string:strategy_id>', methods=['GET'])
def get_strategy(strategy_id):
    try:
        record = get_store().get(strategy_id)
    except Exception:
        current_app.logger.exception(f"[get] strategy={strategy_id} failed")
        return jsonify({'success': False, 'error': 'Failed to retrieve strategy'}), 500
    if record is None:
        return _not_found()
    return jsonify({'success': True, 'strategy': record.to_dict()})


@strategies.route('', methods=['GET'])
def list_strategies():
    try:
        records = get_store().list()
    except Exception:
        current_app.logger.exception("[list] failed")
        return jsonify({'success': False, 'error': 'Failed to retrieve strategies'}), 500
    return jsonify({
        'success': True,
        'strategies': [r.to_dict() for r in records],
        'count': len(records),
    })
