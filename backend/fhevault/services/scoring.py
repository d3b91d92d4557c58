from typing import Optional

from flask import current_app

from fhevault import socketio
from fhevault.services.codec import compute_score
from fhevault.services.storage import StrategyRecord, StrategyStore


def publish_status(record: StrategyRecord) -> None:
    """Push a lifecycle change to clients watching this strategy."""
    socketio.emit(
        'strategy_update',
        {'strategyId': record.id, 'status': record.status},
        to=f"strategy:{record.id}",
        namespace='/ws',
    )


def _set_status(store: StrategyStore, strategy_id: str, status: str) -> Optional[StrategyRecord]:
    record = store.update_status(strategy_id, status)
    if record is not None:
        current_app.logger.info(f"[status] strategy={strategy_id} -> {status}")
        publish_status(record)
    return record


def compute_strategy(store: StrategyStore, strategy_id: str) -> Optional[StrategyRecord]:
    """Run the simulated contract computation for one stored strategy.

    pending|completed|failed -> computing -> completed. Returns None for an
    unknown id. Unexpected errors mark the record failed and propagate.
    """
    if store.get(strategy_id) is None:
        return None
    record = _set_status(store, strategy_id, 'computing')
    try:
        encrypted_score = compute_score(record.encrypted_data)
        record = store.update_score(strategy_id, encrypted_score)
    except Exception:
        _set_status(store, strategy_id, 'failed')
        raise
    current_app.logger.info(f"[compute] strategy={strategy_id} completed")
    publish_status(record)
    return record
