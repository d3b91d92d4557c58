from flask_socketio import join_room, leave_room, emit
from fhevault import socketio


def _room_for(data):
    strategy_id = data.get('strategyId') if isinstance(data, dict) else None
    if not strategy_id:
        emit('error', {'message': 'strategyId is required'})
        return None
    return f"strategy:{strategy_id}"


def handle_connect():
    emit('connected', {'message': 'Connected to /ws'})


def handle_join_strategy(data):
    room = _room_for(data)
    if room is None:
        return
    join_room(room)
    emit('joined', {'room': room})


def handle_leave_strategy(data):
    room = _room_for(data)
    if room is None:
        return
    leave_room(room)
    emit('left', {'room': room})


def handle_ping(data):
    emit('pong', data or {})


def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    handlers = {
        'connect': handle_connect,
        'join_strategy': handle_join_strategy,
        'leave_strategy': handle_leave_strategy,
        'ping': handle_ping,
    }
    for event, handler in handlers.items():
        socketio.on_event(event, handler, namespace='/ws')
        if testing:
            socketio.on_event(event, handler, namespace='/')
