from flask import current_app, request
from rps import socketio
from rps.connections import SocketConnection
from rps.messages import parse_envelope


def _engine():
    return current_app.extensions['rps_engine']


def _connections():
    return current_app.extensions['rps_connections']


def _get_sid() -> str:
    # request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _current_connection():
    return _connections().get(_get_sid())


def handle_connect(auth=None):
    conn = SocketConnection(_get_sid(), socketio, namespace=request.namespace)
    _connections().add(conn)
    current_app.logger.info(f"[connect] conn={conn.id} sid={conn.sid}")


def handle_disconnect(reason=None):
    conn = _connections().remove(_get_sid())
    if conn is None:
        return
    _engine().disconnect(conn.id)
    current_app.logger.info(f"[disconnect] conn={conn.id} reason={reason}")


def handle_message(data):
    """Dispatch one ``{type, payload}`` envelope. Bad input is dropped silently."""
    parsed = parse_envelope(data)
    if parsed is None:
        current_app.logger.debug(f"[drop] sid={_get_sid()} malformed envelope")
        return
    message_type, payload = parsed
    handler = _DISPATCH.get(message_type)
    if handler is None:
        current_app.logger.debug(f"[drop] sid={_get_sid()} unknown type={message_type!r}")
        return
    handler(payload)


def handle_chat(payload=None):
    count = _connections().broadcast('chat', payload)
    current_app.logger.debug(f"[chat] sid={_get_sid()} recipients={count}")


def handle_join(payload=None):
    conn = _current_connection()
    if conn is None:
        return
    _engine().request_join(conn)


def handle_move(payload=None):
    conn = _current_connection()
    if conn is None:
        return
    _engine().submit_choice(conn.id, payload)


_DISPATCH = {
    'chat': handle_chat,
    'join': handle_join,
    'move': handle_move,
}


def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    Besides the ``message`` envelope, ``join``/``move``/``chat`` are accepted
    as named events carrying just the payload.
    """
    namespaces = ['/ws', '/'] if testing else ['/ws']
    for ns in namespaces:
        socketio.on_event('connect', handle_connect, namespace=ns)
        socketio.on_event('disconnect', handle_disconnect, namespace=ns)
        socketio.on_event('message', handle_message, namespace=ns)
        for name, handler in _DISPATCH.items():
            socketio.on_event(name, handler, namespace=ns)
