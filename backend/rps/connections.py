import logging
import threading
import uuid
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


class SocketConnection:
    """Addressable endpoint for one connected Socket.IO session.

    Messages go out as ``{'type': ..., 'payload': ...}`` envelopes on the
    ``message`` event. Sending to a closed connection is a no-op and emit
    failures are logged, never raised.
    """

    def __init__(self, sid: str, socketio, namespace: str = '/ws'):
        self.id = uuid.uuid4().hex
        self.sid = sid
        self.namespace = namespace
        self.is_open = True
        self._socketio = socketio

    def send(self, message_type: str, payload: Any = None) -> None:
        if not self.is_open:
            logger.debug(f"[send-skip] conn={self.id} type={message_type} closed")
            return
        try:
            self._socketio.emit(
                'message',
                {'type': message_type, 'payload': payload},
                to=self.sid,
                namespace=self.namespace,
            )
        except Exception:
            logger.warning(f"[send-fail] conn={self.id} type={message_type}", exc_info=True)

    def close(self) -> None:
        self.is_open = False

    def __repr__(self):
        state = 'open' if self.is_open else 'closed'
        return f"<SocketConnection {self.id} sid={self.sid} {state}>"


class ConnectionRegistry:
    """Open connections keyed by Socket.IO sid."""

    def __init__(self):
        self._by_sid: Dict[str, SocketConnection] = {}
        self._lock = threading.Lock()

    def add(self, connection: SocketConnection) -> None:
        with self._lock:
            self._by_sid[connection.sid] = connection

    def remove(self, sid: str) -> Optional[SocketConnection]:
        with self._lock:
            connection = self._by_sid.pop(sid, None)
        if connection is not None:
            connection.close()
        return connection

    def get(self, sid: str) -> Optional[SocketConnection]:
        with self._lock:
            return self._by_sid.get(sid)

    def open_connections(self) -> List[SocketConnection]:
        with self._lock:
            return [c for c in self._by_sid.values() if c.is_open]

    def broadcast(self, message_type: str, payload: Any = None) -> int:
        """Send to every open connection, including the sender. Returns the count."""
        targets = self.open_connections()
        for connection in targets:
            connection.send(message_type, payload)
        return len(targets)

    def __len__(self):
        with self._lock:
            return len(self._by_sid)
