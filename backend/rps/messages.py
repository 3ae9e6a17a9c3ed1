import json
from typing import Any, Optional, Tuple


def parse_envelope(data: Any) -> Optional[Tuple[str, Any]]:
    """Return ``(type, payload)`` for a ``{type, payload}`` envelope.

    Accepts a dict or its JSON text (str or bytes). Anything unparseable, not
    an object, or without a string ``type`` yields None.
    """
    if isinstance(data, (bytes, bytearray)):
        try:
            data = data.decode('utf-8')
        except UnicodeDecodeError:
            return None
    if isinstance(data, str):
        try:
            data = json.loads(data)
        except ValueError:
            return None
    if not isinstance(data, dict):
        return None
    message_type = data.get('type')
    if not isinstance(message_type, str):
        return None
    return message_type, data.get('payload')
