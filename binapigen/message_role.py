"""Positional classification of messages into request/reply/event/other"""

from typing import Optional, Sequence

from .api import MessageType
from .types import Message

ANY = None

# (name at position 1, name at position 2, role); first matching row wins.
# Position 0 is the message id; position 2 only matters after client_index.
ROLE_TABLE = (
    ('client_index', 'context', MessageType.REQUEST),
    ('client_index', ANY, MessageType.EVENT),
    ('context', ANY, MessageType.REPLY),
)


def classify_message(field_names: Sequence[str]) -> MessageType:
    """Role of a message given the names of all of its fields in order"""
    first: Optional[str] = field_names[1] if len(field_names) > 1 else None
    second: Optional[str] = field_names[2] if len(field_names) > 2 else None
    for at_first, at_second, role in ROLE_TABLE:
        if first != at_first:
            continue
        if at_second is ANY or second == at_second:
            return role
    return MessageType.OTHER


def message_role(msg: Message) -> MessageType:
    return classify_message([f.name for f in msg.fields])
