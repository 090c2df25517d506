"""
Runtime support imported by generated binary API bindings.

Generated modules describe their wire layout with construct and subclass the
base classes defined here.  Every generated type, union and message is a
dataclass whose ``_layout`` holds the construct Struct of its visible and
synthesized fields; ``wire()`` wraps that layout so decoding yields instances
of the generated class instead of plain Containers.
"""

import abc
import logging
from dataclasses import fields
from enum import IntEnum
from typing import Callable, Dict, Mapping, Optional

from construct import Adapter, Construct, ConstructError

logger = logging.getLogger(__name__)


class MessageType(IntEnum):
    """Role of a message in request/reply correlation and event dispatch"""
    REQUEST = 0
    REPLY = 1
    EVENT = 2
    OTHER = 3


class VppApiError(Exception):
    """Binary API exchange failed"""

    def __init__(self, message: str, retval: Optional[int] = None):
        super().__init__(message)
        self.retval = retval


class EncodeError(ValueError):
    """Value does not fit the wire layout"""


class DecodeError(ValueError):
    """Bytes do not match the wire layout"""


# ══════════════════════════════════════════════════════════════
# Adapters
# ══════════════════════════════════════════════════════════════

class EntityAdapter(Adapter):
    """Maps a construct Struct to a generated dataclass"""

    def __init__(self, subcon: Construct, cls: type):
        super().__init__(subcon)
        self.cls = cls

    def _decode(self, obj, context, path):
        values = {}
        for f in fields(self.cls):
            value = obj[f.name]
            if isinstance(value, list):
                value = list(value)
            values[f.name] = value
        return self.cls(**values)

    def _encode(self, obj, context, path):
        if isinstance(obj, Mapping):
            return obj
        # counters follow the length of the sequence they describe
        for counter, array in getattr(obj, '_sizeof', {}).items():
            setattr(obj, counter, len(getattr(obj, array)))
        return {f.name: getattr(obj, f.name) for f in fields(obj)}


class EnumAdapter(Adapter):
    """Maps an integer construct to a generated IntEnum"""

    def __init__(self, subcon: Construct, enum: type):
        super().__init__(subcon)
        self.enum = enum

    def _decode(self, obj, context, path):
        try:
            return self.enum(obj)
        except ValueError:
            # undeclared values are passed through unchanged
            return obj

    def _encode(self, obj, context, path):
        return int(obj)


def string_length(name: str) -> Callable:
    """Rebuild function for the hidden length prefix of a string field"""
    def length(context) -> int:
        return len(context[name].encode('utf-8'))
    return length


# ══════════════════════════════════════════════════════════════
# Base classes
# ══════════════════════════════════════════════════════════════

class Encodable(abc.ABC):
    """Base of generated types, unions and messages"""

    _layout: Construct
    _sizeof: Dict[str, str] = {}

    @classmethod
    def wire(cls) -> Construct:
        """Construct encoding instances of this class"""
        adapter = cls.__dict__.get('_adapter')
        if adapter is None:
            adapter = EntityAdapter(cls._layout, cls)
            cls._adapter = adapter
        return adapter

    def pack(self) -> bytes:
        """Encode into wire bytes"""
        try:
            return self.wire().build(self)
        except (ConstructError, TypeError, AttributeError, UnicodeError) as exc:
            raise EncodeError(f"{type(self).__name__}: {exc}") from exc

    @classmethod
    def unpack(cls, data: bytes):
        """Decode an instance from wire bytes"""
        try:
            return cls.wire().parse(data)
        except (ConstructError, UnicodeError) as exc:
            raise DecodeError(f"{cls.__name__}: {exc}") from exc

    @staticmethod
    @abc.abstractmethod
    def get_crc_string() -> str:
        """Checksum of the schema definition"""


class Type(Encodable):
    """Base of generated types"""

    @staticmethod
    @abc.abstractmethod
    def get_type_name() -> str:
        """Original schema name"""


class Union(Type):
    """Base of generated untagged unions.

    The value lives in ``union_data``; the generated ``set_*`` methods
    encode into it and ``get_*`` decode from it.  Nothing records which
    member was set last.
    """


class Message(Encodable):
    """Base of generated messages"""

    @staticmethod
    @abc.abstractmethod
    def get_message_name() -> str:
        """Original schema name"""

    @staticmethod
    @abc.abstractmethod
    def get_message_type() -> MessageType:
        """Role of the message"""


class Alias:
    """Base of generated aliases; values are plain values of the aliased type"""

    _layout: Construct

    @classmethod
    def wire(cls) -> Construct:
        return cls._layout


class Services(abc.ABC):
    """Base of generated service contracts"""


# ══════════════════════════════════════════════════════════════
# Unions
# ══════════════════════════════════════════════════════════════

def union_encode(subcon: Construct, value, buffer: bytes) -> bytes:
    """Copy the encoding of value into the start of a union buffer"""
    try:
        data = subcon.build(value)
    except (ConstructError, TypeError, AttributeError, UnicodeError) as exc:
        raise EncodeError(str(exc)) from exc
    if len(data) > len(buffer):
        raise EncodeError(
            f"{len(data)} bytes do not fit in a {len(buffer)} byte union")
    return data + buffer[len(data):]


def union_decode(subcon: Construct, buffer: bytes):
    """Decode the start of a union buffer as subcon"""
    try:
        return subcon.parse(buffer)
    except (ConstructError, UnicodeError) as exc:
        raise DecodeError(str(exc)) from exc


# ══════════════════════════════════════════════════════════════
# Message registry
# ══════════════════════════════════════════════════════════════

_messages: Dict[str, type] = {}


def register_message(cls: type, key: str) -> None:
    """Register a generated message class under module.name"""
    existing = _messages.get(key)
    if existing is not None and existing is not cls:
        if (existing.__module__, existing.__qualname__) != (cls.__module__, cls.__qualname__):
            raise ValueError(
                f"message {key!r} already registered as {existing.__qualname__}")
    _messages[key] = cls
    logger.debug("registered message %s -> %s", key, cls.__qualname__)


def register_messages(module: str, table: Mapping[str, type]) -> None:
    """Register every message of a generated module"""
    for name, cls in table.items():
        register_message(cls, f"{module}.{name}")


def lookup_message(key: str) -> Optional[type]:
    return _messages.get(key)


def registered_messages() -> Dict[str, type]:
    return dict(_messages)
