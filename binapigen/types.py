"""Data types for VPP binary API schemas"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class Field:
    """Type, union or message field"""
    name: str
    type: str
    length: int = 0
    size_from: str = ""


@dataclass
class EnumEntry:
    """Named enum value"""
    name: str
    value: int


@dataclass
class Enum:
    """Enum definition"""
    name: str
    type: str = "u32"
    entries: list[EnumEntry] = field(default_factory=list)
    crc: str = ""
    doc: str = ""


@dataclass
class Alias:
    """Alias of a primitive or user type, optionally a fixed array"""
    name: str
    type: str
    length: int = 0
    crc: str = ""
    doc: str = ""


@dataclass
class Type:
    """Structured type definition"""
    name: str
    fields: list[Field] = field(default_factory=list)
    crc: str = ""
    doc: str = ""


@dataclass
class Union:
    """Untagged union definition"""
    name: str
    fields: list[Field] = field(default_factory=list)
    crc: str = ""
    doc: str = ""


@dataclass
class Message:
    """Binary API message definition"""
    name: str
    fields: list[Field] = field(default_factory=list)
    crc: str = ""
    doc: str = ""


@dataclass
class Service:
    """Request/reply pairing"""
    request_type: str
    reply_type: Optional[str] = None
    stream: bool = False
    events: list[str] = field(default_factory=list)


@dataclass
class Package:
    """Complete parsed schema of one binary API module"""
    name: str
    source: str = ""
    api_version: int = 0
    services: list[Service] = field(default_factory=list)
    enums: list[Enum] = field(default_factory=list)
    aliases: list[Alias] = field(default_factory=list)
    types: list[Type] = field(default_factory=list)
    unions: list[Union] = field(default_factory=list)
    messages: list[Message] = field(default_factory=list)

    def entity_by_name(self, name: str):
        """Find a non-message user type by its schema name"""
        for group in (self.types, self.aliases, self.enums, self.unions):
            for entity in group:
                if entity.name == name:
                    return entity
        return None

    def message_by_name(self, name: str) -> Optional[Message]:
        return next((m for m in self.messages if m.name == name), None)
