"""Wire layout planning for the fields of types, unions and messages"""

import enum
from dataclasses import dataclass

from .errors import NamingCollisionError, SchemaError, where
from .type_mapper import TypeMapper, field_name
from .types import Field

# Never part of the visible layout
INTERNAL_FIELDS = {'crc', '_vl_msg_id'}

# Transport header of a message, filled in by the transport layer
HEADER_FIELDS = {'client_index', 'context'}


class LayoutKind(enum.Enum):
    SCALAR = 'scalar'
    FIXED_ARRAY = 'fixed-array'
    SIZEOF_ARRAY = 'sizeof-array'
    STRING = 'string'


@dataclass
class FieldLayout:
    """Wire representation decided for one field"""
    field: Field
    name: str
    kind: LayoutKind
    # attribute of the sequence whose length this scalar holds
    sizeof_of: str = ""
    # attribute holding the element count of this sequence
    count_field: str = ""

    @property
    def type(self) -> str:
        return self.field.type

    @property
    def length(self) -> int:
        return self.field.length

    @property
    def hidden_length(self) -> str:
        """Synthesized length prefix of a string field"""
        if self.kind is LayoutKind.STRING:
            return f"XXX_{self.name}_len"
        return ""


def visible_fields(fields: list[Field], is_message: bool = False) -> list[Field]:
    """Fields that make up the data layout, in declared order"""
    visible = []
    for f in fields:
        if f.name.lower() in INTERNAL_FIELDS:
            continue
        if is_message and not visible and f.name in HEADER_FIELDS:
            continue
        visible.append(f)
    return visible


def plan_fields(package: str, entity: str, fields: list[Field],
                is_message: bool = False) -> list[FieldLayout]:
    """Decide the wire layout of every visible field of an entity"""
    position = {f.name: i for i, f in enumerate(fields)}
    by_name = {f.name: f for f in fields}
    visible = visible_fields(fields, is_message)

    counters = {}
    for i, f in enumerate(fields):
        loc = where(package, entity, f.name)
        if TypeMapper.is_string(f.type) and (f.length or f.size_from):
            raise SchemaError(f"{loc}: string cannot be a fixed or variable array")
        if not f.size_from:
            continue
        target = by_name.get(f.size_from)
        if target is None:
            raise SchemaError(f"{loc}: size-of field {f.size_from!r} is not declared")
        if TypeMapper.is_string(target.type):
            raise SchemaError(f"{loc}: string {f.size_from!r} cannot hold an element count")
        if not TypeMapper.is_integer(target.type) or target.length:
            raise SchemaError(
                f"{loc}: size-of field {f.size_from!r} must be an integer scalar")
        if position[f.size_from] > i:
            raise SchemaError(
                f"{loc}: size-of field {f.size_from!r} must precede the array")
        if f.size_from in counters:
            raise SchemaError(
                f"{loc}: {f.size_from!r} already holds the length of "
                f"{counters[f.size_from]!r}")
        counters[f.size_from] = f.name

    plans = []
    seen = {}
    for f in visible:
        name = field_name(f.name)
        if name in seen:
            raise NamingCollisionError(
                f"{where(package, entity)}: fields {seen[name]!r} and {f.name!r} "
                f"both map to {name!r}")
        seen[name] = f.name

        if TypeMapper.is_string(f.type):
            kind = LayoutKind.STRING
        elif f.size_from:
            kind = LayoutKind.SIZEOF_ARRAY
        elif f.length > 0:
            kind = LayoutKind.FIXED_ARRAY
        else:
            kind = LayoutKind.SCALAR
        plans.append(FieldLayout(field=f, name=name, kind=kind))

    names = {p.field.name: p.name for p in plans}
    for p in plans:
        if p.kind is LayoutKind.SIZEOF_ARRAY:
            if p.field.size_from not in names:
                raise SchemaError(
                    f"{where(package, entity, p.field.name)}: size-of field "
                    f"{p.field.size_from!r} is not part of the data layout")
            p.count_field = names[p.field.size_from]
        if p.field.name in counters:
            p.sizeof_of = names.get(counters[p.field.name], "")
    return plans
