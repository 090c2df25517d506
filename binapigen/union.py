"""Untagged unions as fixed-size byte buffers with typed accessors"""

import logging
from dataclasses import dataclass, field

from .errors import SchemaError, where
from .layout import FieldLayout, plan_fields
from .type_mapper import TypeMapper
from .types import Union

logger = logging.getLogger(__name__)

# Name of the buffer attribute of every generated union
UNION_DATA = 'union_data'


@dataclass
class UnionPlan:
    """Buffer size and accessor pairs of one union"""
    union: Union
    size: int
    accessors: list[FieldLayout] = field(default_factory=list)


def union_size(mapper: TypeMapper, union: Union) -> int:
    """Largest encoded size among the union's members"""
    size = 0
    for f in union.fields:
        if f.name.lower() in ('crc', '_vl_msg_id'):
            continue
        loc = where(mapper.package.name, union.name, f.name)
        if TypeMapper.is_string(f.type) or f.size_from:
            raise SchemaError(f"{loc}: union members must have a fixed size")
        member = mapper.size_of(f.type, union.name, f.name)
        if member is None:
            raise SchemaError(f"{loc}: {f.type!r} has no fixed size")
        size = max(size, member * (f.length or 1))
    return size


def plan_union(mapper: TypeMapper, union: Union) -> UnionPlan:
    size = union_size(mapper, union)
    accessors = plan_fields(mapper.package.name, union.name, union.fields)
    logger.debug(" union %r is %d bytes wide", union.name, size)
    return UnionPlan(union=union, size=size, accessors=accessors)
