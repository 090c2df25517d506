"""Type mapping from VPP binary API types to construct/Python types"""

import keyword
from typing import Optional

from .errors import NamingCollisionError, SchemaError, where
from .types import Alias, Enum, Package, Union


# Words kept upper-case in generated class names
COMMON_INITIALISMS = {
    'ACL', 'API', 'ARP', 'ASCII', 'BFD', 'CPU', 'DHCP', 'DNS', 'EOF',
    'GUID', 'HTML', 'HTTP', 'HTTPS', 'ID', 'IP', 'IP4', 'IP6', 'JSON',
    'LHS', 'MAC', 'MTU', 'NAT', 'QPS', 'RAM', 'RHS', 'RPC', 'SLA', 'SMTP',
    'SQL', 'SSH', 'TCP', 'TLS', 'TTL', 'UDP', 'UI', 'UID', 'UUID', 'URI',
    'URL', 'UTF8', 'VM', 'VRF', 'XML', 'XMPP', 'XSRF', 'XSS',
}

# Attribute names provided by the runtime base classes
RESERVED_ATTRIBUTES = {
    'pack', 'unpack', 'wire',
    'get_type_name', 'get_message_name', 'get_crc_string', 'get_message_type',
    # names the generated class bodies refer to
    'api', 'dataclasses', 'this', 'len_',
}

USER_TYPE_PREFIX = 'vl_api_'
USER_TYPE_SUFFIX = '_t'


def camel_case_name(name: str) -> str:
    """Convert a snake_case schema name to a CamelCase class name"""
    words = [w for w in name.split('_') if w]
    out = []
    for word in words:
        if word.upper() in COMMON_INITIALISMS:
            out.append(word.upper())
        else:
            out.append(word[0].upper() + word[1:])
    return ''.join(out)


def field_name(name: str) -> str:
    """Convert a schema field name to a Python attribute name"""
    if name.startswith('_'):
        name = name[1:]
    if keyword.iskeyword(name) or name in RESERVED_ATTRIBUTES:
        name += '_'
    return name


def strip_user_type(idl_type: str) -> str:
    """vl_api_address_t -> address"""
    if idl_type.startswith(USER_TYPE_PREFIX):
        idl_type = idl_type[len(USER_TYPE_PREFIX):]
        if idl_type.endswith(USER_TYPE_SUFFIX):
            idl_type = idl_type[:-len(USER_TYPE_SUFFIX)]
    return idl_type


def class_name(name: str) -> str:
    """Emitted class name for a schema entity"""
    cls = camel_case_name(strip_user_type(name))
    if not cls or not cls.isidentifier() or keyword.iskeyword(cls):
        raise NamingCollisionError(f"{name!r} cannot be used as a class name")
    return cls


class TypeMapper:
    """Maps VPP binary API types of one package to construct and Python types"""

    # schema type -> (construct name, Python hint, size in bytes, default)
    PRIMITIVES = {
        'u8': ('Int8ub', 'int', 1, '0'),
        'i8': ('Int8sb', 'int', 1, '0'),
        'u16': ('Int16ub', 'int', 2, '0'),
        'i16': ('Int16sb', 'int', 2, '0'),
        'u32': ('Int32ub', 'int', 4, '0'),
        'i32': ('Int32sb', 'int', 4, '0'),
        'u64': ('Int64ub', 'int', 8, '0'),
        'i64': ('Int64sb', 'int', 8, '0'),
        'f32': ('Float32b', 'float', 4, '0.0'),
        'f64': ('Float64b', 'float', 8, '0.0'),
        'bool': ('Flag', 'bool', 1, 'False'),
    }

    INTEGER_TYPES = {'u8', 'i8', 'u16', 'i16', 'u32', 'i32', 'u64', 'i64'}

    STRING = 'string'
    BYTE = 'u8'

    def __init__(self, package: Package):
        self.package = package
        # construct names referenced by the expressions handed out so far
        self.constructs: set[str] = set()

    @classmethod
    def is_primitive(cls, idl_type: str) -> bool:
        return idl_type in cls.PRIMITIVES

    @classmethod
    def is_string(cls, idl_type: str) -> bool:
        return idl_type == cls.STRING

    @classmethod
    def is_byte(cls, idl_type: str) -> bool:
        return idl_type == cls.BYTE

    @classmethod
    def is_integer(cls, idl_type: str) -> bool:
        return idl_type in cls.INTEGER_TYPES

    def resolve(self, idl_type: str, entity: str = "", field: str = ""):
        """Find the user entity behind a non-primitive type name"""
        found = self.package.entity_by_name(strip_user_type(idl_type))
        if found is None:
            raise SchemaError(
                f"{where(self.package.name, entity, field)}: "
                f"unknown type {idl_type!r}")
        return found

    def to_wire(self, idl_type: str, entity: str = "", field: str = "",
                lazy: bool = True) -> str:
        """Construct expression encoding one element of idl_type.

        User types are bound lazily by default so a layout may refer to a
        class defined further down the module.
        """
        if self.is_primitive(idl_type):
            wire = self.PRIMITIVES[idl_type][0]
            self.constructs.add(wire)
            return wire
        if self.is_string(idl_type):
            raise SchemaError(
                f"{where(self.package.name, entity, field)}: "
                "string has no fixed element encoding")
        wire = f'{self.to_class(idl_type, entity, field)}.wire()'
        if not lazy:
            return wire
        self.constructs.add('LazyBound')
        return f'LazyBound(lambda: {wire})'

    def to_class(self, idl_type: str, entity: str = "", field: str = "") -> str:
        """Emitted class name of a user type"""
        return class_name(self.resolve(idl_type, entity, field).name)

    def to_python(self, idl_type: str, entity: str = "", field: str = "") -> str:
        """Python type hint for one element of idl_type"""
        if self.is_primitive(idl_type):
            return self.PRIMITIVES[idl_type][1]
        if self.is_string(idl_type):
            return 'str'
        target = self.resolve(idl_type, entity, field)
        if isinstance(target, Alias):
            return self.array_python(target.type, target.length, target.name)
        return class_name(target.name)

    def array_python(self, idl_type: str, length: int, entity: str = "", field: str = "") -> str:
        """Python type hint for idl_type repeated length times (0 = once)"""
        if not length:
            return self.to_python(idl_type, entity, field)
        if self.is_byte(idl_type):
            return 'bytes'
        return f'List[{self.to_python(idl_type, entity, field)}]'

    def default(self, idl_type: str, entity: str = "", field: str = "") -> str:
        """Expression producing the zero value of one element of idl_type"""
        if self.is_primitive(idl_type):
            return self.PRIMITIVES[idl_type][3]
        if self.is_string(idl_type):
            return '""'
        target = self.resolve(idl_type, entity, field)
        if isinstance(target, Alias):
            return self.array_default(target.type, target.length, entity, field)
        if isinstance(target, Enum):
            return '0'
        return f'{class_name(target.name)}()'

    def array_default(self, idl_type: str, length: int, entity: str = "", field: str = "") -> str:
        """Zero value of idl_type repeated length times (0 = once)"""
        if not length:
            return self.default(idl_type, entity, field)
        if self.is_byte(idl_type):
            return f'b"\\x00" * {length}'
        element = self.default(idl_type, entity, field)
        if self.is_primitive(idl_type):
            return f'[{element}] * {length}'
        return f'[{element} for _ in range({length})]'

    def size_of(self, idl_type: str, entity: str = "", field: str = "",
                _seen: Optional[set] = None) -> Optional[int]:
        """Encoded size of one element of idl_type, None if variable"""
        if self.is_primitive(idl_type):
            return self.PRIMITIVES[idl_type][2]
        if self.is_string(idl_type):
            return None
        target = self.resolve(idl_type, entity, field)
        seen = set(_seen or ())
        if target.name in seen:
            raise SchemaError(
                f"{where(self.package.name, entity, field)}: "
                f"type {target.name!r} contains itself")
        seen.add(target.name)
        if isinstance(target, Enum):
            return self.size_of(target.type, target.name, _seen=seen)
        if isinstance(target, Alias):
            size = self.size_of(target.type, target.name, _seen=seen)
            if size is None:
                return None
            return size * (target.length or 1)
        sizes = []
        for f in target.fields:
            if f.name.lower() in ('crc', '_vl_msg_id'):
                continue
            if f.size_from or self.is_string(f.type):
                return None
            size = self.size_of(f.type, target.name, f.name, _seen=seen)
            if size is None:
                return None
            sizes.append(size * (f.length or 1))
        if isinstance(target, Union):
            return max(sizes, default=0)
        return sum(sizes)
