"""Python Generator - generates Python bindings for a VPP binary API package"""

import keyword
import logging
from typing import Optional, Sequence

from .api import MessageType
from .config import GeneratorConfig
from .errors import NamingCollisionError, SchemaError, where
from .layout import FieldLayout, LayoutKind, plan_fields
from .message_role import message_role
from .services import ServiceMethod, synthesize_services
from .type_mapper import TypeMapper, class_name
from .types import Alias, Enum, Message, Package, Type, Union
from .union import UNION_DATA, plan_union

logger = logging.getLogger(__name__)

BANNER = "# ══════════════════════════════════════════════════════════════"

# construct names the generated modules may import
CONSTRUCT_NAMES = {
    'Array', 'Bytes', 'FixedSized', 'Flag', 'Float32b', 'Float64b',
    'GreedyBytes', 'Int8sb', 'Int8ub', 'Int16sb', 'Int16ub', 'Int32sb',
    'Int32ub', 'Int64sb', 'Int64ub', 'LazyBound', 'PascalString',
    'Rebuild', 'StringEncoded', 'Struct', 'len_', 'this',
}

# module level names of every generated module
MODULE_NAMES = {
    'Services', 'MESSAGES', 'VL_API_VERSION',
    'abc', 'api', 'dataclasses', 'IntEnum', 'List',
} | CONSTRUCT_NAMES

# message role -> value returned by get_message_type()
ROLE_NAMES = {
    MessageType.REQUEST: 'api.MessageType.REQUEST',
    MessageType.REPLY: 'api.MessageType.REPLY',
    MessageType.EVENT: 'api.MessageType.EVENT',
    MessageType.OTHER: 'api.MessageType.OTHER',
}

IMMUTABLE_DEFAULTS = {'0', '0.0', 'False', '""', 'b""'}


def crc_string(crc: str) -> str:
    """Checksum without its 0x marker"""
    return crc[2:] if crc.startswith('0x') else crc


def _escape(line: str) -> str:
    return line.replace('\\', '\\\\').replace('"""', '\\"\\"\\"')


class PythonGenerator:
    """Generates one Python module per binary API package"""

    def __init__(self, package: Package, config: Optional[GeneratorConfig] = None):
        self.package = package
        self.config = config or GeneratorConfig()
        self.module_name = package.name
        self.package_name = self.config.package_name(package.name)
        self.mapper = TypeMapper(package)
        self._constructs: set[str] = set()
        self._uses_list = False

    def generate(self) -> str:
        """Generate complete Python module"""
        logger.debug("generating package %r", self.package_name)
        self._check_names()
        services = synthesize_services(self.package)

        body = []
        if self.config.include_api_version:
            body.extend(self._generate_api_version())
        if services:
            body.extend(self._generate_services(services))
        body.extend(self._generate_enums())
        body.extend(self._generate_aliases())
        body.extend(self._generate_types())
        body.extend(self._generate_unions())
        body.extend(self._generate_messages())
        body.extend(self._generate_registration())

        lines = self._generate_header()
        lines.extend(self._generate_imports(bool(services)))
        lines.extend(body)
        while lines and not lines[-1]:
            lines.pop()
        return "\n".join(lines) + "\n"

    def _generate_header(self) -> list[str]:
        pkg = self.package
        lines = [
            '"""',
            "Code generated by binapigen. DO NOT EDIT.",
        ]
        if pkg.source:
            lines.append(f" source: {_escape(pkg.source)}")
        lines.extend([
            "",
            f"Package {self.package_name} is generated from VPP binary API "
            f"module '{self.module_name}'.",
            "",
            "It contains following objects:",
        ])
        counts = [
            ("message", len(pkg.messages)),
            ("type", len(pkg.types)),
            ("alias", len(pkg.aliases)),
            ("enum", len(pkg.enums)),
            ("union", len(pkg.unions)),
            ("service", len(pkg.services)),
        ]
        for obj, num in counts:
            if num <= 0:
                continue
            if num > 1:
                obj += "es" if obj.endswith("s") else "s"
            lines.append(f"    {num:3d} {obj}")
        lines.extend(['"""', ""])
        return lines

    def _generate_imports(self, has_services: bool) -> list[str]:
        lines = ["from __future__ import annotations", ""]
        stdlib = []
        if has_services:
            stdlib.append("import abc")
        if self.package.types or self.package.unions or self.package.messages:
            stdlib.append("import dataclasses")
        if self.package.enums:
            stdlib.append("from enum import IntEnum")
        if self._uses_list:
            stdlib.append("from typing import List")
        if stdlib:
            lines.extend(stdlib)
            lines.append("")

        constructs = sorted(self._constructs | self.mapper.constructs,
                            key=lambda n: (n[0].islower(), n))
        if constructs:
            lines.append("from construct import (")
            lines.extend(f"    {name}," for name in constructs)
            lines.append(")")
            lines.append("")

        runtime, _, attr = self.config.runtime_module.rpartition(".")
        if not runtime:
            lines.append(f"import {attr} as api")
        elif attr == "api":
            lines.append(f"from {runtime} import api")
        else:
            lines.append(f"from {runtime} import {attr} as api")
        lines.extend(["", ""])
        return lines

    def _use(self, *names: str):
        self._constructs.update(names)

    def _check_names(self):
        """Reject identifiers the generated module could not hold"""
        if not self.package_name.isidentifier() or keyword.iskeyword(self.package_name):
            raise NamingCollisionError(
                f"{self.module_name}: package name {self.package_name!r} is reserved; "
                "map it to another name")

        seen = {}
        groups = (
            self.package.enums, self.package.aliases, self.package.types,
            self.package.unions, self.package.messages,
        )
        for group in groups:
            for entity in group:
                name = class_name(entity.name)
                if name in MODULE_NAMES:
                    raise NamingCollisionError(
                        f"{where(self.module_name, entity.name)}: "
                        f"{name!r} is reserved in generated modules")
                if name in seen:
                    raise NamingCollisionError(
                        f"{self.module_name}: {seen[name]!r} and {entity.name!r} "
                        f"both map to {name!r}")
                seen[name] = entity.name

    def _docstring(self, summary: str, source: str, notes: Sequence[str] = (),
                   indent: str = "    ") -> list[str]:
        """Docstring quoting the schema fragment an object was generated from"""
        if not source and not notes:
            return [f'{indent}"""{summary}"""']
        lines = [f'{indent}"""{summary}' + (":" if source else "")]
        for line in source.splitlines():
            if len(lines) == 1:
                lines.append("")
            lines.append(f"{indent}    {_escape(line)}".rstrip())
        for note in notes:
            lines.extend(["", f"{indent}{_escape(note)}"])
        lines.append(f'{indent}"""')
        return lines

    def _name_getter(self, accessor: str, name: str) -> list[str]:
        return [
            "    @staticmethod",
            f"    def {accessor}() -> str:",
            f'        return "{name}"',
            "",
        ]

    def _crc_getter(self, crc: str) -> list[str]:
        return [
            "    @staticmethod",
            "    def get_crc_string() -> str:",
            f'        return "{crc_string(crc)}"',
            "",
        ]

    def _array_wire(self, idl_type: str, length: int = 0, count: str = "",
                    entity: str = "", field: str = "", lazy: bool = True) -> str:
        """Construct for idl_type as a scalar, fixed array or counted sequence"""
        if length and TypeMapper.is_byte(idl_type):
            self._use('FixedSized', 'GreedyBytes')
            return f'FixedSized({length}, GreedyBytes)'
        if count and TypeMapper.is_byte(idl_type):
            self._use('Bytes')
            return f'Bytes({count})'
        element = self.mapper.to_wire(idl_type, entity, field, lazy=lazy)
        if length:
            self._use('Array')
            return f'Array({length}, {element})'
        if count:
            self._use('Array')
            return f'Array({count}, {element})'
        return element

    def _field_wire(self, entity: str, plan: FieldLayout) -> list[str]:
        """Struct members encoding one field"""
        if plan.kind is LayoutKind.STRING:
            hidden = plan.hidden_length
            self._use('Rebuild', 'Int32ub', 'StringEncoded', 'Bytes', 'this')
            return [
                f'"{hidden}" / Rebuild(Int32ub, api.string_length("{plan.name}")),',
                f'"{plan.name}" / StringEncoded(Bytes(this.{hidden}), "utf8"),',
            ]
        length = plan.length if plan.kind is LayoutKind.FIXED_ARRAY else 0
        count = ""
        if plan.kind is LayoutKind.SIZEOF_ARRAY:
            self._use('this')
            count = f'this.{plan.count_field}'
        wire = self._array_wire(plan.type, length, count, entity, plan.field.name)
        if plan.sizeof_of:
            self._use('Rebuild', 'len_', 'this')
            wire = f'Rebuild({wire}, len_(this.{plan.sizeof_of}))'
        return [f'"{plan.name}" / {wire},']

    def _field_hint(self, entity: str, plan: FieldLayout) -> str:
        if plan.kind is LayoutKind.STRING:
            return 'str'
        if plan.kind is LayoutKind.FIXED_ARRAY:
            hint = self.mapper.array_python(plan.type, plan.length, entity, plan.field.name)
        elif plan.kind is LayoutKind.SIZEOF_ARRAY:
            if TypeMapper.is_byte(plan.type):
                hint = 'bytes'
            else:
                hint = f'List[{self.mapper.to_python(plan.type, entity, plan.field.name)}]'
        else:
            hint = self.mapper.to_python(plan.type, entity, plan.field.name)
        if 'List[' in hint:
            self._uses_list = True
        return hint

    def _field_default(self, entity: str, plan: FieldLayout) -> str:
        if plan.kind is LayoutKind.STRING:
            return '""'
        if plan.kind is LayoutKind.SIZEOF_ARRAY:
            if TypeMapper.is_byte(plan.type):
                return 'b""'
            return 'dataclasses.field(default_factory=lambda: [])'
        length = plan.length if plan.kind is LayoutKind.FIXED_ARRAY else 0
        default = self.mapper.array_default(plan.type, length, entity, plan.field.name)
        if default in IMMUTABLE_DEFAULTS or default.startswith('b"'):
            return default
        return f'dataclasses.field(default_factory=lambda: {default})'

    def _generate_fields(self, entity: str, plans: list[FieldLayout]) -> list[str]:
        """Dataclass fields, wire layout and size-of links of an entity"""
        lines = []
        for plan in plans:
            hint = self._field_hint(entity, plan)
            default = self._field_default(entity, plan)
            lines.append(f"    {plan.name}: {hint} = {default}")
        if plans:
            lines.append("")

        self._use('Struct')
        if plans:
            lines.append("    _layout = Struct(")
            for plan in plans:
                lines.extend(f"        {w}" for w in self._field_wire(entity, plan))
            lines.append("    )")
        else:
            lines.append("    _layout = Struct()")

        sizeof = [(p.name, p.sizeof_of) for p in plans if p.sizeof_of]
        if sizeof:
            pairs = ", ".join(f'"{c}": "{a}"' for c, a in sizeof)
            lines.append(f"    _sizeof = {{{pairs}}}")
        lines.append("")
        return lines

    def _generate_api_version(self) -> list[str]:
        return [
            "# VL_API_VERSION represents version of the binary API module.",
            f"VL_API_VERSION = 0x{self.package.api_version:08x}",
            "",
            "",
        ]

    def _generate_services(self, methods: list[ServiceMethod]) -> list[str]:
        """Generate the abstract Services class"""
        lines = [
            BANNER,
            "# Services",
            BANNER,
            "",
            "class Services(api.Services):",
            '    """Services represents VPP binary API services:',
            "",
        ]
        for m in methods:
            svc = m.service
            desc = f"reply {svc.reply_type}" if svc.reply_type else "no reply"
            if svc.stream:
                desc += ", stream"
            if svc.events:
                desc += f", events {', '.join(svc.events)}"
            lines.append(f"        {svc.request_type}: {desc}")
        lines.extend(['    """', ""])

        for m in methods:
            if m.stream:
                self._uses_list = True
            lines.extend(self._generate_service(m))
        lines.append("")
        return lines

    def _generate_service(self, method: ServiceMethod) -> list[str]:
        if not method.reply:
            doc = f"Send {method.request} without waiting for a reply."
        elif method.stream:
            doc = f"Send {method.request} and collect every {method.reply} of the dump."
        else:
            doc = f"Send {method.request} and return its {method.reply}."
        return [
            "    @abc.abstractmethod",
            f"    def {method.name}(self, request: {method.request}) -> {method.returns}:",
            f'        """{doc}',
            "",
            "        Raises api.VppApiError if the exchange fails.",
            '        """',
            "",
        ]

    def _generate_enums(self) -> list[str]:
        """Generate IntEnum classes"""
        if not self.package.enums:
            return []
        lines = [BANNER, "# Enums", BANNER, ""]
        for enum in self.package.enums:
            lines.extend(self._generate_enum(enum))
        return lines

    def _generate_enum(self, enum: Enum) -> list[str]:
        name = class_name(enum.name)
        logger.debug(" writing enum %r (%s) with %d entries", enum.name, name, len(enum.entries))
        if not TypeMapper.is_integer(enum.type):
            raise SchemaError(
                f"{where(self.module_name, enum.name)}: enum type {enum.type!r} is not an integer")

        # IntEnum turns entries sharing a value into aliases of the first one
        first = {}
        notes = []
        for entry in enum.entries:
            canonical = first.setdefault(entry.value, entry.name)
            if canonical != entry.name:
                notes.append(
                    f"{entry.name} is an alias of {canonical} (value {entry.value}): "
                    f"iteration skips it and {name}({entry.value}) returns {canonical}.")

        lines = [f"class {name}(IntEnum):"]
        lines.extend(self._docstring(
            f"{name} represents VPP binary API enum '{enum.name}'", enum.doc, notes))
        seen = set()
        for entry in enum.entries:
            bad = (not entry.name.isidentifier() or keyword.iskeyword(entry.name)
                   or entry.name.startswith('_'))
            if bad or entry.name in seen or entry.name in ('wire', 'get_type_name', 'get_crc_string'):
                raise NamingCollisionError(
                    f"{where(self.module_name, enum.name, entry.name)}: "
                    "entry name is duplicated or reserved")
            seen.add(entry.name)
            lines.append(f"    {entry.name} = {entry.value}")
        lines.append("")
        lines.extend(self._name_getter("get_type_name", enum.name))
        lines.extend(self._crc_getter(enum.crc))
        wire = self.mapper.to_wire(enum.type, enum.name)
        lines.extend([
            "    @classmethod",
            "    def wire(cls):",
            f"        return api.EnumAdapter({wire}, cls)",
            "",
            "",
        ])
        return lines

    def _generate_aliases(self) -> list[str]:
        if not self.package.aliases:
            return []
        lines = [BANNER, "# Aliases", BANNER, ""]
        for alias in self.package.aliases:
            lines.extend(self._generate_alias(alias))
        return lines

    def _generate_alias(self, alias: Alias) -> list[str]:
        name = class_name(alias.name)
        logger.debug(" writing alias %r (%s), length: %d", alias.name, name, alias.length)

        if TypeMapper.is_string(alias.type):
            if alias.length:
                raise SchemaError(
                    f"{where(self.module_name, alias.name)}: string cannot be a fixed array")
            self._use('PascalString', 'Int32ub')
            wire = 'PascalString(Int32ub, "utf8")'
        else:
            wire = self._array_wire(alias.type, alias.length, entity=alias.name)

        lines = [f"class {name}(api.Alias):"]
        lines.extend(self._docstring(
            f"{name} represents VPP binary API alias '{alias.name}'", alias.doc))
        lines.extend([f"    _layout = {wire}", ""])
        lines.extend(self._name_getter("get_type_name", alias.name))
        lines.extend(self._crc_getter(alias.crc))
        lines.append("")
        return lines

    def _generate_types(self) -> list[str]:
        if not self.package.types:
            return []
        lines = [BANNER, "# Types", BANNER, ""]
        for typ in self.package.types:
            lines.extend(self._generate_type(typ))
        return lines

    def _generate_type(self, typ: Type) -> list[str]:
        name = class_name(typ.name)
        logger.debug(" writing type %r (%s) with %d fields", typ.name, name, len(typ.fields))
        plans = plan_fields(self.module_name, typ.name, typ.fields)

        lines = ["@dataclasses.dataclass", f"class {name}(api.Type):"]
        lines.extend(self._docstring(
            f"{name} represents VPP binary API type '{typ.name}'", typ.doc))
        lines.append("")
        lines.extend(self._generate_fields(typ.name, plans))
        lines.extend(self._name_getter("get_type_name", typ.name))
        lines.extend(self._crc_getter(typ.crc))
        lines.append("")
        return lines

    def _generate_unions(self) -> list[str]:
        if not self.package.unions:
            return []
        lines = [BANNER, "# Unions", BANNER, ""]
        for union in self.package.unions:
            lines.extend(self._generate_union(union))
        return lines

    def _generate_union(self, union: Union) -> list[str]:
        name = class_name(union.name)
        logger.debug(" writing union %r (%s) with %d fields", union.name, name, len(union.fields))
        plan = plan_union(self.mapper, union)

        self._use('Struct', 'Bytes')
        lines = ["@dataclasses.dataclass", f"class {name}(api.Union):"]
        lines.extend(self._docstring(
            f"{name} represents VPP binary API union '{union.name}'", union.doc))
        lines.extend([
            "",
            f'    {UNION_DATA}: bytes = b"\\x00" * {plan.size}',
            "",
            "    _layout = Struct(",
            f'        "{UNION_DATA}" / Bytes({plan.size}),',
            "    )",
            "",
        ])
        lines.extend(self._name_getter("get_type_name", union.name))
        lines.extend(self._crc_getter(union.crc))

        for accessor in plan.accessors:
            length = accessor.length
            hint = self.mapper.array_python(accessor.type, length, union.name, accessor.field.name)
            if 'List[' in hint:
                self._uses_list = True
            wire = self._array_wire(accessor.type, length, entity=union.name,
                                    field=accessor.field.name, lazy=False)
            lines.extend([
                f"    def set_{accessor.name}(self, value: {hint}) -> None:",
                f"        self.{UNION_DATA} = api.union_encode({wire}, value, self.{UNION_DATA})",
                "",
                f"    def get_{accessor.name}(self) -> {hint}:",
                f"        return api.union_decode({wire}, self.{UNION_DATA})",
                "",
            ])
        lines.append("")
        return lines

    def _generate_messages(self) -> list[str]:
        if not self.package.messages:
            return []
        lines = [BANNER, "# Messages", BANNER, ""]
        for msg in self.package.messages:
            lines.extend(self._generate_message(msg))
        return lines

    def _generate_message(self, msg: Message) -> list[str]:
        name = class_name(msg.name)
        logger.debug(" writing message %r (%s) with %d fields", msg.name, name, len(msg.fields))
        plans = plan_fields(self.module_name, msg.name, msg.fields, is_message=True)
        role = message_role(msg)

        lines = ["@dataclasses.dataclass", f"class {name}(api.Message):"]
        lines.extend(self._docstring(
            f"{name} represents VPP binary API message '{msg.name}'", msg.doc))
        lines.append("")
        lines.extend(self._generate_fields(msg.name, plans))
        lines.extend(self._name_getter("get_message_name", msg.name))
        lines.extend(self._crc_getter(msg.crc))
        lines.extend([
            "    @staticmethod",
            "    def get_message_type() -> api.MessageType:",
            f"        return {ROLE_NAMES[role]}",
            "",
            "",
        ])
        return lines

    def _generate_registration(self) -> list[str]:
        """Table of messages by schema name, registered with the runtime"""
        lines = [BANNER, "# Registration", BANNER, ""]
        if self.package.messages:
            lines.append("MESSAGES = {")
            for msg in self.package.messages:
                lines.append(f'    "{msg.name}": {class_name(msg.name)},')
            lines.append("}")
        else:
            lines.append("MESSAGES = {}")
        lines.extend(["", f'api.register_messages("{self.module_name}", MESSAGES)', ""])
        return lines
