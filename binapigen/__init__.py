"""
VPP Binary API Binding Generator Package

Reads VPP binary API modules (*.api.json) and generates Python bindings:
  1. Wire layouts (construct) for types, unions and messages
  2. Message role, name and checksum accessors
  3. Untagged union accessors
  4. Abstract service contracts
  5. Message registration tables
"""

from .types import Field, EnumEntry, Enum, Alias, Type, Union, Message, Service, Package
from .errors import GenerateError, SchemaError, NamingCollisionError, OutputError
from .config import GeneratorConfig, DEFAULT_RESERVED_NAMES
from .parser import ApiJsonParser, load_package
from .type_mapper import TypeMapper
from .layout import LayoutKind, FieldLayout, plan_fields
from .message_role import classify_message, message_role
from .union import plan_union, union_size
from .services import ServiceMethod, synthesize_services
from .python_generator import PythonGenerator

__all__ = [
    'Field', 'EnumEntry', 'Enum', 'Alias', 'Type', 'Union', 'Message', 'Service', 'Package',
    'GenerateError', 'SchemaError', 'NamingCollisionError', 'OutputError',
    'GeneratorConfig', 'DEFAULT_RESERVED_NAMES',
    'ApiJsonParser', 'load_package', 'TypeMapper',
    'LayoutKind', 'FieldLayout', 'plan_fields',
    'classify_message', 'message_role',
    'plan_union', 'union_size',
    'ServiceMethod', 'synthesize_services',
    'PythonGenerator',
]
