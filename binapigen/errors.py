"""Errors raised while generating bindings"""


class GenerateError(Exception):
    """Base class for generation failures"""


class SchemaError(GenerateError):
    """Schema does not satisfy the generator's input contract"""


class NamingCollisionError(GenerateError):
    """Two generated objects would share one identifier"""


class OutputError(GenerateError):
    """Generated module could not be written"""


def where(package: str, entity: str = "", field: str = "") -> str:
    """Format a location inside a schema for error messages"""
    parts = [package]
    if entity:
        parts.append(entity)
    if field:
        parts.append(field)
    return ".".join(p for p in parts if p)
