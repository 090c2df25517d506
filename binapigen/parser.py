"""VPP binary API JSON schema loader"""

import json
from pathlib import Path
from typing import Union as TypingUnion

from .errors import SchemaError
from .types import Alias, Enum, EnumEntry, Field, Message, Package, Service, Type, Union

INPUT_FILE_EXT = '.api.json'


class ApiJsonParser:
    """Parses the JSON form of a VPP binary API module"""

    def __init__(self, content: str, name: str, source: str = ""):
        self.name = name
        self.source = source
        try:
            self.data = json.loads(content)
        except json.JSONDecodeError as exc:
            raise SchemaError(f"{source or name}: invalid JSON: {exc}") from exc
        if not isinstance(self.data, dict):
            raise SchemaError(f"{source or name}: top level must be an object")

    def parse(self) -> Package:
        result = Package(name=self.name, source=self.source)
        result.api_version = self._parse_version()
        result.enums = self._parse_enums()
        result.aliases = self._parse_aliases()
        result.types = [Type(**kw) for kw in self._parse_structs('types')]
        result.unions = [Union(**kw) for kw in self._parse_structs('unions')]
        result.messages = [Message(**kw) for kw in self._parse_structs('messages')]
        result.services = self._parse_services()
        return result

    def _error(self, msg: str) -> SchemaError:
        return SchemaError(f"{self.source or self.name}: {msg}")

    def _parse_version(self) -> int:
        version = self.data.get('vl_api_version', 0)
        if isinstance(version, int):
            return version
        try:
            return int(version, 0)
        except (TypeError, ValueError):
            raise self._error(f"invalid vl_api_version {version!r}") from None

    def _parse_structs(self, section: str) -> list[dict]:
        """Parse entries like ["name", [type, name, ...]..., {"crc": "0x.."}]"""
        structs = []
        for raw in self.data.get(section, []):
            if not isinstance(raw, list) or not raw or not isinstance(raw[0], str):
                raise self._error(f"malformed entry in {section}: {raw!r}")
            name = raw[0]
            fields = []
            crc = ""
            for item in raw[1:]:
                if isinstance(item, dict):
                    crc = item.get('crc', crc)
                else:
                    fields.append(self._parse_field(name, item))
            structs.append(dict(name=name, fields=fields, crc=crc, doc=_fragment(raw)))
        return structs

    def _parse_field(self, owner: str, item) -> Field:
        # [type, name] / [type, name, length] / [type, name, length, size_from]
        parts = [p for p in item if not isinstance(p, dict)] if isinstance(item, list) else []
        if len(parts) < 2 or not all(isinstance(p, str) for p in parts[:2]):
            raise self._error(f"{owner}: malformed field {item!r}")
        field = Field(type=parts[0], name=parts[1])
        if len(parts) > 2:
            if not isinstance(parts[2], int) or parts[2] < 0:
                raise self._error(f"{owner}.{field.name}: invalid length {parts[2]!r}")
            field.length = parts[2]
        if len(parts) > 3:
            if not isinstance(parts[3], str):
                raise self._error(f"{owner}.{field.name}: invalid size-of {parts[3]!r}")
            field.size_from = parts[3]
        return field

    def _parse_enums(self) -> list[Enum]:
        enums = []
        for raw in self.data.get('enums', []):
            if not isinstance(raw, list) or not raw or not isinstance(raw[0], str):
                raise self._error(f"malformed enum {raw!r}")
            enum = Enum(name=raw[0], doc=_fragment(raw))
            for item in raw[1:]:
                if isinstance(item, dict):
                    enum.type = item.get('enumtype', enum.type)
                    enum.crc = item.get('crc', enum.crc)
                elif (isinstance(item, list) and len(item) == 2
                      and isinstance(item[0], str) and isinstance(item[1], int)):
                    enum.entries.append(EnumEntry(name=item[0], value=item[1]))
                else:
                    raise self._error(f"{enum.name}: malformed entry {item!r}")
            enums.append(enum)
        return enums

    def _parse_aliases(self) -> list[Alias]:
        aliases = []
        for name, raw in self.data.get('aliases', {}).items():
            if not isinstance(raw, dict) or not isinstance(raw.get('type'), str):
                raise self._error(f"malformed alias {name!r}")
            aliases.append(Alias(
                name=name,
                type=raw['type'],
                length=raw.get('length', 0),
                crc=raw.get('crc', ""),
                doc=f'"{name}": {json.dumps(raw)}',
            ))
        return aliases

    def _parse_services(self) -> list[Service]:
        services = []
        for request, raw in self.data.get('services', {}).items():
            if not isinstance(raw, dict):
                raise self._error(f"malformed service {request!r}")
            reply = raw.get('reply')
            if reply == 'null':
                reply = None
            services.append(Service(
                request_type=request,
                reply_type=reply,
                stream=bool(raw.get('stream', False)),
                events=list(raw.get('events', [])),
            ))
        return services


def _fragment(raw: list) -> str:
    """Render a schema entry one element per line, as the API files are written"""
    if len(raw) < 2:
        return json.dumps(raw)
    lines = [f"[{json.dumps(raw[0])},"]
    items = [json.dumps(item) for item in raw[1:]]
    lines.extend(f"    {item}," for item in items[:-1])
    lines.append(f"    {items[-1]}")
    lines.append("]")
    return "\n".join(lines)


def module_name(path: TypingUnion[str, Path]) -> str:
    """Schema module name: file name up to the first dot"""
    return Path(path).name.split('.', 1)[0]


def load_package(path: TypingUnion[str, Path]) -> Package:
    """Read and parse one .api.json file"""
    path = Path(path)
    if not path.name.endswith(INPUT_FILE_EXT):
        raise SchemaError(f"invalid input file name: {str(path)!r}")
    return ApiJsonParser(path.read_text(), module_name(path), path.name).parse()
