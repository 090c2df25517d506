"""Method contracts synthesized from service request/reply pairs"""

import keyword
from dataclasses import dataclass
from typing import Optional

from .errors import NamingCollisionError, SchemaError, where
from .type_mapper import class_name
from .types import Package, Service

DUMP_SUFFIX = '_dump'


@dataclass
class ServiceMethod:
    """One abstract method of the generated Services class"""
    name: str
    service: Service
    request: str
    reply: Optional[str] = None

    @property
    def stream(self) -> bool:
        return self.service.stream

    @property
    def returns(self) -> str:
        """Python return annotation"""
        if not self.reply:
            return 'None'
        if self.stream:
            return f'List[{self.reply}]'
        return self.reply


def method_name(svc: Service) -> str:
    """Method name is the request name, dump requests read as dump_<what>"""
    name = svc.request_type
    if svc.stream and name.endswith(DUMP_SUFFIX) and len(name) > len(DUMP_SUFFIX):
        name = 'dump_' + name[:-len(DUMP_SUFFIX)]
    if keyword.iskeyword(name):
        name += '_'
    return name


def synthesize_services(package: Package) -> list[ServiceMethod]:
    """Build method contracts for every service entry, in declared order"""
    methods = []
    seen = {}
    for svc in package.services:
        loc = where(package.name, 'services', svc.request_type)
        if package.message_by_name(svc.request_type) is None:
            raise SchemaError(f"{loc}: request {svc.request_type!r} is not a message")
        reply = None
        if svc.reply_type:
            if package.message_by_name(svc.reply_type) is None:
                raise SchemaError(f"{loc}: reply {svc.reply_type!r} is not a message")
            reply = class_name(svc.reply_type)

        name = method_name(svc)
        if name in seen:
            raise NamingCollisionError(
                f"{loc}: services {seen[name]!r} and {svc.request_type!r} "
                f"both map to method {name!r}")
        seen[name] = svc.request_type

        methods.append(ServiceMethod(
            name=name,
            service=svc,
            request=class_name(svc.request_type),
            reply=reply,
        ))
    return methods
