import pytest

from binapigen import (
    Message, NamingCollisionError, Package, SchemaError, Service, synthesize_services,
)
from binapigen.services import method_name


def make_package(*services, messages=()):
    return Package(
        name="test",
        services=list(services),
        messages=[Message(name=name) for name in messages],
    )


def test_dump_returns_list_of_details():
    package = make_package(
        Service(request_type="Dump", reply_type="Details", stream=True),
        messages=["Dump", "Details"],
    )
    (method,) = synthesize_services(package)
    assert method.name == "Dump"
    assert method.request == "Dump"
    assert method.reply == "Details"
    assert method.stream
    assert method.returns == "List[Details]"


def test_method_kinds():
    package = make_package(
        Service(request_type="show_version", reply_type="show_version_reply"),
        Service(request_type="sw_interface_dump", reply_type="sw_interface_details", stream=True),
        Service(request_type="trace_record"),
        messages=["show_version", "show_version_reply", "sw_interface_dump",
                  "sw_interface_details", "trace_record"],
    )
    methods = synthesize_services(package)
    assert [(m.name, m.returns) for m in methods] == [
        ("show_version", "ShowVersionReply"),
        ("dump_sw_interface", "List[SwInterfaceDetails]"),
        ("trace_record", "None"),
    ]


@pytest.mark.parametrize("service, expected", [
    (Service(request_type="acl_dump", stream=True), "dump_acl"),
    (Service(request_type="acl_dump"), "acl_dump"),
    (Service(request_type="_dump", stream=True), "_dump"),
    (Service(request_type="import"), "import_"),
])
def test_method_name(service, expected):
    assert method_name(service) == expected


def test_method_name_collision():
    package = make_package(
        Service(request_type="acl_dump", reply_type="acl_details", stream=True),
        Service(request_type="dump_acl", reply_type="acl_details"),
        messages=["acl_dump", "dump_acl", "acl_details"],
    )
    with pytest.raises(NamingCollisionError, match="'dump_acl'"):
        synthesize_services(package)


def test_unknown_request():
    package = make_package(Service(request_type="missing"), messages=[])
    with pytest.raises(SchemaError, match="request 'missing' is not a message"):
        synthesize_services(package)


def test_unknown_reply():
    package = make_package(
        Service(request_type="show_version", reply_type="show_version_reply"),
        messages=["show_version"],
    )
    with pytest.raises(SchemaError, match="reply 'show_version_reply'"):
        synthesize_services(package)
