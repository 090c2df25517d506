import pytest

from binapigen import (
    Alias, Enum, EnumEntry, Field, NamingCollisionError, Package, SchemaError,
    Type, TypeMapper, Union,
)
from binapigen.type_mapper import camel_case_name, class_name, field_name, strip_user_type


@pytest.fixture
def mapper():
    package = Package(
        name="test",
        enums=[Enum(name="if_status_flags", type="u8",
                    entries=[EnumEntry("IF_STATUS_API_FLAG_ADMIN_UP", 1)])],
        aliases=[
            Alias(name="mac_address", type="u8", length=6),
            Alias(name="interface_index", type="u32"),
            Alias(name="weights", type="u16", length=4),
        ],
        types=[
            Type(name="mprefix", fields=[
                Field(name="af", type="u8"),
                Field(name="grp_address_length", type="u16"),
                Field(name="grp_address", type="u8", length=16),
            ]),
            Type(name="label_stack", fields=[
                Field(name="n_labels", type="u8"),
                Field(name="labels", type="u32", size_from="n_labels"),
            ]),
            Type(name="loop", fields=[Field(name="next", type="vl_api_loop_t")]),
        ],
        unions=[
            Union(name="address_union", fields=[
                Field(name="ip4", type="u8", length=4),
                Field(name="ip6", type="u8", length=16),
            ]),
        ],
    )
    return TypeMapper(package)


@pytest.mark.parametrize("name, expected", [
    ("show_version", "ShowVersion"),
    ("ip4_address", "IP4Address"),
    ("sw_interface_set_mtu", "SwInterfaceSetMTU"),
    ("acl_rule", "ACLRule"),
    ("want_dhcp6_events", "WantDhcp6Events"),
    ("l2_fib_clear_table", "L2FibClearTable"),
])
def test_camel_case_name(name, expected):
    assert camel_case_name(name) == expected


def test_class_name_strips_user_type_marker():
    assert strip_user_type("vl_api_address_t") == "address"
    assert strip_user_type("address") == "address"
    assert class_name("vl_api_mac_address_t") == "MACAddress"


def test_class_name_rejects_invalid_identifiers():
    with pytest.raises(NamingCollisionError):
        class_name("1st_type")
    with pytest.raises(NamingCollisionError):
        class_name("_")


@pytest.mark.parametrize("name, expected", [
    ("sw_if_index", "sw_if_index"),
    ("_vl_msg_id", "vl_msg_id"),
    ("is_add", "is_add"),
    ("from", "from_"),
    ("class", "class_"),
    ("pack", "pack_"),
    ("wire", "wire_"),
    ("api", "api_"),
])
def test_field_name(name, expected):
    assert field_name(name) == expected


def test_primitive_mapping(mapper):
    assert mapper.to_wire("u32") == "Int32ub"
    assert mapper.to_wire("i64") == "Int64sb"
    assert mapper.to_wire("bool") == "Flag"
    assert mapper.to_wire("f64") == "Float64b"
    assert mapper.to_python("f32") == "float"
    assert mapper.to_python("bool") == "bool"
    assert mapper.to_python("string") == "str"
    assert {"Int32ub", "Int64sb", "Flag", "Float64b"} <= mapper.constructs


def test_user_types_are_bound_lazily(mapper):
    assert mapper.to_wire("vl_api_mprefix_t") == "LazyBound(lambda: Mprefix.wire())"
    assert mapper.to_wire("vl_api_mprefix_t", lazy=False) == "Mprefix.wire()"
    assert "LazyBound" in mapper.constructs


def test_alias_python_hint_follows_target(mapper):
    assert mapper.to_python("vl_api_mac_address_t") == "bytes"
    assert mapper.to_python("vl_api_interface_index_t") == "int"
    assert mapper.to_python("vl_api_weights_t") == "List[int]"
    assert mapper.to_python("vl_api_if_status_flags_t") == "IfStatusFlags"


def test_defaults(mapper):
    assert mapper.default("u16") == "0"
    assert mapper.default("string") == '""'
    assert mapper.default("vl_api_if_status_flags_t") == "0"
    assert mapper.default("vl_api_mac_address_t") == 'b"\\x00" * 6'
    assert mapper.default("vl_api_mprefix_t") == "Mprefix()"
    assert mapper.array_default("u32", 3) == "[0] * 3"
    assert mapper.array_default("vl_api_mprefix_t", 2) == "[Mprefix() for _ in range(2)]"


def test_size_of(mapper):
    assert mapper.size_of("u64") == 8
    assert mapper.size_of("vl_api_if_status_flags_t") == 1
    assert mapper.size_of("vl_api_mac_address_t") == 6
    assert mapper.size_of("vl_api_weights_t") == 8
    assert mapper.size_of("vl_api_mprefix_t") == 1 + 2 + 16
    assert mapper.size_of("vl_api_address_union_t") == 16
    assert mapper.size_of("vl_api_label_stack_t") is None
    assert mapper.size_of("string") is None


def test_self_containing_type_is_rejected(mapper):
    with pytest.raises(SchemaError, match="contains itself"):
        mapper.size_of("vl_api_loop_t")


def test_unknown_type(mapper):
    with pytest.raises(SchemaError, match="test.route.path: unknown type 'vl_api_fib_path_t'"):
        mapper.to_wire("vl_api_fib_path_t", "route", "path")
