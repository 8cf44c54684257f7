"""Tests for building PATCH bodies from diffs."""

import pytest

from scim_diff.descriptors import get_resource_descriptor
from scim_diff.diff import Diff, generate_diff
from scim_diff.model import ScimObject
from scim_diff.patch_body import build_patch_body
from scim_diff.resources import InvalidResourceError, ScimResource
from scim_diff.schemas import CORE_USER_URN, ENTERPRISE_USER_URN
from tests.scim_payloads import make_user, resource


def _diff(source, target):
    return generate_diff(resource(source), resource(target))


def test_deletions_go_in_meta_attributes():
    diff = _diff(
        make_user(nickName="B", name={"givenName": "Barbara", "middleName": "J"}, extra={"costCenter": "4130"}),
        make_user(title="Guide", name={"givenName": "Barbara"}),
    )
    body = diff.to_partial_resource().to_json()
    assert body == {
        "schemas": [CORE_USER_URN],
        "meta": {"attributes": [
            "nickName",
            f"{ENTERPRISE_USER_URN}:costCenter",
            "name.middleName",
        ]},
        "title": "Guide",
    }


def test_no_meta_without_deletions():
    body = _diff(make_user(), make_user(title="Guide")).to_partial_resource().to_json()
    assert "meta" not in body
    assert body["title"] == "Guide"


def test_empty_diff_gives_empty_body():
    body = _diff(make_user(), make_user()).to_partial_resource().to_json()
    assert body == {"schemas": [CORE_USER_URN]}


def test_extension_updates_nest_under_schema():
    body = _diff(
        make_user(extra={"department": "Tours"}),
        make_user(extra={"department": "Sales"}),
    ).to_partial_resource().to_json()
    assert body == {
        "schemas": [CORE_USER_URN, ENTERPRISE_USER_URN],
        ENTERPRISE_USER_URN: {"department": "Sales"},
    }


def test_read_only_attributes_are_left_out():
    source = make_user(id="2819c223", groups=[{"value": "e9e30dba", "display": "Tour Guides"}])
    target = make_user(id="2819c223-7f76", title="Guide", groups=[{"value": "fc348aa8", "display": "Admins"}])
    diff = _diff(source, target)
    assert {a.name for a in diff.attributes_to_update} == {"id", "groups", "title"}

    body = diff.to_partial_resource().to_json()
    assert body == {"schemas": [CORE_USER_URN], "title": "Guide"}


def test_default_factory_returns_resource():
    result = _diff(make_user(), make_user(title="Guide")).to_partial_resource()
    assert isinstance(result, ScimResource)
    assert result.resource_descriptor.name == "User"


def test_custom_factory_receives_descriptor_and_tree():
    calls = []

    def factory(descriptor, scim_object):
        calls.append((descriptor, scim_object))
        return "built"

    diff = _diff(make_user(nickName="B"), make_user(title="Guide"))
    assert diff.to_partial_resource(factory) == "built"

    (descriptor, scim_object), = calls
    assert descriptor is diff.resource_descriptor
    assert isinstance(scim_object, ScimObject)
    assert [a.name for a in scim_object] == ["meta", "title"]


def test_factory_error_is_wrapped():
    error = RuntimeError("backend unavailable")

    def factory(descriptor, scim_object):
        raise error

    diff = _diff(make_user(), make_user(title="Guide"))
    with pytest.raises(InvalidResourceError, match="backend unavailable") as exc_info:
        diff.to_partial_resource(factory)
    assert exc_info.value.cause is error
    assert exc_info.value.__cause__ is error


def test_invalid_resource_error_passes_through():
    error = InvalidResourceError("rejected")

    def factory(descriptor, scim_object):
        raise error

    diff = _diff(make_user(), make_user(title="Guide"))
    with pytest.raises(InvalidResourceError) as exc_info:
        diff.to_partial_resource(factory)
    assert exc_info.value is error


def test_descriptor_override_is_checked_by_default_factory():
    diff = _diff(make_user(), make_user(title="Guide"))
    with pytest.raises(InvalidResourceError, match="not defined for resource type 'Group'"):
        build_patch_body(diff, resource_descriptor=get_resource_descriptor("Group"))


def test_descriptor_override_is_passed_to_factory():
    group = get_resource_descriptor("Group")
    seen = []
    diff = Diff(get_resource_descriptor("User"))
    build_patch_body(diff, lambda descriptor, tree: seen.append(descriptor), group)
    assert seen == [group]
