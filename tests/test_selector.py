"""Tests for the attribute selector."""

import pytest

from scim_diff.attribute_path import ParseError
from scim_diff.schemas import CORE_GROUP_URN, CORE_USER_URN, ENTERPRISE_USER_URN
from scim_diff.selector import AttributeSelector


def test_no_paths_matches_everything():
    selector = AttributeSelector.from_strings(None)
    assert not selector.is_restricted
    assert selector.matches(CORE_USER_URN, "anything")
    assert selector.matches_sub_attribute(ENTERPRISE_USER_URN, "manager", "value")
    assert not selector.filters_sub_attributes(CORE_USER_URN, "name")


def test_empty_list_matches_everything():
    assert not AttributeSelector.from_strings([]).is_restricted


def test_matches_named_attribute_only():
    selector = AttributeSelector.from_strings(["userName", "emails"])
    assert selector.matches(CORE_USER_URN, "userName")
    assert selector.matches(CORE_USER_URN, "emails")
    assert not selector.matches(CORE_USER_URN, "displayName")


def test_matching_ignores_case():
    selector = AttributeSelector.from_strings(["NAME.GivenName"])
    assert selector.matches(CORE_USER_URN.upper(), "name")
    assert selector.matches_sub_attribute(CORE_USER_URN, "Name", "givenname")


def test_sub_attribute_path_selects_its_attribute():
    selector = AttributeSelector.from_strings(["name.givenName"])
    assert selector.matches(CORE_USER_URN, "name")
    assert selector.matches_sub_attribute(CORE_USER_URN, "name", "givenName")
    assert not selector.matches_sub_attribute(CORE_USER_URN, "name", "familyName")
    assert selector.filters_sub_attributes(CORE_USER_URN, "name")


def test_several_sub_attributes_of_one_attribute():
    selector = AttributeSelector.from_strings(["name.givenName", "name.familyName"])
    assert selector.matches_sub_attribute(CORE_USER_URN, "name", "givenName")
    assert selector.matches_sub_attribute(CORE_USER_URN, "name", "familyName")
    assert not selector.matches_sub_attribute(CORE_USER_URN, "name", "middleName")


def test_whole_attribute_selects_all_sub_attributes():
    selector = AttributeSelector.from_strings(["name"])
    assert selector.matches_sub_attribute(CORE_USER_URN, "name", "middleName")
    assert not selector.filters_sub_attributes(CORE_USER_URN, "name")


@pytest.mark.parametrize("paths", [
    ["name", "name.givenName"],
    ["name.givenName", "name"],
])
def test_whole_attribute_wins_over_sub_attribute(paths):
    selector = AttributeSelector.from_strings(paths)
    assert selector.matches_sub_attribute(CORE_USER_URN, "name", "familyName")


def test_sub_attribute_of_unselected_attribute():
    selector = AttributeSelector.from_strings(["emails"])
    assert not selector.matches_sub_attribute(CORE_USER_URN, "name", "givenName")


def test_schemas_are_kept_apart():
    selector = AttributeSelector.from_strings([f"{ENTERPRISE_USER_URN}:department"])
    assert selector.matches(ENTERPRISE_USER_URN, "department")
    assert not selector.matches(CORE_USER_URN, "department")


def test_unprefixed_paths_use_default_schema():
    selector = AttributeSelector.from_strings(["displayName"], CORE_GROUP_URN)
    assert selector.matches(CORE_GROUP_URN, "displayName")
    assert not selector.matches(CORE_USER_URN, "displayName")


def test_malformed_path_fails_at_construction():
    with pytest.raises(ParseError) as exc_info:
        AttributeSelector.from_strings(["userName", "name.given.name"])
    assert exc_info.value.token == "name.given.name"
