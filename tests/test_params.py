"""Tests for compound request parameter parsing."""

from recordgate.query.params import (
    ParsedParameter,
    is_blank,
    parse_parameter_with_additional_values,
    split_list,
)


def test_multiple_groups_with_values_and_bare_name():
    parsed = parse_parameter_with_additional_values("a:1,2|b:3|c")

    assert parsed == [
        ParsedParameter(name="a", values=["1", "2"]),
        ParsedParameter(name="b", values="3"),
        ParsedParameter(name="c", values=None),
    ]


def test_single_group_is_still_a_list():
    assert parse_parameter_with_additional_values("a:1") == [ParsedParameter(name="a", values="1")]
    assert parse_parameter_with_additional_values("cities") == [ParsedParameter(name="cities")]


def test_only_first_colon_separates_name():
    parsed = parse_parameter_with_additional_values("rel:a:b,c")

    assert parsed == [ParsedParameter(name="rel", values=["a:b", "c"])]


def test_empty_groups_are_skipped():
    assert parse_parameter_with_additional_values("a||b|") == [
        ParsedParameter(name="a"),
        ParsedParameter(name="b"),
    ]
    assert parse_parameter_with_additional_values("") == []


def test_value_list_and_first_value_handle_both_shapes():
    many = ParsedParameter(name="name", values=["desc", "x"])
    one = ParsedParameter(name="name", values="desc")
    none = ParsedParameter(name="name")

    assert many.value_list() == ["desc", "x"]
    assert one.value_list() == ["desc"]
    assert none.value_list() == []
    assert one.first_value() == "desc"
    assert none.first_value("asc") == "asc"


def test_split_list_drops_blanks_and_strips():
    assert split_list("year, name,,id ") == ["year", "name", "id"]
    assert split_list(["a", " b "]) == ["a", "b"]
    assert split_list(None) == []


def test_is_blank():
    assert is_blank(None)
    assert is_blank("  ")
    assert not is_blank("0")
    assert not is_blank(0)
