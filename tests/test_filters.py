import pytest

from k3dctl.filters import FilterError, split_filters_from_flag, split_kv


def test_no_filter_returns_value_unchanged():
    assert split_filters_from_flag("8080:80") == ("8080:80", [])


def test_single_filter():
    assert split_filters_from_flag("8080:80@agent:0") == ("8080:80", ["agent:0"])


def test_multiple_filters_split_on_semicolon():
    value, filters = split_filters_from_flag("/tmp/a:/tmp/b@server:0;agent:1")
    assert value == "/tmp/a:/tmp/b"
    assert filters == ["server:0", "agent:1"]


def test_escaped_at_sign_is_kept_literally():
    value, filters = split_filters_from_flag("user\\@host@server:0")
    assert value == "user@host"
    assert filters == ["server:0"]


def test_double_backslash_escapes_the_backslash():
    value, filters = split_filters_from_flag("path\\\\@server:0")
    assert value == "path\\"
    assert filters == ["server:0"]


def test_two_unescaped_at_signs_fail():
    with pytest.raises(FilterError):
        split_filters_from_flag("a@b@c")


def test_escaped_at_without_filter_fails():
    with pytest.raises(FilterError):
        split_filters_from_flag("value\\@")


def test_leading_at_gives_empty_value():
    assert split_filters_from_flag("@server:0") == ("", ["server:0"])


def test_split_kv_first_equals_only():
    assert split_kv("KEY=VAL=more") == ("KEY", "VAL=more")


def test_split_kv_without_equals():
    assert split_kv("KEY") == ("KEY", "")


def test_split_kv_empty_key():
    assert split_kv("=value") == ("", "value")