"""
动态方法名解析测试
"""

import pytest

from pwt.databag.dispatch import Accessor, Action, parse_accessor, parse_attribute


class TestParseAccessor:
    """宽松解析: 只看前缀"""

    @pytest.mark.parametrize(
        "name, expected",
        [
            ("setFoo", Accessor(Action.SET, "Foo")),
            ("getFooBar", Accessor(Action.GET, "FooBar")),
            ("hasFoo", Accessor(Action.HAS, "Foo")),
            ("unsetFoo", Accessor(Action.UNSET, "Foo")),
            ("unsFoo", Accessor(Action.UNSET, "Foo")),
            ("settings", Accessor(Action.SET, "tings")),
        ],
    )
    def test_known_prefixes(self, name, expected):
        assert parse_accessor(name) == expected

    @pytest.mark.parametrize("name", ["fooBar", "delFoo", "", "se"])
    def test_unknown_prefix(self, name):
        assert parse_accessor(name) is None


class TestParseAttribute:
    """严格解析: 前缀后必须是大写字母或 `_`"""

    @pytest.mark.parametrize(
        "name, expected",
        [
            ("setFoo", Accessor(Action.SET, "Foo")),
            ("set_foo", Accessor(Action.SET, "foo")),
            ("get_foo_bar", Accessor(Action.GET, "foo_bar")),
            ("hasFoo", Accessor(Action.HAS, "Foo")),
            ("unsetFoo", Accessor(Action.UNSET, "Foo")),
            ("unset_foo", Accessor(Action.UNSET, "foo")),
            ("unsFoo", Accessor(Action.UNSET, "Foo")),
        ],
    )
    def test_accessor_names(self, name, expected):
        assert parse_attribute(name) == expected

    @pytest.mark.parametrize(
        "name",
        [
            "settings",
            "getter",
            "hash",
            "unsettled",
            "get",
            "_setFoo",
            "__getstate__",
            "unset_",
            "set_",
            "set__foo",
        ],
    )
    def test_plain_attribute_names(self, name):
        assert parse_attribute(name) is None
