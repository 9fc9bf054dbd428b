"""
动态方法名分发.

把 `setFoo(5)` / `getFoo()` / `hasFoo()` / `unsetFoo()` / `unsFoo()` 这类名字
解析为 (动作, 键名), 再交给 DataBag 的四个基本操作处理.

两种入口:
- `parse_accessor`: 宽松解析, 只看前缀, 用于显式的 `invoke_named`.
- `parse_attribute`: 严格解析, 要求前缀后紧跟大写字母或 `_`,
  用于 `__getattr__`, 避免把 `settings` 之类的普通属性名误当作 setter.
"""

from __future__ import annotations

import enum
import re
from typing import NamedTuple


class Action(enum.Enum):
    SET = "set"
    GET = "get"
    HAS = "has"
    UNSET = "unset"


class Accessor(NamedTuple):
    action: Action
    key: str


# unset 必须排在 uns 之前
_PREFIXES = (
    ("unset", Action.UNSET),
    ("uns", Action.UNSET),
    ("set", Action.SET),
    ("get", Action.GET),
    ("has", Action.HAS),
)

_ATTRIBUTE = re.compile(r"^(unset|uns|set|get|has)(?=[A-Z_])_?([^_].*)$")


def parse_accessor(name: str) -> Accessor | None:
    """
    按前缀解析方法名.

    参数:
        name: 方法名, 例如 `setFooBar`.
    返回:
        Accessor; 前缀无法识别时返回 None.
    """
    for prefix, action in _PREFIXES:
        if name.startswith(prefix):
            return Accessor(action, name[len(prefix) :])
    return None


def parse_attribute(name: str) -> Accessor | None:
    """
    按属性访问规则解析方法名.

    - 私有名/魔术名(以 `_` 开头)一律不解析;
    - 前缀后必须是大写字母或 `_`, 紧跟的单个 `_` 会被去掉;
    - 去掉前缀和 `_` 后不能为空, 也不能再以 `_` 开头.
    """
    if name.startswith("_"):
        return None
    m = _ATTRIBUTE.match(name)
    if m is None:
        return None
    prefix, key = m.groups()
    action = Action.UNSET if prefix.startswith("uns") else Action(prefix)
    return Accessor(action, key)
