"""
键名归一化.

所有读写都先经过 `normalize_key`, 保证同一原始键总能取回同一条目:
- 在任意字符与紧随其后的大写字母之间插入 `_` (从左到右, 不重叠匹配);
- 然后整体转为小写.

示例:
    >>> normalize_key("fooBar")
    'foo_bar'
    >>> normalize_key("FooBar")
    'foo_bar'
    >>> normalize_key("someMixedCASEKey")
    'some_mixed_ca_se_key'
"""

from __future__ import annotations

import re
from typing import Any

SEPARATOR = "_"

_BOUNDARY = re.compile(r"(.)([A-Z])")


def normalize_key(key: Any) -> str:
    """
    返回键名的归一化形式.

    参数:
        key: 原始键名, 必须为 str.
    返回:
        归一化后的键名.
    异常:
        TypeError: 键名不是字符串.
    """
    if not isinstance(key, str):
        raise TypeError(f"DataBag keys must be str, not {type(key).__name__}")
    return _BOUNDARY.sub(rf"\1{SEPARATOR}\2", key).lower()
