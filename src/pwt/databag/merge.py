"""
递归合并(merge-recursive).

规则:
- 只在一侧出现的键: 原样保留;
- 两侧都是映射(含 DataBag): 递归合并;
- 其它冲突: 收集为列表, 原值在前, 新值追加在后.
  - 原值: list/tuple 展开, 其它(含 None)包成单元素;
  - 新值: list/tuple 展开, 其它(含 None)作为单个元素追加.

两个参数都不会被修改, 返回的是新映射.

示例:
    >>> merge_recursive({"a": 2}, {"a": 1})
    {'a': [2, 1]}
    >>> merge_recursive({"a": {"y": 2}}, {"a": {"x": 1}})
    {'a': {'y': 2, 'x': 1}}
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any


def merge_recursive(
    base: Mapping[Any, Any], incoming: Mapping[Any, Any]
) -> dict[Any, Any]:
    result = dict(base.items())
    for key, value in incoming.items():
        if key in result:
            result[key] = merge_values(result[key], value)
        else:
            result[key] = value
    return result


def merge_values(existing: Any, incoming: Any) -> Any:
    """合并同一个键下的两个值."""
    if isinstance(existing, Mapping) and isinstance(incoming, Mapping):
        new_child = getattr(existing, "new_child", None)
        if callable(new_child):
            # 原值是 DataBag: 保持其类型, 并由 merge 归一化新值各层的键
            return new_child().set_all(existing).merge(incoming)
        return merge_recursive(existing, incoming)

    if isinstance(existing, (list, tuple)):
        result = list(existing)
    else:
        result = [existing]

    if isinstance(incoming, (list, tuple)):
        result.extend(incoming)
    else:
        result.append(incoming)
    return result
