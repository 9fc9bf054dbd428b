"""
projection
==========

把 DataBag 以及其中存放的任意值转换为 JSON 友好的结构(dict / list / 基础类型),
供 `DataBag.to_json` / `str(DataBag)` 以及 JSON 日志输出使用.

主要特性:
- 实现了 `json_serialize()` 的对象(如 DataBag)按其投影结果递归展开.
- 映射的键统一转为字符串, 列表/元组/集合统一转为 list.
- 二进制类型转十六进制, 日期时间转 ISO 字符串, 其它对象退化为 str(value).
- 可选最大递归深度(max_depth)与循环引用检测(check_circular).
- 基于 functools.singledispatch, 可为自定义类型注册投影逻辑.
"""

from __future__ import annotations

import json
from collections.abc import Mapping, Set
from datetime import date, datetime, time
from functools import singledispatch
from typing import Any, NamedTuple, Protocol, runtime_checkable

from pydantic import BaseModel, Field


@runtime_checkable
class JsonSerializable(Protocol):
    def json_serialize(self) -> Mapping[str, Any]: ...


class JsonOptions(BaseModel):
    """
    文本投影选项.

    Attributes:
        indent: 缩进空格数, None 表示单行输出.
        ensure_ascii: 是否转义非 ASCII 字符.
        sort_keys: 是否按键排序.
        max_depth: 最大递归深度(0 表示不限制).
        check_circular: 是否检测循环引用.
    """

    indent: int | None = Field(default=None, ge=0)
    ensure_ascii: bool = False
    sort_keys: bool = False
    max_depth: int = Field(default=0, ge=0)
    check_circular: bool = True


class _Context(NamedTuple):
    max_depth: int
    check_circular: bool
    path: list[str | int]
    memo: dict[int, int]


def to_jsonable(value: Any, *, max_depth: int = 0, check_circular: bool = False) -> Any:
    """
    将任意对象投影为 JSON 友好的结构.

    Args:
        value: 任意 Python 对象.
        max_depth: 最大递归深度(0 表示不限制).
        check_circular: 是否检测循环引用.

    Returns:
        投影后的对象(基础类型/dict/list).
    """
    context = _Context(max_depth, check_circular, [], {id(value): 0})
    return _project(value, context)


def dumps(value: Any, options: JsonOptions | None = None) -> str:
    """按选项把对象渲染为 JSON 文本."""
    options = options or JsonOptions()
    data = to_jsonable(
        value, max_depth=options.max_depth, check_circular=options.check_circular
    )
    return json.dumps(
        data,
        indent=options.indent,
        ensure_ascii=options.ensure_ascii,
        sort_keys=options.sort_keys,
    )


def _render_path(path: list[str | int]) -> str:
    parts = (f"[{p}]" if isinstance(p, int) else f".{p}" for p in path)
    return "$" + "".join(parts)


def _key(key: Any) -> str:
    if isinstance(key, bool):
        return "true" if key else "false"
    if key is None:
        return "null"
    return str(key)


def _recurse(value: Any, key: str | int, context: _Context) -> Any:
    if isinstance(value, (str, int, float, bool, type(None))):
        return value

    if context.max_depth > 0 and len(context.path) >= context.max_depth:
        return {"$depth": "<Max depth reached>"}

    value_id = id(value)
    if context.check_circular and value_id in context.memo:
        return {"$ref": _render_path(context.path[: context.memo[value_id]])}

    context.path.append(key)
    context.memo[value_id] = len(context.path)
    try:
        return _project(value, context)
    finally:
        context.memo.pop(value_id, None)
        context.path.pop()


@singledispatch
def _project(value: Any, context: _Context) -> Any:
    if isinstance(value, JsonSerializable):
        return _project_mapping(value.json_serialize(), context)
    return str(value)


@_project.register(str)
@_project.register(int)
@_project.register(float)
@_project.register(bool)
@_project.register(type(None))
def _(value: Any, context: _Context) -> Any:
    return value


@_project.register(bytes)
@_project.register(bytearray)
@_project.register(memoryview)
def _(value: bytes | bytearray | memoryview, context: _Context) -> Any:
    return value.hex()


@_project.register(datetime)
@_project.register(date)
@_project.register(time)
def _(value: datetime | date | time, context: _Context) -> Any:
    return value.isoformat()


@_project.register(Mapping)
def _(value: Mapping, context: _Context) -> Any:
    if isinstance(value, JsonSerializable):
        value = value.json_serialize()
    return _project_mapping(value, context)


@_project.register(list)
@_project.register(tuple)
@_project.register(Set)
def _(value: Any, context: _Context) -> Any:
    return [_recurse(v, i, context) for i, v in enumerate(value)]


def _project_mapping(value: Mapping[Any, Any], context: _Context) -> dict[str, Any]:
    result = {}
    for k, v in value.items():
        k = _key(k)
        result[k] = _recurse(v, k, context)
    return result
