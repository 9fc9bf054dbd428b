"""
DataBag: 以归一化键存取任意命名值的通用容器.

设计目标:
- 所有键名先经 `normalize_key` 归一化(`fooBar` / `FooBar` / `foo_bar` 指向同一条目).
- 读取缺失的键返回 None(或调用方给出的 default), 从不抛异常;
  删除缺失的键是静默的空操作.
- 支持递归加载: 嵌套的原始映射被包装为同类型的子容器.
- 支持 merge-recursive 合并: 嵌套映射递归合并, 冲突的标量收集为列表.
- 多种访问方式: 基本操作 / 下标 / 动态方法名(`setFoo`, `get_foo` ...) /
  迭代 / len / JSON 投影 / 文本投影.
- 可 copy / deepcopy / pickle, 仅 `_persistent_fields` 中列出的字段参与.

适合作为 "命名属性集合" 类对象(记录, 配置节点, 灵活属性实体)的基类.
子类可覆盖 `post_init` 做额外初始化, 覆盖 `new_child` 控制嵌套容器的类型.

单线程使用; 多个持有者共享同一容器(或其子容器)时, 同步由调用方负责.

示例:
    >>> bag = DataBag({"fooBar": 1})
    >>> bag.get_data("foo_bar")
    1
    >>> bag.setBaz(2).hasBaz()
    True
    >>> str(bag)
    '{"foo_bar": 1, "baz": 2}'
"""

from __future__ import annotations

import copy
from collections.abc import Mapping, MutableMapping
from functools import partial
from typing import Any, Callable, Iterator, Self

from pydantic import GetCoreSchemaHandler
from pydantic_core import core_schema

from pwt.databag import projection
from pwt.databag.dispatch import Accessor, Action, parse_accessor, parse_attribute
from pwt.databag.errors import InvalidMergeSourceError
from pwt.databag.keys import normalize_key
from pwt.databag.log import log_helpers
from pwt.databag.merge import merge_recursive

logger = log_helpers.get_logger_adapter(__name__)

_MISSING: Any = object()


class DataBag(MutableMapping[str, Any]):
    """
    以归一化字符串键存储任意值的有序容器.

    内部结构:
    - self._data: {归一化键: 值}, 保持插入顺序.

    特性:
    - **键名归一化**: 读写/判断/删除都先归一化, 相同归一化结果的写入后者覆盖前者.
    - **存在性与取值分离**: 值为 None 的键, `has_data` 仍返回 True.
    - **取整体映射是别名**: `get_data()` 返回内部字典本身, 而非副本.
    - **浅层计数与迭代**: len/迭代只覆盖顶层条目.
    """

    _persistent_fields: tuple[str, ...] = ("_data",)

    _data: dict[str, Any]

    def __init__(self, data: Any = None, *args: Any, **kwargs: Any) -> None:
        """
        初始化容器.

        参数:
            data: 初始映射, 非递归加载; 不是映射时忽略(不报错).
            *args, **kwargs: 连同 data 一起原样转交给 `post_init`.
        """
        self._data = {}
        if isinstance(data, Mapping):
            self.add_data(data)
        self.post_init(data, *args, **kwargs)

    def post_init(self, *args: Any, **kwargs: Any) -> None:
        """构造后扩展点, 供子类覆盖. 收到构造函数的全部参数."""

    def new_child(self) -> Self:
        """创建嵌套容器. 递归加载与合并都通过这里构造子容器."""
        return type(self)()

    @classmethod
    def from_nested(cls, data: Mapping[str, Any]) -> Self:
        """递归加载 `data`, 嵌套映射全部转换为子容器."""
        return cls().add_data(data, recursive=True)

    # ------------------------------------------------------------------
    # 基本操作

    def add_data(
        self, data: Mapping[str, Any] | None, recursive: bool = False
    ) -> Self:
        """
        追加加载映射中的条目(不清空已有数据).

        参数:
            data: 原始映射或 DataBag; None 或非映射时什么也不做.
            recursive: 为真时, 值为原始映射的条目先被包装成子容器(递归传递).
        返回:
            self, 便于链式调用.
        """
        if not isinstance(data, Mapping):
            return self
        for key, value in data.items():
            if (
                recursive
                and isinstance(value, Mapping)
                and not isinstance(value, DataBag)
            ):
                value = self.new_child().add_data(value, recursive)
            self.set_data(key, value)
        return self

    def set_data(self, key: str, value: Any = None) -> Self:
        """写入一个值(覆盖语义), 返回 self."""
        self._data[normalize_key(key)] = value
        return self

    def set_all(
        self, data: Mapping[str, Any] | None = None, recursive: bool = False
    ) -> Self:
        """
        整体替换数据: 先清空, 再加载 `data`.

        `data` 为空或 None 时等同于清空. 内部字典原地清空, `get_data()` 返回的别名保持有效.
        """
        if data is self or data is self._data:
            data = dict(data.items())
        self._data.clear()
        if data:
            self.add_data(data, recursive)
        logger.debug(f"DataBag - 整体替换 - {len(self._data)} 个条目")
        return self

    def get_data(
        self, key: str | None = None, field: Any = None, default: Any = None
    ) -> Any:
        """
        读取数据.

        参数:
            key: 键名; 为 None 时返回内部字典本身(别名, 修改会反映到容器).
            field: 若给出, 返回所存值的该字段(值不可按该字段下标访问时返回 default).
            default: 键或字段不存在时的返回值.
        返回:
            对应的值; 不存在时返回 default, 从不抛异常.
        """
        if key is None:
            return self._data
        key = normalize_key(key)
        if key not in self._data:
            return default
        value = self._data[key]
        if field is None:
            return value
        try:
            result = value[field]
        except (KeyError, IndexError, TypeError):
            return default
        return default if result is None else result

    def has_data(self, key: str | None = None) -> bool:
        """
        判断数据是否存在.

        key 为 None 时判断容器是否非空; 否则判断归一化键是否存在(与值是否为真无关).
        """
        if key is None:
            return bool(self._data)
        return normalize_key(key) in self._data

    def unset_data(self, key: str | None = None) -> Self:
        """删除一个键; key 为 None 时清空容器. 键不存在时什么也不做."""
        if key is None:
            self._data.clear()
        else:
            self._data.pop(normalize_key(key), None)
        return self

    def merge(self, other: Mapping[str, Any]) -> Self:
        """
        以 merge-recursive 规则合并另一个 DataBag 或映射.

        - 两侧都是映射的键递归合并;
        - 其它冲突的值收集为列表, 原值在前, 新值在后;
        - 合并结果整体替换当前数据.

        异常:
            InvalidMergeSourceError: other 既不是映射也不是 DataBag.
        """
        if not isinstance(other, Mapping):
            logger.warning(f"DataBag - 合并被拒绝 - {type(other).__name__}")
            raise InvalidMergeSourceError(other)
        if isinstance(other, DataBag):
            incoming = other.get_data()
        else:
            incoming = {normalize_key(k): v for k, v in other.items()}
        logger.debug(f"DataBag - 合并 - {len(self._data)} + {len(incoming)} 个条目")
        return self.set_all(merge_recursive(self._data, incoming))

    # ------------------------------------------------------------------
    # 动态方法名

    def invoke_named(self, name: str, *args: Any) -> Any:
        """
        按方法名调用基本操作.

        `setFoo(v)` -> set_data("Foo", v); `getFoo(field)` -> get_data("Foo", field);
        `hasFoo()` -> has_data("Foo"); `unsetFoo()` / `unsFoo()` -> unset_data("Foo").
        前缀无法识别时返回 None.
        """
        accessor = parse_accessor(name)
        if accessor is None:
            return None
        return self._invoke(accessor, *args)

    def _invoke(self, accessor: Accessor, *args: Any) -> Any:
        arg = args[0] if args else None
        match accessor.action:
            case Action.SET:
                return self.set_data(accessor.key, arg)
            case Action.GET:
                return self.get_data(accessor.key, arg)
            case Action.HAS:
                return self.has_data(accessor.key)
            case Action.UNSET:
                return self.unset_data(accessor.key)

    def __getattr__(self, name: str) -> Callable[..., Any]:
        accessor = parse_attribute(name)
        if accessor is None:
            raise AttributeError(
                f"{type(self).__name__!r} object has no attribute {name!r}"
            )
        return partial(self._invoke, accessor)

    # ------------------------------------------------------------------
    # 映射协议

    def __getitem__(self, key: str) -> Any:
        return self.get_data(key)

    def __setitem__(self, key: str, value: Any) -> None:
        self.set_data(key, value)

    def __delitem__(self, key: str) -> None:
        self.unset_data(key)

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        return normalize_key(key) in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(tuple(self._data))

    def __len__(self) -> int:
        return len(self._data)

    def get(self, key: str, default: Any = None) -> Any:
        return self.get_data(key, default=default)

    def pop(self, key: str, default: Any = _MISSING) -> Any:
        key = normalize_key(key)
        if key in self._data:
            return self._data.pop(key)
        if default is _MISSING:
            raise KeyError(key)
        return default

    def setdefault(self, key: str, default: Any = None) -> Any:
        key = normalize_key(key)
        if key not in self._data:
            self._data[key] = default
        return self._data[key]

    def clear(self) -> None:
        self.unset_data()

    # ------------------------------------------------------------------
    # 投影与序列化

    def json_serialize(self) -> dict[str, Any]:
        """JSON 投影: 返回内部字典本身, 嵌套 DataBag 由序列化器递归投影."""
        return self._data

    def to_json(self, options: projection.JsonOptions | None = None) -> str:
        """渲染为 JSON 文本, 总是对象形式(空容器为 `{}`)."""
        return projection.dumps(self, options)

    def __str__(self) -> str:
        return self.to_json()

    def __repr__(self) -> str:
        inner = ", ".join(f"{k!r}: {v!r}" for k, v in self._data.items())
        return f"{type(self).__name__}({{{inner}}})"

    def __rich_repr__(self):
        yield from self._data.items()

    def __getstate__(self) -> dict[str, Any]:
        return {name: getattr(self, name) for name in self._persistent_fields}

    def __setstate__(self, state: dict[str, Any]) -> None:
        for name in self._persistent_fields:
            setattr(self, name, state[name])

    def __copy__(self) -> Self:
        clone = type(self).__new__(type(self))
        clone.__setstate__(
            {name: copy.copy(value) for name, value in self.__getstate__().items()}
        )
        return clone

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        def validate(value: Any) -> DataBag:
            if isinstance(value, cls):
                return value
            if isinstance(value, Mapping):
                return cls.from_nested(value)
            raise ValueError(f"Expected a mapping, got {type(value).__name__}")

        return core_schema.no_info_plain_validator_function(
            validate,
            serialization=core_schema.plain_serializer_function_ser_schema(
                projection.to_jsonable, info_arg=False
            ),
        )
