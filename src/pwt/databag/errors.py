"""
定义 DataBag 使用的异常体系.

异常层级结构如下:
    - DataBagError: 所有异常的统一基类, 支持 cause 链式追踪.
        - InvalidMergeSourceError: merge 收到既不是映射也不是 DataBag 的参数.

说明:
    - 只有 merge 会向调用方抛出异常, 其它操作缺失时返回 None 或静默忽略.
    - 非字符串键属于编程错误, 直接抛出内置 TypeError, 不纳入本体系.
"""

from __future__ import annotations

from typing import Any


class DataBagError(Exception):
    """
    所有 DataBag 异常的基类.

    参数:
    - `*args`: 异常消息内容;
    - `cause`: 可选的原始异常, 自动赋值给 `__cause__`.
    """

    def __init__(self, *args: Any, cause: Exception | None = None) -> None:
        super().__init__(*args)
        self.cause: Exception | None = cause
        self.__cause__ = cause


class InvalidMergeSourceError(DataBagError, TypeError):
    """
    merge 参数类型错误.

    继承 TypeError, 以便调用方按内置参数错误统一捕获.
    """

    def __init__(self, source: Any) -> None:
        super().__init__(
            f"Only a mapping or a DataBag can be merged, got {type(source).__name__}"
        )
        self.source = source
