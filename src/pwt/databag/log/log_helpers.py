from __future__ import annotations

import logging
from typing import Any


def get_logger_adapter(name: str | None = None, **extra: Any) -> LoggerAdapter:
    return LoggerAdapter(logging.getLogger(name), **extra)


class LoggerAdapter:
    """
    日志适配器, 封装标准库 `logging.Logger`

    构造时传入的 `extra` 会合并到每条日志记录中, 调用时的 `extra` 优先.
    调用位置(stacklevel)指向适配器的调用方而非适配器本身.
    """

    def __init__(self, logger: logging.Logger, **extra: Any) -> None:
        self.logger = logger
        self.extra = extra

    def debug(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self.log(logging.DEBUG, msg, *args, **kwargs)

    def warning(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self.log(logging.WARNING, msg, *args, **kwargs)

    def log(self, level: int, msg: str, *args: Any, **kwargs: Any) -> None:
        kwargs["extra"] = {**self.extra, **kwargs.get("extra", {})}
        kwargs.setdefault("stacklevel", 3)
        self.logger.log(level, msg, *args, **kwargs)
