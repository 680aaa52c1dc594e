"""日志工厂：按配置统一初始化模块日志器。"""
from __future__ import annotations

import logging
from threading import Lock

_ROOT_LOGGER_NAME = "sf_graphdb"


class LoggerFactory:
    """为各模块创建共享同一处理器的日志器。

    首次调用时根据 ``Settings.logging`` 在 ``sf_graphdb`` 根日志器上挂载一个 StreamHandler，
    之后创建的子日志器直接向上冒泡，避免重复输出。"""

    _configured = False
    _lock = Lock()

    @classmethod
    def create_default_logger(cls, name: str) -> logging.Logger:
        cls._ensure_configured()
        return logging.getLogger(name)

    @classmethod
    def _ensure_configured(cls) -> None:
        if cls._configured:
            return
        with cls._lock:
            if cls._configured:
                return
            from sf_graphdb.common.config import ConfigManager

            cfg = ConfigManager.current().settings.logging
            root = logging.getLogger(_ROOT_LOGGER_NAME)
            if not root.handlers:
                handler = logging.StreamHandler()
                handler.setFormatter(logging.Formatter(cfg.format))
                root.addHandler(handler)
            root.setLevel(cfg.level.upper())
            cls._configured = True
