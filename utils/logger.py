"""
日志模块（clock_logic）

提供多等级文件日志（debug/info/warning/error 各一个文件）和基础的 Windows 兼容处理。
所有模块通过 get_logger() 共享同一个 logger 对象；重新配置日志目录时只替换 handler。
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import List, Tuple


# 单个日志文件大小上限与备份数量
MAX_BYTES = 10 * 1024 * 1024  # 10MB
BACKUP_COUNT = 5

DETAIL_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(threadName)s - %(filename)s:%(lineno)d - %(message)s"
SIMPLE_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
ERROR_FORMAT = "%(asctime)s - %(levelname)s - %(threadName)s - %(filename)s:%(lineno)d - %(message)s"

# (文件后缀, 等级, 格式)
LEVEL_FILES: List[Tuple[str, int, str]] = [
    ("debug", logging.DEBUG, DETAIL_FORMAT),
    ("info", logging.INFO, SIMPLE_FORMAT),
    ("warning", logging.WARNING, SIMPLE_FORMAT),
    ("error", logging.ERROR, ERROR_FORMAT),
]


class SafeRotatingFileHandler(RotatingFileHandler):
    """
    安全的日志轮转处理器

    在 Windows 上，如果日志文件被其他进程占用，轮转会失败。
    失败时继续写当前文件，不让日志影响周期任务。
    """

    def doRollover(self) -> None:
        try:
            super().doRollover()
        except OSError:
            # 文件被占用，继续使用当前日志文件
            pass


class Logger:
    """
    日志管理器。

    - 按等级输出到不同日志文件。
    - 可选输出到控制台（运行脚本使用）。
    """

    def __init__(self, log_dir: str = "logs", name: str = "clock_logic", console: bool = False) -> None:
        """
        初始化日志管理器。

        Args:
            log_dir: 日志输出目录，默认 "logs"。
            name: logger 名称，同时作为日志文件名前缀，默认 "clock_logic"。
            console: 是否同时输出 INFO 及以上日志到 stderr。
        """
        self.log_dir = log_dir
        self.name = name

        os.makedirs(log_dir, exist_ok=True)

        self.logger = logging.getLogger(name)
        self.logger.setLevel(logging.DEBUG)
        self.logger.propagate = False

        # 避免重复添加 handler
        if not self.logger.handlers:
            self._setup_handlers(console)

    def _setup_handlers(self, console: bool) -> None:
        """设置不同级别的日志处理器。"""
        for suffix, level, fmt in LEVEL_FILES:
            handler = SafeRotatingFileHandler(
                os.path.join(self.log_dir, f"{self.name}_{suffix}.log"),
                maxBytes=MAX_BYTES,
                backupCount=BACKUP_COUNT,
                encoding="utf-8",
            )
            handler.setLevel(level)
            handler.setFormatter(logging.Formatter(fmt))
            self.logger.addHandler(handler)

        if console:
            stream_handler = logging.StreamHandler(sys.stderr)
            stream_handler.setLevel(logging.INFO)
            stream_handler.setFormatter(logging.Formatter(SIMPLE_FORMAT))
            self.logger.addHandler(stream_handler)

    def get_logger(self) -> logging.Logger:
        """获取底层 logger 实例。"""
        return self.logger

    def close(self) -> None:
        """
        关闭并移除所有日志处理器。

        在程序退出前调用，确保日志文件句柄释放（Windows 上避免文件占用）。
        """
        for handler in list(self.logger.handlers):
            try:
                handler.flush()
                handler.close()
            except (OSError, ValueError):
                # 关闭时的错误不影响程序退出
                pass
            self.logger.removeHandler(handler)


_LOGGER_INSTANCE: Logger | None = None


def get_logger(log_dir: str = "logs", name: str = "clock_logic") -> logging.Logger:
    """
    获取全局 logger 实例（单例）。

    Args:
        log_dir: 日志输出目录（仅第一次调用时生效）。
        name: logger 名称。
    """
    global _LOGGER_INSTANCE
    if _LOGGER_INSTANCE is None:
        _LOGGER_INSTANCE = Logger(log_dir, name)
    return _LOGGER_INSTANCE.get_logger()


def setup_logger(log_dir: str = "logs", name: str = "clock_logic", console: bool = False) -> logging.Logger:
    """
    按新的目录重新配置全局 logger。

    各模块在导入时已经持有同名 logger 对象，这里只替换其 handler，
    因此已有的 logger 引用无需更新。
    """
    global _LOGGER_INSTANCE
    close_logger()
    _LOGGER_INSTANCE = Logger(log_dir, name, console=console)
    return _LOGGER_INSTANCE.get_logger()


def close_logger() -> None:
    """
    关闭全局 logger 实例。

    在长时间运行的进程退出前调用，确保日志文件句柄释放。
    """
    global _LOGGER_INSTANCE
    if _LOGGER_INSTANCE is not None:
        _LOGGER_INSTANCE.close()
        _LOGGER_INSTANCE = None
