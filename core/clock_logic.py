"""
时钟逻辑模块

对应 HMI 工程中的 ClockLogic：
- 启动时创建 1000ms 的周期任务，每个周期把本地时间、UTC 时间写入 Time / UTCTime 两个变量
- 停止时释放周期任务

写入的是“墙上时间”（naive datetime），两个值来自同一次读时，
因此 Time - UTCTime 恰好等于写入时刻的本地 UTC 偏移。
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from .periodic_task import PeriodicTask
from .variable import VariableSink
from utils.logger import get_logger


logger = get_logger()

# 常量定义
DEFAULT_INTERVAL_MS = 1000
TIME_VARIABLE = "Time"
UTC_TIME_VARIABLE = "UTCTime"


@dataclass
class ClockLogicConfig:
    """
    时钟逻辑配置。

    Attributes:
        interval_ms: 更新周期（毫秒），默认 1000
        time_variable: 本地时间变量名，默认 "Time"
        utc_variable: UTC 时间变量名，默认 "UTCTime"
        time_format: 时间字符串格式化模板（strftime 格式），例如：
                     - "%Y-%m-%d %H:%M:%S" -> "2024-12-02 10:30:45"
                     如果为 None，则写入 datetime 对象
        log_dir: 日志输出目录
    """

    interval_ms: int = DEFAULT_INTERVAL_MS
    time_variable: str = TIME_VARIABLE
    utc_variable: str = UTC_TIME_VARIABLE
    time_format: str | None = None
    log_dir: str = "logs"

    def __post_init__(self) -> None:
        """验证配置有效性。"""
        if isinstance(self.interval_ms, bool) or not isinstance(self.interval_ms, int):
            raise ValueError(f"interval_ms must be an integer, got {self.interval_ms!r}")
        if self.interval_ms <= 0:
            raise ValueError(f"interval_ms must be positive, got {self.interval_ms}")
        if not self.time_variable or not self.utc_variable:
            raise ValueError("time_variable and utc_variable must not be empty")
        if self.time_variable == self.utc_variable:
            raise ValueError(
                f"time_variable and utc_variable must differ, both are '{self.time_variable}'"
            )


def system_utc_now() -> datetime:
    """默认时间源：系统 UTC 时间（带时区）。"""
    return datetime.now(timezone.utc)


class ClockLogic:
    """
    时钟逻辑对象（周期任务的唯一拥有者）。

    生命周期：
    - start(): 创建并启动周期任务；已在运行时为空操作（记录警告）
    - stop(): 释放周期任务，幂等
    - 也可以作为上下文管理器使用，退出时保证释放
    """

    def __init__(
        self,
        variables: VariableSink,
        config: ClockLogicConfig | None = None,
        time_source: Callable[[], datetime] | None = None,
    ) -> None:
        """
        初始化时钟逻辑。

        Args:
            variables: 变量写入能力（需提供 set(key, value)）
            config: 时钟逻辑配置，默认 1000ms / Time / UTCTime
            time_source: 返回当前 UTC 时间的函数，默认系统时钟
        """
        self.variables = variables
        self.config = config or ClockLogicConfig()
        self.time_source = time_source or system_utc_now
        self._periodic_task: Optional[PeriodicTask] = None
        # 保护 _periodic_task 的创建与释放
        self._lifecycle_lock = threading.Lock()

        logger.info(
            "ClockLogic initialized: interval=%dms, time_variable=%s, utc_variable=%s, time_format=%s",
            self.config.interval_ms,
            self.config.time_variable,
            self.config.utc_variable,
            self.config.time_format,
        )

    @property
    def is_running(self) -> bool:
        task = self._periodic_task
        return task is not None and task.is_running

    def start(self) -> None:
        """启动周期更新（可从多个线程调用，始终只有一个周期任务）。"""
        with self._lifecycle_lock:
            if self._periodic_task is not None:
                logger.warning("ClockLogic already started, start() ignored")
                return
            self._periodic_task = PeriodicTask(
                self.update_time, self.config.interval_ms, owner=self, name="ClockLogic"
            )
            self._periodic_task.start()

    def stop(self) -> None:
        """停止周期更新并释放周期任务。"""
        with self._lifecycle_lock:
            task = self._periodic_task
            if task is None:
                return
            task.dispose()
            self._periodic_task = None

    def __enter__(self) -> "ClockLogic":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()

    def update_time(self) -> None:
        """
        写入一次当前时间（单个 tick）。

        两个变量分别写入，任何一个失败只记录日志，不影响另一个，也不抛出。
        """
        try:
            now = self.time_source()
            if now.tzinfo is None:
                now = now.replace(tzinfo=timezone.utc)
            utc_now = now.astimezone(timezone.utc).replace(tzinfo=None)
            local_now = now.astimezone().replace(tzinfo=None)
        except Exception as e:
            logger.error("Failed to read time source: %s", e, exc_info=True)
            return

        self._write(self.config.time_variable, self._format(local_now))
        self._write(self.config.utc_variable, self._format(utc_now))
        logger.debug("Clock updated: local=%s, utc=%s", local_now, utc_now)

    def _format(self, value: datetime) -> Any:
        if self.config.time_format:
            return value.strftime(self.config.time_format)
        return value

    def _write(self, name: str, value: Any) -> None:
        try:
            self.variables.set(name, value)
        except Exception as e:
            logger.error("Failed to write variable '%s': %s", name, e, exc_info=True)
