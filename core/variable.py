"""
命名变量存储模块

替代 HMI 运行时中的变量（tag）存储：按名称读写变量值。
周期任务只依赖 `VariableSink` 协议（set(key, value)），不依赖具体存储实现。
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, Protocol


class VariableNotFoundError(KeyError):
    """严格模式下访问未声明的变量。"""


class VariableSink(Protocol):
    """变量写入能力（由宿主环境提供）。"""

    def set(self, name: str, value: Any) -> None: ...


@dataclass
class VariableState:
    """
    单个变量的运行时状态。

    Attributes:
        name: 变量名称（例如 "Time"、"UTCTime"）。
        value: 当前值。
        write_count: 写入次数。
        updated_at: 最近一次写入的单调时钟时间（秒），未写入时为 None。
    """

    name: str
    value: Any = None
    write_count: int = 0
    updated_at: Optional[float] = None

    def update(self, new_value: Any) -> None:
        """更新当前值。"""
        self.value = new_value
        self.write_count += 1
        self.updated_at = time.monotonic()


class VariableStore:
    """
    变量存储与访问容器（线程安全）。

    - 写入来自周期任务线程，读取来自其他线程，所有操作共用一把锁。
    - 指定 declared 时为严格模式：只允许访问声明过的变量，
      相当于逻辑对象下必须先创建变量才能写入。
    """

    def __init__(self, declared: Iterable[str] | None = None) -> None:
        self._lock = threading.Lock()
        self._vars: Dict[str, VariableState] = {}
        self._strict = declared is not None
        for name in declared or ():
            self._vars[name] = VariableState(name=name)

    @property
    def strict(self) -> bool:
        return self._strict

    def _lookup(self, name: str, create: bool) -> VariableState:
        var = self._vars.get(name)
        if var is None:
            if self._strict or not create:
                raise VariableNotFoundError(name)
            var = VariableState(name=name)
            self._vars[name] = var
        return var

    def get_variable(self, name: str) -> VariableState:
        """
        获取变量状态对象的副本。

        非严格模式下不存在的变量会被创建。
        """
        with self._lock:
            var = self._lookup(name, create=True)
            return VariableState(var.name, var.value, var.write_count, var.updated_at)

    def set(self, name: str, value: Any) -> None:
        """设置变量当前值。"""
        with self._lock:
            self._lookup(name, create=True).update(value)

    def get(self, name: str, default: Any = None) -> Any:
        """获取变量当前值。"""
        with self._lock:
            var = self._vars.get(name)
            if var is None:
                return default
            return var.value

    def write_count(self, name: str) -> int:
        with self._lock:
            var = self._vars.get(name)
            return 0 if var is None else var.write_count

    def snapshot(self) -> Dict[str, Any]:
        """导出当前所有变量的快照（仅当前值）。"""
        with self._lock:
            return {name: vs.value for name, vs in self._vars.items()}

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._vars
