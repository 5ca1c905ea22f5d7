"""
周期任务模块

在后台线程上按固定周期调用回调函数，对应 HMI 运行时中的 PeriodicTask。

核心设计：
- 固定频率调度：第 k 次 tick 的截止时间为 start + k * interval（单调时钟），
  且任意两次 tick 的实际开始时间至少相隔一个周期
- tick 严格串行执行，即使 stop() 之后立即 start()，新旧调度的 tick 也不会重叠
- start()/stop() 都是幂等的：重复 start() 为空操作（记录警告），重复 stop() 无副作用
- stop() 不等待正在执行的 tick，返回后不会再开始新的 tick
"""

from __future__ import annotations

import threading
import time
from typing import Any, Callable, Optional

from utils.logger import get_logger


logger = get_logger()

# 常量定义
OVERRUN_WARNING_THRESHOLD = 0.6  # tick 执行时间警告阈值（占周期的百分比）


class PeriodicTask:
    """
    周期任务（一个实例即一个调度句柄）。

    状态机：Idle --start()--> Running --stop()--> Idle

    Attributes:
        callback: 无参回调函数
        interval_ms: 调用周期（毫秒），正整数
        owner: 拥有该任务的对象（仅用于日志上下文）
        name: 任务名称，同时作为后台线程名
        tick_count: 已开始执行的 tick 总数
    """

    def __init__(
        self,
        callback: Callable[[], Any],
        interval_ms: int,
        owner: Any = None,
        name: str | None = None,
    ) -> None:
        """
        初始化周期任务（不会自动启动）。

        Args:
            callback: 每个周期调用一次的无参函数
            interval_ms: 调用周期（毫秒）
            owner: 拥有该任务的对象，可选
            name: 任务名称，默认根据 owner 生成
        """
        if not callable(callback):
            raise TypeError(f"callback must be callable, got {type(callback).__name__}")
        if isinstance(interval_ms, bool) or int(interval_ms) != interval_ms or interval_ms <= 0:
            raise ValueError(f"interval_ms must be a positive integer, got {interval_ms}")

        self.callback = callback
        self.interval_ms: int = int(interval_ms)
        self.owner = owner
        if name is None:
            name = f"{type(owner).__name__}.PeriodicTask" if owner is not None else "PeriodicTask"
        self.name = name
        self.tick_count: int = 0

        # 运行状态（由 _state_lock 保护）
        self._state_lock = threading.Lock()
        self._running: bool = False
        self._generation: int = 0
        self._wakeup: Optional[threading.Event] = None
        self._thread: Optional[threading.Thread] = None

        # 串行化回调执行，跨越 stop/start 也不会重叠
        self._tick_lock = threading.Lock()

    @property
    def interval(self) -> float:
        """调用周期（秒）。"""
        return self.interval_ms / 1000.0

    @property
    def is_running(self) -> bool:
        with self._state_lock:
            return self._running

    def start(self) -> None:
        """
        启动周期调度。

        已在运行时为空操作（记录警告），不会创建第二个调度。
        第一次 tick 发生在启动后一个周期。
        """
        with self._state_lock:
            if self._running:
                logger.warning("PeriodicTask '%s' already running, start() ignored", self.name)
                return
            self._running = True
            self._generation += 1
            generation = self._generation
            wakeup = threading.Event()
            self._wakeup = wakeup
            thread = threading.Thread(
                target=self._run,
                args=(generation, wakeup),
                name=self.name,
                daemon=True,
            )
            self._thread = thread
        thread.start()
        logger.info("PeriodicTask '%s' started: interval=%dms", self.name, self.interval_ms)

    def stop(self) -> None:
        """
        停止周期调度（幂等）。

        返回后不会再开始新的 tick；正在执行的 tick 允许执行完毕，本方法不等待。
        需要等待后台线程退出时调用 join()。
        """
        with self._state_lock:
            if not self._running:
                return
            self._running = False
            self._generation += 1
            wakeup = self._wakeup
            self._wakeup = None
        if wakeup is not None:
            wakeup.set()
        logger.info("PeriodicTask '%s' stopped: tick_count=%d", self.name, self.tick_count)

    def dispose(self) -> None:
        """释放调度资源，等同于 stop()。"""
        self.stop()

    def join(self, timeout: float | None = None) -> bool:
        """
        等待后台线程退出。

        Args:
            timeout: 最长等待时间（秒），None 表示一直等待

        Returns:
            线程是否已经退出
        """
        thread = self._thread
        if thread is None or thread is threading.current_thread():
            return thread is None
        thread.join(timeout)
        return not thread.is_alive()

    def __enter__(self) -> "PeriodicTask":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()

    # ------------------------------------------------------------------#
    # 后台线程
    # ------------------------------------------------------------------#
    def _run(self, generation: int, wakeup: threading.Event) -> None:
        """后台调度循环，generation 与当前值不一致时退出。"""
        interval = self.interval
        deadline = time.monotonic() + interval

        while True:
            remaining = deadline - time.monotonic()
            if remaining > 0 and wakeup.wait(remaining):
                break

            tick_start = self._tick(generation)
            if tick_start is None:
                break
            now = time.monotonic()
            elapsed = now - tick_start

            if elapsed > interval * OVERRUN_WARNING_THRESHOLD:
                logger.warning(
                    "PeriodicTask '%s' tick took %.3fs, exceeds 60%% of interval (%.3fs)",
                    self.name,
                    elapsed,
                    interval,
                )

            # 固定频率，但下一次 tick 不早于本次回调实际开始后一个周期
            deadline = max(deadline + interval, tick_start + interval)
            # 跳过已经错过的截止时间，不连续补跑
            if deadline <= now:
                missed = int((now - deadline) // interval) + 1
                deadline += missed * interval
                logger.warning(
                    "PeriodicTask '%s' overran, skipped %d tick(s)", self.name, missed
                )

        logger.debug("PeriodicTask '%s' thread exiting (generation=%d)", self.name, generation)

    def _tick(self, generation: int) -> Optional[float]:
        """
        执行一次 tick。

        Returns:
            回调实际开始的单调时钟时间；调度已被 stop() 取消时返回 None
        """
        with self._tick_lock:
            with self._state_lock:
                if not self._running or generation != self._generation:
                    return None
                self.tick_count += 1
                tick_no = self.tick_count
            started = time.monotonic()
            try:
                self.callback()
            except Exception as e:
                # 回调失败不能终止调度
                logger.error(
                    "PeriodicTask '%s' callback failed on tick %d: %s",
                    self.name,
                    tick_no,
                    e,
                    exc_info=True,
                )
        return started
