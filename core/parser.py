"""
配置解析器

负责从 YAML 文件中读取时钟逻辑配置（例如 config/clock_logic.yaml），
解析出 ClockLogicConfig。

支持的顶层键：interval_ms, time_variable, utc_variable, time_format, log_dir
缺省键使用 ClockLogicConfig 的默认值。
"""

from __future__ import annotations

from typing import Any, Dict

import pathlib

import yaml

from .clock_logic import ClockLogicConfig


class ClockLogicConfigParser:
    """时钟逻辑配置解析器。"""

    def parse_file(self, path: str | pathlib.Path) -> ClockLogicConfig:
        """
        从 YAML 文件解析 ClockLogicConfig。

        Args:
            path: 配置文件路径。
        """
        path_obj = pathlib.Path(path)
        with path_obj.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        return self.parse_dict(data)

    def parse_dict(self, data: Dict[str, Any]) -> ClockLogicConfig:
        """从已加载的字典解析配置。"""
        if not isinstance(data, dict):
            raise ValueError(f"config root must be a mapping, got {type(data).__name__}")

        kwargs: Dict[str, Any] = {}
        if data.get("interval_ms") is not None:
            interval = data["interval_ms"]
            # 浮点数不截断（1.9 不能变成 1ms），字符串只接受整数写法
            if isinstance(interval, (bool, float)):
                raise ValueError(f"interval_ms must be an integer, got {interval!r}")
            try:
                kwargs["interval_ms"] = int(interval)
            except (TypeError, ValueError):
                raise ValueError(f"interval_ms must be an integer, got {interval!r}") from None
        for key in ("time_variable", "utc_variable", "log_dir"):
            if data.get(key) is not None:
                kwargs[key] = str(data[key])
        if data.get("time_format"):
            kwargs["time_format"] = str(data["time_format"])

        return ClockLogicConfig(**kwargs)
