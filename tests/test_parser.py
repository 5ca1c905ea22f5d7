"""
配置解析测试
"""

import pathlib
import sys

import pytest

# 添加项目根目录到路径
project_root = pathlib.Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from core.parser import ClockLogicConfigParser


def test_parse_bundled_config():
    """解析工程自带的 config/clock_logic.yaml。"""
    config = ClockLogicConfigParser().parse_file(project_root / "config" / "clock_logic.yaml")
    assert config.interval_ms == 1000
    assert config.time_variable == "Time"
    assert config.utc_variable == "UTCTime"
    assert config.time_format is None
    assert config.log_dir == "logs"


def test_parse_empty_file_uses_defaults(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")
    config = ClockLogicConfigParser().parse_file(path)
    assert config.interval_ms == 1000
    assert config.time_variable == "Time"


def test_parse_custom_values(tmp_path):
    path = tmp_path / "clock.yaml"
    path.write_text(
        "interval_ms: 250\n"
        "time_variable: LocalTime\n"
        "utc_variable: UtcTime\n"
        'time_format: "%H:%M:%S"\n',
        encoding="utf-8",
    )
    config = ClockLogicConfigParser().parse_file(path)
    assert config.interval_ms == 250
    assert config.time_variable == "LocalTime"
    assert config.utc_variable == "UtcTime"
    assert config.time_format == "%H:%M:%S"


@pytest.mark.parametrize(
    "text",
    [
        "interval_ms: 0\n",
        "interval_ms: -10\n",
        "interval_ms: fast\n",
        "interval_ms: true\n",
        "interval_ms: 1.9\n",
        "interval_ms: 999.9\n",
        "interval_ms: \"1.9\"\n",
        "time_variable: Time\nutc_variable: Time\n",
        "- not\n- a mapping\n",
    ],
)
def test_parse_invalid_values(tmp_path, text):
    path = tmp_path / "bad.yaml"
    path.write_text(text, encoding="utf-8")
    with pytest.raises(ValueError):
        ClockLogicConfigParser().parse_file(path)
