"""
独立运行时钟逻辑

使用方式：
    python run_clock_logic.py
    或者
    python run_clock_logic.py config/clock_logic.yaml

按 Ctrl+C 停止。
"""

import pathlib
import signal
import sys
import threading
from typing import Optional

from core.clock_logic import ClockLogic
from core.parser import ClockLogicConfigParser
from core.variable import VariableStore
from utils.logger import close_logger, get_logger, setup_logger


logger = get_logger()

DEFAULT_CONFIG_PATH = pathlib.Path(__file__).parent / "config" / "clock_logic.yaml"


def run_clock_logic(config_path: Optional[str] = None) -> None:
    """
    运行时钟逻辑，直到收到 SIGINT / SIGTERM。

    Args:
        config_path: YAML 配置文件路径，默认 config/clock_logic.yaml
    """
    path = pathlib.Path(config_path) if config_path else DEFAULT_CONFIG_PATH
    config = ClockLogicConfigParser().parse_file(path)
    setup_logger(config.log_dir, console=True)

    variables = VariableStore(declared=[config.time_variable, config.utc_variable])
    stop_event = threading.Event()

    # 注册信号处理（优雅退出）
    def signal_handler(sig, frame):
        logger.info(f"Received signal {sig}, shutting down...")
        stop_event.set()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    logger.info("=" * 60)
    logger.info("Starting ClockLogic")
    logger.info(f"Config: {path}")
    logger.info(f"Interval: {config.interval_ms}ms")
    logger.info(f"Variables: {config.time_variable}, {config.utc_variable}")
    logger.info("=" * 60)

    try:
        with ClockLogic(variables, config):
            while not stop_event.wait(config.interval_ms / 1000.0):
                snapshot = variables.snapshot()
                logger.debug(
                    f"{config.time_variable}={snapshot.get(config.time_variable)}, "
                    f"{config.utc_variable}={snapshot.get(config.utc_variable)}"
                )
    except Exception as e:
        logger.error(f"Error: {e}", exc_info=True)
        raise
    finally:
        logger.info("ClockLogic stopped")
        close_logger()


if __name__ == "__main__":
    run_clock_logic(sys.argv[1] if len(sys.argv) > 1 else None)
