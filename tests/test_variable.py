"""
命名变量存储测试
"""

import pathlib
import sys
import threading

import pytest

# 添加项目根目录到路径
project_root = pathlib.Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from core.variable import VariableNotFoundError, VariableStore


def test_set_and_get():
    store = VariableStore()
    assert store.get("Time") is None
    assert store.get("Time", default=0) == 0

    store.set("Time", 1)
    store.set("Time", 2)
    assert store.get("Time") == 2
    assert store.write_count("Time") == 2
    assert store.snapshot() == {"Time": 2}


def test_strict_store_rejects_unknown_names():
    """严格模式下只允许访问声明过的变量。"""
    store = VariableStore(declared=["Time", "UTCTime"])
    assert store.strict
    assert store.snapshot() == {"Time": None, "UTCTime": None}

    with pytest.raises(VariableNotFoundError):
        store.set("Other", 1)
    with pytest.raises(KeyError):
        store.get_variable("Other")
    assert "Other" not in store


def test_get_variable_returns_copy():
    store = VariableStore()
    store.set("Time", "a")
    var = store.get_variable("Time")
    assert var.name == "Time"
    assert var.value == "a"
    assert var.write_count == 1
    assert var.updated_at is not None

    var.update("b")
    assert store.get("Time") == "a"


def test_concurrent_writes_are_counted():
    """多线程写入不丢失计数。"""
    store = VariableStore(declared=["Time"])

    def writer():
        for i in range(500):
            store.set("Time", i)

    threads = [threading.Thread(target=writer) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert store.write_count("Time") == 2000
