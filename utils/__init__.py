"""
clock_logic.utils

通用工具：日志 `logger`
"""
