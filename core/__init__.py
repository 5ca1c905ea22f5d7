"""
clock_logic.core

时钟逻辑相关模块：
- 周期任务 `periodic_task`
- 命名变量存储 `variable`
- 时钟逻辑对象 `clock_logic`
- YAML 配置解析 `parser`
"""
