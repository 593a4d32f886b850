"""
流水线模块 - 运行编排与记录

子模块：
- stages: 流水线各阶段定义
- executor: 流水线执行器
"""

from .executor import PipelineExecutor, create_run
from .stages import GRID_EXPORT_STAGES, PipelineStage, StageEnum

__all__ = [
    "PipelineStage",
    "StageEnum",
    "GRID_EXPORT_STAGES",
    "PipelineExecutor",
    "create_run",
]
