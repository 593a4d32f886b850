"""
流水线阶段定义

职责：
1. 定义各阶段的名称与进度区间
2. 标记可按配置跳过的阶段
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class StageEnum(str, Enum):
    """流水线阶段枚举"""
    LOAD_DRAWING = "LOAD_DRAWING"
    RESOLVE_ORIGIN = "RESOLVE_ORIGIN"
    EXPLODE_ARRAYS = "EXPLODE_ARRAYS"
    PARTITION_AND_EXPORT = "PARTITION_AND_EXPORT"
    SAVE_FLATTENED = "SAVE_FLATTENED"


@dataclass
class PipelineStage:
    """流水线阶段"""
    name: str
    progress_start: int  # 进度起点（0-100）
    progress_end: int    # 进度终点
    requires_flatten: bool = False  # 关闭阵列炸开时跳过


# 网格导出流水线各阶段配置
GRID_EXPORT_STAGES: list[PipelineStage] = [
    PipelineStage(StageEnum.LOAD_DRAWING.value, 0, 10),
    PipelineStage(StageEnum.RESOLVE_ORIGIN.value, 10, 15),
    PipelineStage(StageEnum.EXPLODE_ARRAYS.value, 15, 40, requires_flatten=True),
    PipelineStage(StageEnum.PARTITION_AND_EXPORT.value, 40, 90),
    PipelineStage(StageEnum.SAVE_FLATTENED.value, 90, 100, requires_flatten=True),
]
