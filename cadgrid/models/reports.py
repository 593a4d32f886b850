"""
结果汇总模型 - 阵列炸开与网格导出的计数报告
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field

from .geometry import GridSpec


class ExplodeReport(BaseModel):
    """阵列炸开汇总"""
    selected: int = 0
    arrays_found: int = 0
    exploded: int = 0
    failed: int = 0
    entities_created: int = 0
    failures: list[str] = Field(default_factory=list, description="失败的实体句柄")


class CellStatus(str, Enum):
    """单元处理状态"""
    EXPORTED = "exported"
    EMPTY = "empty"         # 有标签但无轮廓，不输出文件
    FAILED = "failed"       # 导出端失败


class CellOutcome(BaseModel):
    """单个网格单元的处理结果"""
    row: int
    col: int
    label: str
    file_name: str | None = None
    entity_count: int = 0
    status: CellStatus
    output_path: Path | None = None
    error: str | None = None


class GridExportReport(BaseModel):
    """网格导出汇总"""
    grid: GridSpec
    labels_collected: int = 0
    contours_collected: int = 0
    contours_skipped: int = Field(0, description="无边界框而跳过的轮廓")
    cells_processed: int = 0
    cells_exported: int = 0
    cells_empty: int = 0
    cells_failed: int = 0
    stop_row: int | None = None
    stop_col: int | None = None
    outcomes: list[CellOutcome] = Field(default_factory=list)

    def add_outcome(self, outcome: CellOutcome) -> None:
        """记录单元结果并更新计数"""
        self.outcomes.append(outcome)
        self.cells_processed += 1
        if outcome.status == CellStatus.EXPORTED:
            self.cells_exported += 1
        elif outcome.status == CellStatus.EMPTY:
            self.cells_empty += 1
        else:
            self.cells_failed += 1

    def summary(self) -> str:
        return (
            f"单元 {self.cells_processed} 个: 导出 {self.cells_exported}, "
            f"空 {self.cells_empty}, 失败 {self.cells_failed}"
        )
