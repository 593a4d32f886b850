"""
运行记录模型 - 单次导出运行的状态与生命周期

持久化为输出目录下的 run.json
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field

from .reports import ExplodeReport, GridExportReport


class RunStatus(str, Enum):
    """运行状态枚举"""
    QUEUED = "queued"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class RunArtifacts(BaseModel):
    """运行产物路径"""
    cells_dir: Path | None = None
    flattened_dxf: Path | None = None
    run_json: Path | None = None
    cell_files: list[Path] = Field(default_factory=list)


class RunProgress(BaseModel):
    """运行进度"""
    stage: str = "INIT"
    percent: int = 0
    message: str = ""


class ExportRun(BaseModel):
    """导出运行实体"""
    run_id: str = Field(..., description="UUID")
    input_file: Path
    output_dir: Path

    # 状态
    status: RunStatus = RunStatus.QUEUED
    progress: RunProgress = Field(default_factory=RunProgress)

    # 结果
    explode_report: ExplodeReport | None = None
    grid_report: GridExportReport | None = None
    artifacts: RunArtifacts = Field(default_factory=RunArtifacts)
    flags: list[str] = Field(default_factory=list, description="告警标记")
    errors: list[str] = Field(default_factory=list, description="错误信息")

    # 时间戳
    created_at: datetime = Field(default_factory=datetime.now)
    started_at: datetime | None = None
    finished_at: datetime | None = None

    def mark_running(self, stage: str = "LOAD_DRAWING") -> None:
        """标记为运行中"""
        self.status = RunStatus.RUNNING
        self.started_at = datetime.now()
        self.progress.stage = stage

    def mark_succeeded(self) -> None:
        """标记为成功"""
        self.status = RunStatus.SUCCEEDED
        self.finished_at = datetime.now()
        self.progress.percent = 100

    def mark_failed(self, error: str) -> None:
        """标记为失败"""
        self.status = RunStatus.FAILED
        self.finished_at = datetime.now()
        self.errors.append(error)

    def add_flag(self, flag: str) -> None:
        """添加告警标记（不中断）"""
        if flag not in self.flags:
            self.flags.append(flag)
