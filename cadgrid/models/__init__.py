"""
数据模型层 - 定义系统核心数据结构

所有模块通过这些模型交互，实现解耦：
- BBox/GridSpec/Cell: 几何与网格
- LabelRecord/MetadataBag/ReactorRef: 图纸记录
- CellMatch/ExportUnit: 分区与导出单元
- ExplodeReport/GridExportReport: 结果汇总
- ExportRun: 运行状态与生命周期
"""

from .geometry import BBox, Cell, GridSpec, Point2D
from .records import CellMatch, ExportUnit, LabelRecord, MetadataBag, ReactorRef
from .reports import CellOutcome, CellStatus, ExplodeReport, GridExportReport
from .run import ExportRun, RunArtifacts, RunProgress, RunStatus

__all__ = [
    "Point2D",
    "BBox",
    "GridSpec",
    "Cell",
    "LabelRecord",
    "MetadataBag",
    "ReactorRef",
    "CellMatch",
    "ExportUnit",
    "ExplodeReport",
    "CellOutcome",
    "CellStatus",
    "GridExportReport",
    "ExportRun",
    "RunArtifacts",
    "RunProgress",
    "RunStatus",
]
