"""
网格导出器 - 基准块定原点，按单元导出轮廓

职责：
1. 取基准块边界框左上角为网格原点（取不到则整体失败）
2. 收集标签图层文本与轮廓实体（无边界框的轮廓跳过计数）
3. 驱动网格分区，逐单元清洗文件名并调用导出端
4. 单元导出失败只记录，不中断扫描

测试要点：
- test_end_to_end_two_cells: 两单元后遇无标签终止
- test_empty_cell_counted_not_exported: 空单元计数不输出
- test_export_failure_continues: 导出失败继续扫描
- test_block_without_extents: 基准块无边界框
"""

from __future__ import annotations

import logging
from typing import Any

from ..config import ExportConfig, GridConfig, LayerConfig
from ..interfaces import (
    ExportError,
    ExtentsError,
    IDrawingSource,
    IExportSink,
    OriginUnavailableError,
)
from ..models import (
    CellOutcome,
    CellStatus,
    ExportUnit,
    GridExportReport,
    GridSpec,
    LabelRecord,
    Point2D,
)
from .grid_partitioner import partition
from .naming import sanitize_filename, unique_name

logger = logging.getLogger(__name__)


class GridExporter:
    """网格分区导出编排"""

    def __init__(
        self,
        source: IDrawingSource,
        sink: IExportSink,
        grid_config: GridConfig | None = None,
        layer_config: LayerConfig | None = None,
        export_config: ExportConfig | None = None,
        space: str = "Model",
    ):
        self.source = source
        self.sink = sink
        self.grid_config = grid_config or GridConfig()
        self.layer_config = layer_config or LayerConfig()
        self.export_config = export_config or ExportConfig()
        self.space = space

    def resolve_origin(self, reference_block: Any) -> Point2D:
        """基准块边界框左上角"""
        if reference_block is None:
            raise OriginUnavailableError("未找到网格基准块")
        try:
            extents = self.source.get_extents(reference_block)
        except ExtentsError as e:
            raise OriginUnavailableError(f"无法获取基准块边界: {e}") from e
        return extents.top_left

    def build_grid(self, origin: Point2D) -> GridSpec:
        return GridSpec(
            origin=origin,
            cell_width=self.grid_config.cell_width,
            cell_height=self.grid_config.cell_height,
            columns=self.grid_config.columns,
        )

    def collect(
        self, reference_block: Any = None
    ) -> tuple[list[LabelRecord], list[tuple[Any, Point2D]], int]:
        """
        收集标签与轮廓

        Returns:
            (标签列表, (轮廓, 中心点)列表, 跳过的轮廓数)
        """
        label_layer = self.layer_config.label_layer.lower()
        contour_layers = {name.lower() for name in self.layer_config.contour_layers}

        labels: list[LabelRecord] = []
        contours: list[tuple[Any, Point2D]] = []
        skipped = 0

        for entity in self.source.enumerate_entities(self.space):
            if entity is reference_block:
                continue
            layer = self.source.get_layer(entity).lower()

            label = self.source.get_label(entity)
            if label is not None:
                if layer == label_layer:
                    labels.append(label)
                continue

            if contour_layers:
                if layer not in contour_layers:
                    continue
            elif layer == label_layer:
                continue

            try:
                extents = self.source.get_extents(entity)
            except ExtentsError as e:
                logger.debug(f"轮廓无边界框，跳过: {e}")
                skipped += 1
                continue
            contours.append((entity, extents.center))

        return labels, contours, skipped

    def export_grid(self, reference_block: Any) -> GridExportReport:
        """执行网格分区导出"""
        origin = self.resolve_origin(reference_block)
        grid = self.build_grid(origin)
        labels, contours, skipped = self.collect(reference_block)

        report = GridExportReport(
            grid=grid,
            labels_collected=len(labels),
            contours_collected=len(contours),
            contours_skipped=skipped,
        )
        logger.info(
            f"网格原点 ({origin.x:.3f}, {origin.y:.3f}), "
            f"标签 {len(labels)} 个, 轮廓 {len(contours)} 个"
        )

        used_names: set[str] = set()
        for match in partition(grid, labels, contours):
            logger.info(
                f"Cell [row {match.row + 1}, col {match.col + 1}]: {match.label} "
                f"({len(match.entities)} 个实体)"
            )
            name = sanitize_filename(match.label) or f"R{match.row + 1}C{match.col + 1}"

            if match.is_empty and self.export_config.skip_empty:
                report.add_outcome(
                    CellOutcome(
                        row=match.row,
                        col=match.col,
                        label=match.label,
                        status=CellStatus.EMPTY,
                    )
                )
                continue

            unit = ExportUnit(name=unique_name(name, used_names), entities=match.entities)
            try:
                path = self.sink.export(unit.name, unit.entities)
            except ExportError as e:
                logger.warning(f"单元导出失败: {unit.name}: {e}")
                report.add_outcome(
                    CellOutcome(
                        row=match.row,
                        col=match.col,
                        label=match.label,
                        file_name=unit.name,
                        entity_count=len(unit.entities),
                        status=CellStatus.FAILED,
                        error=str(e),
                    )
                )
                continue

            report.add_outcome(
                CellOutcome(
                    row=match.row,
                    col=match.col,
                    label=match.label,
                    file_name=unit.name,
                    entity_count=len(unit.entities),
                    status=CellStatus.EXPORTED,
                    output_path=path,
                )
            )

        # 扫描按行优先连续进行，已处理数即终止单元的序号
        report.stop_row, report.stop_col = divmod(report.cells_processed, grid.columns)
        logger.info(
            f"Cell [row {report.stop_row + 1}, col {report.stop_col + 1}]: "
            f"图层 {self.layer_config.label_layer} 无标签，停止扫描"
        )
        logger.info(f"共处理 {report.cells_processed} 个单元")
        return report
